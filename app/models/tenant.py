"""Tenant model — top-level isolation boundary and billing unit."""

import uuid
from enum import StrEnum

from sqlmodel import Field, SQLModel

from app.models.base import TimestampMixin, new_uuid


class TenantPlan(StrEnum):
    FREE = "free"
    PRO = "pro"


class Tenant(TimestampMixin, SQLModel, table=True):
    __tablename__ = "tenants"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    name: str = Field(max_length=255, nullable=False)
    # Public, permanent address of the tenant (e.g. /tenants/acme/upgrade)
    slug: str = Field(max_length=100, unique=True, nullable=False, index=True)
    plan: TenantPlan = Field(default=TenantPlan.FREE)


# ── Pydantic schemas ─────────────────────────────────────────

class TenantRead(SQLModel):
    id: uuid.UUID
    name: str
    slug: str
    plan: TenantPlan


class TenantUsage(SQLModel):
    plan: TenantPlan
    note_count: int
    note_limit: int | None = Field(description="None means unlimited")


class TenantDetail(TenantRead):
    usage: TenantUsage
