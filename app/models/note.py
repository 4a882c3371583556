"""Note model — the tenant-owned resource guarded by scoping and quotas."""

import uuid
from datetime import datetime
from typing import Annotated

from pydantic import StringConstraints
from sqlmodel import Field, SQLModel

from app.models.base import TimestampMixin, new_uuid

NoteTitle = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
NoteContent = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=10000)
]


class Note(TimestampMixin, SQLModel, table=True):
    __tablename__ = "notes"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    # Set once from the creating principal; never taken from request input
    tenant_id: uuid.UUID = Field(foreign_key="tenants.id", nullable=False, index=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", nullable=False, index=True)

    title: str = Field(max_length=200, nullable=False)
    content: str = Field(max_length=10000, nullable=False)


# ── Pydantic schemas ─────────────────────────────────────────

class NoteWrite(SQLModel):
    """Body for both create and update (full replacement)."""
    title: NoteTitle
    content: NoteContent


class NoteAuthor(SQLModel):
    id: uuid.UUID
    email: str


class NoteRead(SQLModel):
    id: uuid.UUID
    tenant_id: uuid.UUID
    user_id: uuid.UUID
    title: str
    content: str
    created_at: datetime
    updated_at: datetime
    author: NoteAuthor | None = None
