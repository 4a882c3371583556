"""Import all models so SQLModel.metadata picks them up."""

from app.models.note import Note, NoteAuthor, NoteRead, NoteWrite
from app.models.tenant import Tenant, TenantDetail, TenantPlan, TenantRead, TenantUsage
from app.models.user import User, UserCreate, UserRead, UserRole

__all__ = [
    "Note",
    "NoteAuthor",
    "NoteRead",
    "NoteWrite",
    "Tenant",
    "TenantDetail",
    "TenantPlan",
    "TenantRead",
    "TenantUsage",
    "User",
    "UserCreate",
    "UserRead",
    "UserRole",
]
