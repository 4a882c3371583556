"""Tenant-scoped data access.

Every read and write issued on behalf of a caller goes through a
``TenantScope`` bound to that caller's Principal. The tenant id used for
filtering comes only from the Principal; ids or slugs taken from the request
are used to *look things up*, never to choose the scope.

A note that exists under another tenant is reported exactly like a note
that does not exist at all.
"""

import logging
import uuid

from app.core.errors import Conflict, Forbidden, NotFound, PlanAlreadyActive
from app.core.security import hash_password
from app.models.note import Note
from app.models.tenant import Tenant, TenantPlan
from app.models.user import User, UserRole
from app.services.access import ADMIN_ONLY, authorize
from app.services.principal import Principal
from app.services.store import SqlStore

logger = logging.getLogger(__name__)

NOTE_NOT_FOUND = "Note not found"


class TenantScope:
    """Data operations implicitly confined to one principal's tenant."""

    def __init__(self, store: SqlStore, principal: Principal) -> None:
        self.store = store
        self.principal = principal

    @property
    def tenant_id(self) -> uuid.UUID:
        return self.principal.tenant_id

    # ── Notes ────────────────────────────────────────────────

    async def find_note(self, note_id: uuid.UUID) -> tuple[Note, User]:
        found = await self.store.find_note_by_id_and_tenant(note_id, self.tenant_id)
        if found is None:
            logger.info("Note %s not found in tenant %s", note_id, self.tenant_id)
            raise NotFound(NOTE_NOT_FOUND)
        return found

    async def list_notes(self) -> list[tuple[Note, User]]:
        """Notes of the caller's tenant, newest first."""
        return await self.store.list_notes_by_tenant(self.tenant_id)

    async def update_note(self, note_id: uuid.UUID, title: str, content: str) -> tuple[Note, User]:
        # The store filters on (id, tenant_id) in the UPDATE itself, so the
        # scope is re-checked by the mutating statement.
        updated = await self.store.update_note(note_id, self.tenant_id, title, content)
        if not updated:
            logger.info("Note %s not found in tenant %s", note_id, self.tenant_id)
            raise NotFound(NOTE_NOT_FOUND)
        return await self.find_note(note_id)

    async def delete_note(self, note_id: uuid.UUID) -> None:
        deleted = await self.store.delete_note(note_id, self.tenant_id)
        if not deleted:
            logger.info("Note %s not found in tenant %s", note_id, self.tenant_id)
            raise NotFound(NOTE_NOT_FOUND)

    # ── Tenant administration ────────────────────────────────

    async def ensure_tenant(self, slug: str) -> Tenant:
        """Resolve ``slug`` and require it to be the caller's own tenant.

        Slugs are public, so a mismatch (or an unknown slug) is Forbidden
        rather than NotFound.
        """
        tenant = await self.store.find_tenant_by_slug(slug)
        if tenant is None or tenant.id != self.tenant_id:
            logger.warning(
                "Principal %s of tenant %s addressed tenant %r",
                self.principal.principal_id,
                self.principal.tenant_slug,
                slug,
            )
            raise Forbidden("Access denied to this tenant")
        return tenant

    async def upgrade_plan(self, slug: str) -> Tenant:
        """Move the caller's tenant from free to pro. Admins only."""
        authorize(self.principal, ADMIN_ONLY)
        tenant = await self.ensure_tenant(slug)

        if tenant.plan == TenantPlan.PRO:
            raise PlanAlreadyActive("Tenant is already on Pro plan")

        upgraded = await self.store.update_tenant_plan(tenant.id, TenantPlan.FREE, TenantPlan.PRO)
        if upgraded is None:
            # Another request upgraded it between the read and the write
            raise PlanAlreadyActive("Tenant is already on Pro plan")

        logger.info("Tenant %s upgraded to pro by %s", upgraded.slug, self.principal.principal_id)
        return upgraded

    # ── Users ────────────────────────────────────────────────

    async def list_users(self) -> list[User]:
        return await self.store.list_users_by_tenant(self.tenant_id)

    async def create_user(self, email: str, password: str, role: UserRole) -> User:
        """Invite a user into the caller's tenant. Admins only."""
        authorize(self.principal, ADMIN_ONLY)

        if await self.store.find_user_by_email(email) is not None:
            raise Conflict("A user with this email already exists")

        user = User(
            tenant_id=self.tenant_id,
            email=email,
            password_hash=hash_password(password),
            role=role,
        )
        return await self.store.create_user(user)

    async def deactivate_user(self, user_id: uuid.UUID) -> None:
        authorize(self.principal, ADMIN_ONLY)
        if not await self.store.deactivate_user(user_id, self.tenant_id):
            raise NotFound("User not found")
