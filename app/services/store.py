"""SQL persistence collaborator for the auth, scoping and quota layers.

Every method is one logical operation; methods that write commit before
returning, so a request either fully applies a mutation or leaves no trace.
Nothing in here decides *who* may do what: callers pass the tenant id they
are scoped to, and the store filters on it.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable

from sqlalchemy import delete, func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.errors import Conflict
from app.models.base import utcnow
from app.models.note import Note
from app.models.tenant import Tenant, TenantPlan
from app.models.user import User


class SqlStore:
    """Thin query layer over one request's AsyncSession."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # ── Principals / users ───────────────────────────────────

    async def find_principal_by_id(self, user_id: uuid.UUID) -> tuple[User, Tenant] | None:
        """Load a user and its tenant in a single joined read."""
        stmt = (
            select(User, Tenant)
            .join(Tenant, Tenant.id == User.tenant_id)  # type: ignore[arg-type]
            .where(User.id == user_id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        row = result.first()
        if row is None:
            return None
        user, tenant = row
        return user, tenant

    async def find_user_by_email(self, email: str) -> User | None:
        result = await self._session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def list_users_by_tenant(self, tenant_id: uuid.UUID) -> list[User]:
        stmt = (
            select(User)
            .where(User.tenant_id == tenant_id)
            .order_by(User.email.asc())  # type: ignore[union-attr]
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def create_user(self, user: User) -> User:
        """Insert a user. A concurrent insert of the same email is a Conflict."""
        self._session.add(user)
        try:
            await self._session.commit()
        except IntegrityError as exc:
            await self._session.rollback()
            raise Conflict("A user with this email already exists") from exc
        await self._session.refresh(user)
        return user

    async def deactivate_user(self, user_id: uuid.UUID, tenant_id: uuid.UUID) -> bool:
        stmt = (
            update(User)
            .where(User.id == user_id, User.tenant_id == tenant_id)  # type: ignore[arg-type]
            .values(is_active=False, updated_at=utcnow())
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            await self._session.rollback()
            return False
        await self._session.commit()
        return True

    # ── Tenants ──────────────────────────────────────────────

    async def find_tenant_by_slug(self, slug: str) -> Tenant | None:
        stmt = (
            select(Tenant)
            .where(Tenant.slug == slug)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_tenant_by_id(self, tenant_id: uuid.UUID) -> Tenant | None:
        return await self._session.get(Tenant, tenant_id, populate_existing=True)

    async def update_tenant_plan(
        self,
        tenant_id: uuid.UUID,
        from_plan: TenantPlan,
        to_plan: TenantPlan,
    ) -> Tenant | None:
        """Move a tenant from ``from_plan`` to ``to_plan``.

        Conditional on the current plan, so two racing upgrades cannot both
        succeed. Returns None when the tenant was not on ``from_plan``.
        """
        stmt = (
            update(Tenant)
            .where(Tenant.id == tenant_id, Tenant.plan == from_plan)  # type: ignore[arg-type]
            .values(plan=to_plan, updated_at=utcnow())
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            await self._session.rollback()
            return None
        await self._session.commit()
        return await self.find_tenant_by_id(tenant_id)

    # ── Notes ────────────────────────────────────────────────

    async def count_notes_by_tenant(self, tenant_id: uuid.UUID) -> int:
        stmt = select(func.count()).select_from(Note).where(Note.tenant_id == tenant_id)
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def count_and_create_note(
        self,
        note: Note,
        admit: Callable[[TenantPlan, int], bool],
    ) -> Note | None:
        """Insert ``note`` only if ``admit(plan, current_count)`` allows it.

        The tenant row is locked (``SELECT ... FOR UPDATE``) before counting,
        so concurrent creators for the same tenant queue on the lock and each
        sees the count left by the previous one. The plan is re-read under the
        same lock. Returns None, with nothing written, when not admitted.
        """
        stmt = (
            select(Tenant)
            .where(Tenant.id == note.tenant_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        tenant = result.scalar_one_or_none()
        if tenant is None:
            await self._session.rollback()
            return None

        count = await self.count_notes_by_tenant(note.tenant_id)
        if not admit(tenant.plan, count):
            await self._session.rollback()
            return None

        self._session.add(note)
        await self._session.commit()
        await self._session.refresh(note)
        return note

    async def find_note_by_id_and_tenant(
        self, note_id: uuid.UUID, tenant_id: uuid.UUID
    ) -> tuple[Note, User] | None:
        stmt = (
            select(Note, User)
            .join(User, User.id == Note.user_id)  # type: ignore[arg-type]
            .where(Note.id == note_id, Note.tenant_id == tenant_id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        row = result.first()
        if row is None:
            return None
        note, author = row
        return note, author

    async def list_notes_by_tenant(self, tenant_id: uuid.UUID) -> list[tuple[Note, User]]:
        stmt = (
            select(Note, User)
            .join(User, User.id == Note.user_id)  # type: ignore[arg-type]
            .where(Note.tenant_id == tenant_id)
            .order_by(Note.created_at.desc())  # type: ignore[union-attr]
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return [(note, author) for note, author in result.all()]

    async def update_note(
        self,
        note_id: uuid.UUID,
        tenant_id: uuid.UUID,
        title: str,
        content: str,
    ) -> bool:
        """Scope check and write in one statement. False if nothing matched."""
        stmt = (
            update(Note)
            .where(Note.id == note_id, Note.tenant_id == tenant_id)  # type: ignore[arg-type]
            .values(title=title, content=content, updated_at=utcnow())
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            await self._session.rollback()
            return False
        await self._session.commit()
        return True

    async def delete_note(self, note_id: uuid.UUID, tenant_id: uuid.UUID) -> bool:
        stmt = delete(Note).where(
            Note.id == note_id,  # type: ignore[arg-type]
            Note.tenant_id == tenant_id,  # type: ignore[arg-type]
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            await self._session.rollback()
            return False
        await self._session.commit()
        return True
