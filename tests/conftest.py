"""Shared test fixtures — async SQLite in-memory DB, test client, tenant factory,
and an in-memory persistence fake for exercising the core without SQL."""

import asyncio
import os
import uuid
from collections.abc import AsyncGenerator, Callable
from dataclasses import dataclass

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

# Import all models so metadata is populated
import app.models  # noqa: F401
from app.core.database import get_session
from app.core.security import create_jwt, hash_password
from app.main import app
from app.models.base import utcnow
from app.models.note import Note
from app.models.tenant import Tenant, TenantPlan
from app.models.user import User, UserRole
from app.services.principal import Principal

PASSWORD = "password123"
_PASSWORD_HASH = hash_password(PASSWORD)


@pytest.fixture(scope="session")
async def engine():
    eng = create_async_engine("sqlite+aiosqlite://", echo=False)
    async with eng.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture(scope="session")
def test_session_factory(engine):
    """Session factory bound to the test SQLite engine."""
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(test_session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with test_session_factory() as sess:
        yield sess
        await sess.rollback()


@pytest.fixture
async def client(session) -> AsyncGenerator[AsyncClient, None]:
    """HTTPX async test client with DB session override."""

    async def _override_session():
        yield session

    app.dependency_overrides[get_session] = _override_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ── Tenant factory (SQL) ─────────────────────────────────────

@dataclass
class SeededTenant:
    id: uuid.UUID
    slug: str
    admin_id: uuid.UUID
    member_id: uuid.UUID
    admin_email: str
    member_email: str
    admin_headers: dict[str, str]
    member_headers: dict[str, str]


def bearer(user_id: uuid.UUID, tenant_id: uuid.UUID, role: UserRole) -> dict[str, str]:
    token = create_jwt(subject=str(user_id), tenant_id=str(tenant_id), role=role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_tenant(session) -> Callable:
    """Create a tenant with one admin and one member; slugs are made unique.

    The test database is shared across the session, so every call gets a
    fresh slug and fresh emails.
    """

    async def _make(prefix: str = "t", plan: TenantPlan = TenantPlan.FREE, notes: int = 0):
        slug = f"{prefix}-{uuid.uuid4().hex[:8]}"
        tenant = Tenant(name=f"{prefix.title()} Inc", slug=slug, plan=plan)
        session.add(tenant)
        await session.flush()

        admin = User(
            tenant_id=tenant.id,
            email=f"admin@{slug}.test",
            password_hash=_PASSWORD_HASH,
            role=UserRole.ADMIN,
        )
        member = User(
            tenant_id=tenant.id,
            email=f"user@{slug}.test",
            password_hash=_PASSWORD_HASH,
            role=UserRole.MEMBER,
        )
        session.add_all([admin, member])
        await session.flush()

        for i in range(notes):
            session.add(Note(tenant_id=tenant.id, user_id=member.id, title=f"seed {i}", content="x"))
        await session.commit()

        return SeededTenant(
            id=tenant.id,
            slug=slug,
            admin_id=admin.id,
            member_id=member.id,
            admin_email=admin.email,
            member_email=member.email,
            admin_headers=bearer(admin.id, tenant.id, UserRole.ADMIN),
            member_headers=bearer(member.id, tenant.id, UserRole.MEMBER),
        )

    return _make


# ── In-memory persistence fake ───────────────────────────────

class MemoryStore:
    """Dict-backed stand-in for SqlStore.

    ``count_and_create_note`` yields to the event loop between counting and
    inserting, so any caller that does not serialise creates will race.
    """

    def __init__(self) -> None:
        self.tenants: dict[uuid.UUID, Tenant] = {}
        self.users: dict[uuid.UUID, User] = {}
        self.notes: list[Note] = []
        self.writes = 0

    # seeding helpers
    def add_tenant(self, slug: str, plan: TenantPlan = TenantPlan.FREE) -> Tenant:
        tenant = Tenant(id=uuid.uuid4(), name=slug.title(), slug=slug, plan=plan)
        self.tenants[tenant.id] = tenant
        return tenant

    def add_user(self, tenant: Tenant, email: str, role: UserRole) -> User:
        user = User(
            id=uuid.uuid4(),
            tenant_id=tenant.id,
            email=email,
            password_hash="x",
            role=role,
            is_active=True,
        )
        self.users[user.id] = user
        return user

    def principal(self, user: User) -> Principal:
        tenant = self.tenants[user.tenant_id]
        return Principal(
            principal_id=user.id,
            email=user.email,
            role=user.role,
            tenant_id=tenant.id,
            tenant_slug=tenant.slug,
            tenant_plan=tenant.plan,
        )

    # principals / users
    async def find_principal_by_id(self, user_id):
        await asyncio.sleep(0)
        user = self.users.get(user_id)
        if user is None:
            return None
        return user, self.tenants[user.tenant_id]

    async def find_user_by_email(self, email):
        return next((u for u in self.users.values() if u.email == email), None)

    async def list_users_by_tenant(self, tenant_id):
        return sorted((u for u in self.users.values() if u.tenant_id == tenant_id), key=lambda u: u.email)

    async def create_user(self, user):
        self.writes += 1
        user.id = user.id or uuid.uuid4()
        self.users[user.id] = user
        return user

    async def deactivate_user(self, user_id, tenant_id):
        user = self.users.get(user_id)
        if user is None or user.tenant_id != tenant_id:
            return False
        self.writes += 1
        user.is_active = False
        return True

    # tenants
    async def find_tenant_by_slug(self, slug):
        return next((t for t in self.tenants.values() if t.slug == slug), None)

    async def find_tenant_by_id(self, tenant_id):
        return self.tenants.get(tenant_id)

    async def update_tenant_plan(self, tenant_id, from_plan, to_plan):
        tenant = self.tenants.get(tenant_id)
        if tenant is None or tenant.plan != from_plan:
            return None
        self.writes += 1
        tenant.plan = to_plan
        return tenant

    # notes
    async def count_notes_by_tenant(self, tenant_id):
        return sum(1 for n in self.notes if n.tenant_id == tenant_id)

    async def create_note(self, note):
        self.writes += 1
        self.notes.append(note)
        return note

    async def count_and_create_note(self, note, admit):
        tenant = self.tenants.get(note.tenant_id)
        if tenant is None:
            return None
        count = await self.count_notes_by_tenant(note.tenant_id)
        await asyncio.sleep(0)
        if not admit(tenant.plan, count):
            return None
        await asyncio.sleep(0)
        note.created_at = utcnow()
        return await self.create_note(note)

    async def find_note_by_id_and_tenant(self, note_id, tenant_id):
        for note in self.notes:
            if note.id == note_id and note.tenant_id == tenant_id:
                return note, self.users[note.user_id]
        return None

    async def list_notes_by_tenant(self, tenant_id):
        # newest first; insertion order stands in for created_at
        return [(n, self.users[n.user_id]) for n in reversed(self.notes) if n.tenant_id == tenant_id]

    async def update_note(self, note_id, tenant_id, title, content):
        found = await self.find_note_by_id_and_tenant(note_id, tenant_id)
        if found is None:
            return False
        note, _ = found
        self.writes += 1
        note.title = title
        note.content = content
        return True

    async def delete_note(self, note_id, tenant_id):
        found = await self.find_note_by_id_and_tenant(note_id, tenant_id)
        if found is None:
            return False
        self.writes += 1
        self.notes.remove(found[0])
        return True


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def two_tenants(memory_store):
    """acme (free) and globex (free), each with an admin and a member."""
    acme = memory_store.add_tenant("acme")
    globex = memory_store.add_tenant("globex")
    return {
        "store": memory_store,
        "acme": acme,
        "globex": globex,
        "acme_admin": memory_store.add_user(acme, "admin@acme.test", UserRole.ADMIN),
        "acme_member": memory_store.add_user(acme, "user@acme.test", UserRole.MEMBER),
        "globex_admin": memory_store.add_user(globex, "admin@globex.test", UserRole.ADMIN),
        "globex_member": memory_store.add_user(globex, "user@globex.test", UserRole.MEMBER),
    }
