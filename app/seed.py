"""Seed demo tenants and users.

Usage: ``python -m app.seed``. Safe to run repeatedly; existing tenants and
users are left untouched.
"""

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.database import async_session_factory, init_db
from app.core.security import hash_password
from app.models.tenant import Tenant, TenantPlan
from app.models.user import User, UserRole

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password"

DEMO_TENANTS = [
    ("Acme Corporation", "acme"),
    ("Globex Corporation", "globex"),
]


async def _get_or_create_tenant(session: AsyncSession, name: str, slug: str) -> Tenant:
    result = await session.execute(select(Tenant).where(Tenant.slug == slug))
    tenant = result.scalar_one_or_none()
    if tenant is None:
        tenant = Tenant(name=name, slug=slug, plan=TenantPlan.FREE)
        session.add(tenant)
        await session.flush()
    return tenant


async def _get_or_create_user(
    session: AsyncSession, tenant: Tenant, email: str, role: UserRole, password_hash: str
) -> None:
    result = await session.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none() is None:
        session.add(User(tenant_id=tenant.id, email=email, password_hash=password_hash, role=role))


async def seed(session: AsyncSession) -> None:
    password_hash = hash_password(DEMO_PASSWORD)
    for name, slug in DEMO_TENANTS:
        tenant = await _get_or_create_tenant(session, name, slug)
        await _get_or_create_user(session, tenant, f"admin@{slug}.test", UserRole.ADMIN, password_hash)
        await _get_or_create_user(session, tenant, f"user@{slug}.test", UserRole.MEMBER, password_hash)
    await session.commit()


async def main() -> None:
    await init_db()
    async with async_session_factory() as session:
        await seed(session)
    for _, slug in DEMO_TENANTS:
        logger.info("Seeded admin@%s.test (admin) and user@%s.test (member)", slug, slug)
    logger.info("Password for all accounts: %s", DEMO_PASSWORD)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    asyncio.run(main())
