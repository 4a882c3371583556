"""Principal resolution: turn a verified token subject into an identity."""

import logging
import uuid

from app.core.errors import Unauthenticated
from app.models.tenant import TenantPlan
from app.models.user import UserRole
from app.services.store import SqlStore

logger = logging.getLogger(__name__)


class Principal:
    """Resolved identity carried explicitly through one request.

    Built fresh from the database on every request; the tenant's slug and
    plan are denormalised from the same read that loaded the user.
    """

    __slots__ = ("principal_id", "email", "role", "tenant_id", "tenant_slug", "tenant_plan")

    def __init__(
        self,
        principal_id: uuid.UUID,
        email: str,
        role: UserRole,
        tenant_id: uuid.UUID,
        tenant_slug: str,
        tenant_plan: TenantPlan,
    ) -> None:
        self.principal_id = principal_id
        self.email = email
        self.role = role
        self.tenant_id = tenant_id
        self.tenant_slug = tenant_slug
        self.tenant_plan = tenant_plan

    def __repr__(self) -> str:
        return f"Principal({self.email!r}, role={self.role}, tenant={self.tenant_slug!r})"


async def resolve_principal(store: SqlStore, principal_id: uuid.UUID) -> Principal:
    """Load the user named by a token, with role and tenant from storage.

    Token validity is not enough: a user that has been removed or
    deactivated since the token was issued does not resolve.
    """
    found = await store.find_principal_by_id(principal_id)
    if found is None:
        logger.info("Token subject %s has no user record", principal_id)
        raise Unauthenticated("User no longer exists")

    user, tenant = found
    if not user.is_active:
        logger.info("Token subject %s is deactivated", principal_id)
        raise Unauthenticated("Account is disabled")

    return Principal(
        principal_id=user.id,
        email=user.email,
        role=UserRole(user.role),
        tenant_id=tenant.id,
        tenant_slug=tenant.slug,
        tenant_plan=TenantPlan(tenant.plan),
    )
