"""Role gate for privileged operations."""

import logging

from app.core.errors import Forbidden
from app.models.user import UserRole
from app.services.principal import Principal

logger = logging.getLogger(__name__)

ADMIN_ONLY: frozenset[UserRole] = frozenset({UserRole.ADMIN})
ANY_ROLE: frozenset[UserRole] = frozenset(UserRole)


def authorize(principal: Principal, allowed_roles: frozenset[UserRole]) -> None:
    """Raise Forbidden unless the principal's role is in ``allowed_roles``.

    Plain membership: there is no role hierarchy, so an admin only passes
    a gate that lists admin.
    """
    if principal.role not in allowed_roles:
        logger.warning(
            "Denied %s (role=%s) for roles %s",
            principal.principal_id,
            principal.role,
            sorted(allowed_roles),
        )
        raise Forbidden("Insufficient permissions")
