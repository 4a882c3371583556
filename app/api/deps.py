"""FastAPI dependencies for authentication, role gates and tenant scoping.

Request pipeline: bearer token -> verify_token -> resolve_principal
-> (require_roles) -> TenantScope / QuotaEnforcer. The Principal is passed
explicitly to every later stage.
"""

from collections.abc import Callable, Coroutine
from typing import Annotated, Any

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_session
from app.core.security import verify_token
from app.models.user import UserRole
from app.services.access import authorize
from app.services.principal import Principal, resolve_principal
from app.services.quota import QuotaEnforcer
from app.services.scoping import TenantScope
from app.services.store import SqlStore

# auto_error=False: a missing header must surface as our 401, not FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)


def get_store(session: Annotated[AsyncSession, Depends(get_session)]) -> SqlStore:
    return SqlStore(session)


async def get_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    store: Annotated[SqlStore, Depends(get_store)],
) -> Principal:
    """Authenticate the bearer token and resolve it to a fresh Principal."""
    token = credentials.credentials if credentials is not None else None
    principal_id = verify_token(token)
    return await resolve_principal(store, principal_id)


def require_roles(*roles: UserRole) -> Callable[..., Coroutine[Any, Any, Principal]]:
    """Build a dependency that authenticates, then gates on ``roles``."""
    allowed = frozenset(roles)

    async def _gate(principal: Annotated[Principal, Depends(get_principal)]) -> Principal:
        authorize(principal, allowed)
        return principal

    return _gate


def get_scope(
    principal: Annotated[Principal, Depends(get_principal)],
    store: Annotated[SqlStore, Depends(get_store)],
) -> TenantScope:
    return TenantScope(store, principal)


def get_quota_enforcer(request: Request) -> QuotaEnforcer:
    return request.app.state.quota_enforcer


# Typed shorthand for use in route signatures
Auth = Annotated[Principal, Depends(get_principal)]
AdminOnly = Annotated[Principal, Depends(require_roles(UserRole.ADMIN))]
Store = Annotated[SqlStore, Depends(get_store)]
Scope = Annotated[TenantScope, Depends(get_scope)]
Quota = Annotated[QuotaEnforcer, Depends(get_quota_enforcer)]
