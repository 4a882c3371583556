"""Authentication endpoints — login + current user."""

import logging

from fastapi import APIRouter
from pydantic import BaseModel

from app.api.deps import Auth, Store
from app.core.errors import NotFound, Unauthenticated
from app.core.security import create_jwt, verify_password
from app.models.tenant import TenantRead
from app.models.user import UserRead

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


# ── Schemas ──────────────────────────────────────────────────

class LoginRequest(BaseModel):
    # Plain str: lookup only, and seeded accounts use reserved .test domains
    email: str
    password: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead
    tenant: TenantRead


class MeResponse(BaseModel):
    user: UserRead
    tenant: TenantRead


# ── Routes ───────────────────────────────────────────────────

@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, store: Store) -> LoginResponse:
    """Authenticate with email + password, receive a JWT."""
    user = await store.find_user_by_email(body.email)

    if user is None or not verify_password(body.password, user.password_hash):
        logger.info("Failed login for %s", body.email)
        raise Unauthenticated("Invalid email or password")

    if not user.is_active:
        raise Unauthenticated("Account is disabled")

    tenant = await store.find_tenant_by_id(user.tenant_id)
    if tenant is None:
        raise Unauthenticated("Invalid email or password")

    token = create_jwt(
        subject=str(user.id),
        tenant_id=str(user.tenant_id),
        role=user.role,
    )

    return LoginResponse(
        access_token=token,
        user=UserRead.model_validate(user),
        tenant=TenantRead.model_validate(tenant),
    )


@router.get("/me", response_model=MeResponse)
async def get_me(auth: Auth, store: Store) -> MeResponse:
    """Return the current authenticated user and their tenant."""
    found = await store.find_principal_by_id(auth.principal_id)
    if found is None:
        raise NotFound("User not found")
    user, tenant = found

    return MeResponse(
        user=UserRead.model_validate(user),
        tenant=TenantRead.model_validate(tenant),
    )
