"""Tenant endpoints — current tenant info and plan upgrade."""

from fastapi import APIRouter
from pydantic import BaseModel

from app.api.deps import Quota, Scope, Store
from app.core.errors import NotFound
from app.models.tenant import TenantDetail, TenantRead

router = APIRouter(prefix="/tenants", tags=["tenants"])


class UpgradeResponse(BaseModel):
    message: str
    tenant: TenantRead


@router.get(
    "/me",
    response_model=TenantDetail,
    summary="Get current tenant info and note usage",
)
async def get_current_tenant(scope: Scope, store: Store, quota: Quota) -> TenantDetail:
    tenant = await store.find_tenant_by_id(scope.tenant_id)
    if tenant is None:
        raise NotFound("Tenant not found")
    usage = await quota.usage(store, tenant)
    return TenantDetail(
        **TenantRead.model_validate(tenant).model_dump(),
        usage=usage,
    )


@router.post(
    "/{slug}/upgrade",
    response_model=UpgradeResponse,
    summary="Upgrade the caller's tenant to the Pro plan (admin only)",
)
async def upgrade_tenant(slug: str, scope: Scope) -> UpgradeResponse:
    """One-way free -> pro. The slug must name the caller's own tenant."""
    tenant = await scope.upgrade_plan(slug)
    return UpgradeResponse(
        message="Tenant successfully upgraded to Pro plan",
        tenant=TenantRead.model_validate(tenant),
    )
