"""Users — tenant-scoped; inviting and deactivating are admin only."""

import uuid

from fastapi import APIRouter, status

from app.api.deps import AdminOnly, Scope
from app.models.user import UserCreate, UserRead

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def create_user(body: UserCreate, _admin: AdminOnly, scope: Scope) -> UserRead:
    user = await scope.create_user(body.email, body.password, body.role)
    return UserRead.model_validate(user)


@router.get("", response_model=list[UserRead])
async def list_users(scope: Scope) -> list[UserRead]:
    return [UserRead.model_validate(u) for u in await scope.list_users()]


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def deactivate_user(user_id: uuid.UUID, _admin: AdminOnly, scope: Scope) -> None:
    await scope.deactivate_user(user_id)
