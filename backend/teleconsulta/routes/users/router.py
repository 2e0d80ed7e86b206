from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from teleconsulta.config.constants import Role
from teleconsulta.core.middleware import get_current_user, get_db, require_roles
from teleconsulta.db.models.user import UserModel
from teleconsulta.routes.users import services
from teleconsulta.schemas.shared import UserOut
from teleconsulta.schemas.user import UpdateUserRequest

router = APIRouter(prefix="/users", tags=["users"])

admin_only = require_roles([Role.ADMIN])


@router.get("/me", response_model=UserOut)
async def get_me(current_user: UserModel = Depends(get_current_user)):
    return UserOut.from_model(current_user)


@router.get("/{user_id}", response_model=UserOut)
async def get_user_route(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    user = await services.get_user_for(db, user_id, current_user)
    return UserOut.from_model(user)


@router.get("", response_model=List[UserOut])
async def list_users_route(
    skip: int = 0,
    limit: int = 100,
    db: AsyncSession = Depends(get_db),
    _: UserModel = Depends(admin_only),
):
    users = await services.list_users(db, skip=skip, limit=limit)
    return [UserOut.from_model(u) for u in users]


@router.put("/{user_id}", response_model=UserOut)
async def update_user_route(
    user_id: int,
    request: UpdateUserRequest,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    user = await services.update_user(db, user_id, request, current_user)
    return UserOut.from_model(user)


@router.patch("/{user_id}/deactivate", status_code=status.HTTP_204_NO_CONTENT)
async def deactivate_user_route(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    _: UserModel = Depends(admin_only),
):
    await services.set_user_active(db, user_id, False)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{user_id}/activate", status_code=status.HTTP_204_NO_CONTENT)
async def activate_user_route(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    _: UserModel = Depends(admin_only),
):
    await services.set_user_active(db, user_id, True)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
