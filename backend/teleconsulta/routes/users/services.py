import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from teleconsulta.config.constants import Role
from teleconsulta.core.exceptions import PermissionDeniedError, ResourceNotFoundError
from teleconsulta.db.crud import user as user_crud
from teleconsulta.db.models.user import UserModel
from teleconsulta.schemas.user import UpdateUserRequest

logger = logging.getLogger(__name__)


async def find_user(db: AsyncSession, user_id: int) -> UserModel:
    user = await user_crud.get_user(db, user_id)
    if user is None:
        raise ResourceNotFoundError("User", "id", user_id)
    return user


def ensure_self_or_admin(current_user: UserModel, user_id: int) -> None:
    if current_user.role != Role.ADMIN and current_user.id != user_id:
        raise PermissionDeniedError("You can only access your own account")


async def get_user_for(db: AsyncSession, user_id: int, current_user: UserModel) -> UserModel:
    ensure_self_or_admin(current_user, user_id)
    return await find_user(db, user_id)


async def list_users(db: AsyncSession, skip: int = 0, limit: int = 100) -> List[UserModel]:
    return await user_crud.get_users(db, skip=skip, limit=limit)


async def list_doctors(db: AsyncSession, skip: int = 0, limit: int = 100) -> List[UserModel]:
    """Active doctors only; deactivated accounts never show in the public directory."""
    return await user_crud.get_users(db, skip=skip, limit=limit, role=Role.DOCTOR, active_only=True)


async def list_doctors_by_specialty(
    db: AsyncSession, specialty: str, skip: int = 0, limit: int = 100
) -> List[UserModel]:
    return await user_crud.find_doctors_by_specialty(db, specialty, skip=skip, limit=limit)


async def update_user(
    db: AsyncSession, user_id: int, request: UpdateUserRequest, current_user: UserModel
) -> UserModel:
    """Apply the non-None fields. A specialty is only stored for doctors."""
    ensure_self_or_admin(current_user, user_id)
    user = await find_user(db, user_id)

    if request.name is not None:
        user.name = request.name
    if request.phone is not None:
        user.phone = request.phone
    if request.specialty is not None and user.role == Role.DOCTOR:
        user.specialty = request.specialty

    await db.commit()
    logger.info(f"User {user.id} updated by user {current_user.id}")
    return user


async def set_user_active(db: AsyncSession, user_id: int, active: bool) -> UserModel:
    user = await find_user(db, user_id)
    user.active = active
    await db.commit()
    logger.info(f"User {user.id} {'activated' if active else 'deactivated'}")
    return user
