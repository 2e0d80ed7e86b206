# teleconsulta/db/crud/user.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, exists
from typing import List, Optional

from teleconsulta.config.constants import Role
from teleconsulta.db.models.user import UserModel


async def get_users(
    db: AsyncSession,
    skip: int = 0,
    limit: int = 100,
    role: Optional[Role] = None,
    active_only: bool = False,
) -> List[UserModel]:
    """
    Get a list of users with optional filtering by role and active flag.

    Args:
        db: Database session
        skip: Number of records to skip
        limit: Maximum number of records to return
        role: Filter by user role (optional)
        active_only: Only return active accounts

    Returns:
        List of UserModel objects ordered by id
    """
    query = select(UserModel)

    if role:
        query = query.where(UserModel.role == role)
    if active_only:
        query = query.where(UserModel.active.is_(True))

    query = query.order_by(UserModel.id).offset(skip).limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_user(db: AsyncSession, user_id: int) -> Optional[UserModel]:
    """Get a user by ID (plan loaded eagerly), or None."""
    result = await db.execute(select(UserModel).where(UserModel.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[UserModel]:
    """Get a user by email, or None."""
    result = await db.execute(select(UserModel).where(UserModel.email == email))
    return result.scalar_one_or_none()


async def exists_by_email(db: AsyncSession, email: str) -> bool:
    return bool(await db.scalar(select(exists().where(UserModel.email == email))))


async def exists_by_national_id(db: AsyncSession, national_id: str) -> bool:
    return bool(await db.scalar(select(exists().where(UserModel.national_id == national_id))))


async def find_doctors_by_specialty(
    db: AsyncSession, specialty: str, skip: int = 0, limit: int = 100
) -> List[UserModel]:
    """Active doctors whose specialty contains the search term (case-insensitive)."""
    term = specialty.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    pattern = f"%{term}%"
    query = (
        select(UserModel)
        .where(
            UserModel.role == Role.DOCTOR,
            UserModel.active.is_(True),
            UserModel.specialty.ilike(pattern, escape="\\"),
        )
        .order_by(UserModel.name, UserModel.id)
        .offset(skip)
        .limit(limit)
    )
    result = await db.execute(query)
    return list(result.scalars().all())


async def save_user(db: AsyncSession, user: UserModel) -> UserModel:
    """Stage the user and flush so generated ids are available. Caller commits."""
    db.add(user)
    await db.flush()
    return user
