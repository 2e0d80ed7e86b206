import logging

from jose import JWTError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from teleconsulta.config.constants import Role
from teleconsulta.core.auth import (
    REFRESH_TOKEN_TYPE,
    create_tokens_for_user,
    decode_access_token,
    get_password_hash,
    verify_password,
)
from teleconsulta.core.exceptions import BusinessRuleError
from teleconsulta.db.crud.user import (
    exists_by_email,
    exists_by_national_id,
    get_user,
    get_user_by_email,
    save_user,
)
from teleconsulta.db.models.user import UserModel
from teleconsulta.schemas.auth_response import AuthResponse
from teleconsulta.schemas.login_request import LoginRequest
from teleconsulta.schemas.register_request import RegisterRequest

logger = logging.getLogger(__name__)


class InvalidCredentialsError(Exception):
    """Raised when a login or refresh attempt cannot be authenticated."""


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


async def create_user(db: AsyncSession, data: RegisterRequest) -> UserModel:
    """Validate uniqueness and role-specific fields, then insert the account."""
    if await exists_by_email(db, data.email):
        raise BusinessRuleError("Email is already in use")
    if await exists_by_national_id(db, data.national_id):
        raise BusinessRuleError("National id is already registered")

    if data.role == Role.DOCTOR:
        if _blank(data.license_id):
            raise BusinessRuleError("A license id is required for doctors")
        if _blank(data.specialty):
            raise BusinessRuleError("A specialty is required for doctors")

    user = UserModel(
        name=data.name,
        email=data.email,
        password_hash=get_password_hash(data.password),
        national_id=data.national_id,
        phone=data.phone,
        role=data.role,
        license_id=data.license_id if data.role == Role.DOCTOR else None,
        specialty=data.specialty if data.role == Role.DOCTOR else None,
        active=True,
    )

    try:
        await save_user(db, user)
        await db.commit()
    except IntegrityError as e:
        # lost a race with another registration using the same email/national id
        await db.rollback()
        raise BusinessRuleError("Email or national id is already registered") from e

    logger.info(f"Registered user {user.id} with role {user.role.value}")
    return user


async def register(db: AsyncSession, data: RegisterRequest) -> AuthResponse:
    user = await create_user(db, data)
    return create_tokens_for_user(user)


async def authenticate_user(db: AsyncSession, login_data: LoginRequest) -> UserModel:
    """Return the user for valid credentials; inactive accounts are a business error."""
    user = await get_user_by_email(db, login_data.email)
    if not user or not verify_password(login_data.password, user.password_hash):
        logger.info(f"Failed login attempt for {login_data.email}")
        raise InvalidCredentialsError("Invalid credentials")
    if not user.active:
        raise BusinessRuleError("Account deactivated. Please contact support.")
    return user


async def refresh_user_token(db: AsyncSession, refresh_token: str | None) -> AuthResponse:
    """Issue a new token pair from a valid refresh token."""
    if not refresh_token:
        raise InvalidCredentialsError("Missing refresh token")
    try:
        payload = decode_access_token(refresh_token)
    except JWTError as e:
        raise InvalidCredentialsError("Invalid refresh token") from e

    if payload.get("type") != REFRESH_TOKEN_TYPE:
        raise InvalidCredentialsError("Invalid refresh token")

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError) as e:
        raise InvalidCredentialsError("Invalid refresh token") from e

    user = await get_user(db, user_id)
    if not user or not user.active:
        raise InvalidCredentialsError("User not found")

    return create_tokens_for_user(user)
