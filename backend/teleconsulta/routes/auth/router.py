from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status, Response, Cookie
from sqlalchemy.ext.asyncio import AsyncSession

from teleconsulta.config.settings import env, settings
from teleconsulta.core.auth import create_tokens_for_user
from teleconsulta.core.middleware import get_db, get_current_user
from teleconsulta.db.models.user import UserModel
from teleconsulta.routes.auth.services import (
    InvalidCredentialsError,
    authenticate_user,
    refresh_user_token,
    register as register_user,
)
from teleconsulta.schemas.auth_response import AuthResponse
from teleconsulta.schemas.login_request import LoginRequest
from teleconsulta.schemas.register_request import RegisterRequest
from teleconsulta.schemas.shared import UserOut

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
)

# determine secure flag
secure_cookie = env == "production"


def _set_auth_cookies(response: Response, tokens: AuthResponse) -> None:
    response.set_cookie(
        key="session",
        value=tokens.access_token,
        httponly=True,
        secure=secure_cookie,
        samesite="lax",
        max_age=settings.access_token_expire_minutes * 60
    )
    response.set_cookie(
        key="refresh",
        value=tokens.refresh_token,
        httponly=True,
        secure=secure_cookie,
        samesite="lax",
        max_age=settings.refresh_token_expire_days * 86400
    )


def _unauthorized(exc: InvalidCredentialsError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=str(exc),
        headers={"WWW-Authenticate": "Bearer"},
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: RegisterRequest,
    response: Response,
    db: AsyncSession = Depends(get_db)
):
    tokens = await register_user(db, user_data)
    _set_auth_cookies(response, tokens)
    return tokens

@router.post("/login", response_model=AuthResponse)
async def login(
    login_data: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db)
):
    try:
        user = await authenticate_user(db, login_data)
    except InvalidCredentialsError as e:
        raise _unauthorized(e)
    tokens = create_tokens_for_user(user)
    _set_auth_cookies(response, tokens)
    return tokens

@router.post("/refresh", response_model=AuthResponse)
async def refresh(
    response: Response,
    refresh_token: Optional[str] = Cookie(None, alias="refresh"),
    db: AsyncSession = Depends(get_db)
):
    try:
        tokens = await refresh_user_token(db, refresh_token)
    except InvalidCredentialsError as e:
        raise _unauthorized(e)
    _set_auth_cookies(response, tokens)
    return tokens

@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout():
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(key="session")
    response.delete_cookie(key="refresh")
    return response

@router.get("/me", response_model=UserOut)
async def me(current_user: UserModel = Depends(get_current_user)):
    return UserOut.from_model(current_user)
