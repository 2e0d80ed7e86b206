import logging
from typing import Iterable, Optional

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from .auth import ACCESS_TOKEN_TYPE, decode_access_token
from teleconsulta.config.constants import Role
from teleconsulta.db.crud.user import get_user
from teleconsulta.db.models.user import UserModel
from teleconsulta.db.session import get_db_session

logger = logging.getLogger(__name__)

# List of paths that should be excluded from authentication checks
PUBLIC_PATHS = [
    "/auth/login",
    "/auth/register",
    "/auth/refresh",
    "/health",
    "/docs",
    "/openapi.json",
    "/redoc"
]


def _extract_token(request: Request) -> Optional[str]:
    session_cookie = request.cookies.get("session")
    if session_cookie:
        return session_cookie
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header.split(" ", 1)[1]
    return None


async def verify_token_middleware(request: Request, call_next):
    """
    Check the session cookie (or bearer header) and put the token claims on
    request.state.user. Unauthenticated requests pass through; protected
    routes reject them through get_current_user.
    """
    request.state.user = None

    # Skip authentication for public paths
    if any(request.url.path.startswith(public_path) for public_path in PUBLIC_PATHS):
        return await call_next(request)

    token = _extract_token(request)
    if token:
        try:
            token_data = decode_access_token(token)
        except JWTError as e:
            logger.debug(f"Ignoring invalid token on {request.url.path}: {e}")
        else:
            if token_data.get("type", ACCESS_TOKEN_TYPE) == ACCESS_TOKEN_TYPE:
                request.state.user = {
                    "user_id": token_data.get("sub"),
                    "role": token_data.get("role")
                }

    return await call_next(request)


# Get a database session dependency
async def get_db(request: Request):
    """Yield an async SQLAlchemy session (dependency)."""
    async for session in get_db_session(request):
        yield session


def get_token_claims(request: Request) -> dict:
    """Claims decoded by the middleware; 401 when the request carries none."""
    claims = getattr(request.state, "user", None)
    if not claims or not claims.get("user_id"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return claims


async def get_current_user(
    claims: dict = Depends(get_token_claims),
    db: AsyncSession = Depends(get_db),
) -> UserModel:
    """
    Dependency for routes that require authentication. Resolves the token
    subject to a live, active UserModel.
    """
    try:
        user_id = int(claims["user_id"])
    except (TypeError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    user = await get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    if not user.active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Account deactivated")
    return user


def require_roles(roles: Iterable[Role]):
    """
    Factory function to create a dependency that requires specific roles.
    Usage: current_user: UserModel = Depends(require_roles([Role.ADMIN]))
    """
    allowed = frozenset(roles)

    def _require_roles(user: UserModel = Depends(get_current_user)) -> UserModel:
        if user.role not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not enough permissions")
        return user

    return _require_roles
