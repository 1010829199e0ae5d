from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from academy.config import settings
from academy.db.session import get_db
from academy.db.repositories.user_repo import get_user_by_id
from academy.errors import AuthError, ForbiddenError
from academy.models.user import Authority, User
from academy.services.auth_service import decode_access_token

security = HTTPBearer(auto_error=False)


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> User:
    if not credentials or not credentials.credentials:
        raise AuthError("Not authenticated", headers={"WWW-Authenticate": "Bearer"})
    payload = decode_access_token(credentials.credentials)
    if not payload or "sub" not in payload:
        raise AuthError("Invalid or expired token", headers={"WWW-Authenticate": "Bearer"})
    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise AuthError("Invalid token")
    user = await get_user_by_id(db, user_id)
    if not user:
        raise AuthError("User not found")
    return user


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if current_user.authority != Authority.admin.value:
        raise ForbiddenError("Admin access required")
    return current_user


async def require_owner(user_id: int, current_user: User = Depends(get_current_user)) -> User:
    """The ``{user_id}`` path parameter must be the token's own user."""
    if current_user.id != user_id:
        raise ForbiddenError("Access denied")
    return current_user


def public_base_url(request: Request) -> str:
    return settings.public_base_url or str(request.base_url).rstrip("/")
