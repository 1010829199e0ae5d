import logging
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from academy.db.session import get_db
from academy.db.repositories.user_repo import get_user_by_email
from academy.errors import AuthError, ForbiddenError, NotFound, ValidationError
from academy.models.user import Authority
from academy.schemas.auth import LoginRequest, LoginUser, TokenResponse
from academy.services.auth_service import create_access_token

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Email + password login. ``role`` restricts which panel the account may enter."""
    if not body.email.strip() or not body.password:
        raise ValidationError("Email and password are required")
    user = await get_user_by_email(db, body.email)
    if not user:
        raise NotFound("No such user")
    # Plaintext comparison: passwords are stored unhashed
    if user.password_plain != body.password:
        raise AuthError("Wrong password")
    if body.role == "admin" and user.authority != Authority.admin.value:
        raise ForbiddenError("This account has no admin panel access")
    if body.role == "user" and user.authority not in (Authority.admin.value, Authority.user.value):
        raise ForbiddenError("This account has no user panel access")

    token = create_access_token(
        data={"sub": str(user.id), "username": user.username, "email": user.email, "authority": user.authority}
    )
    logger.info("User %s logged in (role=%s)", user.id, body.role or "-")
    return TokenResponse(
        message=f"{'Admin' if body.role == 'admin' else 'User'} login successful",
        token=token,
        user=LoginUser.model_validate(user),
    )
