"""Authentication endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from joyhomes.api.deps import get_db
from joyhomes.core.exceptions import AuthenticationError
from joyhomes.core.security import create_tokens, verify_password, verify_token
from joyhomes.models.user import User
from joyhomes.schemas.user import RefreshTokenRequest, TokenResponse, UserLogin
from joyhomes.utils.dates import utcnow

router = APIRouter()


@router.post("/login", response_model=TokenResponse)
async def login(
    credentials: UserLogin,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """Login with email and password."""
    result = await db.execute(select(User).where(User.email == credentials.email))
    user = result.scalar_one_or_none()

    if not user or not verify_password(credentials.password, user.password_hash):
        raise AuthenticationError("Invalid email or password")

    if not user.is_active:
        raise AuthenticationError("Account is deactivated")

    user.last_login_at = utcnow()

    tokens = create_tokens(user)
    return TokenResponse(**tokens)


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(
    request: RefreshTokenRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """Refresh access token using refresh token."""
    payload = verify_token(request.refresh_token, token_type="refresh")
    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Invalid token")

    try:
        user = await db.get(User, UUID(user_id))
    except ValueError:
        raise AuthenticationError("Invalid token")
    if not user or not user.is_active:
        raise AuthenticationError("User not found or inactive")

    tokens = create_tokens(user)
    return TokenResponse(**tokens)
