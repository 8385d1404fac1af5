"""Password hashing and JWT tokens for CRM staff accounts.

Both tokens carry the user's CRM role. An access token minted before a role
change no longer authenticates; the client refreshes to pick up the new role.
"""

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from joyhomes.config import settings
from joyhomes.core.exceptions import AuthenticationError

if TYPE_CHECKING:
    from joyhomes.models.user import User

# Password hashing context using Argon2
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

ROLE_CHANGED = "Quyền của tài khoản đã thay đổi, vui lòng đăng nhập lại"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a hashed password."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password using Argon2."""
    return pwd_context.hash(password)


def token_claims(user: "User") -> dict[str, Any]:
    """Subject, email and role claims for a user's tokens."""
    return {"sub": str(user.id), "email": user.email, "role": user.role}


def _create_token(data: dict[str, Any], token_type: str, expires_delta: timedelta) -> str:
    to_encode = data.copy()
    to_encode.update({"exp": datetime.now(UTC) + expires_delta, "type": token_type})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token."""
    return _create_token(
        data, "access", expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )


def create_refresh_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT refresh token."""
    return _create_token(
        data, "refresh", expires_delta or timedelta(days=settings.refresh_token_expire_days)
    )


def verify_token(token: str, token_type: str = "access") -> dict[str, Any]:
    """Verify and decode a JWT token."""
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as e:
        raise AuthenticationError(f"Token validation failed: {str(e)}")
    if payload.get("type") != token_type:
        raise AuthenticationError("Invalid token type")
    return payload


def assert_role_current(payload: dict[str, Any], user: "User") -> None:
    """Reject a token whose role claim no longer matches the account."""
    if payload.get("role") != user.role:
        raise AuthenticationError(ROLE_CHANGED)


def create_tokens(user: "User") -> dict[str, str]:
    """Create both access and refresh tokens for a user's current role."""
    claims = token_claims(user)
    return {
        "access_token": create_access_token(claims),
        "refresh_token": create_refresh_token(claims),
        "token_type": "bearer",
    }
