"""User and authentication schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import EmailStr, Field

from joyhomes.schemas.common import CamelModel


class UserLogin(CamelModel):
    """Schema for email/password login."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class RefreshTokenRequest(CamelModel):
    refresh_token: str


class TokenResponse(CamelModel):
    """Schema for issued JWT tokens."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class UserResponse(CamelModel):
    """Schema for the current user's profile."""

    id: UUID
    email: str
    full_name: str
    phone: str | None
    role: str
    is_active: bool
    created_at: datetime
    last_login_at: datetime | None
