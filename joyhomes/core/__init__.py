"""Core utilities and security modules."""

from joyhomes.core.exceptions import (
    AppException,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    InvalidBookingStatus,
    InvalidTransactionStatus,
    NotFoundError,
    PropertyNotAvailable,
    ValidationError,
)
from joyhomes.core.security import (
    create_access_token,
    create_refresh_token,
    create_tokens,
    get_password_hash,
    verify_password,
    verify_token,
)

__all__ = [
    "AppException",
    "AuthenticationError",
    "AuthorizationError",
    "ConflictError",
    "InvalidBookingStatus",
    "InvalidTransactionStatus",
    "NotFoundError",
    "PropertyNotAvailable",
    "ValidationError",
    "create_access_token",
    "create_refresh_token",
    "create_tokens",
    "get_password_hash",
    "verify_password",
    "verify_token",
]
