"""Custom application exceptions.

Domain-rule messages are user facing and written in Vietnamese; the HTTP
layer only maps the exception class to a status code.
"""

from typing import Any

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base application exception."""

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An unexpected error occurred",
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class ValidationError(AppException):
    """Validation error exception."""

    def __init__(self, detail: str = "Validation failed", errors: list[dict[str, Any]] | None = None) -> None:
        self.errors = errors
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class NotFoundError(AppException):
    """Resource not found exception."""

    def __init__(self, resource: str = "Resource", identifier: str | None = None, detail: str | None = None) -> None:
        if detail is None:
            detail = f"{resource} not found"
            if identifier:
                detail = f"{resource} with ID '{identifier}' not found"
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class AuthenticationError(AppException):
    """Authentication failed exception."""

    def __init__(self, detail: str = "Authentication failed") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(AppException):
    """Authorization denied exception."""

    def __init__(self, detail: str = "Forbidden") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class ConflictError(AppException):
    """Concurrent modification detected."""

    def __init__(self, detail: str = "Dữ liệu đã bị thay đổi, vui lòng thử lại") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class PropertyNotAvailable(AppException):
    """Property cannot be booked in its current status."""

    def __init__(self, detail: str = "Sản phẩm không khả dụng để đặt") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class InvalidBookingStatus(AppException):
    """Invalid booking status for operation."""

    def __init__(self, detail: str = "Thao tác không hợp lệ với trạng thái booking hiện tại") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class InvalidTransactionStatus(AppException):
    """Invalid ledger entry status for operation."""

    def __init__(self, detail: str = "Giao dịch đã bị hủy") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
