"""Customer schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import EmailStr, Field

from joyhomes.schemas.common import CamelModel, Pagination


class CustomerCreate(CamelModel):
    """Schema for creating a customer."""

    full_name: str = Field(..., min_length=1, max_length=200, description="Vui lòng nhập họ tên")
    phone: str = Field(..., pattern=r"^\+?[0-9]{9,15}$")
    email: EmailStr | None = None
    source: str | None = Field(None, max_length=30)
    notes: str | None = None
    assigned_to_id: UUID | None = None


class CustomerResponse(CamelModel):
    id: UUID
    code: str
    full_name: str
    phone: str
    email: str | None
    source: str | None
    status: str
    notes: str | None
    assigned_to_id: UUID | None
    created_at: datetime


class CustomerListResponse(CamelModel):
    customers: list[CustomerResponse]
    pagination: Pagination
