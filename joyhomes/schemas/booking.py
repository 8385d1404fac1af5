"""Booking-related Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import Field, field_validator

from joyhomes.domain.booking_state import BookingStatus
from joyhomes.domain.ledger import PaymentMethod, TransactionType
from joyhomes.schemas.common import CamelModel, Pagination


class BookingCreate(CamelModel):
    """Schema for creating a booking."""

    property_id: UUID
    customer_id: UUID
    agreed_price: int = Field(..., gt=0, description="Giá bán phải lớn hơn 0")
    deposit_amount: int = Field(default=0, ge=0)
    deposit_date: datetime | None = None
    notes: str | None = Field(None, max_length=5000)


class BookingUpdate(CamelModel):
    """Schema for the generic booking field update."""

    agreed_price: int | None = Field(None, gt=0)
    deposit_amount: int | None = Field(None, ge=0)
    deposit_date: datetime | None = None
    contract_date: datetime | None = None
    handover_date: datetime | None = None
    notes: str | None = Field(None, max_length=5000)


class BookingCancelRequest(CamelModel):
    """Schema for cancelling a booking."""

    reason: str = Field(..., max_length=1000)

    @field_validator("reason")
    @classmethod
    def validate_reason(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Vui lòng nhập lý do hủy")
        return v


class BookingStatusUpdateRequest(CamelModel):
    """Schema for an explicit status transition."""

    status: BookingStatus
    contract_number: str | None = Field(None, max_length=50)
    notes: str | None = Field(None, max_length=1000)


class TransactionCreateRequest(CamelModel):
    """Schema for recording a deposit, payment or refund."""

    amount: int = Field(..., gt=0, description="Số tiền phải lớn hơn 0")
    payment_method: PaymentMethod | None = None
    notes: str | None = Field(None, max_length=1000)


class TransactionCancelRequest(CamelModel):
    """Schema for cancelling a ledger entry."""

    reason: str = Field(..., min_length=1, max_length=1000)


# PATCH /bookings/{id} actions that record a ledger entry
ACTION_TRANSACTION_TYPES: dict[str, TransactionType] = {
    "add_deposit": TransactionType.DEPOSIT,
    "add_payment": TransactionType.PAYMENT,
    "add_refund": TransactionType.REFUND,
}


class CustomerBrief(CamelModel):
    id: UUID
    code: str
    full_name: str
    phone: str


class ProjectBrief(CamelModel):
    id: UUID
    code: str
    name: str
    commission_rate: float | None


class PropertyBrief(CamelModel):
    id: UUID
    code: str
    building: str | None
    floor: int | None
    area: float | None
    status: str
    project: ProjectBrief


class UserBrief(CamelModel):
    id: UUID
    full_name: str
    email: str


class TransactionResponse(CamelModel):
    """Schema for a ledger entry."""

    id: UUID
    code: str
    booking_id: UUID
    type: str
    amount: int
    payment_method: str | None
    payment_date: datetime | None
    status: str
    notes: str | None
    created_by: str
    applied_to_deposit: bool
    created_at: datetime


class BookingResponse(CamelModel):
    """Schema for booking response."""

    id: UUID
    code: str
    property_id: UUID
    project_id: UUID
    customer_id: UUID
    user_id: UUID

    # Money
    agreed_price: int
    deposit_amount: int
    deposit_date: datetime | None

    # Commission
    commission_rate: float
    commission_amount: int

    # Status
    status: str
    contract_number: str | None
    contract_date: datetime | None
    handover_date: datetime | None
    notes: str | None
    version: int

    # Timestamps
    created_at: datetime
    updated_at: datetime

    # Related
    customer: CustomerBrief
    property: PropertyBrief
    user: UserBrief


class BookingDetailResponse(BookingResponse):
    """Booking with its ledger, newest entry first."""

    transactions: list[TransactionResponse] = []


class BookingListResponse(CamelModel):
    """Schema for paginated booking list."""

    bookings: list[BookingResponse]
    pagination: Pagination


class PaymentSummary(CamelModel):
    """Aggregated CONFIRMED ledger totals for a booking."""

    agreed_price: int
    deposits: int
    payments: int
    refunds: int
    total_paid: int
    remaining: int
    commission_amount: int
    commission_rate: float


class NextStatusesResponse(CamelModel):
    current_status: BookingStatus
    next_statuses: list[BookingStatus]


class BookingStats(CamelModel):
    """Per-status counts plus completed revenue and commission."""

    total: int
    pending: int
    approved: int
    deposited: int
    contracted: int
    completed: int
    cancelled: int
    refunded: int
    revenue: int
    commission: int

