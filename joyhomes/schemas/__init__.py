"""Pydantic schemas for API validation."""

from joyhomes.schemas.booking import (
    BookingCreate,
    BookingDetailResponse,
    BookingListResponse,
    BookingResponse,
    BookingUpdate,
    PaymentSummary,
    TransactionResponse,
)
from joyhomes.schemas.customer import CustomerCreate, CustomerResponse
from joyhomes.schemas.inventory import (
    ProjectCreate,
    ProjectResponse,
    PropertyCreate,
    PropertyResponse,
)
from joyhomes.schemas.report import (
    DailyRevenue,
    DashboardStats,
    MonthlyRevenue,
    ProjectPerformance,
    SalesPerformance,
)
from joyhomes.schemas.user import TokenResponse, UserLogin, UserResponse

__all__ = [
    # User
    "UserLogin",
    "UserResponse",
    "TokenResponse",
    # Customer
    "CustomerCreate",
    "CustomerResponse",
    # Inventory
    "ProjectCreate",
    "ProjectResponse",
    "PropertyCreate",
    "PropertyResponse",
    # Booking
    "BookingCreate",
    "BookingUpdate",
    "BookingResponse",
    "BookingDetailResponse",
    "BookingListResponse",
    "PaymentSummary",
    "TransactionResponse",
    # Reports
    "DashboardStats",
    "DailyRevenue",
    "MonthlyRevenue",
    "SalesPerformance",
    "ProjectPerformance",
]
