"""Booking report schemas (read-only)."""

from datetime import date
from uuid import UUID

from joyhomes.schemas.common import CamelModel


class DashboardStats(CamelModel):
    """Overview counters with month-over-month trends in percent."""

    total_customers: int
    total_projects: int
    total_bookings: int
    active_bookings: int
    pending_bookings: int
    completed_bookings: int
    total_revenue: int
    total_commission: int

    current_month_customers: int
    current_month_bookings: int
    current_month_revenue: int
    customer_trend: float
    booking_trend: float
    revenue_trend: float
    conversion_rate: float


class DailyRevenue(CamelModel):
    day: date
    revenue: int
    commission: int
    count: int


class MonthlyRevenue(CamelModel):
    month: int
    revenue: int
    commission: int
    count: int


class SalesPerformance(CamelModel):
    """Bookings, revenue and commission attributed to one sales user."""

    rank: int
    user_id: UUID
    full_name: str
    email: str
    booking_count: int
    total_revenue: int
    total_commission: int


class ProjectPerformance(CamelModel):
    id: UUID
    code: str
    name: str
    status: str
    total_units: int
    available_units: int
    sold_units: int
    sold_percentage: float
    booking_count: int
    total_revenue: int


class StatusCount(CamelModel):
    status: str
    count: int


class SourceCount(CamelModel):
    source: str
    count: int
