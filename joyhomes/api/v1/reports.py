"""Booking report endpoints (read-only)."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from joyhomes.api.deps import get_db
from joyhomes.core.exceptions import ValidationError
from joyhomes.core.permissions import require_reports_read
from joyhomes.models.user import User
from joyhomes.schemas.report import (
    DailyRevenue,
    DashboardStats,
    MonthlyRevenue,
    ProjectPerformance,
    SalesPerformance,
    SourceCount,
    StatusCount,
)
from joyhomes.services.report_service import report_service
from joyhomes.utils.dates import utcnow

router = APIRouter()


@router.get("/dashboard", response_model=DashboardStats)
async def get_dashboard(
    current_user: Annotated[User, Depends(require_reports_read)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DashboardStats:
    """Overview counters with month-over-month trends."""
    data = await report_service.get_dashboard_stats(db)
    return DashboardStats(**data)


@router.get("/revenue-trend", response_model=list[DailyRevenue])
async def get_revenue_trend(
    current_user: Annotated[User, Depends(require_reports_read)],
    db: Annotated[AsyncSession, Depends(get_db)],
    days: Annotated[int, Query(ge=1, le=365)] = 30,
) -> list[DailyRevenue]:
    """Completed revenue per day over the last ``days`` days."""
    rows = await report_service.get_revenue_trend(db, days)
    return [DailyRevenue(**row) for row in rows]


@router.get("/monthly-revenue", response_model=list[MonthlyRevenue])
async def get_monthly_revenue(
    current_user: Annotated[User, Depends(require_reports_read)],
    db: Annotated[AsyncSession, Depends(get_db)],
    year: Annotated[int | None, Query(ge=2000, le=2100)] = None,
) -> list[MonthlyRevenue]:
    """Completed revenue per month; defaults to the current year."""
    rows = await report_service.get_monthly_revenue(db, year or utcnow().year)
    return [MonthlyRevenue(**row) for row in rows]


@router.get("/sales-performance", response_model=list[SalesPerformance])
async def get_sales_performance(
    current_user: Annotated[User, Depends(require_reports_read)],
    db: Annotated[AsyncSession, Depends(get_db)],
    start_date: Annotated[date | None, Query(alias="startDate")] = None,
    end_date: Annotated[date | None, Query(alias="endDate")] = None,
) -> list[SalesPerformance]:
    """Sales users ranked by revenue."""
    if start_date and end_date and start_date > end_date:
        raise ValidationError("Ngày bắt đầu phải trước ngày kết thúc")
    rows = await report_service.get_sales_performance(db, start_date, end_date)
    return [SalesPerformance(**row) for row in rows]


@router.get("/top-performers", response_model=list[SalesPerformance])
async def get_top_performers(
    current_user: Annotated[User, Depends(require_reports_read)],
    db: Annotated[AsyncSession, Depends(get_db)],
    limit: Annotated[int, Query(ge=1, le=50)] = 5,
) -> list[SalesPerformance]:
    """Sales users ranked by booking count."""
    rows = await report_service.get_top_performers(db, limit)
    return [SalesPerformance(**row) for row in rows]


@router.get("/project-performance", response_model=list[ProjectPerformance])
async def get_project_performance(
    current_user: Annotated[User, Depends(require_reports_read)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[ProjectPerformance]:
    rows = await report_service.get_project_performance(db)
    return [ProjectPerformance(**row) for row in rows]


@router.get("/booking-status", response_model=list[StatusCount])
async def get_booking_status(
    current_user: Annotated[User, Depends(require_reports_read)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[StatusCount]:
    rows = await report_service.get_booking_status_breakdown(db)
    return [StatusCount(**row) for row in rows]


@router.get("/customer-sources", response_model=list[SourceCount])
async def get_customer_sources(
    current_user: Annotated[User, Depends(require_reports_read)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[SourceCount]:
    rows = await report_service.get_customer_sources(db)
    return [SourceCount(**row) for row in rows]
