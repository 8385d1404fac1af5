"""Booking reports (read-only queries).

Revenue and commission only count COMPLETED bookings, bucketed by the day the
booking was created (UTC).
"""

from datetime import UTC, date, datetime, time, timedelta
from typing import Any

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from joyhomes.domain.booking_state import CLAIMING_STATUSES, BookingStatus, PropertyStatus
from joyhomes.models.booking import Booking
from joyhomes.models.customer import Customer
from joyhomes.models.inventory import Project, Property
from joyhomes.models.user import User
from joyhomes.utils.dates import utcnow

COMPLETED = BookingStatus.COMPLETED.value
ACTIVE_STATUSES = sorted(s.value for s in CLAIMING_STATUSES if s != BookingStatus.COMPLETED)
# Bookings that fell through are left out of sales performance
LOST_STATUSES = [BookingStatus.CANCELLED.value, BookingStatus.REFUNDED.value]


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive values that are already UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _day_start(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=UTC)


def _month_start(year: int, month: int) -> datetime:
    return datetime(year, month, 1, tzinfo=UTC)


def _trend(current: int, previous: int) -> float:
    """Percentage change; growth from nothing counts as 100%."""
    if previous > 0:
        return round((current - previous) / previous * 100, 1)
    return 100.0 if current > 0 else 0.0


class ReportService:
    """Read-only booking reports."""

    async def get_dashboard_stats(self, db: AsyncSession) -> dict[str, Any]:
        """Overview counters plus this month against last month."""
        now = utcnow()
        current_start = _month_start(now.year, now.month)
        if now.month == 1:
            last_start = _month_start(now.year - 1, 12)
        else:
            last_start = _month_start(now.year, now.month - 1)

        total_customers = await db.scalar(select(func.count()).select_from(Customer)) or 0
        total_projects = await db.scalar(select(func.count()).select_from(Project)) or 0

        result = await db.execute(select(Booking.status, func.count()).group_by(Booking.status))
        counts = {status: count for status, count in result.all()}

        totals = await db.execute(
            select(
                func.coalesce(func.sum(Booking.agreed_price), 0),
                func.coalesce(func.sum(Booking.commission_amount), 0),
            ).where(Booking.status == COMPLETED)
        )
        total_revenue, total_commission = totals.one()

        current_customers = await self._count_customers(db, current_start)
        last_customers = await self._count_customers(db, last_start, current_start)
        current_bookings, current_revenue = await self._booking_window(db, current_start)
        last_bookings, last_revenue = await self._booking_window(db, last_start, current_start)

        completed = counts.get(COMPLETED, 0)
        conversion_rate = round(completed / total_customers * 100, 1) if total_customers else 0.0

        return {
            "total_customers": total_customers,
            "total_projects": total_projects,
            "total_bookings": sum(counts.values()),
            "active_bookings": sum(counts.get(status, 0) for status in ACTIVE_STATUSES),
            "pending_bookings": counts.get(BookingStatus.PENDING.value, 0),
            "completed_bookings": completed,
            "total_revenue": int(total_revenue),
            "total_commission": int(total_commission),
            "current_month_customers": current_customers,
            "current_month_bookings": current_bookings,
            "current_month_revenue": current_revenue,
            "customer_trend": _trend(current_customers, last_customers),
            "booking_trend": _trend(current_bookings, last_bookings),
            "revenue_trend": _trend(current_revenue, last_revenue),
            "conversion_rate": conversion_rate,
        }

    async def get_revenue_trend(self, db: AsyncSession, days: int) -> list[dict[str, Any]]:
        """Daily revenue for the last ``days`` days, today included."""
        today = utcnow().date()
        first_day = today - timedelta(days=days - 1)
        buckets = {
            first_day + timedelta(days=offset): {
                "day": first_day + timedelta(days=offset),
                "revenue": 0,
                "commission": 0,
                "count": 0,
            }
            for offset in range(days)
        }

        result = await db.execute(
            select(Booking.agreed_price, Booking.commission_amount, Booking.created_at).where(
                Booking.status == COMPLETED,
                Booking.created_at >= _day_start(first_day),
            )
        )
        for price, commission, created_at in result.all():
            bucket = buckets.get(_as_utc(created_at).date())
            if bucket is None:
                continue
            bucket["revenue"] += price
            bucket["commission"] += commission
            bucket["count"] += 1

        return list(buckets.values())

    async def get_monthly_revenue(self, db: AsyncSession, year: int) -> list[dict[str, Any]]:
        """Twelve monthly buckets for ``year``."""
        months = [
            {"month": month, "revenue": 0, "commission": 0, "count": 0} for month in range(1, 13)
        ]

        result = await db.execute(
            select(Booking.agreed_price, Booking.commission_amount, Booking.created_at).where(
                Booking.status == COMPLETED,
                Booking.created_at >= _month_start(year, 1),
                Booking.created_at < _month_start(year + 1, 1),
            )
        )
        for price, commission, created_at in result.all():
            bucket = months[_as_utc(created_at).month - 1]
            bucket["revenue"] += price
            bucket["commission"] += commission
            bucket["count"] += 1

        return months

    async def get_sales_performance(
        self,
        db: AsyncSession,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[dict[str, Any]]:
        """Per sales user totals, highest revenue first. Dates are inclusive."""
        criteria = []
        if start_date:
            criteria.append(Booking.created_at >= _day_start(start_date))
        if end_date:
            criteria.append(Booking.created_at < _day_start(end_date + timedelta(days=1)))
        return await self._sales_rows(db, criteria, by_count=False)

    async def get_top_performers(self, db: AsyncSession, limit: int = 5) -> list[dict[str, Any]]:
        """Sales users with the most bookings."""
        return await self._sales_rows(db, [], by_count=True, limit=limit)

    async def get_project_performance(self, db: AsyncSession) -> list[dict[str, Any]]:
        """Unit availability, bookings and completed revenue per project."""
        projects = (await db.execute(select(Project).order_by(Project.code))).scalars().all()

        unit_rows = await db.execute(
            select(Property.project_id, Property.status, func.count()).group_by(
                Property.project_id, Property.status
            )
        )
        units: dict[Any, dict[str, int]] = {}
        for project_id, status, count in unit_rows.all():
            units.setdefault(project_id, {})[status] = count

        booking_rows = await db.execute(
            select(
                Booking.project_id,
                func.count(),
                func.coalesce(
                    func.sum(case((Booking.status == COMPLETED, Booking.agreed_price), else_=0)), 0
                ),
            ).group_by(Booking.project_id)
        )
        bookings = {project_id: (count, int(revenue)) for project_id, count, revenue in booking_rows.all()}

        report = []
        for project in projects:
            by_status = units.get(project.id, {})
            total_units = sum(by_status.values())
            sold_units = by_status.get(PropertyStatus.SOLD.value, 0)
            booking_count, revenue = bookings.get(project.id, (0, 0))
            report.append(
                {
                    "id": project.id,
                    "code": project.code,
                    "name": project.name,
                    "status": project.status,
                    "total_units": total_units,
                    "available_units": by_status.get(PropertyStatus.AVAILABLE.value, 0),
                    "sold_units": sold_units,
                    "sold_percentage": round(sold_units / total_units * 100, 1) if total_units else 0.0,
                    "booking_count": booking_count,
                    "total_revenue": revenue,
                }
            )
        return report

    async def get_booking_status_breakdown(self, db: AsyncSession) -> list[dict[str, Any]]:
        """Booking count for every status, in lifecycle order."""
        result = await db.execute(select(Booking.status, func.count()).group_by(Booking.status))
        counts = {status: count for status, count in result.all()}
        return [{"status": status.value, "count": counts.get(status.value, 0)} for status in BookingStatus]

    async def get_customer_sources(self, db: AsyncSession) -> list[dict[str, Any]]:
        """Customers per acquisition source, largest first."""
        result = await db.execute(select(Customer.source, func.count()).group_by(Customer.source))
        sources = [{"source": source or "UNKNOWN", "count": count} for source, count in result.all()]
        return sorted(sources, key=lambda row: (-row["count"], row["source"]))

    # ==================== Helpers ====================

    async def _count_customers(
        self, db: AsyncSession, start: datetime, end: datetime | None = None
    ) -> int:
        window = [Customer.created_at >= start]
        if end is not None:
            window.append(Customer.created_at < end)
        return await db.scalar(select(func.count()).select_from(Customer).where(*window)) or 0

    async def _booking_window(
        self, db: AsyncSession, start: datetime, end: datetime | None = None
    ) -> tuple[int, int]:
        """Bookings created in the window and the revenue of those completed."""
        window = [Booking.created_at >= start]
        if end is not None:
            window.append(Booking.created_at < end)
        result = await db.execute(
            select(
                func.count(),
                func.coalesce(
                    func.sum(case((Booking.status == COMPLETED, Booking.agreed_price), else_=0)), 0
                ),
            ).where(*window)
        )
        count, revenue = result.one()
        return count, int(revenue)

    async def _sales_rows(
        self,
        db: AsyncSession,
        criteria: list,
        by_count: bool,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        booking_count = func.count(Booking.id)
        revenue = func.coalesce(func.sum(Booking.agreed_price), 0)
        commission = func.coalesce(func.sum(Booking.commission_amount), 0)

        query = (
            select(User.id, User.full_name, User.email, booking_count, revenue, commission)
            .join(Booking, Booking.user_id == User.id)
            .where(Booking.status.not_in(LOST_STATUSES), *criteria)
            .group_by(User.id, User.full_name, User.email)
            .order_by((booking_count if by_count else revenue).desc(), User.full_name)
        )
        if limit:
            query = query.limit(limit)

        result = await db.execute(query)
        return [
            {
                "rank": rank,
                "user_id": user_id,
                "full_name": full_name,
                "email": email,
                "booking_count": count,
                "total_revenue": int(total_revenue),
                "total_commission": int(total_commission),
            }
            for rank, (user_id, full_name, email, count, total_revenue, total_commission) in enumerate(
                result.all(), start=1
            )
        ]


report_service = ReportService()
