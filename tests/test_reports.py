"""Booking reports: dashboard, revenue buckets, sales and project performance."""

from datetime import date, timedelta

from joyhomes.schemas.booking import BookingCreate
from joyhomes.services.booking_service import booking_service
from joyhomes.services.report_service import report_service
from joyhomes.utils.dates import utcnow
from tests.conftest import auth_headers

PRICE = 3_000_000_000


async def book(db, seed, prop=None, user=None, agreed_price=PRICE):
    data = BookingCreate(
        property_id=(prop or seed.property).id,
        customer_id=seed.customer.id,
        agreed_price=agreed_price,
    )
    return await booking_service.create_booking(db, data, (user or seed.sales).id)


async def sell(db, seed, **kwargs):
    booking = await book(db, seed, **kwargs)
    await booking_service.approve_booking(db, booking.id)
    await booking_service.add_transaction(db, booking.id, "DEPOSIT", 300_000_000)
    await booking_service.update_booking_status(db, booking.id, "CONTRACTED", contract_number="HD-100")
    return await booking_service.update_booking_status(db, booking.id, "COMPLETED")


class TestDashboard:
    async def test_counters_and_trends(self, db, seed):
        await sell(db, seed)
        await book(db, seed, prop=seed.default_rate_property, agreed_price=4_000_000_000)

        stats = await report_service.get_dashboard_stats(db)

        assert stats["total_customers"] == 2
        assert stats["total_projects"] == 2
        assert stats["total_bookings"] == 2
        assert stats["active_bookings"] == 1
        assert stats["pending_bookings"] == 1
        assert stats["completed_bookings"] == 1
        assert stats["total_revenue"] == PRICE
        assert stats["total_commission"] == 75_000_000
        assert stats["current_month_bookings"] == 2
        assert stats["current_month_revenue"] == PRICE
        assert stats["booking_trend"] == 100.0
        assert stats["revenue_trend"] == 100.0
        assert stats["conversion_rate"] == 50.0

    async def test_empty_database(self, db):
        stats = await report_service.get_dashboard_stats(db)

        assert stats["total_bookings"] == 0
        assert stats["conversion_rate"] == 0.0
        assert stats["booking_trend"] == 0.0


class TestRevenue:
    async def test_monthly_buckets(self, db, seed):
        await sell(db, seed)
        await book(db, seed, prop=seed.default_rate_property)

        now = utcnow()
        months = await report_service.get_monthly_revenue(db, now.year)

        assert [m["month"] for m in months] == list(range(1, 13))
        current = months[now.month - 1]
        assert current == {"month": now.month, "revenue": PRICE, "commission": 75_000_000, "count": 1}
        assert sum(m["count"] for m in months) == 1

        previous_year = await report_service.get_monthly_revenue(db, now.year - 1)
        assert all(m["revenue"] == 0 for m in previous_year)

    async def test_daily_trend_ends_today(self, db, seed):
        await sell(db, seed)

        days = await report_service.get_revenue_trend(db, 7)

        assert len(days) == 7
        assert days[-1]["day"] == utcnow().date()
        assert days[0]["day"] == utcnow().date() - timedelta(days=6)
        assert days[-1]["revenue"] == PRICE
        assert sum(d["count"] for d in days) == 1


class TestSalesPerformance:
    async def test_ranked_by_revenue_without_lost_bookings(self, db, seed):
        await sell(db, seed)
        lost = await book(db, seed, prop=seed.default_rate_property, user=seed.other_sales)
        await booking_service.cancel_booking(db, lost.id, "khách đổi ý")

        rows = await report_service.get_sales_performance(db)

        assert [row["user_id"] for row in rows] == [seed.sales.id]
        assert rows[0]["rank"] == 1
        assert rows[0]["booking_count"] == 1
        assert rows[0]["total_revenue"] == PRICE
        assert rows[0]["total_commission"] == 75_000_000

    async def test_date_range_is_inclusive(self, db, seed):
        await book(db, seed)
        today = utcnow().date()

        assert len(await report_service.get_sales_performance(db, today, today)) == 1
        assert await report_service.get_sales_performance(db, date(2000, 1, 1), today - timedelta(days=1)) == []

    async def test_top_performers_by_booking_count(self, db, seed):
        await book(db, seed, user=seed.other_sales, agreed_price=9_000_000_000)
        await book(db, seed)
        await book(db, seed, prop=seed.default_rate_property)

        rows = await report_service.get_top_performers(db, limit=1)

        assert len(rows) == 1
        assert rows[0]["user_id"] == seed.sales.id
        assert rows[0]["booking_count"] == 2


class TestBreakdowns:
    async def test_project_performance(self, db, seed):
        await sell(db, seed)

        rows = {row["code"]: row for row in await report_service.get_project_performance(db)}

        assert rows["VH-GP"]["total_units"] == 2
        assert rows["VH-GP"]["sold_units"] == 2
        assert rows["VH-GP"]["sold_percentage"] == 100.0
        assert rows["VH-GP"]["booking_count"] == 1
        assert rows["VH-GP"]["total_revenue"] == PRICE
        assert rows["MT"]["available_units"] == 1
        assert rows["MT"]["sold_percentage"] == 0.0
        assert rows["MT"]["booking_count"] == 0

    async def test_status_breakdown_lists_every_status(self, db, seed):
        booking = await book(db, seed)
        await booking_service.cancel_booking(db, booking.id, "khách đổi ý")
        await book(db, seed)

        rows = await report_service.get_booking_status_breakdown(db)

        assert [row["status"] for row in rows] == [
            "PENDING", "APPROVED", "DEPOSITED", "CONTRACTED", "COMPLETED", "CANCELLED", "REFUNDED",
        ]
        counts = {row["status"]: row["count"] for row in rows}
        assert counts["PENDING"] == 1
        assert counts["CANCELLED"] == 1
        assert counts["COMPLETED"] == 0

    async def test_customer_sources(self, db, seed):
        rows = await report_service.get_customer_sources(db)
        assert rows == [{"source": "UNKNOWN", "count": 2}]


class TestReportsApi:
    async def test_marketing_reads_dashboard(self, client, seed):
        response = await client.get("/api/reports/dashboard", headers=auth_headers(seed.marketing))
        assert response.status_code == 200
        assert response.json()["totalCustomers"] == 2
        assert "conversionRate" in response.json()

    async def test_sales_cannot_read_reports(self, client, seed):
        response = await client.get("/api/reports/booking-status", headers=auth_headers(seed.sales))
        assert response.status_code == 403

    async def test_monthly_revenue_defaults_to_current_year(self, client, seed):
        response = await client.get("/api/reports/monthly-revenue", headers=auth_headers(seed.accountant))
        assert response.status_code == 200
        assert len(response.json()) == 12

    async def test_days_out_of_range(self, client, seed):
        response = await client.get(
            "/api/reports/revenue-trend", params={"days": 0}, headers=auth_headers(seed.manager)
        )
        assert response.status_code == 400

    async def test_inverted_date_range(self, client, seed):
        response = await client.get(
            "/api/reports/sales-performance",
            params={"startDate": "2026-02-01", "endDate": "2026-01-01"},
            headers=auth_headers(seed.manager),
        )
        assert response.status_code == 400
