"""Booking orchestration: lifecycle, property side effects and the ledger."""

from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm.exc import StaleDataError

from joyhomes.core.exceptions import (
    InvalidBookingStatus,
    InvalidTransactionStatus,
    NotFoundError,
    PropertyNotAvailable,
    ValidationError,
)
from joyhomes.core.immutability import ImmutabilityViolationError
from joyhomes.models.activity import ActivityLog
from joyhomes.models.booking import Booking, Transaction
from joyhomes.models.inventory import Property
from joyhomes.schemas.booking import BookingCreate, BookingUpdate
from joyhomes.services.activity_log_service import ActivityLogService
from joyhomes.services.booking_service import BookingService, booking_service

PRICE = 3_000_000_000
DEPOSIT = 300_000_000


async def create(db, seed, prop=None, **overrides):
    data = BookingCreate(
        property_id=(prop or seed.property).id,
        customer_id=seed.customer.id,
        agreed_price=overrides.pop("agreed_price", PRICE),
        **overrides,
    )
    return await booking_service.create_booking(db, data, seed.sales.id)


async def deposited(db, seed):
    booking = await create(db, seed)
    await booking_service.approve_booking(db, booking.id, seed.manager.id)
    await booking_service.add_transaction(
        db, booking.id, "DEPOSIT", DEPOSIT, "BANK_TRANSFER", actor_id=seed.accountant.id
    )
    return await booking_service.get_booking_by_id(db, booking.id)


async def property_status(db, seed, prop=None) -> str:
    prop = await db.get(Property, (prop or seed.property).id)
    return prop.status


class ExplodingActivity(ActivityLogService):
    async def log_activity(self, *args, **kwargs):
        raise RuntimeError("activity store unavailable")


class TestCreateBooking:
    async def test_creates_pending_booking_and_holds_property(self, db, seed):
        booking = await create(db, seed)

        assert booking.status == "PENDING"
        assert booking.code.startswith("BK-")
        assert booking.project_id == seed.project.id
        assert booking.user_id == seed.sales.id
        assert booking.commission_rate == Decimal("2.5")
        assert booking.commission_amount == 75_000_000
        assert booking.deposit_amount == 0
        assert booking.version == 1
        assert await property_status(db, seed) == "HOLD"

    async def test_project_without_rate_uses_default(self, db, seed):
        booking = await create(db, seed, prop=seed.default_rate_property, agreed_price=4_000_000_000)

        assert booking.commission_rate == Decimal("2")
        assert booking.commission_amount == 80_000_000

    async def test_property_on_hold_can_be_booked_again(self, db, seed):
        await create(db, seed)
        second = await create(db, seed)

        assert second.status == "PENDING"
        assert await property_status(db, seed) == "HOLD"

    async def test_sold_property_is_rejected_without_writes(self, db, seed, session_factory):
        with pytest.raises(PropertyNotAvailable):
            await create(db, seed, prop=seed.sold_property)

        async with session_factory() as fresh:
            count = await fresh.scalar(select(func.count()).select_from(Booking))
            prop = await fresh.get(Property, seed.sold_property.id)
        assert count == 0
        assert prop.status == "SOLD"

    async def test_unknown_property(self, db, seed):
        data = BookingCreate(property_id=seed.customer.id, customer_id=seed.customer.id, agreed_price=PRICE)
        with pytest.raises(NotFoundError):
            await booking_service.create_booking(db, data, seed.sales.id)

    async def test_unknown_customer(self, db, seed):
        data = BookingCreate(property_id=seed.property.id, customer_id=seed.property.id, agreed_price=PRICE)
        with pytest.raises(NotFoundError):
            await booking_service.create_booking(db, data, seed.sales.id)

    async def test_logs_activity(self, db, seed):
        booking = await create(db, seed)
        await db.flush()

        logs = (await db.execute(select(ActivityLog))).scalars().all()
        assert [(log.action, log.entity_type, log.entity_id) for log in logs] == [
            ("CREATE", "BOOKING", str(booking.id))
        ]


class TestLifecycle:
    async def test_full_sale(self, db, seed):
        booking = await create(db, seed)

        booking = await booking_service.approve_booking(db, booking.id, seed.manager.id)
        assert booking.status == "APPROVED"
        assert await property_status(db, seed) == "BOOKED"

        deposit = await booking_service.add_transaction(
            db, booking.id, "DEPOSIT", DEPOSIT, "BANK_TRANSFER", actor_id=seed.accountant.id
        )
        assert deposit.status == "CONFIRMED"
        assert deposit.code.startswith("TXN-")
        assert deposit.created_by == str(seed.accountant.id)

        booking = await booking_service.get_booking_by_id(db, booking.id)
        assert booking.status == "DEPOSITED"
        assert booking.deposit_amount == DEPOSIT
        assert booking.deposit_date is not None

        booking = await booking_service.update_booking_status(
            db, booking.id, "CONTRACTED", contract_number="HD-001", actor_id=seed.manager.id
        )
        assert booking.status == "CONTRACTED"
        assert booking.contract_number == "HD-001"
        assert booking.contract_date is not None

        booking = await booking_service.update_booking_status(
            db, booking.id, "COMPLETED", actor_id=seed.manager.id
        )
        assert booking.status == "COMPLETED"
        assert await property_status(db, seed) == "SOLD"

        summary = await booking_service.get_payment_summary(db, booking.id)
        assert summary.deposits == DEPOSIT
        assert summary.total_paid == DEPOSIT
        assert summary.remaining == 2_700_000_000
        assert summary.commission_amount == 75_000_000
        assert summary.commission_rate == 2.5

    async def test_cancel_releases_property(self, db, seed):
        booking = await create(db, seed)
        await booking_service.approve_booking(db, booking.id, seed.manager.id)

        booking = await booking_service.cancel_booking(db, booking.id, "khách đổi ý", seed.manager.id)

        assert booking.status == "CANCELLED"
        assert "[HỦY] khách đổi ý" in booking.notes
        assert await property_status(db, seed) == "AVAILABLE"

    async def test_cancel_requires_reason(self, db, seed):
        booking = await create(db, seed)
        with pytest.raises(ValidationError):
            await booking_service.cancel_booking(db, booking.id, "   ")

    async def test_cannot_cancel_completed(self, db, seed):
        booking = await deposited(db, seed)
        await booking_service.update_booking_status(db, booking.id, "CONTRACTED", contract_number="HD-002")
        await booking_service.update_booking_status(db, booking.id, "COMPLETED")

        with pytest.raises(InvalidBookingStatus):
            await booking_service.cancel_booking(db, booking.id, "khách đổi ý")

    async def test_cannot_cancel_twice(self, db, seed):
        booking = await create(db, seed)
        await booking_service.cancel_booking(db, booking.id, "trùng booking")

        with pytest.raises(InvalidBookingStatus):
            await booking_service.cancel_booking(db, booking.id, "trùng booking")

    async def test_approve_only_pending(self, db, seed):
        booking = await create(db, seed)
        await booking_service.approve_booking(db, booking.id)

        with pytest.raises(InvalidBookingStatus):
            await booking_service.approve_booking(db, booking.id)

    async def test_disallowed_transition(self, db, seed):
        booking = await create(db, seed)

        with pytest.raises(InvalidBookingStatus):
            await booking_service.update_booking_status(db, booking.id, "COMPLETED")

        booking = await booking_service.get_booking_by_id(db, booking.id)
        assert booking.status == "PENDING"

    async def test_unknown_status(self, db, seed):
        booking = await create(db, seed)
        with pytest.raises(ValidationError):
            await booking_service.update_booking_status(db, booking.id, "ARCHIVED")

    @pytest.mark.parametrize("target", ["CANCELLED", "REFUNDED"])
    async def test_release_statuses_require_reason(self, db, seed, target):
        booking = await deposited(db, seed)
        with pytest.raises(ValidationError):
            await booking_service.update_booking_status(db, booking.id, target)

    async def test_refund_releases_property(self, db, seed):
        booking = await deposited(db, seed)

        booking = await booking_service.update_booking_status(
            db, booking.id, "REFUNDED", notes="Chủ đầu tư dừng dự án"
        )

        assert booking.status == "REFUNDED"
        assert "[REFUNDED] Chủ đầu tư dừng dự án" in booking.notes
        assert await property_status(db, seed) == "AVAILABLE"

    async def test_unknown_booking(self, db, seed):
        with pytest.raises(NotFoundError):
            await booking_service.approve_booking(db, seed.customer.id)

    async def test_cancel_keeps_property_booked_for_approved_sibling(self, db, seed):
        first = await create(db, seed)
        second = await create(db, seed)
        await booking_service.approve_booking(db, first.id, seed.manager.id)

        await booking_service.cancel_booking(db, second.id, "trùng booking", seed.manager.id)

        assert await property_status(db, seed) == "BOOKED"
        with pytest.raises(PropertyNotAvailable):
            await create(db, seed)

    async def test_cancel_keeps_hold_for_pending_sibling(self, db, seed):
        first = await create(db, seed)
        await create(db, seed)

        await booking_service.cancel_booking(db, first.id, "khách đổi ý")

        assert await property_status(db, seed) == "HOLD"

    async def test_status_cancel_keeps_property_sold_by_sibling(self, db, seed):
        waiting = await create(db, seed)
        sold = await deposited(db, seed)
        await booking_service.update_booking_status(db, sold.id, "CONTRACTED", contract_number="HD-003")
        await booking_service.update_booking_status(db, sold.id, "COMPLETED")

        await booking_service.update_booking_status(db, waiting.id, "CANCELLED", notes="đã bán")

        assert await property_status(db, seed) == "SOLD"

    async def test_last_claim_released_frees_property(self, db, seed):
        first = await create(db, seed)
        second = await create(db, seed)
        await booking_service.cancel_booking(db, first.id, "khách đổi ý")
        await booking_service.cancel_booking(db, second.id, "khách đổi ý")

        assert await property_status(db, seed) == "AVAILABLE"


class TestUpdateBooking:
    async def test_new_price_recomputes_commission_with_stored_rate(self, db, seed):
        booking = await create(db, seed)

        booking = await booking_service.update_booking(
            db, booking.id, BookingUpdate(agreed_price=2_000_000_000, notes="Giảm giá")
        )

        assert booking.agreed_price == 2_000_000_000
        assert booking.commission_amount == 50_000_000
        assert booking.notes == "Giảm giá"

    async def test_terminal_booking_is_read_only(self, db, seed):
        booking = await create(db, seed)
        await booking_service.cancel_booking(db, booking.id, "khách đổi ý")

        with pytest.raises(InvalidBookingStatus):
            await booking_service.update_booking(db, booking.id, BookingUpdate(notes="x"))


class TestAtomicity:
    async def test_failed_create_leaves_nothing_behind(self, seed, session_factory):
        service = BookingService(activity=ExplodingActivity())
        data = BookingCreate(property_id=seed.property.id, customer_id=seed.customer.id, agreed_price=PRICE)

        async with session_factory() as session:
            with pytest.raises(RuntimeError):
                async with session.begin():
                    await service.create_booking(session, data, seed.sales.id)

        async with session_factory() as fresh:
            count = await fresh.scalar(select(func.count()).select_from(Booking))
            prop = await fresh.get(Property, seed.property.id)
        assert count == 0
        assert prop.status == "AVAILABLE"

    async def test_failed_approve_keeps_booking_and_property_in_step(self, seed, session_factory):
        async with session_factory() as session:
            booking = await create(session, seed)
            await session.commit()

        service = BookingService(activity=ExplodingActivity())
        async with session_factory() as session:
            with pytest.raises(RuntimeError):
                async with session.begin():
                    await service.approve_booking(session, booking.id, seed.manager.id)

        async with session_factory() as fresh:
            stored = await fresh.get(Booking, booking.id)
            prop = await fresh.get(Property, seed.property.id)
        assert stored.status == "PENDING"
        assert prop.status == "HOLD"

    async def test_stale_write_is_rejected(self, seed, session_factory):
        async with session_factory() as session:
            booking = await create(session, seed)
            await session.commit()

        async with session_factory() as first, session_factory() as second:
            stale = await second.get(Booking, booking.id)

            await booking_service.approve_booking(first, booking.id)
            await first.commit()

            stale.notes = "ghi đè"
            with pytest.raises(StaleDataError):
                await second.flush()


class TestLedger:
    async def test_second_deposit_does_not_retrigger_transition(self, db, seed):
        booking = await deposited(db, seed)

        await booking_service.add_transaction(db, booking.id, "DEPOSIT", 100_000_000)
        booking = await booking_service.get_booking_by_id(db, booking.id)

        assert booking.status == "DEPOSITED"
        assert booking.deposit_amount == DEPOSIT
        summary = await booking_service.get_payment_summary(db, booking.id)
        assert summary.deposits == DEPOSIT + 100_000_000

    async def test_deposit_before_approval_leaves_status(self, db, seed):
        booking = await create(db, seed)

        await booking_service.add_transaction(db, booking.id, "DEPOSIT", DEPOSIT)
        booking = await booking_service.get_booking_by_id(db, booking.id)

        assert booking.status == "PENDING"
        assert booking.deposit_amount == 0

    async def test_system_actor(self, db, seed):
        booking = await create(db, seed)
        transaction = await booking_service.add_transaction(db, booking.id, "PAYMENT", 1_000_000)
        assert transaction.created_by == "system"

    @pytest.mark.parametrize("amount", [0, -5])
    async def test_amount_must_be_positive(self, db, seed, amount):
        booking = await create(db, seed)
        with pytest.raises(ValidationError):
            await booking_service.add_transaction(db, booking.id, "PAYMENT", amount)

    async def test_unknown_type(self, db, seed):
        booking = await create(db, seed)
        with pytest.raises(ValidationError):
            await booking_service.add_transaction(db, booking.id, "BONUS", 1_000)

    async def test_refund_after_cancellation(self, db, seed):
        booking = await deposited(db, seed)
        await booking_service.cancel_booking(db, booking.id, "khách đổi ý")

        await booking_service.add_transaction(db, booking.id, "REFUND", DEPOSIT)
        summary = await booking_service.get_payment_summary(db, booking.id)

        assert summary.refunds == DEPOSIT
        assert summary.total_paid == 0
        assert summary.remaining == PRICE

    async def test_commission_entries_do_not_count_as_paid(self, db, seed):
        booking = await deposited(db, seed)
        await booking_service.add_transaction(db, booking.id, "COMMISSION", 75_000_000)

        summary = await booking_service.get_payment_summary(db, booking.id)
        assert summary.total_paid == DEPOSIT

    async def test_payment_summary_is_read_only(self, db, seed):
        booking = await deposited(db, seed)
        await booking_service.add_transaction(db, booking.id, "PAYMENT", 500_000_000)
        await db.flush()
        version = booking.version

        first = await booking_service.get_payment_summary(db, booking.id)
        second = await booking_service.get_payment_summary(db, booking.id)

        assert first == second
        assert first.total_paid == DEPOSIT + 500_000_000
        assert (await booking_service.get_booking_by_id(db, booking.id)).version == version

    async def test_cancel_deposit_adjusts_deposit_amount_only(self, db, seed):
        booking = await deposited(db, seed)
        deposit = booking.transactions[0]

        cancelled = await booking_service.cancel_transaction(db, deposit.id, "Nhập sai", seed.accountant.id)
        booking = await booking_service.get_booking_by_id(db, booking.id)

        assert cancelled.status == "CANCELLED"
        assert "[HỦY] Nhập sai" in cancelled.notes
        assert booking.deposit_amount == 0
        assert booking.status == "DEPOSITED"
        summary = await booking_service.get_payment_summary(db, booking.id)
        assert summary.deposits == 0

    async def test_cancel_deposit_recorded_before_approval(self, db, seed):
        booking = await create(db, seed, deposit_amount=50_000_000)
        deposit = await booking_service.add_transaction(db, booking.id, "DEPOSIT", 100_000_000)
        assert deposit.applied_to_deposit is False

        await booking_service.cancel_transaction(db, deposit.id, "Nhập sai")
        booking = await booking_service.get_booking_by_id(db, booking.id)

        assert booking.deposit_amount == 50_000_000

    async def test_cancel_later_deposit_keeps_first(self, db, seed):
        booking = await deposited(db, seed)
        extra = await booking_service.add_transaction(db, booking.id, "DEPOSIT", 100_000_000)

        await booking_service.cancel_transaction(db, extra.id, "Nhập sai")
        booking = await booking_service.get_booking_by_id(db, booking.id)

        assert booking.deposit_amount == DEPOSIT
        summary = await booking_service.get_payment_summary(db, booking.id)
        assert summary.deposits == DEPOSIT

    async def test_deposit_flag_is_immutable(self, db, seed):
        booking = await deposited(db, seed)
        deposit = await db.get(Transaction, booking.transactions[0].id)
        assert deposit.applied_to_deposit is True

        deposit.applied_to_deposit = False
        with pytest.raises(ImmutabilityViolationError):
            await db.flush()

    async def test_cancel_transaction_twice(self, db, seed):
        booking = await deposited(db, seed)
        deposit = booking.transactions[0]
        await booking_service.cancel_transaction(db, deposit.id, "Nhập sai")

        with pytest.raises(InvalidTransactionStatus):
            await booking_service.cancel_transaction(db, deposit.id, "Nhập sai")

    async def test_cancel_unknown_transaction(self, db, seed):
        with pytest.raises(NotFoundError):
            await booking_service.cancel_transaction(db, seed.customer.id, "Nhập sai")

    async def test_amount_is_immutable(self, db, seed):
        booking = await deposited(db, seed)
        deposit = await db.get(Transaction, booking.transactions[0].id)

        deposit.amount = 1
        with pytest.raises(ImmutabilityViolationError):
            await db.flush()

    async def test_entries_cannot_be_deleted(self, db, seed):
        booking = await deposited(db, seed)
        deposit = await db.get(Transaction, booking.transactions[0].id)

        await db.delete(deposit)
        with pytest.raises(ImmutabilityViolationError):
            await db.flush()


class TestQueries:
    async def test_list_search_and_scope(self, db, seed):
        mine = await create(db, seed)
        other = await booking_service.create_booking(
            db,
            BookingCreate(
                property_id=seed.default_rate_property.id,
                customer_id=seed.other_customer.id,
                agreed_price=4_000_000_000,
            ),
            seed.other_sales.id,
        )

        bookings, total = await booking_service.get_bookings(db)
        assert total == 2
        assert {b.id for b in bookings} == {mine.id, other.id}

        bookings, total = await booking_service.get_bookings(db, search="nguyễn")
        assert total == 1
        assert bookings[0].id == mine.id

        bookings, total = await booking_service.get_bookings(db, search="T1-08")
        assert [b.id for b in bookings] == [other.id]

        bookings, total = await booking_service.get_bookings(db, user_id=seed.sales.id)
        assert [b.id for b in bookings] == [mine.id]

        bookings, total = await booking_service.get_bookings(db, project_id=seed.no_rate_project.id)
        assert [b.id for b in bookings] == [other.id]

    async def test_pagination(self, db, seed):
        for _ in range(3):
            await create(db, seed)

        bookings, total = await booking_service.get_bookings(db, page=2, limit=2)
        assert total == 3
        assert len(bookings) == 1

    async def test_stats(self, db, seed):
        booking = await deposited(db, seed)
        await booking_service.update_booking_status(db, booking.id, "CONTRACTED", contract_number="HD-003")
        await booking_service.update_booking_status(db, booking.id, "COMPLETED")
        cancelled = await create(db, seed, prop=seed.default_rate_property)
        await booking_service.cancel_booking(db, cancelled.id, "khách đổi ý")
        await create(db, seed, prop=seed.default_rate_property)
        await db.flush()

        stats = await booking_service.get_booking_stats(db)

        assert stats.total == 3
        assert stats.completed == 1
        assert stats.cancelled == 1
        assert stats.pending == 1
        assert stats.revenue == PRICE
        assert stats.commission == 75_000_000

        scoped = await booking_service.get_booking_stats(db, seed.project.id)
        assert scoped.total == 1

    async def test_transactions_newest_first(self, db, seed):
        booking = await deposited(db, seed)
        payment = await booking_service.add_transaction(db, booking.id, "PAYMENT", 10_000_000)

        transactions = await booking_service.get_booking_transactions(db, booking.id)
        assert [t.id for t in transactions][0] == payment.id
        assert len(transactions) == 2
