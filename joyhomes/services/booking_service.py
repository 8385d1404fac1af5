"""Booking lifecycle and settlement ledger.

Every mutation below runs inside the caller's session transaction and
flushes the Booking row together with the Property (or Transaction) row it
affects, so a failure leaves neither changed once the request rolls back.
Booking and Property rows are version-checked on UPDATE; a concurrent write
surfaces as ``StaleDataError`` rather than a silent overwrite.
"""

import logging
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from joyhomes.core.exceptions import (
    InvalidBookingStatus,
    InvalidTransactionStatus,
    NotFoundError,
    PropertyNotAvailable,
    ValidationError,
)
from joyhomes.domain.booking_state import (
    BOOKABLE_PROPERTY_STATUSES,
    CLAIMING_STATUSES,
    BookingStatus,
    PropertyStatus,
    assert_booking_transition,
    is_terminal,
    property_status_for,
    property_status_held_by,
)
from joyhomes.domain.ledger import PaymentMethod, TransactionStatus, TransactionType
from joyhomes.models.booking import Booking, Transaction
from joyhomes.models.customer import Customer
from joyhomes.models.inventory import Project, Property
from joyhomes.schemas.booking import BookingCreate, BookingStats, BookingUpdate, PaymentSummary
from joyhomes.services.activity_log_service import (
    ActivityAction,
    ActivityLogService,
    EntityType,
    activity_log_service,
)
from joyhomes.services.commission_service import CommissionService, commission_service
from joyhomes.utils.codes import generate_booking_code, generate_transaction_code
from joyhomes.utils.dates import utcnow

logger = logging.getLogger(__name__)

BOOKING_NOT_FOUND = "Booking không tồn tại"
PROPERTY_NOT_FOUND = "Sản phẩm không tồn tại"
CUSTOMER_NOT_FOUND = "Khách hàng không tồn tại"
TRANSACTION_NOT_FOUND = "Giao dịch không tồn tại"
REASON_REQUIRED = "Vui lòng nhập lý do hủy"


def with_note(existing: str | None, tag: str, text: str) -> str:
    """Append a ``[TAG] text`` line to free-form notes."""
    return f"{existing or ''}\n[{tag}] {text}".strip()


def _booking_with_relations():
    return select(Booking).options(
        selectinload(Booking.customer),
        selectinload(Booking.property).selectinload(Property.project),
        selectinload(Booking.user),
        selectinload(Booking.transactions),
    )


class BookingService:
    """Orchestrates booking lifecycle, property availability and the ledger."""

    def __init__(
        self,
        commission: CommissionService = commission_service,
        activity: ActivityLogService = activity_log_service,
    ) -> None:
        self.commission = commission
        self.activity = activity

    # ==================== Queries ====================

    async def get_booking_by_id(self, db: AsyncSession, booking_id: UUID) -> Booking | None:
        """Booking with customer, property+project, user and ledger loaded."""
        result = await db.execute(
            _booking_with_relations()
            .where(Booking.id == booking_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_bookings(
        self,
        db: AsyncSession,
        search: str | None = None,
        status: str | None = None,
        project_id: UUID | None = None,
        user_id: UUID | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[Booking], int]:
        """List bookings newest first, with the unpaginated total.

        ``search`` matches booking code, customer name or property code,
        case-insensitively. ``user_id`` scopes the list to one sales owner.
        """
        query = select(Booking)

        if search:
            pattern = f"%{search}%"
            query = (
                query.join(Booking.customer)
                .join(Booking.property)
                .where(
                    or_(
                        Booking.code.ilike(pattern),
                        Customer.full_name.ilike(pattern),
                        Property.code.ilike(pattern),
                    )
                )
            )
        if status:
            query = query.where(Booking.status == status)
        if project_id:
            query = query.where(Booking.project_id == project_id)
        if user_id:
            query = query.where(Booking.user_id == user_id)

        count_result = await db.execute(select(func.count()).select_from(query.subquery()))
        total = count_result.scalar() or 0

        query = (
            query.options(
                selectinload(Booking.customer),
                selectinload(Booking.property).selectinload(Property.project),
                selectinload(Booking.user),
            )
            .order_by(Booking.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        result = await db.execute(query)
        return list(result.scalars().all()), total

    async def get_booking_stats(self, db: AsyncSession, project_id: UUID | None = None) -> BookingStats:
        """Counts per status plus revenue and commission of completed bookings."""
        scope = [Booking.project_id == project_id] if project_id else []

        result = await db.execute(
            select(Booking.status, func.count()).where(*scope).group_by(Booking.status)
        )
        counts = {status: count for status, count in result.all()}

        totals = await db.execute(
            select(
                func.coalesce(func.sum(Booking.agreed_price), 0),
                func.coalesce(func.sum(Booking.commission_amount), 0),
            ).where(*scope, Booking.status == BookingStatus.COMPLETED.value)
        )
        revenue, commission = totals.one()

        return BookingStats(
            total=sum(counts.values()),
            pending=counts.get(BookingStatus.PENDING.value, 0),
            approved=counts.get(BookingStatus.APPROVED.value, 0),
            deposited=counts.get(BookingStatus.DEPOSITED.value, 0),
            contracted=counts.get(BookingStatus.CONTRACTED.value, 0),
            completed=counts.get(BookingStatus.COMPLETED.value, 0),
            cancelled=counts.get(BookingStatus.CANCELLED.value, 0),
            refunded=counts.get(BookingStatus.REFUNDED.value, 0),
            revenue=int(revenue),
            commission=int(commission),
        )

    async def get_booking_transactions(self, db: AsyncSession, booking_id: UUID) -> list[Transaction]:
        """Ledger entries for a booking, newest first."""
        await self._get_booking(db, booking_id)
        result = await db.execute(
            select(Transaction)
            .where(Transaction.booking_id == booking_id)
            .order_by(Transaction.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_payment_summary(self, db: AsyncSession, booking_id: UUID) -> PaymentSummary:
        """Aggregate CONFIRMED ledger entries by type. Read-only.

        ``total_paid = deposits + payments - refunds`` and
        ``remaining = agreed_price - total_paid``. Commission payouts do not
        count toward what the customer has paid.
        """
        booking = await self._get_booking(db, booking_id)

        result = await db.execute(
            select(Transaction.type, func.coalesce(func.sum(Transaction.amount), 0))
            .where(
                Transaction.booking_id == booking_id,
                Transaction.status == TransactionStatus.CONFIRMED.value,
            )
            .group_by(Transaction.type)
        )
        sums = {tx_type: int(total) for tx_type, total in result.all()}

        deposits = sums.get(TransactionType.DEPOSIT.value, 0)
        payments = sums.get(TransactionType.PAYMENT.value, 0)
        refunds = sums.get(TransactionType.REFUND.value, 0)
        total_paid = deposits + payments - refunds

        return PaymentSummary(
            agreed_price=booking.agreed_price,
            deposits=deposits,
            payments=payments,
            refunds=refunds,
            total_paid=total_paid,
            remaining=booking.agreed_price - total_paid,
            commission_amount=booking.commission_amount,
            commission_rate=float(booking.commission_rate),
        )

    # ==================== Lifecycle ====================

    async def create_booking(self, db: AsyncSession, data: BookingCreate, user_id: UUID) -> Booking:
        """Reserve a property for a customer.

        Inserts a PENDING booking and puts the property on HOLD.

        Raises:
            NotFoundError: Property or customer does not exist
            PropertyNotAvailable: Property is not AVAILABLE or HOLD
        """
        prop = await db.get(Property, data.property_id)
        if prop is None:
            raise NotFoundError(detail=PROPERTY_NOT_FOUND)
        if prop.status not in {s.value for s in BOOKABLE_PROPERTY_STATUSES}:
            raise PropertyNotAvailable()

        customer = await db.get(Customer, data.customer_id)
        if customer is None:
            raise NotFoundError(detail=CUSTOMER_NOT_FOUND)

        project = await db.get(Project, prop.project_id)
        commission_rate = self.commission.get_commission_rate(project)
        commission_amount = self.commission.calculate_commission(data.agreed_price, commission_rate)

        booking = Booking(
            code=await generate_booking_code(db),
            property_id=prop.id,
            project_id=prop.project_id,
            customer_id=customer.id,
            user_id=user_id,
            agreed_price=data.agreed_price,
            deposit_amount=data.deposit_amount or 0,
            deposit_date=data.deposit_date,
            commission_rate=commission_rate,
            commission_amount=commission_amount,
            status=BookingStatus.PENDING.value,
            notes=data.notes,
        )
        db.add(booking)
        prop.status = PropertyStatus.HOLD.value
        await db.flush()

        await self.activity.log_activity(
            db, user_id, ActivityAction.CREATE, EntityType.BOOKING, booking.id
        )
        logger.info(
            "Booking %s created for property %s (commission %s%% = %s)",
            booking.code,
            prop.code,
            commission_rate,
            commission_amount,
        )
        return await self.get_booking_by_id(db, booking.id)

    async def approve_booking(
        self, db: AsyncSession, booking_id: UUID, actor_id: UUID | None = None
    ) -> Booking:
        """PENDING -> APPROVED; property becomes BOOKED."""
        booking = await self._get_booking(db, booking_id)
        if booking.status != BookingStatus.PENDING.value:
            raise InvalidBookingStatus("Chỉ có thể duyệt booking đang chờ")

        await self._apply_status(db, booking, BookingStatus.APPROVED)
        await db.flush()

        await self._log(db, actor_id, ActivityAction.APPROVE, booking)
        logger.info("Booking %s approved", booking.code)
        return await self.get_booking_by_id(db, booking.id)

    async def cancel_booking(
        self,
        db: AsyncSession,
        booking_id: UUID,
        reason: str,
        actor_id: UUID | None = None,
    ) -> Booking:
        """Cancel a booking and release its property.

        The reason is appended to the notes as ``[HỦY] <reason>``.
        """
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError(REASON_REQUIRED)

        booking = await self._get_booking(db, booking_id)
        if booking.status == BookingStatus.COMPLETED.value:
            raise InvalidBookingStatus("Không thể hủy booking đã hoàn thành")
        if is_terminal(booking.status):
            raise InvalidBookingStatus("Booking đã kết thúc, không thể hủy")

        booking.notes = with_note(booking.notes, "HỦY", reason)
        await self._apply_status(db, booking, BookingStatus.CANCELLED)
        await db.flush()

        await self._log(db, actor_id, ActivityAction.CANCEL, booking)
        logger.info("Booking %s cancelled: %s", booking.code, reason)
        return await self.get_booking_by_id(db, booking.id)

    async def update_booking_status(
        self,
        db: AsyncSession,
        booking_id: UUID,
        new_status: str | BookingStatus,
        contract_number: str | None = None,
        notes: str | None = None,
        actor_id: UUID | None = None,
    ) -> Booking:
        """Move a booking along the transition table.

        CONTRACTED records the contract number and date. CANCELLED and
        REFUNDED require a reason in ``notes``. The property follows the new
        status (BOOKED, SOLD or AVAILABLE) in the same flush.
        """
        try:
            target = BookingStatus(new_status)
        except ValueError:
            raise ValidationError(f'Trạng thái "{new_status}" không hợp lệ')

        booking = await self._get_booking(db, booking_id)
        assert_booking_transition(booking.status, target)

        notes = (notes or "").strip()
        if target in (BookingStatus.CANCELLED, BookingStatus.REFUNDED) and not notes:
            raise ValidationError(REASON_REQUIRED)

        if target == BookingStatus.CONTRACTED:
            booking.contract_number = contract_number
            booking.contract_date = utcnow()
        if notes:
            booking.notes = with_note(booking.notes, target.value, notes)

        previous = booking.status
        await self._apply_status(db, booking, target)
        await db.flush()

        action = ActivityAction.CANCEL if target == BookingStatus.CANCELLED else ActivityAction.UPDATE
        await self._log(db, actor_id, action, booking)
        logger.info("Booking %s: %s -> %s", booking.code, previous, target.value)
        return await self.get_booking_by_id(db, booking.id)

    async def update_booking(
        self,
        db: AsyncSession,
        booking_id: UUID,
        data: BookingUpdate,
        actor_id: UUID | None = None,
    ) -> Booking:
        """Generic field update; a new agreed price recomputes commission."""
        booking = await self._get_booking(db, booking_id)
        if is_terminal(booking.status):
            raise InvalidBookingStatus("Booking đã kết thúc, không thể chỉnh sửa")

        update_data = data.model_dump(exclude_unset=True)
        if update_data.get("agreed_price"):
            booking.commission_amount = self.commission.calculate_commission(
                update_data["agreed_price"], booking.commission_rate
            )
        for field, value in update_data.items():
            if value is not None:
                setattr(booking, field, value)
        await db.flush()

        await self._log(db, actor_id, ActivityAction.UPDATE, booking)
        return await self.get_booking_by_id(db, booking.id)

    # ==================== Ledger ====================

    async def add_transaction(
        self,
        db: AsyncSession,
        booking_id: UUID,
        tx_type: str | TransactionType,
        amount: int,
        payment_method: str | PaymentMethod | None = None,
        notes: str | None = None,
        actor_id: UUID | str | None = None,
    ) -> Transaction:
        """Record a CONFIRMED ledger entry.

        A DEPOSIT on an APPROVED booking also advances it to DEPOSITED and
        adds the amount to ``deposit_amount``; both land in the same flush.
        Later deposits leave the status alone.
        """
        try:
            tx_type = TransactionType(tx_type)
            method = PaymentMethod(payment_method) if payment_method else None
        except ValueError as e:
            raise ValidationError(str(e))
        if amount is None or amount <= 0:
            raise ValidationError("Số tiền phải lớn hơn 0")

        booking = await self._get_booking(db, booking_id)
        now = utcnow()

        transaction = Transaction(
            code=await generate_transaction_code(db),
            booking_id=booking.id,
            type=tx_type.value,
            amount=amount,
            payment_method=method.value if method else None,
            payment_date=now,
            notes=notes,
            status=TransactionStatus.CONFIRMED.value,
            created_by=str(actor_id) if actor_id else "system",
        )
        db.add(transaction)

        if tx_type == TransactionType.DEPOSIT and booking.status == BookingStatus.APPROVED.value:
            await self._apply_status(db, booking, BookingStatus.DEPOSITED)
            transaction.applied_to_deposit = True
            booking.deposit_amount = (booking.deposit_amount or 0) + amount
            booking.deposit_date = now
            logger.info("Booking %s deposited %s", booking.code, amount)

        await db.flush()

        if isinstance(actor_id, UUID):
            await self.activity.log_activity(
                db, actor_id, ActivityAction.CREATE, EntityType.TRANSACTION, transaction.id
            )
        logger.info(
            "Transaction %s recorded: %s %s on booking %s",
            transaction.code,
            tx_type.value,
            amount,
            booking.code,
        )
        return transaction

    async def cancel_transaction(
        self,
        db: AsyncSession,
        transaction_id: UUID,
        reason: str,
        actor_id: UUID | None = None,
    ) -> Transaction:
        """Soft-cancel a ledger entry.

        A cancelled DEPOSIT that was added to the booking's ``deposit_amount``
        is taken back out of it; deposits recorded only in the ledger leave
        it alone. The booking status is left as is.
        """
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError(REASON_REQUIRED)

        transaction = await db.get(Transaction, transaction_id)
        if transaction is None:
            raise NotFoundError(detail=TRANSACTION_NOT_FOUND)
        if transaction.status == TransactionStatus.CANCELLED.value:
            raise InvalidTransactionStatus("Giao dịch đã bị hủy")

        if transaction.applied_to_deposit:
            booking = await self._get_booking(db, transaction.booking_id)
            booking.deposit_amount = max((booking.deposit_amount or 0) - transaction.amount, 0)

        transaction.status = TransactionStatus.CANCELLED.value
        transaction.notes = with_note(transaction.notes, "HỦY", reason)
        await db.flush()

        if actor_id:
            await self.activity.log_activity(
                db, actor_id, ActivityAction.CANCEL, EntityType.TRANSACTION, transaction.id
            )
        logger.info("Transaction %s cancelled: %s", transaction.code, reason)
        return transaction

    # ==================== Helpers ====================

    async def _get_booking(self, db: AsyncSession, booking_id: UUID) -> Booking:
        booking = await db.get(Booking, booking_id)
        if booking is None:
            raise NotFoundError(detail=BOOKING_NOT_FOUND)
        return booking

    async def _apply_status(self, db: AsyncSession, booking: Booking, status: BookingStatus) -> None:
        """Set the booking status and the property status it implies.

        A released property only returns to AVAILABLE when no other booking
        still claims it; otherwise it keeps the strongest remaining claim.
        """
        booking.status = status.value
        property_status = property_status_for(status)
        if property_status is None:
            return
        prop = await db.get(Property, booking.property_id)
        if prop is None:
            raise NotFoundError(detail=PROPERTY_NOT_FOUND)
        if property_status == PropertyStatus.AVAILABLE:
            result = await db.execute(
                select(Booking.status).where(
                    Booking.property_id == booking.property_id,
                    Booking.id != booking.id,
                    Booking.status.in_([s.value for s in CLAIMING_STATUSES]),
                )
            )
            property_status = property_status_held_by(result.scalars().all())
            if property_status != PropertyStatus.AVAILABLE:
                logger.info(
                    "Property %s stays %s for another booking", prop.code, property_status.value
                )
        prop.status = property_status.value

    async def _log(
        self, db: AsyncSession, actor_id: UUID | None, action: ActivityAction, booking: Booking
    ) -> None:
        if actor_id:
            await self.activity.log_activity(db, actor_id, action, EntityType.BOOKING, booking.id)


booking_service = BookingService()
