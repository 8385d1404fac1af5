"""Booking endpoints."""

import logging
from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from joyhomes.api.deps import get_current_user, get_db, parse_body
from joyhomes.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from joyhomes.core.permissions import (
    Permission,
    can_access_own_only,
    check_permission,
    require_bookings_read,
    require_bookings_write,
)
from joyhomes.domain.booking_state import BookingStatus, get_next_valid_statuses
from joyhomes.models.booking import Booking
from joyhomes.models.user import User
from joyhomes.schemas.booking import (
    ACTION_TRANSACTION_TYPES,
    BookingCancelRequest,
    BookingCreate,
    BookingDetailResponse,
    BookingListResponse,
    BookingResponse,
    BookingStats,
    BookingStatusUpdateRequest,
    BookingUpdate,
    NextStatusesResponse,
    PaymentSummary,
    TransactionCreateRequest,
    TransactionResponse,
)
from joyhomes.schemas.common import Pagination
from joyhomes.services.booking_service import BOOKING_NOT_FOUND, booking_service

logger = logging.getLogger(__name__)

router = APIRouter()

# PATCH actions that only read
READ_ACTIONS = {"payment_summary", "next_statuses"}
MANAGE_ACTIONS = {"approve", "cancel", "update_status"}


async def _get_visible_booking(db: AsyncSession, booking_id: UUID, user: User) -> Booking:
    """Load a booking, hiding other owners' bookings from SALES users."""
    booking = await booking_service.get_booking_by_id(db, booking_id)
    if booking is None:
        raise NotFoundError(detail=BOOKING_NOT_FOUND)
    if can_access_own_only(user.role, "bookings") and booking.user_id != user.id:
        raise AuthorizationError("Bạn không có quyền xem booking này")
    return booking


@router.get("", response_model=None)
async def list_bookings(
    current_user: Annotated[User, Depends(require_bookings_read)],
    db: Annotated[AsyncSession, Depends(get_db)],
    search: str | None = None,
    booking_status: Annotated[BookingStatus | None, Query(alias="status")] = None,
    project_id: Annotated[UUID | None, Query(alias="projectId")] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
    stats: bool = False,
) -> BookingListResponse | BookingStats:
    """List bookings, or per-status statistics when ``stats=true``."""
    if stats:
        return await booking_service.get_booking_stats(db, project_id)

    owner_id = current_user.id if can_access_own_only(current_user.role, "bookings") else None
    bookings, total = await booking_service.get_bookings(
        db,
        search=search,
        status=booking_status.value if booking_status else None,
        project_id=project_id,
        user_id=owner_id,
        page=page,
        limit=limit,
    )
    return BookingListResponse(
        bookings=[BookingResponse.model_validate(b) for b in bookings],
        pagination=Pagination.build(page, limit, total),
    )


@router.post("", response_model=BookingDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    data: BookingCreate,
    current_user: Annotated[User, Depends(require_bookings_write)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Create a PENDING booking and put the property on hold."""
    return await booking_service.create_booking(db, data, current_user.id)


@router.get("/{booking_id}", response_model=BookingDetailResponse)
async def get_booking(
    booking_id: UUID,
    current_user: Annotated[User, Depends(require_bookings_read)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Get booking details with its ledger."""
    return await _get_visible_booking(db, booking_id, current_user)


@router.get("/{booking_id}/transactions", response_model=list[TransactionResponse])
async def list_booking_transactions(
    booking_id: UUID,
    current_user: Annotated[User, Depends(require_bookings_read)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Ledger entries for a booking, newest first."""
    await _get_visible_booking(db, booking_id, current_user)
    return await booking_service.get_booking_transactions(db, booking_id)


@router.patch("/{booking_id}", response_model=None)
async def patch_booking(
    booking_id: UUID,
    body: Annotated[dict[str, Any], Body()],
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BookingDetailResponse | TransactionResponse | PaymentSummary | NextStatusesResponse:
    """Apply a lifecycle action, or a plain field update when no action is given.

    Actions: approve, cancel, update_status, add_deposit, add_payment,
    add_refund, payment_summary, next_statuses.
    """
    action = body.get("action")

    if action in READ_ACTIONS:
        check_permission(current_user, Permission.BOOKINGS_READ)
        booking = await _get_visible_booking(db, booking_id, current_user)
        if action == "payment_summary":
            return await booking_service.get_payment_summary(db, booking_id)
        return NextStatusesResponse(
            current_status=BookingStatus(booking.status),
            next_statuses=get_next_valid_statuses(booking.status),
        )

    if action in ACTION_TRANSACTION_TYPES:
        check_permission(current_user, Permission.TRANSACTIONS_WRITE)
        request = parse_body(TransactionCreateRequest, body)
        transaction = await booking_service.add_transaction(
            db,
            booking_id,
            ACTION_TRANSACTION_TYPES[action],
            request.amount,
            payment_method=request.payment_method,
            notes=request.notes,
            actor_id=current_user.id,
        )
        return TransactionResponse.model_validate(transaction)

    if action is not None and action not in MANAGE_ACTIONS:
        raise ValidationError(f'Hành động "{action}" không hợp lệ')

    check_permission(current_user, Permission.BOOKINGS_MANAGE)
    if action == "approve":
        booking = await booking_service.approve_booking(db, booking_id, current_user.id)
    elif action == "cancel":
        request = parse_body(BookingCancelRequest, body)
        booking = await booking_service.cancel_booking(
            db, booking_id, request.reason, current_user.id
        )
    elif action == "update_status":
        request = parse_body(BookingStatusUpdateRequest, body)
        booking = await booking_service.update_booking_status(
            db,
            booking_id,
            request.status,
            contract_number=request.contract_number,
            notes=request.notes,
            actor_id=current_user.id,
        )
    else:
        request = parse_body(BookingUpdate, body)
        booking = await booking_service.update_booking(db, booking_id, request, current_user.id)

    logger.debug("PATCH booking %s action=%s by %s", booking_id, action, current_user.id)
    return BookingDetailResponse.model_validate(booking)
