"""Booking state machine."""

from collections.abc import Iterable
from enum import Enum

from joyhomes.core.exceptions import InvalidBookingStatus


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    PENDING = "PENDING"  # Chờ duyệt
    APPROVED = "APPROVED"  # Đã duyệt
    DEPOSITED = "DEPOSITED"  # Đã đặt cọc
    CONTRACTED = "CONTRACTED"  # Đã ký HĐ
    COMPLETED = "COMPLETED"  # Hoàn thành
    CANCELLED = "CANCELLED"  # Đã hủy
    REFUNDED = "REFUNDED"  # Đã hoàn tiền


class PropertyStatus(str, Enum):
    """Inventory availability of a property."""

    AVAILABLE = "AVAILABLE"
    HOLD = "HOLD"
    BOOKED = "BOOKED"
    SOLD = "SOLD"
    UNAVAILABLE = "UNAVAILABLE"


BOOKING_TRANSITIONS: dict[BookingStatus, tuple[BookingStatus, ...]] = {
    BookingStatus.PENDING: (BookingStatus.APPROVED, BookingStatus.CANCELLED),
    BookingStatus.APPROVED: (BookingStatus.DEPOSITED, BookingStatus.CANCELLED),
    BookingStatus.DEPOSITED: (
        BookingStatus.CONTRACTED,
        BookingStatus.CANCELLED,
        BookingStatus.REFUNDED,
    ),
    BookingStatus.CONTRACTED: (
        BookingStatus.COMPLETED,
        BookingStatus.CANCELLED,
        BookingStatus.REFUNDED,
    ),
    BookingStatus.COMPLETED: (),
    BookingStatus.CANCELLED: (),
    BookingStatus.REFUNDED: (),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in BOOKING_TRANSITIONS.items() if not targets
)

BOOKABLE_PROPERTY_STATUSES = frozenset({PropertyStatus.AVAILABLE, PropertyStatus.HOLD})

# Property status a booking keeps in place while it is open or completed
_PROPERTY_STATUS_HELD_BY = {
    BookingStatus.PENDING: PropertyStatus.HOLD,
    BookingStatus.APPROVED: PropertyStatus.BOOKED,
    BookingStatus.DEPOSITED: PropertyStatus.BOOKED,
    BookingStatus.CONTRACTED: PropertyStatus.BOOKED,
    BookingStatus.COMPLETED: PropertyStatus.SOLD,
}
# Weakest claim first
_CLAIM_ORDER = (PropertyStatus.HOLD, PropertyStatus.BOOKED, PropertyStatus.SOLD)

# Booking statuses that still hold a claim on their property
CLAIMING_STATUSES = frozenset(_PROPERTY_STATUS_HELD_BY)

# Property status implied by entering a booking status
_PROPERTY_STATUS_FOR = {
    BookingStatus.APPROVED: PropertyStatus.BOOKED,
    BookingStatus.COMPLETED: PropertyStatus.SOLD,
    BookingStatus.CANCELLED: PropertyStatus.AVAILABLE,
    BookingStatus.REFUNDED: PropertyStatus.AVAILABLE,
}


def _coerce(status: str | BookingStatus) -> BookingStatus | None:
    try:
        return BookingStatus(status)
    except ValueError:
        return None


def is_valid_status_transition(current: str | BookingStatus, target: str | BookingStatus) -> bool:
    """Return whether ``current -> target`` is an allowed transition."""
    source = _coerce(current)
    destination = _coerce(target)
    if source is None or destination is None:
        return False
    return destination in BOOKING_TRANSITIONS[source]


def get_next_valid_statuses(current: str | BookingStatus) -> list[BookingStatus]:
    """Statuses reachable in one step from ``current``."""
    source = _coerce(current)
    if source is None:
        return []
    return list(BOOKING_TRANSITIONS[source])


def is_terminal(status: str | BookingStatus) -> bool:
    return _coerce(status) in TERMINAL_STATUSES


def assert_booking_transition(current: str | BookingStatus, target: str | BookingStatus) -> None:
    if not is_valid_status_transition(current, target):
        raise InvalidBookingStatus(
            f'Không thể chuyển từ "{_label(current)}" sang "{_label(target)}"'
        )


def property_status_for(status: str | BookingStatus) -> PropertyStatus | None:
    """Property status a booking entering ``status`` imposes, if any."""
    return _PROPERTY_STATUS_FOR.get(_coerce(status))


def _label(status: str | BookingStatus) -> str:
    return status.value if isinstance(status, BookingStatus) else str(status)


def property_status_held_by(statuses: Iterable[str | BookingStatus]) -> PropertyStatus:
    """Strongest claim the given bookings hold on a property.

    AVAILABLE when none of them is still open or completed.
    """
    held = {_PROPERTY_STATUS_HELD_BY.get(_coerce(status)) for status in statuses}
    for claim in reversed(_CLAIM_ORDER):
        if claim in held:
            return claim
    return PropertyStatus.AVAILABLE
