"""Booking transition table."""

import pytest

from joyhomes.core.exceptions import InvalidBookingStatus
from joyhomes.domain.booking_state import (
    BOOKING_TRANSITIONS,
    TERMINAL_STATUSES,
    BookingStatus,
    PropertyStatus,
    assert_booking_transition,
    get_next_valid_statuses,
    is_terminal,
    is_valid_status_transition,
    property_status_for,
    property_status_held_by,
)

S = BookingStatus

ALLOWED = {
    (S.PENDING, S.APPROVED),
    (S.PENDING, S.CANCELLED),
    (S.APPROVED, S.DEPOSITED),
    (S.APPROVED, S.CANCELLED),
    (S.DEPOSITED, S.CONTRACTED),
    (S.DEPOSITED, S.CANCELLED),
    (S.DEPOSITED, S.REFUNDED),
    (S.CONTRACTED, S.COMPLETED),
    (S.CONTRACTED, S.CANCELLED),
    (S.CONTRACTED, S.REFUNDED),
}


@pytest.mark.parametrize("source", list(S))
@pytest.mark.parametrize("target", list(S))
def test_transition_matrix(source, target):
    assert is_valid_status_transition(source, target) == ((source, target) in ALLOWED)


class TestTransitions:
    def test_table_covers_every_status(self):
        assert set(BOOKING_TRANSITIONS) == set(S)

    def test_no_self_transitions(self):
        for status in S:
            assert not is_valid_status_transition(status, status)

    def test_accepts_plain_strings(self):
        assert is_valid_status_transition("PENDING", "APPROVED")
        assert not is_valid_status_transition("PENDING", "COMPLETED")

    def test_unknown_status_is_never_valid(self):
        assert not is_valid_status_transition("DRAFT", "APPROVED")
        assert not is_valid_status_transition("PENDING", "ARCHIVED")
        assert get_next_valid_statuses("DRAFT") == []

    def test_next_statuses(self):
        assert get_next_valid_statuses(S.PENDING) == [S.APPROVED, S.CANCELLED]
        assert get_next_valid_statuses("CONTRACTED") == [S.COMPLETED, S.CANCELLED, S.REFUNDED]
        assert get_next_valid_statuses(S.COMPLETED) == []

    def test_terminal_statuses(self):
        assert TERMINAL_STATUSES == {S.COMPLETED, S.CANCELLED, S.REFUNDED}
        assert is_terminal("REFUNDED")
        assert not is_terminal(S.CONTRACTED)


class TestAssertTransition:
    def test_allowed_transition_passes(self):
        assert_booking_transition(S.APPROVED, S.DEPOSITED)

    def test_disallowed_transition_names_both_statuses(self):
        with pytest.raises(InvalidBookingStatus) as exc_info:
            assert_booking_transition("PENDING", "COMPLETED")
        assert exc_info.value.status_code == 400
        assert "PENDING" in exc_info.value.detail
        assert "COMPLETED" in exc_info.value.detail


class TestPropertyStatusFor:
    def test_status_effects(self):
        assert property_status_for(S.APPROVED) == PropertyStatus.BOOKED
        assert property_status_for(S.COMPLETED) == PropertyStatus.SOLD
        assert property_status_for(S.CANCELLED) == PropertyStatus.AVAILABLE
        assert property_status_for(S.REFUNDED) == PropertyStatus.AVAILABLE

    def test_statuses_without_effect(self):
        for status in (S.PENDING, S.DEPOSITED, S.CONTRACTED):
            assert property_status_for(status) is None


class TestPropertyStatusHeldBy:
    @pytest.mark.parametrize(
        "statuses,expected",
        [
            ([], PropertyStatus.AVAILABLE),
            (["CANCELLED", "REFUNDED"], PropertyStatus.AVAILABLE),
            (["PENDING", "CANCELLED"], PropertyStatus.HOLD),
            (["PENDING", "APPROVED"], PropertyStatus.BOOKED),
            ([S.CONTRACTED, S.PENDING], PropertyStatus.BOOKED),
            (["DEPOSITED", "COMPLETED"], PropertyStatus.SOLD),
        ],
    )
    def test_strongest_claim_wins(self, statuses, expected):
        assert property_status_held_by(statuses) == expected
