"""Booking state machine."""

from entitlements.domain.models import BookingStatus

TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.CONFIRMED: frozenset(
        {BookingStatus.COMPLETED, BookingStatus.CANCELLED, BookingStatus.RESCHEDULED}
    ),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.RESCHEDULED: frozenset(),
}

# Leaving CONFIRMED this way gives the session and the seat back.
RELEASING = frozenset({BookingStatus.CANCELLED, BookingStatus.RESCHEDULED})


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    return target in TRANSITIONS[current]
