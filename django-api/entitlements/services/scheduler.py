"""Scheduler - turns a package session into a confirmed booking.

Capacity is checked on the locked slot row before entitlement is touched.
A session is reserved only after the slot is known to be bookable, and is
given back if the booking itself cannot be written. Retries after
``SlotUnavailableError`` must start over from ``schedule_from_package``.
"""

import logging
from collections.abc import Callable, Iterable
from datetime import date

from django.utils import timezone

from entitlements.domain import (
    Booking,
    BookingId,
    BookingStatus,
    CourseId,
    CourseSchedule,
    PackageId,
    Participant,
    ReservationToken,
    ScheduleId,
)
from entitlements.domain.booking_state import RELEASING, can_transition
from entitlements.domain.errors import (
    BookingFailedError,
    BookingNotFoundError,
    CompensationFailureError,
    DomainError,
    InvalidBookingTransitionError,
    InvalidRequestError,
    ScheduleNotFoundError,
    SlotUnavailableError,
)
from entitlements.services.availability_resolver import project_slot
from entitlements.services.entitlement_ledger import EntitlementLedger
from entitlements.services.parsing import parse_id
from entitlements.stores.interfaces import (
    AvailabilityStore,
    BookingStore,
    TransactionManager,
)

logger = logging.getLogger(__name__)


class Scheduler:
    """Service for creating, cancelling and rescheduling package bookings."""

    def __init__(
        self,
        ledger: EntitlementLedger,
        availability: AvailabilityStore,
        bookings: BookingStore,
        transactions: TransactionManager,
        clock: Callable[[], date] = timezone.localdate,
    ) -> None:
        self._ledger = ledger
        self._availability = availability
        self._bookings = bookings
        self._transactions = transactions
        self._clock = clock

    def schedule_from_package(
        self,
        owner_id: int,
        package_id: str,
        course_id: str,
        schedule_id: str,
        booked_date: date,
        participants: Iterable[Participant],
    ) -> Booking:
        """Book one date of a schedule with a session from a package.

        Raises:
            InvalidIdError: If any identifier is malformed.
            InvalidRequestError: If no participant is given.
            ScheduleNotFoundError: If the schedule is missing or not part of the course.
            SlotUnavailableError: If the date is closed or full.
            PackageNotFoundError, PackageExpiredError, CourseNotAllocatedError,
            PackageDepletedError: Propagated from the ledger.
            BookingFailedError: If the booking could not be written; the session was released.
            CompensationFailureError: If the session could not be released afterwards.
        """
        package = parse_id(PackageId, package_id, "package id")
        course = parse_id(CourseId, course_id, "course id")
        schedule = self._schedule_for(course, parse_id(ScheduleId, schedule_id, "schedule id"))
        attendees = tuple(participants)
        if not attendees:
            raise InvalidRequestError("At least one participant is required")
        return self._book(owner_id, package, course, schedule, booked_date, attendees)

    def schedule_for_owner_of_package(
        self,
        package_id: str,
        course_id: str,
        schedule_id: str,
        booked_date: date,
        participants: Iterable[Participant],
    ) -> Booking:
        """Book a session for whoever owns the package. Used by staff."""
        owner_id = self._ledger.owner_of(package_id)
        logger.info("Scheduling from package %s on behalf of owner %s", package_id, owner_id)
        return self.schedule_from_package(
            owner_id, package_id, course_id, schedule_id, booked_date, participants
        )

    def cancel_booking(self, owner_id: int, booking_id: str) -> Booking:
        """Cancel a confirmed booking, returning its seat and its session.

        Raises:
            InvalidIdError, BookingNotFoundError, InvalidBookingTransitionError
        """
        booking_key = parse_id(BookingId, booking_id, "booking id")
        with self._transactions.atomic():
            booking = self._owned_booking_for_update(owner_id, booking_key)
            self._check_transition(booking, BookingStatus.CANCELLED)
            cancelled = self._release_booking(booking, BookingStatus.CANCELLED)
        logger.info("Booking %s cancelled", booking_key)
        return cancelled

    def reschedule_booking(
        self,
        owner_id: int,
        booking_id: str,
        new_date: date,
        schedule_id: str | None = None,
    ) -> Booking:
        """Move a package booking to another date, optionally on another schedule.

        The old booking becomes RESCHEDULED and a new CONFIRMED booking is
        created in the same transaction. If the new booking cannot be made
        nothing changes.
        """
        booking_key = parse_id(BookingId, booking_id, "booking id")
        with self._transactions.atomic():
            booking = self._owned_booking_for_update(owner_id, booking_key)
            self._check_transition(booking, BookingStatus.RESCHEDULED)
            if booking.purchased_package_id is None:
                raise InvalidBookingTransitionError(
                    str(booking.id), "direct", BookingStatus.RESCHEDULED.value
                )
            target = (
                parse_id(ScheduleId, schedule_id, "schedule id")
                if schedule_id
                else booking.schedule_id
            )
            schedule = self._schedule_for(booking.course_id, target)
            self._release_booking(booking, BookingStatus.RESCHEDULED)
            replacement = self._book(
                owner_id,
                booking.purchased_package_id,
                booking.course_id,
                schedule,
                new_date,
                booking.participants,
                rescheduled_from_id=booking.id,
            )
        logger.info("Booking %s rescheduled as %s", booking_key, replacement.id)
        return replacement

    def list_bookings(self, owner_id: int) -> tuple[list[Booking], list[Booking]]:
        """Return (upcoming, past) bookings of the owner."""
        today = self._clock()
        upcoming: list[Booking] = []
        past: list[Booking] = []
        for booking in self._bookings.list_bookings(owner_id):
            if booking.status is BookingStatus.CONFIRMED and booking.booked_date >= today:
                upcoming.append(booking)
            else:
                past.append(booking)
        upcoming.sort(key=lambda b: b.booked_date)
        past.sort(key=lambda b: b.booked_date, reverse=True)
        return upcoming, past

    def complete_elapsed_bookings(self, today: date | None = None) -> int:
        """Mark confirmed bookings dated before today as completed."""
        day = today or self._clock()
        count = self._bookings.complete_before(day)
        logger.info("Completed %d bookings dated before %s", count, day)
        return count

    def _book(
        self,
        owner_id: int,
        package_id: PackageId,
        course_id: CourseId,
        schedule: CourseSchedule,
        booked_date: date,
        participants: tuple[Participant, ...],
        rescheduled_from_id: BookingId | None = None,
    ) -> Booking:
        failure: DomainError | None = None
        booking: Booking | None = None

        with self._transactions.atomic():
            row = self._availability.get_slot_for_update(schedule, booked_date)
            slot = project_slot(schedule, booked_date, row, self._clock())
            if not slot.is_bookable:
                logger.warning(
                    "Slot %s on %s unavailable (open=%s, %d/%d booked)",
                    schedule.id,
                    booked_date,
                    slot.is_booking_open,
                    slot.capacity_booked,
                    slot.capacity_total,
                )
                raise SlotUnavailableError(str(schedule.id), booked_date.isoformat())

            token = self._ledger.reserve_session(
                owner_id, package_id, course_id, session_date=booked_date
            )

            try:
                with self._transactions.atomic():
                    booking = self._bookings.create_booking(
                        owner_id=owner_id,
                        purchased_package_id=package_id,
                        course_id=course_id,
                        schedule_id=schedule.id,
                        booked_date=booked_date,
                        participants=participants,
                        reservation_token=token,
                        rescheduled_from_id=rescheduled_from_id,
                    )
                    self._availability.set_capacity_booked(
                        schedule.id, booked_date, slot.capacity_booked + 1
                    )
            except Exception:
                logger.exception(
                    "Booking for %s on %s failed after reserving %s",
                    schedule.id,
                    booked_date,
                    token,
                )
                self._compensate(token)
                failure = BookingFailedError()

        if failure is not None:
            raise failure

        logger.info(
            "Booking %s confirmed for %s on %s from package %s",
            booking.id,
            schedule.id,
            booked_date,
            package_id,
        )
        return booking

    def _compensate(self, token: ReservationToken) -> None:
        try:
            self._ledger.release_session(token)
        except Exception as exc:
            logger.critical(
                "Reservation %s of package %s is stuck without a booking and needs "
                "manual reconciliation",
                token,
                token.package_id,
            )
            raise CompensationFailureError(str(token)) from exc

    def _release_booking(self, booking: Booking, status: BookingStatus) -> Booking:
        schedule = self._availability.get_schedule(booking.schedule_id)
        if schedule is None:
            raise ScheduleNotFoundError(str(booking.schedule_id))
        slot = self._availability.get_slot_for_update(schedule, booking.booked_date)
        self._availability.set_capacity_booked(
            schedule.id, booking.booked_date, max(0, slot.capacity_booked - 1)
        )
        if booking.reservation_token is not None:
            self._ledger.release_session(booking.reservation_token)
        return self._bookings.set_status(booking.id, status)

    def _check_transition(self, booking: Booking, target: BookingStatus) -> None:
        if not can_transition(booking.status, target):
            raise InvalidBookingTransitionError(
                str(booking.id), booking.status.value, target.value
            )
        if target in RELEASING and booking.booked_date < self._clock():
            raise InvalidBookingTransitionError(str(booking.id), "past", target.value)

    def _owned_booking_for_update(self, owner_id: int, booking_id: BookingId) -> Booking:
        booking = self._bookings.get_booking_for_update(booking_id)
        if booking is None or booking.owner_id != owner_id:
            raise BookingNotFoundError(str(booking_id))
        return booking

    def _schedule_for(self, course_id: CourseId, schedule_id: ScheduleId) -> CourseSchedule:
        schedule = self._availability.get_schedule(schedule_id)
        if schedule is None or schedule.course_id != course_id:
            raise ScheduleNotFoundError(str(schedule_id))
        return schedule
