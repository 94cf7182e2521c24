"""Availability resolver - which dates of a month can be booked on a schedule.

The projection is advisory. The scheduler re-checks capacity on locked rows
before committing anything.
"""

from collections.abc import Callable
from datetime import date

from django.utils import timezone

from entitlements.domain import (
    AvailabilitySlot,
    CourseId,
    CourseSchedule,
    Month,
    ScheduleId,
)
from entitlements.domain.errors import (
    CourseNotFoundError,
    InvalidRequestError,
    ScheduleNotFoundError,
)
from entitlements.services.parsing import parse_id
from entitlements.stores.interfaces import AvailabilityStore


def project_slot(
    schedule: CourseSchedule,
    day: date,
    row: AvailabilitySlot | None,
    today: date,
) -> AvailabilitySlot:
    """Combine a schedule's defaults with an optional per-date row.

    Past dates, dates outside the schedule window and inactive schedules are
    never open. Full dates stay in the result with zero available slots.
    """
    runs = schedule.is_active and schedule.runs_on(day)
    if row is None:
        capacity_total = schedule.daily_capacity.value
        capacity_booked = 0
        is_open = runs
    else:
        capacity_total = row.capacity_total
        capacity_booked = row.capacity_booked
        is_open = runs and row.is_booking_open
    if day < today:
        is_open = False
    return AvailabilitySlot(
        date=day,
        schedule_id=schedule.id,
        capacity_total=capacity_total,
        capacity_booked=capacity_booked,
        is_booking_open=is_open,
    )


class AvailabilityResolver:
    """Service for schedule listings and monthly availability."""

    def __init__(
        self,
        store: AvailabilityStore,
        clock: Callable[[], date] = timezone.localdate,
    ) -> None:
        self._store = store
        self._clock = clock

    def list_schedules(self, course_id: str) -> list[CourseSchedule]:
        """Return the active schedules of a course.

        Raises:
            InvalidIdError: If course_id is not a valid UUID.
            CourseNotFoundError: If the course does not exist.
        """
        course = parse_id(CourseId, course_id, "course id")
        if self._store.get_course(course) is None:
            raise CourseNotFoundError(course_id)
        return self._store.list_schedules(course)

    def get_schedule(self, schedule_id: str) -> CourseSchedule:
        schedule = self._store.get_schedule(parse_id(ScheduleId, schedule_id, "schedule id"))
        if schedule is None:
            raise ScheduleNotFoundError(schedule_id)
        return schedule

    def get_availability(self, schedule_id: str, year: int, month: int) -> list[AvailabilitySlot]:
        """Return one slot per day of the month the schedule runs on.

        Raises:
            InvalidIdError: If schedule_id is not a valid UUID.
            InvalidRequestError: If year/month do not name a calendar month.
            ScheduleNotFoundError: If the schedule does not exist.
        """
        schedule = self.get_schedule(schedule_id)
        try:
            window = Month(year=year, month=month)
        except ValueError as exc:
            raise InvalidRequestError(str(exc)) from None

        rows = {
            slot.date: slot
            for slot in self._store.list_daily_slots(
                schedule.id, window.first_day, window.last_day
            )
        }
        today = self._clock()
        return [
            project_slot(schedule, day, rows.get(day), today)
            for day in window.days()
            if schedule.runs_on(day)
        ]
