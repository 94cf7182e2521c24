"""Store interfaces (repository pattern).

Stores must be swappable and return domain models. Methods named
``*_for_update`` lock the row they return until the surrounding
transaction ends, and must only be called inside ``TransactionManager.atomic``.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import date, datetime

from entitlements.domain import (
    Allocation,
    AvailabilitySlot,
    Booking,
    BookingId,
    BookingStatus,
    Course,
    CourseId,
    CourseSchedule,
    MasterPackageId,
    PackageId,
    PackageOffer,
    Participant,
    PurchasedPackage,
    Reservation,
    ReservationToken,
    ScheduleId,
)


class TransactionManager(ABC):
    """Unit of work boundary shared by all stores."""

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Open a transaction (or a savepoint when one is already open)."""
        ...


class EntitlementStore(ABC):
    """Interface for ledger persistence operations."""

    @abstractmethod
    def get_package(self, package_id: PackageId) -> PurchasedPackage | None:
        """Return a package with its allocations, or None if not found."""
        ...

    @abstractmethod
    def list_packages(self, owner_id: int) -> list[PurchasedPackage]:
        """Return all packages owned by owner_id, newest first."""
        ...

    @abstractmethod
    def get_allocation_for_update(
        self, package_id: PackageId, course_id: CourseId
    ) -> Allocation | None:
        """Return one allocation of a package and lock its row."""
        ...

    @abstractmethod
    def set_sessions_consumed(
        self, package_id: PackageId, course_id: CourseId, sessions_consumed: int
    ) -> None:
        """Persist the consumed counter of one allocation."""
        ...

    @abstractmethod
    def create_reservation(
        self, package_id: PackageId, course_id: CourseId, session_date: date | None
    ) -> Reservation:
        ...

    @abstractmethod
    def get_reservation_for_update(self, token: ReservationToken) -> Reservation | None:
        """Return the reservation behind a token and lock it."""
        ...

    @abstractmethod
    def mark_released(self, token: ReservationToken, released_at: datetime) -> None:
        ...

    @abstractmethod
    def create_package(
        self,
        owner_id: int,
        offer: PackageOffer,
        expiry_date: date,
        renewed_from_id: PackageId | None = None,
    ) -> PurchasedPackage:
        """Create a package and its allocations from a catalog offer."""
        ...


class CatalogStore(ABC):
    """Interface for catalog lookups used by purchase and renewal."""

    @abstractmethod
    def get_offer(self, master_package_id: MasterPackageId) -> PackageOffer | None:
        ...


class AvailabilityStore(ABC):
    """Interface for courses, schedules and per-date capacity."""

    @abstractmethod
    def get_course(self, course_id: CourseId) -> Course | None:
        ...

    @abstractmethod
    def get_schedule(self, schedule_id: ScheduleId) -> CourseSchedule | None:
        ...

    @abstractmethod
    def list_schedules(self, course_id: CourseId) -> list[CourseSchedule]:
        """Return active schedules of a course ordered by start date."""
        ...

    @abstractmethod
    def list_daily_slots(
        self, schedule_id: ScheduleId, first_day: date, last_day: date
    ) -> list[AvailabilitySlot]:
        """Return explicit per-date rows within [first_day, last_day]."""
        ...

    @abstractmethod
    def get_slot_for_update(
        self, schedule: CourseSchedule, day: date
    ) -> AvailabilitySlot:
        """Lock the capacity row for (schedule, day), creating it from the
        schedule's daily capacity if it does not exist yet."""
        ...

    @abstractmethod
    def set_capacity_booked(
        self, schedule_id: ScheduleId, day: date, capacity_booked: int
    ) -> None:
        ...


class BookingStore(ABC):
    """Interface for booking persistence operations."""

    @abstractmethod
    def create_booking(
        self,
        owner_id: int,
        purchased_package_id: PackageId | None,
        course_id: CourseId,
        schedule_id: ScheduleId,
        booked_date: date,
        participants: tuple[Participant, ...],
        reservation_token: ReservationToken | None,
        rescheduled_from_id: BookingId | None = None,
    ) -> Booking:
        """Insert a CONFIRMED booking."""
        ...

    @abstractmethod
    def get_booking(self, booking_id: BookingId) -> Booking | None:
        ...

    @abstractmethod
    def get_booking_for_update(self, booking_id: BookingId) -> Booking | None:
        ...

    @abstractmethod
    def list_bookings(self, owner_id: int) -> list[Booking]:
        ...

    @abstractmethod
    def set_status(self, booking_id: BookingId, status: BookingStatus) -> Booking:
        ...

    @abstractmethod
    def complete_before(self, day: date) -> int:
        """Mark CONFIRMED bookings dated before day as COMPLETED. Returns the count."""
        ...
