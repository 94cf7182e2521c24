"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in entitlements/models.py (persistence layer).
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from entitlements.domain.value_objects import (
    BookingId,
    Capacity,
    CourseId,
    MasterPackageId,
    PackageId,
    ReservationToken,
    ScheduleId,
)


class PackageStatus(Enum):
    """Derived lifecycle state of a purchased package. Never persisted."""

    ACTIVE = "ACTIVE"
    DEPLETED = "DEPLETED"
    EXPIRED = "EXPIRED"


class BookingStatus(Enum):
    """Persisted state of a booking."""

    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"
    RESCHEDULED = "RESCHEDULED"


@dataclass(frozen=True)
class Allocation:
    """Per-course share of a package's sessions."""

    course_id: CourseId
    course_name: str
    sessions_allotted: int
    sessions_consumed: int = 0

    def __post_init__(self) -> None:
        if self.sessions_allotted < 0:
            raise ValueError("sessions_allotted cannot be negative")
        if not 0 <= self.sessions_consumed <= self.sessions_allotted:
            raise ValueError("sessions_consumed must be between 0 and sessions_allotted")

    @property
    def remaining_sessions(self) -> int:
        return self.sessions_allotted - self.sessions_consumed

    @property
    def is_exhausted(self) -> bool:
        return self.sessions_consumed >= self.sessions_allotted


@dataclass(frozen=True)
class PurchasedPackage:
    """Entitlement ledger entry for one purchase."""

    id: PackageId
    owner_id: int
    master_package_id: MasterPackageId | None
    package_name: str
    total_sessions: int
    expiry_date: date
    allocations: tuple[Allocation, ...]
    created_at: datetime
    renewed_from_id: PackageId | None = None

    def __post_init__(self) -> None:
        allotted = sum(a.sessions_allotted for a in self.allocations)
        if allotted != self.total_sessions:
            raise ValueError("total_sessions must equal the sum of allocations")

    @property
    def sessions_consumed(self) -> int:
        return sum(a.sessions_consumed for a in self.allocations)

    @property
    def remaining_sessions(self) -> int:
        return self.total_sessions - self.sessions_consumed

    def allocation_for(self, course_id: CourseId) -> Allocation | None:
        for allocation in self.allocations:
            if allocation.course_id == course_id:
                return allocation
        return None


@dataclass(frozen=True)
class Reservation:
    """One consumed session waiting for, or attached to, a booking."""

    token: ReservationToken
    session_date: date | None
    created_at: datetime
    released_at: datetime | None = None

    @property
    def is_released(self) -> bool:
        return self.released_at is not None


@dataclass(frozen=True)
class Course:
    """Domain representation of a Course."""

    id: CourseId
    name: str
    is_active: bool = True


@dataclass(frozen=True)
class CourseSchedule:
    """A bookable calendar for a course."""

    id: ScheduleId
    course_id: CourseId
    name: str
    start_date: date
    end_date: date | None
    daily_capacity: Capacity
    is_active: bool = True

    def runs_on(self, day: date) -> bool:
        if day < self.start_date:
            return False
        return self.end_date is None or day <= self.end_date


@dataclass(frozen=True)
class AvailabilitySlot:
    """Capacity of one schedule on one date."""

    date: date
    schedule_id: ScheduleId
    capacity_total: int
    capacity_booked: int
    is_booking_open: bool

    @property
    def available_slots(self) -> int:
        return max(0, self.capacity_total - self.capacity_booked)

    @property
    def is_bookable(self) -> bool:
        return self.is_booking_open and self.available_slots > 0


@dataclass(frozen=True)
class Participant:
    first_name: str
    last_name: str


@dataclass(frozen=True)
class Booking:
    """Domain representation of a Booking."""

    id: BookingId
    owner_id: int
    purchased_package_id: PackageId | None
    course_id: CourseId
    schedule_id: ScheduleId
    booked_date: date
    participants: tuple[Participant, ...]
    status: BookingStatus
    created_at: datetime
    reservation_token: ReservationToken | None = None
    rescheduled_from_id: BookingId | None = None


@dataclass(frozen=True)
class PackageOfferCourse:
    course_id: CourseId
    course_name: str
    sessions: int


@dataclass(frozen=True)
class PackageOffer:
    """Catalog definition a purchase or renewal is built from."""

    id: MasterPackageId
    name: str
    validity_days: int
    courses: tuple[PackageOfferCourse, ...]
    is_active: bool = True

    @property
    def total_sessions(self) -> int:
        return sum(c.sessions for c in self.courses)
