"""Domain error codes for the entitlements module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    INVALID_ID = "INVALID_ID"
    INVALID_REQUEST = "INVALID_REQUEST"
    PACKAGE_NOT_FOUND = "PACKAGE_NOT_FOUND"
    MASTER_PACKAGE_NOT_FOUND = "MASTER_PACKAGE_NOT_FOUND"
    COURSE_NOT_FOUND = "COURSE_NOT_FOUND"
    SCHEDULE_NOT_FOUND = "SCHEDULE_NOT_FOUND"
    BOOKING_NOT_FOUND = "BOOKING_NOT_FOUND"
    PACKAGE_EXPIRED = "PACKAGE_EXPIRED"
    PACKAGE_DEPLETED = "PACKAGE_DEPLETED"
    COURSE_NOT_ALLOCATED = "COURSE_NOT_ALLOCATED"
    SLOT_UNAVAILABLE = "SLOT_UNAVAILABLE"
    INVALID_BOOKING_TRANSITION = "INVALID_BOOKING_TRANSITION"
    BOOKING_FAILED = "BOOKING_FAILED"
    COMPENSATION_FAILURE = "COMPENSATION_FAILURE"


class UserAction(Enum):
    """What the client should offer the customer after an error."""

    NONE = "none"
    REFRESH = "refresh"
    RENEW = "renew"
    PICK_ANOTHER_DATE = "pick_another_date"
    CONTACT_SUPPORT = "contact_support"


_ACTIONS = {
    ErrorCode.PACKAGE_NOT_FOUND: UserAction.REFRESH,
    ErrorCode.MASTER_PACKAGE_NOT_FOUND: UserAction.REFRESH,
    ErrorCode.COURSE_NOT_FOUND: UserAction.REFRESH,
    ErrorCode.SCHEDULE_NOT_FOUND: UserAction.REFRESH,
    ErrorCode.BOOKING_NOT_FOUND: UserAction.REFRESH,
    ErrorCode.PACKAGE_EXPIRED: UserAction.RENEW,
    ErrorCode.PACKAGE_DEPLETED: UserAction.RENEW,
    ErrorCode.SLOT_UNAVAILABLE: UserAction.PICK_ANOTHER_DATE,
    ErrorCode.COURSE_NOT_ALLOCATED: UserAction.CONTACT_SUPPORT,
    ErrorCode.BOOKING_FAILED: UserAction.CONTACT_SUPPORT,
    ErrorCode.COMPENSATION_FAILURE: UserAction.CONTACT_SUPPORT,
}


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    @property
    def action(self) -> UserAction:
        return _ACTIONS.get(self.code, UserAction.NONE)

    @property
    def retryable(self) -> bool:
        """Whether the whole operation may be retried from scratch."""
        return self.code is ErrorCode.SLOT_UNAVAILABLE

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class InvalidIdError(DomainError):
    """Raised when an identifier is not in the expected format."""

    def __init__(self, field: str = "id") -> None:
        super().__init__(
            code=ErrorCode.INVALID_ID,
            message=f"Invalid {field} format",
        )
        self.field = field


class InvalidRequestError(DomainError):
    """Raised when a request value is well-formed but out of range."""

    def __init__(self, detail: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_REQUEST,
            message=detail,
        )


class PackageNotFoundError(DomainError):
    """Raised when a purchased package does not exist or belongs to someone else."""

    def __init__(self, package_id: str) -> None:
        super().__init__(
            code=ErrorCode.PACKAGE_NOT_FOUND,
            message="Package not found. Please refresh and try again.",
        )
        self.package_id = package_id


class MasterPackageNotFoundError(DomainError):
    """Raised when a catalog package is missing or no longer sold."""

    def __init__(self, master_package_id: str) -> None:
        super().__init__(
            code=ErrorCode.MASTER_PACKAGE_NOT_FOUND,
            message="This package is no longer available for purchase.",
        )
        self.master_package_id = master_package_id


class CourseNotFoundError(DomainError):
    """Raised when a course is not found."""

    def __init__(self, course_id: str) -> None:
        super().__init__(
            code=ErrorCode.COURSE_NOT_FOUND,
            message="Course not found. Please refresh and try again.",
        )
        self.course_id = course_id


class ScheduleNotFoundError(DomainError):
    """Raised when a schedule is not found or is not part of the course."""

    def __init__(self, schedule_id: str) -> None:
        super().__init__(
            code=ErrorCode.SCHEDULE_NOT_FOUND,
            message="Schedule not found. Please refresh and try again.",
        )
        self.schedule_id = schedule_id


class BookingNotFoundError(DomainError):
    """Raised when a booking is not found or belongs to someone else."""

    def __init__(self, booking_id: str) -> None:
        super().__init__(
            code=ErrorCode.BOOKING_NOT_FOUND,
            message="Booking not found. Please refresh and try again.",
        )
        self.booking_id = booking_id


class PackageExpiredError(DomainError):
    """Raised when a package can no longer be consumed because it expired."""

    def __init__(self, package_id: str) -> None:
        super().__init__(
            code=ErrorCode.PACKAGE_EXPIRED,
            message="This package has expired. Renew it to keep booking sessions.",
        )
        self.package_id = package_id


class PackageDepletedError(DomainError):
    """Raised when no sessions remain for the requested course."""

    def __init__(self, package_id: str, course_id: str) -> None:
        super().__init__(
            code=ErrorCode.PACKAGE_DEPLETED,
            message="You have used all sessions for this course. Renew the package to book more.",
        )
        self.package_id = package_id
        self.course_id = course_id


class CourseNotAllocatedError(DomainError):
    """Raised when a package has no allocation for the requested course."""

    def __init__(self, package_id: str, course_id: str) -> None:
        super().__init__(
            code=ErrorCode.COURSE_NOT_ALLOCATED,
            message="This course is not part of your package. Please contact support.",
        )
        self.package_id = package_id
        self.course_id = course_id


class SlotUnavailableError(DomainError):
    """Raised when the chosen date is closed or already full."""

    def __init__(self, schedule_id: str, booked_date: str) -> None:
        super().__init__(
            code=ErrorCode.SLOT_UNAVAILABLE,
            message="That date is no longer available. Please pick another date.",
        )
        self.schedule_id = schedule_id
        self.booked_date = booked_date


class InvalidBookingTransitionError(DomainError):
    """Raised when a booking cannot move to the requested status."""

    def __init__(self, booking_id: str, current: str, requested: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_BOOKING_TRANSITION,
            message=f"A {current.lower()} booking cannot be {requested.lower()}.",
        )
        self.booking_id = booking_id
        self.current = current
        self.requested = requested


class BookingFailedError(DomainError):
    """Raised when the booking could not be written after a session was reserved.

    The reserved session has already been released when this is raised.
    """

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.BOOKING_FAILED,
            message="We could not complete your booking and your session was not used. "
            "Please contact support if this keeps happening.",
        )


class CompensationFailureError(DomainError):
    """Raised when releasing a reserved session failed after a booking failure."""

    def __init__(self, token: str) -> None:
        super().__init__(
            code=ErrorCode.COMPENSATION_FAILURE,
            message="Your booking did not complete and we could not restore your session "
            "automatically. Our team has been notified and will fix your balance.",
        )
        self.token = token
