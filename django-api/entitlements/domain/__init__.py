from entitlements.domain.models import (
    Allocation,
    AvailabilitySlot,
    Booking,
    BookingStatus,
    Course,
    CourseSchedule,
    PackageOffer,
    PackageOfferCourse,
    PackageStatus,
    Participant,
    PurchasedPackage,
    Reservation,
)
from entitlements.domain.value_objects import (
    BookingId,
    Capacity,
    CourseId,
    MasterPackageId,
    Month,
    PackageId,
    ReservationToken,
    ScheduleId,
)

__all__ = [
    "Allocation",
    "AvailabilitySlot",
    "Booking",
    "BookingStatus",
    "Course",
    "CourseSchedule",
    "PackageOffer",
    "PackageOfferCourse",
    "PackageStatus",
    "Participant",
    "PurchasedPackage",
    "Reservation",
    "BookingId",
    "Capacity",
    "CourseId",
    "MasterPackageId",
    "Month",
    "PackageId",
    "ReservationToken",
    "ScheduleId",
]
