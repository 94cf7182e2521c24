from entitlements.handlers.views import (
    AvailabilityView,
    BookingCancelView,
    BookingRescheduleView,
    CourseScheduleListView,
    MyBookingListView,
    MyPackageDetailView,
    MyPackageListView,
    PackagePurchaseView,
    PackageRenewView,
    ScheduleFromPackageView,
    StaffPackageSearchView,
    StaffScheduleFromPackageView,
)

__all__ = [
    "AvailabilityView",
    "BookingCancelView",
    "BookingRescheduleView",
    "CourseScheduleListView",
    "MyBookingListView",
    "MyPackageDetailView",
    "MyPackageListView",
    "PackagePurchaseView",
    "PackageRenewView",
    "ScheduleFromPackageView",
    "StaffPackageSearchView",
    "StaffScheduleFromPackageView",
]
