from django.urls import path

from entitlements.handlers import (
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

urlpatterns = [
    path(
        "courses/<str:course_id>/schedules",
        CourseScheduleListView.as_view(),
        name="course-schedules",
    ),
    path(
        "availability/schedule/<str:schedule_id>",
        AvailabilityView.as_view(),
        name="schedule-availability",
    ),
    path("users/me/packages", MyPackageListView.as_view(), name="my-packages"),
    path(
        "users/me/packages/<str:package_id>",
        MyPackageDetailView.as_view(),
        name="my-package-detail",
    ),
    path(
        "users/me/packages/<str:package_id>/renew",
        PackageRenewView.as_view(),
        name="package-renew",
    ),
    path(
        "users/schedule-from-package",
        ScheduleFromPackageView.as_view(),
        name="schedule-from-package",
    ),
    path("users/me/bookings", MyBookingListView.as_view(), name="my-bookings"),
    path(
        "users/me/bookings/<str:booking_id>/cancel",
        BookingCancelView.as_view(),
        name="booking-cancel",
    ),
    path(
        "users/me/bookings/<str:booking_id>/reschedule",
        BookingRescheduleView.as_view(),
        name="booking-reschedule",
    ),
    path(
        "booking/package-booking/<str:master_package_id>",
        PackagePurchaseView.as_view(),
        name="package-purchase",
    ),
    path(
        "admin/user-packages/search",
        StaffPackageSearchView.as_view(),
        name="staff-package-search",
    ),
    path(
        "admin/user-packages/schedule-from-package",
        StaffScheduleFromPackageView.as_view(),
        name="staff-schedule-from-package",
    ),
]
