from django.contrib import admin, messages

from entitlements import wiring
from entitlements.domain.errors import DomainError
from entitlements.models import (
    Booking,
    BookingParticipant,
    Course,
    CourseSchedule,
    DailyAvailability,
    MasterPackage,
    MasterPackageCourse,
    PackageAllocation,
    PurchasedPackage,
)


class CourseScheduleInline(admin.TabularInline):
    model = CourseSchedule
    extra = 1


class DailyAvailabilityInline(admin.TabularInline):
    """Capacity rows of a schedule; deleting happens on the row's own admin page."""

    model = DailyAvailability
    extra = 1
    can_delete = False
    readonly_fields = ["booked_slots"]


class MasterPackageCourseInline(admin.TabularInline):
    model = MasterPackageCourse
    extra = 1


class PackageAllocationInline(admin.TabularInline):
    model = PackageAllocation
    extra = 0
    can_delete = False
    readonly_fields = ["course", "course_name", "sessions_allotted", "sessions_consumed"]

    def has_add_permission(self, request, obj=None):
        return False


class BookingParticipantInline(admin.TabularInline):
    model = BookingParticipant
    extra = 0


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ["name", "is_active", "created_at"]
    search_fields = ["name"]
    inlines = [CourseScheduleInline]


@admin.register(CourseSchedule)
class CourseScheduleAdmin(admin.ModelAdmin):
    list_display = ["name", "course", "start_date", "end_date", "daily_capacity", "is_active"]
    list_filter = ["course", "is_active"]
    inlines = [DailyAvailabilityInline]


@admin.register(DailyAvailability)
class DailyAvailabilityAdmin(admin.ModelAdmin):
    list_display = ["schedule", "available_date", "max_slots", "booked_slots", "is_booking_open"]
    list_filter = ["schedule__course", "is_booking_open"]
    readonly_fields = ["booked_slots"]

    def has_delete_permission(self, request, obj=None):
        if obj is not None and obj.booked_slots > 0:
            return False
        return super().has_delete_permission(request, obj)


@admin.register(MasterPackage)
class MasterPackageAdmin(admin.ModelAdmin):
    list_display = ["name", "validity_days", "is_active"]
    search_fields = ["name"]
    inlines = [MasterPackageCourseInline]


@admin.register(PurchasedPackage)
class PurchasedPackageAdmin(admin.ModelAdmin):
    list_display = ["package_name", "owner", "total_sessions", "expiry_date", "created_at"]
    list_filter = ["master_package"]
    search_fields = ["package_name", "owner__email", "owner__username"]
    readonly_fields = ["owner", "master_package", "total_sessions", "renewed_from"]
    inlines = [PackageAllocationInline]


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    """Bookings are changed only through the scheduler so seats and sessions stay in step."""

    list_display = ["course", "schedule", "booked_date", "status", "owner"]
    list_filter = ["status", "course"]
    readonly_fields = [
        "owner",
        "purchased_package",
        "course",
        "schedule",
        "booked_date",
        "status",
        "reservation",
        "rescheduled_from",
    ]
    inlines = [BookingParticipantInline]
    actions = ["cancel_bookings"]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.action(description="Cancel selected bookings and return their sessions")
    def cancel_bookings(self, request, queryset):
        scheduler = wiring.get_scheduler()
        cancelled = 0
        for booking in queryset:
            try:
                scheduler.cancel_booking(booking.owner_id, str(booking.pk))
            except DomainError as error:
                self.message_user(request, f"{booking}: {error.message}", messages.ERROR)
            else:
                cancelled += 1
        if cancelled:
            self.message_user(request, f"Cancelled {cancelled} booking(s).", messages.SUCCESS)
