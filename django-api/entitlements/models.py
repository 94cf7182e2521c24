"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

import uuid

from django.conf import settings
from django.db import models

from entitlements.domain.models import BookingStatus

BOOKING_STATUS_CHOICES = [(s.value, s.value.title()) for s in BookingStatus]


class Course(models.Model):
    """Persistence model for courses."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class CourseSchedule(models.Model):
    """Persistence model for a course's bookable calendar."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="schedules")
    name = models.CharField(max_length=255)
    start_date = models.DateField()
    end_date = models.DateField(blank=True, null=True)
    daily_capacity = models.PositiveIntegerField()
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["start_date", "name"]
        indexes = [
            models.Index(fields=["course", "is_active"], name="schedule_course_active_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.course.name} - {self.name}"


class DailyAvailability(models.Model):
    """Per-date capacity row for a schedule. Locked by the scheduler."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    schedule = models.ForeignKey(
        CourseSchedule, on_delete=models.CASCADE, related_name="daily_availability"
    )
    available_date = models.DateField()
    max_slots = models.PositiveIntegerField()
    booked_slots = models.PositiveIntegerField(default=0)
    is_booking_open = models.BooleanField(default=True)
    notes_admin = models.TextField(blank=True, default="")
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["available_date"]
        verbose_name_plural = "daily availability"
        constraints = [
            models.UniqueConstraint(
                fields=["schedule", "available_date"], name="uniq_schedule_date"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.schedule} @ {self.available_date} ({self.booked_slots}/{self.max_slots})"


class MasterPackage(models.Model):
    """Catalog package definition used for purchase and renewal."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    validity_days = models.PositiveIntegerField()
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class MasterPackageCourse(models.Model):
    """Sessions of one course included in a catalog package."""

    master_package = models.ForeignKey(
        MasterPackage, on_delete=models.CASCADE, related_name="courses"
    )
    course = models.ForeignKey(Course, on_delete=models.PROTECT, related_name="+")
    sessions = models.PositiveIntegerField()
    position = models.PositiveSmallIntegerField(default=0)

    class Meta:
        ordering = ["position", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["master_package", "course"], name="uniq_master_package_course"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.course.name} x{self.sessions}"


class PurchasedPackage(models.Model):
    """Persistence model for an entitlement ledger entry."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="purchased_packages",
    )
    master_package = models.ForeignKey(
        MasterPackage,
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name="purchases",
    )
    package_name = models.CharField(max_length=255)
    total_sessions = models.PositiveIntegerField()
    expiry_date = models.DateField()
    renewed_from = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name="renewals",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["owner", "expiry_date"], name="package_owner_expiry_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.package_name} ({self.owner_id})"


class PackageAllocation(models.Model):
    """Per-course allocation row. The only row the ledger decrements."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    package = models.ForeignKey(
        PurchasedPackage, on_delete=models.CASCADE, related_name="allocations"
    )
    course = models.ForeignKey(Course, on_delete=models.PROTECT, related_name="+")
    course_name = models.CharField(max_length=255)
    position = models.PositiveSmallIntegerField(default=0)
    sessions_allotted = models.PositiveIntegerField()
    sessions_consumed = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["position", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["package", "course"], name="uniq_package_course"
            ),
            models.CheckConstraint(
                condition=models.Q(sessions_consumed__lte=models.F("sessions_allotted")),
                name="consumed_within_allotted",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.course_name}: {self.sessions_consumed}/{self.sessions_allotted}"


class SessionReservation(models.Model):
    """Reservation token persisted with the consumption it represents."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    package = models.ForeignKey(
        PurchasedPackage, on_delete=models.CASCADE, related_name="reservations"
    )
    allocation = models.ForeignKey(
        PackageAllocation, on_delete=models.CASCADE, related_name="reservations"
    )
    session_date = models.DateField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    released_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return str(self.id)


class Booking(models.Model):
    """Persistence model for bookings."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="bookings"
    )
    purchased_package = models.ForeignKey(
        PurchasedPackage,
        on_delete=models.PROTECT,
        blank=True,
        null=True,
        related_name="bookings",
    )
    reservation = models.OneToOneField(
        SessionReservation,
        on_delete=models.PROTECT,
        blank=True,
        null=True,
        related_name="booking",
    )
    course = models.ForeignKey(Course, on_delete=models.PROTECT, related_name="bookings")
    schedule = models.ForeignKey(
        CourseSchedule, on_delete=models.PROTECT, related_name="bookings"
    )
    booked_date = models.DateField()
    status = models.CharField(
        max_length=16,
        choices=BOOKING_STATUS_CHOICES,
        default=BookingStatus.CONFIRMED.value,
    )
    rescheduled_from = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name="rescheduled_to",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["booked_date", "created_at"]
        indexes = [
            models.Index(fields=["schedule", "booked_date", "status"], name="booking_slot_status_idx"),
            models.Index(fields=["owner", "booked_date"], name="booking_owner_date_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.course.name} on {self.booked_date} ({self.status})"


class BookingParticipant(models.Model):
    """Person attending a booking."""

    booking = models.ForeignKey(
        Booking, on_delete=models.CASCADE, related_name="participants"
    )
    position = models.PositiveSmallIntegerField(default=0)
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)

    class Meta:
        ordering = ["position", "id"]

    def __str__(self) -> str:
        return f"{self.first_name} {self.last_name}"
