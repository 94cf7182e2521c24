"""Serializers for transforming domain models to API responses and parsing request bodies."""

from rest_framework import serializers

from entitlements.domain import Participant


class IdentifierField(serializers.Field):
    """Renders an identifier value object as its string form."""

    def to_representation(self, value):
        return str(value.value)


class EnumValueField(serializers.Field):
    """Renders an enum member as its value."""

    def to_representation(self, value):
        return value.value


class ParticipantSerializer(serializers.Serializer):
    """Participant in and out of the API."""

    firstName = serializers.CharField(source="first_name", max_length=100)
    lastName = serializers.CharField(source="last_name", max_length=100)


class SessionDetailSerializer(serializers.Serializer):
    """Serializer for one Allocation of a package."""

    courseId = IdentifierField(source="course_id")
    courseName = serializers.CharField(source="course_name")
    totalSessionsAllotted = serializers.IntegerField(source="sessions_allotted")
    sessionsConsumed = serializers.IntegerField(source="sessions_consumed")
    remainingSessions = serializers.IntegerField(source="remaining_sessions")


class PurchasedPackageSerializer(serializers.Serializer):
    """Serializer for PurchasedPackage domain model.

    Expects a ``lifecycle`` service in the context to derive ``status``.
    """

    id = IdentifierField()
    masterPackageId = IdentifierField(source="master_package_id")
    packageName = serializers.CharField(source="package_name")
    expiryDate = serializers.DateField(source="expiry_date")
    totalSessions = serializers.IntegerField(source="total_sessions")
    remainingSessions = serializers.IntegerField(source="remaining_sessions")
    status = serializers.SerializerMethodField()
    sessionDetails = SessionDetailSerializer(source="allocations", many=True)
    renewedFromId = IdentifierField(source="renewed_from_id")
    createdAt = serializers.DateTimeField(source="created_at")

    def get_status(self, obj) -> str:
        return self.context["lifecycle"].classify(obj).value


class CourseScheduleSerializer(serializers.Serializer):
    """Serializer for CourseSchedule domain model."""

    scheduleId = IdentifierField(source="id")
    courseId = IdentifierField(source="course_id")
    scheduleName = serializers.CharField(source="name")
    startDate = serializers.DateField(source="start_date")
    endDate = serializers.DateField(source="end_date")
    dailyCapacity = serializers.IntegerField(source="daily_capacity.value")


class AvailabilitySlotSerializer(serializers.Serializer):
    """Serializer for AvailabilitySlot domain model."""

    date = serializers.DateField()
    scheduleId = IdentifierField(source="schedule_id")
    capacityTotal = serializers.IntegerField(source="capacity_total")
    capacityBooked = serializers.IntegerField(source="capacity_booked")
    availableSlots = serializers.IntegerField(source="available_slots")
    isBookingOpen = serializers.BooleanField(source="is_booking_open")


class BookingSerializer(serializers.Serializer):
    """Serializer for Booking domain model."""

    id = IdentifierField()
    purchasedPackageId = IdentifierField(source="purchased_package_id")
    courseId = IdentifierField(source="course_id")
    scheduleId = IdentifierField(source="schedule_id")
    bookedDate = serializers.DateField(source="booked_date")
    participants = ParticipantSerializer(many=True)
    status = EnumValueField()
    createdAt = serializers.DateTimeField(source="created_at")
    rescheduledFromId = IdentifierField(source="rescheduled_from_id")


class ScheduleFromPackageRequestSerializer(serializers.Serializer):
    """Body of POST /users/schedule-from-package."""

    purchasedPackageId = serializers.CharField()
    courseId = serializers.CharField()
    scheduleId = serializers.CharField()
    bookedDates = serializers.ListField(
        child=serializers.DateField(), min_length=1, max_length=1
    )
    participants = ParticipantSerializer(many=True, allow_empty=False)

    def participants_data(self) -> list[Participant]:
        return [Participant(**p) for p in self.validated_data["participants"]]


class RescheduleRequestSerializer(serializers.Serializer):
    """Body of POST /users/me/bookings/{id}/reschedule."""

    newDate = serializers.DateField()
    scheduleId = serializers.CharField(required=False, allow_blank=True)


class AvailabilityQuerySerializer(serializers.Serializer):
    """Query string of GET /availability/schedule/{id}."""

    year = serializers.IntegerField(min_value=1, max_value=9999, required=False)
    month = serializers.IntegerField(min_value=1, max_value=12, required=False)


class PackageOwnerSerializer(serializers.Serializer):
    """The customer a package belongs to, as shown to staff."""

    id = serializers.IntegerField(source="pk")
    username = serializers.CharField()
    email = serializers.EmailField()
    firstName = serializers.CharField(source="first_name")
    lastName = serializers.CharField(source="last_name")


class StaffPackageSerializer(PurchasedPackageSerializer):
    """PurchasedPackage with its owner.

    Expects ``owners`` (owner id to user) in the context next to ``lifecycle``.
    """

    owner = serializers.SerializerMethodField()

    def get_owner(self, obj) -> dict:
        return PackageOwnerSerializer(self.context["owners"][obj.owner_id]).data


class PackageSearchQuerySerializer(serializers.Serializer):
    """Query string of GET /admin/user-packages/search."""

    query = serializers.CharField(min_length=2, max_length=150)
