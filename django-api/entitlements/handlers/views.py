"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.db.models import Q
from django.utils import timezone
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAdminUser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from entitlements import wiring
from entitlements.cache import availability_key, cache_timeout, schedules_key
from entitlements.domain.errors import DomainError, ErrorCode, UserAction
from entitlements.handlers.serializers import (
    AvailabilityQuerySerializer,
    AvailabilitySlotSerializer,
    BookingSerializer,
    CourseScheduleSerializer,
    PackageSearchQuerySerializer,
    PurchasedPackageSerializer,
    RescheduleRequestSerializer,
    ScheduleFromPackageRequestSerializer,
    StaffPackageSerializer,
)

HTTP_STATUS_BY_CODE = {
    ErrorCode.INVALID_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_REQUEST: status.HTTP_400_BAD_REQUEST,
    ErrorCode.PACKAGE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.MASTER_PACKAGE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.COURSE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.SCHEDULE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.BOOKING_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.PACKAGE_EXPIRED: status.HTTP_409_CONFLICT,
    ErrorCode.PACKAGE_DEPLETED: status.HTTP_409_CONFLICT,
    ErrorCode.SLOT_UNAVAILABLE: status.HTTP_409_CONFLICT,
    ErrorCode.INVALID_BOOKING_TRANSITION: status.HTTP_409_CONFLICT,
    ErrorCode.COURSE_NOT_ALLOCATED: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.BOOKING_FAILED: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.COMPENSATION_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def error_response(error: DomainError) -> Response:
    """Map a domain error to its HTTP response."""
    return Response(
        {
            "code": error.code.value,
            "message": error.message,
            "action": error.action.value,
            "retryable": error.retryable,
        },
        status=HTTP_STATUS_BY_CODE.get(error.code, status.HTTP_400_BAD_REQUEST),
    )


def invalid_request_response(errors) -> Response:
    return Response(
        {
            "code": ErrorCode.INVALID_REQUEST.value,
            "message": "The request is invalid.",
            "action": UserAction.NONE.value,
            "retryable": False,
            "errors": errors,
        },
        status=status.HTTP_400_BAD_REQUEST,
    )


def _package_payload(packages, lifecycle) -> list[dict]:
    return PurchasedPackageSerializer(packages, many=True, context={"lifecycle": lifecycle}).data


class CourseScheduleListView(APIView):
    """Handler for GET /api/courses/{course_id}/schedules"""

    permission_classes = [AllowAny]

    def get(self, request: Request, course_id: str) -> Response:
        key = schedules_key(course_id)
        payload = cache.get(key)
        if payload is None:
            try:
                schedules = wiring.get_availability_resolver().list_schedules(course_id)
            except DomainError as error:
                return error_response(error)
            payload = CourseScheduleSerializer(schedules, many=True).data
            cache.set(key, payload, cache_timeout())
        return Response(payload)


class AvailabilityView(APIView):
    """Handler for GET /api/availability/schedule/{schedule_id}?year&month"""

    permission_classes = [AllowAny]

    def get(self, request: Request, schedule_id: str) -> Response:
        query = AvailabilityQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return invalid_request_response(query.errors)
        today = timezone.localdate()
        year = query.validated_data.get("year", today.year)
        month = query.validated_data.get("month", today.month)

        key = availability_key(schedule_id, year, month, today)
        payload = cache.get(key)
        if payload is None:
            try:
                slots = wiring.get_availability_resolver().get_availability(
                    schedule_id, year, month
                )
            except DomainError as error:
                return error_response(error)
            payload = AvailabilitySlotSerializer(slots, many=True).data
            cache.set(key, payload, cache_timeout())
        return Response(payload)


class MyPackageListView(APIView):
    """Handler for GET /api/users/me/packages"""

    def get(self, request: Request) -> Response:
        lifecycle = wiring.get_lifecycle_service()
        packages = wiring.get_ledger().list_entitlements(request.user.pk)
        active, history = lifecycle.partition(packages)
        return Response(
            {
                "active": _package_payload(active, lifecycle),
                "history": _package_payload(history, lifecycle),
            }
        )


class MyPackageDetailView(APIView):
    """Handler for GET /api/users/me/packages/{package_id}"""

    def get(self, request: Request, package_id: str) -> Response:
        try:
            package = wiring.get_ledger().get_entitlement(request.user.pk, package_id)
        except DomainError as error:
            return error_response(error)
        serializer = PurchasedPackageSerializer(
            package, context={"lifecycle": wiring.get_lifecycle_service()}
        )
        return Response(serializer.data)


class PackageRenewView(APIView):
    """Handler for POST /api/users/me/packages/{package_id}/renew"""

    def post(self, request: Request, package_id: str) -> Response:
        lifecycle = wiring.get_lifecycle_service()
        try:
            package = lifecycle.renew(request.user.pk, package_id)
        except DomainError as error:
            return error_response(error)
        serializer = PurchasedPackageSerializer(package, context={"lifecycle": lifecycle})
        return Response(serializer.data, status=status.HTTP_201_CREATED)


class PackagePurchaseView(APIView):
    """Handler for POST /api/booking/package-booking/{master_package_id}"""

    def post(self, request: Request, master_package_id: str) -> Response:
        lifecycle = wiring.get_lifecycle_service()
        try:
            package = lifecycle.purchase(request.user.pk, master_package_id)
        except DomainError as error:
            return error_response(error)
        serializer = PurchasedPackageSerializer(package, context={"lifecycle": lifecycle})
        return Response(serializer.data, status=status.HTTP_201_CREATED)


class ScheduleFromPackageView(APIView):
    """Handler for POST /api/users/schedule-from-package"""

    def post(self, request: Request) -> Response:
        body = ScheduleFromPackageRequestSerializer(data=request.data)
        if not body.is_valid():
            return invalid_request_response(body.errors)
        data = body.validated_data
        try:
            booking = wiring.get_scheduler().schedule_from_package(
                owner_id=request.user.pk,
                package_id=data["purchasedPackageId"],
                course_id=data["courseId"],
                schedule_id=data["scheduleId"],
                booked_date=data["bookedDates"][0],
                participants=body.participants_data(),
            )
        except DomainError as error:
            return error_response(error)
        return Response(BookingSerializer(booking).data, status=status.HTTP_201_CREATED)


class MyBookingListView(APIView):
    """Handler for GET /api/users/me/bookings"""

    def get(self, request: Request) -> Response:
        upcoming, past = wiring.get_scheduler().list_bookings(request.user.pk)
        return Response(
            {
                "upcoming": BookingSerializer(upcoming, many=True).data,
                "past": BookingSerializer(past, many=True).data,
            }
        )


class BookingCancelView(APIView):
    """Handler for POST /api/users/me/bookings/{booking_id}/cancel"""

    def post(self, request: Request, booking_id: str) -> Response:
        try:
            booking = wiring.get_scheduler().cancel_booking(request.user.pk, booking_id)
        except DomainError as error:
            return error_response(error)
        return Response(BookingSerializer(booking).data)


class BookingRescheduleView(APIView):
    """Handler for POST /api/users/me/bookings/{booking_id}/reschedule"""

    def post(self, request: Request, booking_id: str) -> Response:
        body = RescheduleRequestSerializer(data=request.data)
        if not body.is_valid():
            return invalid_request_response(body.errors)
        try:
            booking = wiring.get_scheduler().reschedule_booking(
                request.user.pk,
                booking_id,
                body.validated_data["newDate"],
                schedule_id=body.validated_data.get("scheduleId") or None,
            )
        except DomainError as error:
            return error_response(error)
        return Response(BookingSerializer(booking).data, status=status.HTTP_201_CREATED)


class StaffPackageSearchView(APIView):
    """Handler for GET /api/admin/user-packages/search?query"""

    permission_classes = [IsAdminUser]

    def get(self, request: Request) -> Response:
        query = PackageSearchQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return invalid_request_response(query.errors)
        term = query.validated_data["query"]
        owners = {
            user.pk: user
            for user in get_user_model().objects.filter(
                Q(username__icontains=term)
                | Q(email__icontains=term)
                | Q(first_name__icontains=term)
                | Q(last_name__icontains=term)
            )
        }
        ledger = wiring.get_ledger()
        packages = [
            package for owner_id in owners for package in ledger.list_entitlements(owner_id)
        ]
        serializer = StaffPackageSerializer(
            packages,
            many=True,
            context={"lifecycle": wiring.get_lifecycle_service(), "owners": owners},
        )
        return Response(serializer.data)


class StaffScheduleFromPackageView(APIView):
    """Handler for POST /api/admin/user-packages/schedule-from-package

    Books for the package's owner, not for the staff member calling.
    """

    permission_classes = [IsAdminUser]

    def post(self, request: Request) -> Response:
        body = ScheduleFromPackageRequestSerializer(data=request.data)
        if not body.is_valid():
            return invalid_request_response(body.errors)
        data = body.validated_data
        try:
            booking = wiring.get_scheduler().schedule_for_owner_of_package(
                package_id=data["purchasedPackageId"],
                course_id=data["courseId"],
                schedule_id=data["scheduleId"],
                booked_date=data["bookedDates"][0],
                participants=body.participants_data(),
            )
        except DomainError as error:
            return error_response(error)
        return Response(BookingSerializer(booking).data, status=status.HTTP_201_CREATED)
