"""Integration tests for the HTTP API.

These validate response shapes and the mapping of domain errors to status codes.
Run with: pytest tests/test_api.py -v
"""

import calendar
import uuid
from datetime import timedelta

import pytest
from rest_framework.test import APIClient

from entitlements import models as orm


def schedule_payload(package, course, schedule, day, participants=None):
    return {
        "purchasedPackageId": str(package.id),
        "courseId": str(course.id),
        "scheduleId": str(schedule.id),
        "bookedDates": [day.isoformat()],
        "participants": participants
        if participants is not None
        else [{"firstName": "Ada", "lastName": "Lovelace"}],
    }


@pytest.mark.django_db
class TestCourseSchedules:
    """Tests for GET /api/courses/{id}/schedules"""

    def test_lists_active_schedules(self, api_client: APIClient, course, schedule, today):
        """Anonymous callers can list a course's active schedules."""
        orm.CourseSchedule.objects.create(
            course=course, name="Retired", start_date=today, daily_capacity=2, is_active=False
        )

        response = api_client.get(f"/api/courses/{course.id}/schedules")

        assert response.status_code == 200
        assert response.json() == [
            {
                "scheduleId": str(schedule.id),
                "courseId": str(course.id),
                "scheduleName": "Weekday mornings",
                "startDate": schedule.start_date.isoformat(),
                "endDate": None,
                "dailyCapacity": 4,
            }
        ]

    def test_unknown_course(self, api_client: APIClient, db):
        response = api_client.get(f"/api/courses/{uuid.uuid4()}/schedules")
        assert response.status_code == 404
        assert response.json()["code"] == "COURSE_NOT_FOUND"
        assert response.json()["action"] == "refresh"

    def test_invalid_course_id(self, api_client: APIClient, db):
        response = api_client.get("/api/courses/abc/schedules")
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_ID"


@pytest.mark.django_db
class TestAvailability:
    """Tests for GET /api/availability/schedule/{id}"""

    def test_month_of_slots(self, api_client: APIClient, schedule, make_slot, today):
        """Every day of the month is returned and a full day shows zero seats."""
        full_day = today + timedelta(days=1)
        make_slot(full_day, max_slots=3, booked_slots=3)

        response = api_client.get(
            f"/api/availability/schedule/{schedule.id}",
            {"year": full_day.year, "month": full_day.month},
        )

        assert response.status_code == 200
        slots = {s["date"]: s for s in response.json()}
        assert len(slots) == calendar.monthrange(full_day.year, full_day.month)[1]
        assert slots[full_day.isoformat()] == {
            "date": full_day.isoformat(),
            "scheduleId": str(schedule.id),
            "capacityTotal": 3,
            "capacityBooked": 3,
            "availableSlots": 0,
            "isBookingOpen": True,
        }

    def test_defaults_to_current_month(self, api_client: APIClient, schedule, today):
        response = api_client.get(f"/api/availability/schedule/{schedule.id}")
        assert response.status_code == 200
        assert today.isoformat() in {s["date"] for s in response.json()}

    def test_invalid_month(self, api_client: APIClient, schedule):
        response = api_client.get(
            f"/api/availability/schedule/{schedule.id}", {"year": 2026, "month": 13}
        )
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_REQUEST"
        assert "month" in response.json()["errors"]

    def test_unknown_schedule(self, api_client: APIClient, db):
        response = api_client.get(f"/api/availability/schedule/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.json()["code"] == "SCHEDULE_NOT_FOUND"


@pytest.mark.django_db
class TestMyPackages:
    """Tests for GET /api/users/me/packages[/{id}]"""

    def test_requires_authentication(self, api_client: APIClient):
        response = api_client.get("/api/users/me/packages")
        assert response.status_code == 401

    def test_active_and_history(
        self, auth_client: APIClient, other_user, course, second_course, make_package, today
    ):
        """Packages are split by derived status; nobody sees another customer's packages."""
        active = make_package([(course, 6, 2), (second_course, 4, 0)])
        depleted = make_package([(course, 5, 5)])
        expired = make_package([(course, 5, 1)], expiry_date=today - timedelta(days=1))
        make_package([(course, 5, 0)], owner=other_user)

        response = auth_client.get("/api/users/me/packages")

        assert response.status_code == 200
        body = response.json()
        assert [p["id"] for p in body["active"]] == [str(active.id)]
        assert {p["id"] for p in body["history"]} == {str(depleted.id), str(expired.id)}
        first = body["active"][0]
        assert first["status"] == "ACTIVE"
        assert first["totalSessions"] == 10
        assert first["remainingSessions"] == 8
        assert first["sessionDetails"][0] == {
            "courseId": str(course.id),
            "courseName": "Junior Tennis",
            "totalSessionsAllotted": 6,
            "sessionsConsumed": 2,
            "remainingSessions": 4,
        }
        statuses = {p["id"]: p["status"] for p in body["history"]}
        assert statuses[str(depleted.id)] == "DEPLETED"
        assert statuses[str(expired.id)] == "EXPIRED"

    def test_detail(self, auth_client: APIClient, course, make_package):
        package = make_package([(course, 10, 3)])
        response = auth_client.get(f"/api/users/me/packages/{package.id}")
        assert response.status_code == 200
        assert response.json()["remainingSessions"] == 7

    def test_detail_of_another_customer(self, auth_client: APIClient, other_user, course, make_package):
        package = make_package([(course, 10, 3)], owner=other_user)
        response = auth_client.get(f"/api/users/me/packages/{package.id}")
        assert response.status_code == 404
        assert response.json()["code"] == "PACKAGE_NOT_FOUND"

    def test_detail_invalid_id(self, auth_client: APIClient):
        response = auth_client.get("/api/users/me/packages/not-a-uuid")
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_ID"


@pytest.mark.django_db
class TestPurchaseAndRenew:
    """Tests for package purchase and renewal."""

    def test_purchase(self, auth_client: APIClient, master_package, today):
        response = auth_client.post(f"/api/booking/package-booking/{master_package.id}")

        assert response.status_code == 201
        body = response.json()
        assert body["masterPackageId"] == str(master_package.id)
        assert body["totalSessions"] == 10
        assert body["expiryDate"] == (today + timedelta(days=90)).isoformat()
        assert [d["totalSessionsAllotted"] for d in body["sessionDetails"]] == [6, 4]

    def test_purchase_inactive_offer(self, auth_client: APIClient, master_package):
        master_package.is_active = False
        master_package.save()
        response = auth_client.post(f"/api/booking/package-booking/{master_package.id}")
        assert response.status_code == 404
        assert response.json()["code"] == "MASTER_PACKAGE_NOT_FOUND"

    def test_renew_expired_package(
        self, auth_client: APIClient, course, second_course, master_package, make_package, today
    ):
        """Renewal creates a fresh package and keeps the expired one in history."""
        old = make_package(
            [(course, 6, 2), (second_course, 4, 4)],
            expiry_date=today - timedelta(days=3),
            master_package=master_package,
        )

        response = auth_client.post(f"/api/users/me/packages/{old.id}/renew")

        assert response.status_code == 201
        assert response.json()["renewedFromId"] == str(old.id)
        assert response.json()["status"] == "ACTIVE"
        listing = auth_client.get("/api/users/me/packages").json()
        assert [p["id"] for p in listing["history"]] == [str(old.id)]
        assert [p["id"] for p in listing["active"]] == [response.json()["id"]]


@pytest.mark.django_db
class TestScheduleFromPackage:
    """Tests for POST /api/users/schedule-from-package"""

    def test_books_a_session(self, auth_client: APIClient, course, schedule, make_package, today):
        day = today + timedelta(days=2)
        package = make_package([(course, 10, 0)])

        response = auth_client.post(
            "/api/users/schedule-from-package",
            schedule_payload(package, course, schedule, day),
            format="json",
        )

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "CONFIRMED"
        assert body["bookedDate"] == day.isoformat()
        assert body["participants"] == [{"firstName": "Ada", "lastName": "Lovelace"}]
        assert body["purchasedPackageId"] == str(package.id)

    def test_full_date(self, auth_client: APIClient, course, schedule, make_package, make_slot, today):
        day = today + timedelta(days=2)
        make_slot(day, max_slots=1, booked_slots=1)
        package = make_package([(course, 10, 0)])

        response = auth_client.post(
            "/api/users/schedule-from-package",
            schedule_payload(package, course, schedule, day),
            format="json",
        )

        assert response.status_code == 409
        assert response.json() == {
            "code": "SLOT_UNAVAILABLE",
            "message": "That date is no longer available. Please pick another date.",
            "action": "pick_another_date",
            "retryable": True,
        }

    def test_expired_package(self, auth_client: APIClient, course, schedule, make_package, today):
        package = make_package([(course, 10, 0)], expiry_date=today)
        response = auth_client.post(
            "/api/users/schedule-from-package",
            schedule_payload(package, course, schedule, today + timedelta(days=1)),
            format="json",
        )
        assert response.status_code == 409
        assert response.json()["code"] == "PACKAGE_EXPIRED"
        assert response.json()["action"] == "renew"

    def test_depleted_course(self, auth_client: APIClient, course, schedule, make_package, today):
        package = make_package([(course, 4, 4)])
        response = auth_client.post(
            "/api/users/schedule-from-package",
            schedule_payload(package, course, schedule, today + timedelta(days=1)),
            format="json",
        )
        assert response.status_code == 409
        assert response.json()["code"] == "PACKAGE_DEPLETED"

    def test_course_not_in_package(
        self, auth_client: APIClient, course, second_course, schedule, make_package, today
    ):
        package = make_package([(second_course, 4, 0)])
        response = auth_client.post(
            "/api/users/schedule-from-package",
            schedule_payload(package, course, schedule, today + timedelta(days=1)),
            format="json",
        )
        assert response.status_code == 422
        assert response.json()["code"] == "COURSE_NOT_ALLOCATED"
        assert response.json()["action"] == "contact_support"

    def test_requires_participants(self, auth_client: APIClient, course, schedule, make_package, today):
        package = make_package([(course, 10, 0)])
        response = auth_client.post(
            "/api/users/schedule-from-package",
            schedule_payload(package, course, schedule, today + timedelta(days=1), participants=[]),
            format="json",
        )
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_REQUEST"
        assert "participants" in response.json()["errors"]

    def test_one_date_per_request(self, auth_client: APIClient, course, schedule, make_package, today):
        package = make_package([(course, 10, 0)])
        payload = schedule_payload(package, course, schedule, today + timedelta(days=1))
        payload["bookedDates"].append((today + timedelta(days=2)).isoformat())
        response = auth_client.post("/api/users/schedule-from-package", payload, format="json")
        assert response.status_code == 400
        assert "bookedDates" in response.json()["errors"]


@pytest.mark.django_db
class TestMyBookings:
    """Tests for booking listing, cancellation and rescheduling."""

    @pytest.fixture
    def booking(self, auth_client: APIClient, course, schedule, make_package, today):
        package = make_package([(course, 10, 0)])
        response = auth_client.post(
            "/api/users/schedule-from-package",
            schedule_payload(package, course, schedule, today + timedelta(days=2)),
            format="json",
        )
        assert response.status_code == 201
        return response.json()

    def test_lists_upcoming(self, auth_client: APIClient, booking):
        response = auth_client.get("/api/users/me/bookings")
        assert response.status_code == 200
        assert [b["id"] for b in response.json()["upcoming"]] == [booking["id"]]
        assert response.json()["past"] == []

    def test_cancel(self, auth_client: APIClient, booking):
        response = auth_client.post(f"/api/users/me/bookings/{booking['id']}/cancel")
        assert response.status_code == 200
        assert response.json()["status"] == "CANCELLED"

        again = auth_client.post(f"/api/users/me/bookings/{booking['id']}/cancel")
        assert again.status_code == 409
        assert again.json()["code"] == "INVALID_BOOKING_TRANSITION"
        assert again.json()["message"] == "A cancelled booking cannot be cancelled."

    def test_cancel_unknown_booking(self, auth_client: APIClient):
        response = auth_client.post(f"/api/users/me/bookings/{uuid.uuid4()}/cancel")
        assert response.status_code == 404
        assert response.json()["code"] == "BOOKING_NOT_FOUND"

    def test_reschedule(self, auth_client: APIClient, booking, today):
        new_day = today + timedelta(days=6)
        response = auth_client.post(
            f"/api/users/me/bookings/{booking['id']}/reschedule",
            {"newDate": new_day.isoformat()},
            format="json",
        )
        assert response.status_code == 201
        assert response.json()["rescheduledFromId"] == booking["id"]
        assert response.json()["bookedDate"] == new_day.isoformat()

        listing = auth_client.get("/api/users/me/bookings").json()
        assert [b["id"] for b in listing["upcoming"]] == [response.json()["id"]]
        assert [b["status"] for b in listing["past"]] == ["RESCHEDULED"]

    def test_reschedule_requires_new_date(self, auth_client: APIClient, booking):
        response = auth_client.post(
            f"/api/users/me/bookings/{booking['id']}/reschedule", {}, format="json"
        )
        assert response.status_code == 400
        assert "newDate" in response.json()["errors"]


@pytest.mark.django_db
class TestStaffPackages:
    """Tests for the staff package search and on-behalf scheduling."""

    @pytest.fixture
    def staff_client(self, admin_user) -> APIClient:
        client = APIClient()
        client.force_authenticate(user=admin_user)
        return client

    def test_search_by_username(self, staff_client: APIClient, user, other_user, course, make_package):
        package = make_package([(course, 10, 3)])
        make_package([(course, 5, 0)], owner=other_user)

        response = staff_client.get("/api/admin/user-packages/search", {"query": "PAR"})

        assert response.status_code == 200
        body = response.json()
        assert [p["id"] for p in body] == [str(package.id)]
        assert body[0]["owner"]["id"] == user.pk
        assert body[0]["owner"]["username"] == "parent"
        assert body[0]["remainingSessions"] == 7

    def test_search_needs_two_characters(self, staff_client: APIClient):
        response = staff_client.get("/api/admin/user-packages/search", {"query": "p"})
        assert response.status_code == 400
        assert "query" in response.json()["errors"]

    def test_customers_cannot_search(self, auth_client: APIClient):
        response = auth_client.get("/api/admin/user-packages/search", {"query": "parent"})
        assert response.status_code == 403

    def test_schedules_for_the_package_owner(
        self, staff_client: APIClient, admin_user, user, course, schedule, make_package, today
    ):
        package = make_package([(course, 10, 0)])
        day = today + timedelta(days=2)

        response = staff_client.post(
            "/api/admin/user-packages/schedule-from-package",
            schedule_payload(package, course, schedule, day),
            format="json",
        )

        assert response.status_code == 201
        booking = orm.Booking.objects.get(pk=response.json()["id"])
        assert booking.owner_id == user.pk
        assert booking.owner_id != admin_user.pk
        allocation = orm.PackageAllocation.objects.get(package=package)
        assert allocation.sessions_consumed == 1

    def test_schedule_for_owner_on_full_date(
        self, staff_client: APIClient, course, schedule, make_package, make_slot, today
    ):
        package = make_package([(course, 10, 0)])
        day = today + timedelta(days=2)
        make_slot(day, max_slots=2, booked_slots=2)

        response = staff_client.post(
            "/api/admin/user-packages/schedule-from-package",
            schedule_payload(package, course, schedule, day),
            format="json",
        )

        assert response.status_code == 409
        assert response.json()["code"] == "SLOT_UNAVAILABLE"
        assert orm.PackageAllocation.objects.get(package=package).sessions_consumed == 0

    def test_schedule_for_unknown_package(self, staff_client: APIClient, course, schedule, today):
        payload = {
            "purchasedPackageId": str(uuid.uuid4()),
            "courseId": str(course.id),
            "scheduleId": str(schedule.id),
            "bookedDates": [(today + timedelta(days=2)).isoformat()],
            "participants": [{"firstName": "Ada", "lastName": "Lovelace"}],
        }
        response = staff_client.post(
            "/api/admin/user-packages/schedule-from-package", payload, format="json"
        )
        assert response.status_code == 404
        assert response.json()["code"] == "PACKAGE_NOT_FOUND"

    def test_customers_cannot_schedule_for_others(
        self, auth_client: APIClient, other_user, course, schedule, make_package, today
    ):
        package = make_package([(course, 10, 0)], owner=other_user)
        response = auth_client.post(
            "/api/admin/user-packages/schedule-from-package",
            schedule_payload(package, course, schedule, today + timedelta(days=2)),
            format="json",
        )
        assert response.status_code == 403
        assert not orm.Booking.objects.exists()
