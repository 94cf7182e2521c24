"""Pytest configuration and shared fixtures."""

from datetime import timedelta

import pytest
from django.utils import timezone
from rest_framework.authtoken.models import Token
from rest_framework.test import APIClient

from entitlements import models as orm


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def today():
    return timezone.localdate()


@pytest.fixture
def user(django_user_model):
    return django_user_model.objects.create_user(username="parent", password="secret-pass")


@pytest.fixture
def other_user(django_user_model):
    return django_user_model.objects.create_user(username="neighbour", password="secret-pass")


@pytest.fixture
def auth_client(api_client: APIClient, user) -> APIClient:
    """Client sending ``Authorization: Bearer <token>`` for ``user``."""
    token = Token.objects.create(user=user)
    api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {token.key}")
    return api_client


@pytest.fixture
def course(db):
    return orm.Course.objects.create(name="Junior Tennis")


@pytest.fixture
def second_course(db):
    return orm.Course.objects.create(name="Junior Golf")


@pytest.fixture
def schedule(course, today):
    return orm.CourseSchedule.objects.create(
        course=course,
        name="Weekday mornings",
        start_date=today - timedelta(days=60),
        daily_capacity=4,
    )


@pytest.fixture
def master_package(course, second_course):
    offer = orm.MasterPackage.objects.create(name="Ten Pack", validity_days=90)
    orm.MasterPackageCourse.objects.create(
        master_package=offer, course=course, sessions=6, position=0
    )
    orm.MasterPackageCourse.objects.create(
        master_package=offer, course=second_course, sessions=4, position=1
    )
    return offer


@pytest.fixture
def make_package(user, today):
    """Factory for purchased packages.

    ``allocations`` is a list of ``(course, allotted, consumed)`` tuples.
    """

    def _make(allocations, expiry_date=None, owner=None, master_package=None):
        package = orm.PurchasedPackage.objects.create(
            owner=owner or user,
            master_package=master_package,
            package_name="Ten Pack",
            total_sessions=sum(allotted for _, allotted, _ in allocations),
            expiry_date=expiry_date or today + timedelta(days=30),
        )
        for position, (course, allotted, consumed) in enumerate(allocations):
            orm.PackageAllocation.objects.create(
                package=package,
                course=course,
                course_name=course.name,
                position=position,
                sessions_allotted=allotted,
                sessions_consumed=consumed,
            )
        return package

    return _make


@pytest.fixture
def make_slot(schedule):
    """Factory for explicit DailyAvailability rows on ``schedule``."""

    def _make(day, max_slots=4, booked_slots=0, is_booking_open=True):
        return orm.DailyAvailability.objects.create(
            schedule=schedule,
            available_date=day,
            max_slots=max_slots,
            booked_slots=booked_slots,
            is_booking_open=is_booking_open,
        )

    return _make
