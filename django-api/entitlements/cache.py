"""Cache keys for the availability and schedule projections.

Availability keys embed a per-schedule version so every month cached for a
schedule can be dropped at once by bumping the version.
"""

from datetime import date

from django.conf import settings
from django.core.cache import cache


def _availability_version_key(schedule_id: str) -> str:
    return f"availability:{schedule_id}:version"


def availability_key(schedule_id: str, year: int, month: int, today: date) -> str:
    version = cache.get_or_set(_availability_version_key(schedule_id), 1, timeout=None)
    return f"availability:{schedule_id}:v{version}:{year}-{month:02d}:{today.isoformat()}"


def schedules_key(course_id: str) -> str:
    return f"courses:{course_id}:schedules"


def cache_timeout() -> int:
    return settings.AVAILABILITY_CACHE_SECONDS


def invalidate_availability(schedule_id: str) -> None:
    key = _availability_version_key(schedule_id)
    if cache.add(key, 2, timeout=None):
        return
    try:
        cache.incr(key)
    except ValueError:
        cache.set(key, 2, timeout=None)


def invalidate_schedules(course_id: str) -> None:
    cache.delete(schedules_key(course_id))
