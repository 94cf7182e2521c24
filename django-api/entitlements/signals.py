"""Django signals for cache invalidation.

Invalidation is deferred until the surrounding transaction commits, so a
reader can never cache rows that are about to change under a new version.
"""

from functools import partial

from django.db import transaction
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from entitlements.cache import invalidate_availability, invalidate_schedules
from entitlements.models import Course, CourseSchedule, DailyAvailability


@receiver([post_save, post_delete], sender=DailyAvailability)
def invalidate_daily_availability_cache(sender, instance, **kwargs):
    """Invalidate a schedule's availability when one of its dates changes."""
    transaction.on_commit(partial(invalidate_availability, str(instance.schedule_id)))


@receiver([post_save, post_delete], sender=CourseSchedule)
def invalidate_schedule_cache(sender, instance, **kwargs):
    """Invalidate schedule listings and availability when a schedule changes."""
    transaction.on_commit(partial(invalidate_schedules, str(instance.course_id)))
    transaction.on_commit(partial(invalidate_availability, str(instance.id)))


@receiver([post_save, post_delete], sender=Course)
def invalidate_course_cache(sender, instance, **kwargs):
    """Invalidate schedule listings when a course is saved or deleted."""
    transaction.on_commit(partial(invalidate_schedules, str(instance.id)))
