import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Course",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="MasterPackage",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("validity_days", models.PositiveIntegerField()),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="CourseSchedule",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField(blank=True, null=True)),
                ("daily_capacity", models.PositiveIntegerField()),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("course", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="schedules", to="entitlements.course")),
            ],
            options={
                "ordering": ["start_date", "name"],
                "indexes": [models.Index(fields=["course", "is_active"], name="schedule_course_active_idx")],
            },
        ),
        migrations.CreateModel(
            name="DailyAvailability",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("available_date", models.DateField()),
                ("max_slots", models.PositiveIntegerField()),
                ("booked_slots", models.PositiveIntegerField(default=0)),
                ("is_booking_open", models.BooleanField(default=True)),
                ("notes_admin", models.TextField(blank=True, default="")),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("schedule", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="daily_availability", to="entitlements.courseschedule")),
            ],
            options={
                "ordering": ["available_date"],
                "verbose_name_plural": "daily availability",
                "constraints": [models.UniqueConstraint(fields=("schedule", "available_date"), name="uniq_schedule_date")],
            },
        ),
        migrations.CreateModel(
            name="MasterPackageCourse",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("sessions", models.PositiveIntegerField()),
                ("position", models.PositiveSmallIntegerField(default=0)),
                ("course", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="+", to="entitlements.course")),
                ("master_package", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="courses", to="entitlements.masterpackage")),
            ],
            options={
                "ordering": ["position", "id"],
                "constraints": [models.UniqueConstraint(fields=("master_package", "course"), name="uniq_master_package_course")],
            },
        ),
        migrations.CreateModel(
            name="PurchasedPackage",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("package_name", models.CharField(max_length=255)),
                ("total_sessions", models.PositiveIntegerField()),
                ("expiry_date", models.DateField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("master_package", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="purchases", to="entitlements.masterpackage")),
                ("owner", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="purchased_packages", to=settings.AUTH_USER_MODEL)),
                ("renewed_from", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="renewals", to="entitlements.purchasedpackage")),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["owner", "expiry_date"], name="package_owner_expiry_idx")],
            },
        ),
        migrations.CreateModel(
            name="PackageAllocation",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("course_name", models.CharField(max_length=255)),
                ("position", models.PositiveSmallIntegerField(default=0)),
                ("sessions_allotted", models.PositiveIntegerField()),
                ("sessions_consumed", models.PositiveIntegerField(default=0)),
                ("course", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="+", to="entitlements.course")),
                ("package", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="allocations", to="entitlements.purchasedpackage")),
            ],
            options={
                "ordering": ["position", "id"],
                "constraints": [
                    models.UniqueConstraint(fields=("package", "course"), name="uniq_package_course"),
                    models.CheckConstraint(condition=models.Q(("sessions_consumed__lte", models.F("sessions_allotted"))), name="consumed_within_allotted"),
                ],
            },
        ),
        migrations.CreateModel(
            name="SessionReservation",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("session_date", models.DateField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("released_at", models.DateTimeField(blank=True, null=True)),
                ("allocation", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="reservations", to="entitlements.packageallocation")),
                ("package", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="reservations", to="entitlements.purchasedpackage")),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("booked_date", models.DateField()),
                ("status", models.CharField(choices=[("CONFIRMED", "Confirmed"), ("CANCELLED", "Cancelled"), ("COMPLETED", "Completed"), ("RESCHEDULED", "Rescheduled")], default="CONFIRMED", max_length=16)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("course", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="bookings", to="entitlements.course")),
                ("owner", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="bookings", to=settings.AUTH_USER_MODEL)),
                ("purchased_package", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="bookings", to="entitlements.purchasedpackage")),
                ("reservation", models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="booking", to="entitlements.sessionreservation")),
                ("rescheduled_from", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="rescheduled_to", to="entitlements.booking")),
                ("schedule", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="bookings", to="entitlements.courseschedule")),
            ],
            options={
                "ordering": ["booked_date", "created_at"],
                "indexes": [
                    models.Index(fields=["schedule", "booked_date", "status"], name="booking_slot_status_idx"),
                    models.Index(fields=["owner", "booked_date"], name="booking_owner_date_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="BookingParticipant",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("position", models.PositiveSmallIntegerField(default=0)),
                ("first_name", models.CharField(max_length=100)),
                ("last_name", models.CharField(max_length=100)),
                ("booking", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="participants", to="entitlements.booking")),
            ],
            options={
                "ordering": ["position", "id"],
            },
        ),
    ]
