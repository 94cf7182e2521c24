"""Django ORM implementations of the stores.

Row locks use ``select_for_update`` and only take effect on databases that
support them (PostgreSQL in production). Lock order: booking row, capacity
row, reservation row, allocation row.
"""

from datetime import date, datetime

from django.db import transaction
from django.utils import timezone

from entitlements import models as orm
from entitlements.domain import (
    Allocation,
    AvailabilitySlot,
    Booking,
    BookingId,
    BookingStatus,
    Capacity,
    Course,
    CourseId,
    CourseSchedule,
    MasterPackageId,
    PackageId,
    PackageOffer,
    PackageOfferCourse,
    Participant,
    PurchasedPackage,
    Reservation,
    ReservationToken,
    ScheduleId,
)
from entitlements.stores.interfaces import (
    AvailabilityStore,
    BookingStore,
    CatalogStore,
    EntitlementStore,
    TransactionManager,
)


class DjangoTransactionManager(TransactionManager):
    """Transactions on the default database connection."""

    def atomic(self):
        return transaction.atomic()


def _allocation_to_domain(row: orm.PackageAllocation) -> Allocation:
    return Allocation(
        course_id=CourseId(row.course_id),
        course_name=row.course_name,
        sessions_allotted=row.sessions_allotted,
        sessions_consumed=row.sessions_consumed,
    )


def _package_to_domain(row: orm.PurchasedPackage) -> PurchasedPackage:
    return PurchasedPackage(
        id=PackageId(row.id),
        owner_id=row.owner_id,
        master_package_id=(
            MasterPackageId(row.master_package_id) if row.master_package_id else None
        ),
        package_name=row.package_name,
        total_sessions=row.total_sessions,
        expiry_date=row.expiry_date,
        allocations=tuple(_allocation_to_domain(a) for a in row.allocations.all()),
        created_at=row.created_at,
        renewed_from_id=PackageId(row.renewed_from_id) if row.renewed_from_id else None,
    )


def _schedule_to_domain(row: orm.CourseSchedule) -> CourseSchedule:
    return CourseSchedule(
        id=ScheduleId(row.id),
        course_id=CourseId(row.course_id),
        name=row.name,
        start_date=row.start_date,
        end_date=row.end_date,
        daily_capacity=Capacity(row.daily_capacity),
        is_active=row.is_active,
    )


def _slot_to_domain(row: orm.DailyAvailability) -> AvailabilitySlot:
    return AvailabilitySlot(
        date=row.available_date,
        schedule_id=ScheduleId(row.schedule_id),
        capacity_total=row.max_slots,
        capacity_booked=row.booked_slots,
        is_booking_open=row.is_booking_open,
    )


def _booking_to_domain(row: orm.Booking) -> Booking:
    token = None
    if row.reservation_id is not None:
        token = ReservationToken(
            value=row.reservation_id,
            package_id=PackageId(row.purchased_package_id),
            course_id=CourseId(row.course_id),
        )
    return Booking(
        id=BookingId(row.id),
        owner_id=row.owner_id,
        purchased_package_id=(
            PackageId(row.purchased_package_id) if row.purchased_package_id else None
        ),
        course_id=CourseId(row.course_id),
        schedule_id=ScheduleId(row.schedule_id),
        booked_date=row.booked_date,
        participants=tuple(
            Participant(first_name=p.first_name, last_name=p.last_name)
            for p in row.participants.all()
        ),
        status=BookingStatus(row.status),
        created_at=row.created_at,
        reservation_token=token,
        rescheduled_from_id=(
            BookingId(row.rescheduled_from_id) if row.rescheduled_from_id else None
        ),
    )


class DjangoEntitlementStore(EntitlementStore):
    """PostgreSQL-backed ledger store using Django ORM."""

    def _packages(self):
        return orm.PurchasedPackage.objects.prefetch_related("allocations")

    def get_package(self, package_id: PackageId) -> PurchasedPackage | None:
        row = self._packages().filter(pk=package_id.value).first()
        return _package_to_domain(row) if row else None

    def list_packages(self, owner_id: int) -> list[PurchasedPackage]:
        return [_package_to_domain(row) for row in self._packages().filter(owner_id=owner_id)]

    def get_allocation_for_update(
        self, package_id: PackageId, course_id: CourseId
    ) -> Allocation | None:
        row = (
            orm.PackageAllocation.objects.select_for_update()
            .filter(package_id=package_id.value, course_id=course_id.value)
            .first()
        )
        return _allocation_to_domain(row) if row else None

    def set_sessions_consumed(
        self, package_id: PackageId, course_id: CourseId, sessions_consumed: int
    ) -> None:
        orm.PackageAllocation.objects.filter(
            package_id=package_id.value, course_id=course_id.value
        ).update(sessions_consumed=sessions_consumed)

    def create_reservation(
        self, package_id: PackageId, course_id: CourseId, session_date: date | None
    ) -> Reservation:
        allocation = orm.PackageAllocation.objects.get(
            package_id=package_id.value, course_id=course_id.value
        )
        row = orm.SessionReservation.objects.create(
            package_id=package_id.value,
            allocation=allocation,
            session_date=session_date,
        )
        return Reservation(
            token=ReservationToken(value=row.id, package_id=package_id, course_id=course_id),
            session_date=row.session_date,
            created_at=row.created_at,
        )

    def get_reservation_for_update(self, token: ReservationToken) -> Reservation | None:
        row = (
            orm.SessionReservation.objects.select_for_update()
            .select_related("allocation")
            .filter(pk=token.value)
            .first()
        )
        if row is None:
            return None
        return Reservation(
            token=ReservationToken(
                value=row.id,
                package_id=PackageId(row.package_id),
                course_id=CourseId(row.allocation.course_id),
            ),
            session_date=row.session_date,
            created_at=row.created_at,
            released_at=row.released_at,
        )

    def mark_released(self, token: ReservationToken, released_at: datetime) -> None:
        orm.SessionReservation.objects.filter(pk=token.value).update(released_at=released_at)

    def create_package(
        self,
        owner_id: int,
        offer: PackageOffer,
        expiry_date: date,
        renewed_from_id: PackageId | None = None,
    ) -> PurchasedPackage:
        row = orm.PurchasedPackage.objects.create(
            owner_id=owner_id,
            master_package_id=offer.id.value,
            package_name=offer.name,
            total_sessions=offer.total_sessions,
            expiry_date=expiry_date,
            renewed_from_id=renewed_from_id.value if renewed_from_id else None,
        )
        orm.PackageAllocation.objects.bulk_create(
            orm.PackageAllocation(
                package=row,
                course_id=course.course_id.value,
                course_name=course.course_name,
                position=position,
                sessions_allotted=course.sessions,
            )
            for position, course in enumerate(offer.courses)
        )
        return self.get_package(PackageId(row.id))


class DjangoCatalogStore(CatalogStore):
    """Catalog lookups using Django ORM."""

    def get_offer(self, master_package_id: MasterPackageId) -> PackageOffer | None:
        row = (
            orm.MasterPackage.objects.prefetch_related("courses__course")
            .filter(pk=master_package_id.value)
            .first()
        )
        if row is None:
            return None
        return PackageOffer(
            id=MasterPackageId(row.id),
            name=row.name,
            validity_days=row.validity_days,
            courses=tuple(
                PackageOfferCourse(
                    course_id=CourseId(c.course_id),
                    course_name=c.course.name,
                    sessions=c.sessions,
                )
                for c in row.courses.all()
            ),
            is_active=row.is_active,
        )


class DjangoAvailabilityStore(AvailabilityStore):
    """Courses, schedules and daily capacity using Django ORM."""

    def get_course(self, course_id: CourseId) -> Course | None:
        row = orm.Course.objects.filter(pk=course_id.value).first()
        if row is None:
            return None
        return Course(id=CourseId(row.id), name=row.name, is_active=row.is_active)

    def get_schedule(self, schedule_id: ScheduleId) -> CourseSchedule | None:
        row = orm.CourseSchedule.objects.filter(pk=schedule_id.value).first()
        return _schedule_to_domain(row) if row else None

    def list_schedules(self, course_id: CourseId) -> list[CourseSchedule]:
        rows = orm.CourseSchedule.objects.filter(course_id=course_id.value, is_active=True)
        return [_schedule_to_domain(row) for row in rows]

    def list_daily_slots(
        self, schedule_id: ScheduleId, first_day: date, last_day: date
    ) -> list[AvailabilitySlot]:
        rows = orm.DailyAvailability.objects.filter(
            schedule_id=schedule_id.value,
            available_date__gte=first_day,
            available_date__lte=last_day,
        )
        return [_slot_to_domain(row) for row in rows]

    def get_slot_for_update(self, schedule: CourseSchedule, day: date) -> AvailabilitySlot:
        row, _ = orm.DailyAvailability.objects.get_or_create(
            schedule_id=schedule.id.value,
            available_date=day,
            defaults={"max_slots": schedule.daily_capacity.value},
        )
        row = orm.DailyAvailability.objects.select_for_update().get(pk=row.pk)
        return _slot_to_domain(row)

    def set_capacity_booked(
        self, schedule_id: ScheduleId, day: date, capacity_booked: int
    ) -> None:
        row = orm.DailyAvailability.objects.get(
            schedule_id=schedule_id.value, available_date=day
        )
        row.booked_slots = capacity_booked
        # save() rather than update() so cache invalidation signals fire.
        row.save(update_fields=["booked_slots", "updated_at"])


class DjangoBookingStore(BookingStore):
    """Booking persistence using Django ORM."""

    def _bookings(self):
        return orm.Booking.objects.prefetch_related("participants")

    def create_booking(
        self,
        owner_id: int,
        purchased_package_id: PackageId | None,
        course_id: CourseId,
        schedule_id: ScheduleId,
        booked_date: date,
        participants: tuple[Participant, ...],
        reservation_token: ReservationToken | None,
        rescheduled_from_id: BookingId | None = None,
    ) -> Booking:
        row = orm.Booking.objects.create(
            owner_id=owner_id,
            purchased_package_id=purchased_package_id.value if purchased_package_id else None,
            reservation_id=reservation_token.value if reservation_token else None,
            course_id=course_id.value,
            schedule_id=schedule_id.value,
            booked_date=booked_date,
            status=BookingStatus.CONFIRMED.value,
            rescheduled_from_id=rescheduled_from_id.value if rescheduled_from_id else None,
        )
        orm.BookingParticipant.objects.bulk_create(
            orm.BookingParticipant(
                booking=row,
                position=position,
                first_name=participant.first_name,
                last_name=participant.last_name,
            )
            for position, participant in enumerate(participants)
        )
        return self.get_booking(BookingId(row.id))

    def get_booking(self, booking_id: BookingId) -> Booking | None:
        row = self._bookings().filter(pk=booking_id.value).first()
        return _booking_to_domain(row) if row else None

    def get_booking_for_update(self, booking_id: BookingId) -> Booking | None:
        row = self._bookings().select_for_update().filter(pk=booking_id.value).first()
        return _booking_to_domain(row) if row else None

    def list_bookings(self, owner_id: int) -> list[Booking]:
        return [_booking_to_domain(row) for row in self._bookings().filter(owner_id=owner_id)]

    def set_status(self, booking_id: BookingId, status: BookingStatus) -> Booking:
        orm.Booking.objects.filter(pk=booking_id.value).update(
            status=status.value, updated_at=timezone.now()
        )
        return self.get_booking(booking_id)

    def complete_before(self, day: date) -> int:
        return orm.Booking.objects.filter(
            status=BookingStatus.CONFIRMED.value, booked_date__lt=day
        ).update(status=BookingStatus.COMPLETED.value, updated_at=timezone.now())
