"""Entitlement ledger - the single source of truth for what a customer is owed.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors

``reserve_session`` and ``release_session`` are the only code paths that
change ``sessions_consumed``.
"""

import logging
from collections.abc import Callable
from datetime import date, datetime

from django.utils import timezone

from entitlements.domain import (
    CourseId,
    PackageId,
    PurchasedPackage,
    ReservationToken,
)
from entitlements.domain.errors import (
    CourseNotAllocatedError,
    PackageDepletedError,
    PackageExpiredError,
    PackageNotFoundError,
)
from entitlements.services.parsing import parse_id
from entitlements.stores.interfaces import EntitlementStore, TransactionManager

logger = logging.getLogger(__name__)


class EntitlementLedger:
    """Service for reading and consuming purchased package entitlement."""

    def __init__(
        self,
        store: EntitlementStore,
        transactions: TransactionManager,
        clock: Callable[[], date] = timezone.localdate,
        now: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._store = store
        self._transactions = transactions
        self._clock = clock
        self._now = now

    def get_entitlement(self, owner_id: int, package_id: str) -> PurchasedPackage:
        """Return a package owned by owner_id.

        Raises:
            InvalidIdError: If package_id is not a valid UUID.
            PackageNotFoundError: If the package does not exist or is not the caller's.
        """
        return self._owned_package(owner_id, parse_id(PackageId, package_id, "package id"))

    def owner_of(self, package_id: str) -> int:
        """Return the owner of a package, for staff acting on a customer's behalf.

        Raises:
            InvalidIdError: If package_id is not a valid UUID.
            PackageNotFoundError: If the package does not exist.
        """
        key = parse_id(PackageId, package_id, "package id")
        package = self._store.get_package(key)
        if package is None:
            raise PackageNotFoundError(str(key))
        return package.owner_id

    def list_entitlements(self, owner_id: int) -> list[PurchasedPackage]:
        """Return every package the owner has purchased, newest first."""
        return self._store.list_packages(owner_id)

    def reserve_session(
        self,
        owner_id: int,
        package_id: PackageId,
        course_id: CourseId,
        session_date: date | None = None,
    ) -> ReservationToken:
        """Consume one session of course_id from the package.

        Checks run in order: ownership, expiry, allocation, remaining sessions.
        When session_date is given the session must also fall before expiry.

        Raises:
            PackageNotFoundError, PackageExpiredError,
            CourseNotAllocatedError, PackageDepletedError
        """
        with self._transactions.atomic():
            package = self._owned_package(owner_id, package_id)

            today = self._clock()
            if today >= package.expiry_date or (
                session_date is not None and session_date >= package.expiry_date
            ):
                logger.warning(
                    "Reservation refused: package %s expired on %s",
                    package_id,
                    package.expiry_date,
                )
                raise PackageExpiredError(str(package_id))

            allocation = self._store.get_allocation_for_update(package_id, course_id)
            if allocation is None:
                logger.error(
                    "Course %s is not allocated in package %s", course_id, package_id
                )
                raise CourseNotAllocatedError(str(package_id), str(course_id))

            if allocation.is_exhausted:
                logger.warning(
                    "Reservation refused: course %s depleted in package %s",
                    course_id,
                    package_id,
                )
                raise PackageDepletedError(str(package_id), str(course_id))

            self._store.set_sessions_consumed(
                package_id, course_id, allocation.sessions_consumed + 1
            )
            reservation = self._store.create_reservation(package_id, course_id, session_date)

        logger.info(
            "Reserved session %s of course %s from package %s (%d/%d used)",
            reservation.token,
            course_id,
            package_id,
            allocation.sessions_consumed + 1,
            allocation.sessions_allotted,
        )
        return reservation.token

    def release_session(self, token: ReservationToken) -> bool:
        """Give back the session behind a reservation token.

        Idempotent per token: returns False when the token was already released.

        Raises:
            PackageNotFoundError: If the token is unknown.
            CourseNotAllocatedError: If the allocation behind the token vanished.
        """
        with self._transactions.atomic():
            reservation = self._store.get_reservation_for_update(token)
            if reservation is None:
                raise PackageNotFoundError(str(token.package_id))
            if reservation.is_released:
                logger.info("Reservation %s already released", token)
                return False

            allocation = self._store.get_allocation_for_update(
                token.package_id, token.course_id
            )
            if allocation is None:
                raise CourseNotAllocatedError(str(token.package_id), str(token.course_id))

            if allocation.sessions_consumed == 0:
                logger.error(
                    "Reservation %s has no consumed session to give back", token
                )
            self._store.set_sessions_consumed(
                token.package_id,
                token.course_id,
                max(0, allocation.sessions_consumed - 1),
            )
            self._store.mark_released(token, self._now())

        logger.info("Released session %s back to package %s", token, token.package_id)
        return True

    def _owned_package(self, owner_id: int, package_id: PackageId) -> PurchasedPackage:
        package = self._store.get_package(package_id)
        if package is None or package.owner_id != owner_id:
            raise PackageNotFoundError(str(package_id))
        return package
