"""Package lifecycle - status classification, purchase and renewal.

Renewal never touches the old package. It buys the catalog package the old
one was created from, through the same path as a first purchase.
"""

import logging
from collections.abc import Callable, Iterable
from datetime import date, timedelta

from django.utils import timezone

from entitlements.domain import (
    MasterPackageId,
    PackageId,
    PackageStatus,
    PurchasedPackage,
)
from entitlements.domain.errors import MasterPackageNotFoundError, PackageNotFoundError
from entitlements.domain.lifecycle import classify, partition
from entitlements.services.parsing import parse_id
from entitlements.stores.interfaces import (
    CatalogStore,
    EntitlementStore,
    TransactionManager,
)

logger = logging.getLogger(__name__)


class PackageLifecycleService:
    """Service for lifecycle classification and the purchase/renewal path."""

    def __init__(
        self,
        store: EntitlementStore,
        catalog: CatalogStore,
        transactions: TransactionManager,
        clock: Callable[[], date] = timezone.localdate,
    ) -> None:
        self._store = store
        self._catalog = catalog
        self._transactions = transactions
        self._clock = clock

    def classify(self, package: PurchasedPackage) -> PackageStatus:
        return classify(package, self._clock())

    def partition(
        self, packages: Iterable[PurchasedPackage]
    ) -> tuple[list[PurchasedPackage], list[PurchasedPackage]]:
        return partition(packages, self._clock())

    def purchase(self, owner_id: int, master_package_id: str) -> PurchasedPackage:
        """Create a package for the owner from a catalog definition.

        Called once payment has completed; payment itself is handled elsewhere.

        Raises:
            InvalidIdError: If master_package_id is not a valid UUID.
            MasterPackageNotFoundError: If the catalog entry is missing, inactive or empty.
        """
        offer_id = parse_id(MasterPackageId, master_package_id, "package id")
        return self._purchase(owner_id, offer_id)

    def renew(self, owner_id: int, package_id: str) -> PurchasedPackage:
        """Buy the old package's catalog definition again.

        Allowed for ACTIVE packages too; confirming that is up to the client.

        Raises:
            InvalidIdError, PackageNotFoundError, MasterPackageNotFoundError
        """
        old_id = parse_id(PackageId, package_id, "package id")
        old = self._store.get_package(old_id)
        if old is None or old.owner_id != owner_id:
            raise PackageNotFoundError(package_id)
        if old.master_package_id is None:
            raise MasterPackageNotFoundError(package_id)

        renewed = self._purchase(owner_id, old.master_package_id, renewed_from_id=old.id)
        logger.info(
            "Package %s (%s) renewed as %s",
            old.id,
            self.classify(old).value,
            renewed.id,
        )
        return renewed

    def _purchase(
        self,
        owner_id: int,
        offer_id: MasterPackageId,
        renewed_from_id: PackageId | None = None,
    ) -> PurchasedPackage:
        offer = self._catalog.get_offer(offer_id)
        if offer is None or not offer.is_active or not offer.courses:
            raise MasterPackageNotFoundError(str(offer_id))

        expiry = self._clock() + timedelta(days=offer.validity_days)
        with self._transactions.atomic():
            package = self._store.create_package(
                owner_id, offer, expiry, renewed_from_id=renewed_from_id
            )
        logger.info(
            "Package %s (%s, %d sessions, expires %s) created for owner %s",
            package.id,
            offer.name,
            package.total_sessions,
            package.expiry_date,
            owner_id,
        )
        return package
