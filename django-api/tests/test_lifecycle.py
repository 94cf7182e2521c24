"""Unit tests for package lifecycle classification, purchase and renewal.

Run with: pytest tests/test_lifecycle.py -v
"""

from dataclasses import replace
from datetime import date, timedelta

import pytest

from entitlements.domain import PackageStatus
from entitlements.domain.errors import (
    InvalidIdError,
    MasterPackageNotFoundError,
    PackageNotFoundError,
)
from entitlements.domain.lifecycle import classify, classify_counts, partition
from entitlements.services import PackageLifecycleService
from tests.fakes import (
    InMemoryCatalogStore,
    InMemoryEntitlementStore,
    InMemoryTransactionManager,
    make_course,
    make_offer,
    make_package,
)

TODAY = date(2026, 3, 10)


class TestClassify:
    """Tests for classify."""

    def test_active_with_sessions_left_before_expiry(self):
        package = make_package(1, [(make_course(), 10, 3)], TODAY + timedelta(days=20))
        assert classify(package, TODAY) is PackageStatus.ACTIVE

    def test_depleted_when_every_session_is_used(self):
        package = make_package(1, [(make_course(), 10, 10)], TODAY + timedelta(days=20))
        assert classify(package, TODAY) is PackageStatus.DEPLETED

    def test_expired_on_the_expiry_date(self):
        """A package stops being usable on its expiry date."""
        package = make_package(1, [(make_course(), 10, 3)], TODAY)
        assert classify(package, TODAY) is PackageStatus.EXPIRED

    def test_expired_wins_over_depleted(self):
        """A package that is both used up and past expiry reports EXPIRED."""
        package = make_package(1, [(make_course(), 10, 10)], TODAY - timedelta(days=1))
        assert classify(package, TODAY) is PackageStatus.EXPIRED

    def test_depleted_only_when_all_courses_are_used(self):
        """One exhausted course does not deplete the package."""
        package = make_package(
            1,
            [(make_course(), 6, 6), (make_course("Junior Golf"), 4, 2)],
            TODAY + timedelta(days=20),
        )
        assert classify(package, TODAY) is PackageStatus.ACTIVE

    def test_classify_counts_matches_classify(self):
        package = make_package(1, [(make_course(), 10, 10)], TODAY + timedelta(days=1))
        assert classify_counts(
            package.total_sessions, package.allocations, package.expiry_date, TODAY
        ) is classify(package, TODAY)


class TestPartition:
    """Tests for partition ordering."""

    def test_active_sorted_by_expiry_and_history_most_recent_first(self):
        course = make_course()
        later = make_package(1, [(course, 10, 0)], TODAY + timedelta(days=40))
        sooner = make_package(1, [(course, 10, 0)], TODAY + timedelta(days=5))
        used = make_package(1, [(course, 10, 10)], TODAY + timedelta(days=30))
        old = make_package(1, [(course, 10, 2)], TODAY - timedelta(days=90))
        older = make_package(1, [(course, 10, 2)], TODAY - timedelta(days=200))

        active, history = partition([older, later, used, sooner, old], TODAY)

        assert active == [sooner, later]
        assert history == [used, old, older]

    def test_empty_input(self):
        assert partition([], TODAY) == ([], [])


class TestPackageLifecycleService:
    """Tests for purchase and renewal through the catalog."""

    @pytest.fixture
    def store(self):
        return InMemoryEntitlementStore()

    @pytest.fixture
    def catalog(self):
        return InMemoryCatalogStore()

    @pytest.fixture
    def service(self, store, catalog):
        return PackageLifecycleService(
            store, catalog, InMemoryTransactionManager(), clock=lambda: TODAY
        )

    def test_purchase_builds_allocations_from_offer(self, service, catalog):
        """A purchase copies the offer's courses and starts at zero consumed."""
        tennis, golf = make_course(), make_course("Junior Golf")
        offer = catalog.add(make_offer([(tennis, 6), (golf, 4)], validity_days=90))

        package = service.purchase(7, str(offer.id))

        assert package.owner_id == 7
        assert package.total_sessions == 10
        assert package.expiry_date == TODAY + timedelta(days=90)
        assert [a.sessions_allotted for a in package.allocations] == [6, 4]
        assert package.sessions_consumed == 0
        assert service.classify(package) is PackageStatus.ACTIVE

    def test_purchase_invalid_id(self, service):
        with pytest.raises(InvalidIdError):
            service.purchase(7, "nope")

    def test_purchase_inactive_offer(self, service, catalog):
        """An offer that is no longer sold cannot be purchased."""
        offer = make_offer([(make_course(), 6)])
        catalog.add(replace(offer, is_active=False))
        with pytest.raises(MasterPackageNotFoundError):
            service.purchase(7, str(offer.id))

    def test_renew_creates_new_package_and_keeps_old(self, service, store, catalog):
        """Renewing an expired package leaves it untouched in history."""
        course = make_course()
        offer = catalog.add(make_offer([(course, 10)], validity_days=60))
        old = store.add(
            make_package(7, [(course, 10, 4)], TODAY - timedelta(days=1), offer.id)
        )

        renewed = service.renew(7, str(old.id))

        assert renewed.id != old.id
        assert renewed.renewed_from_id == old.id
        assert renewed.expiry_date == TODAY + timedelta(days=60)
        assert store.get_package(old.id) == old
        active, history = service.partition(store.list_packages(7))
        assert active == [renewed]
        assert history == [old]

    def test_renew_active_package_is_allowed(self, service, store, catalog):
        course = make_course()
        offer = catalog.add(make_offer([(course, 10)]))
        old = store.add(make_package(7, [(course, 10, 1)], TODAY + timedelta(days=5), offer.id))
        assert service.renew(7, str(old.id)).renewed_from_id == old.id

    def test_renew_foreign_package_is_not_found(self, service, store, catalog):
        course = make_course()
        offer = catalog.add(make_offer([(course, 10)]))
        old = store.add(make_package(8, [(course, 10, 1)], TODAY, offer.id))
        with pytest.raises(PackageNotFoundError):
            service.renew(7, str(old.id))

    def test_renew_without_catalog_origin(self, service, store):
        """Packages not bought from the catalog cannot be renewed."""
        old = store.add(make_package(7, [(make_course(), 10, 1)], TODAY))
        with pytest.raises(MasterPackageNotFoundError):
            service.renew(7, str(old.id))
