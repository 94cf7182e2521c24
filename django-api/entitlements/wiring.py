"""Service construction for the HTTP handlers and management commands."""

from entitlements.services import (
    AvailabilityResolver,
    EntitlementLedger,
    PackageLifecycleService,
    Scheduler,
)
from entitlements.stores.django_store import (
    DjangoAvailabilityStore,
    DjangoBookingStore,
    DjangoCatalogStore,
    DjangoEntitlementStore,
    DjangoTransactionManager,
)


def get_ledger() -> EntitlementLedger:
    return EntitlementLedger(DjangoEntitlementStore(), DjangoTransactionManager())


def get_availability_resolver() -> AvailabilityResolver:
    return AvailabilityResolver(DjangoAvailabilityStore())


def get_scheduler() -> Scheduler:
    return Scheduler(
        ledger=get_ledger(),
        availability=DjangoAvailabilityStore(),
        bookings=DjangoBookingStore(),
        transactions=DjangoTransactionManager(),
    )


def get_lifecycle_service() -> PackageLifecycleService:
    return PackageLifecycleService(
        DjangoEntitlementStore(), DjangoCatalogStore(), DjangoTransactionManager()
    )
