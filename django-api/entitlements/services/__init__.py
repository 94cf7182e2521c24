from entitlements.services.availability_resolver import AvailabilityResolver, project_slot
from entitlements.services.entitlement_ledger import EntitlementLedger
from entitlements.services.lifecycle import PackageLifecycleService
from entitlements.services.scheduler import Scheduler

__all__ = [
    "AvailabilityResolver",
    "EntitlementLedger",
    "PackageLifecycleService",
    "Scheduler",
    "project_slot",
]
