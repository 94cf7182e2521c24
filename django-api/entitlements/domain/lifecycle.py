"""Package lifecycle classification.

Status is derived on every read from the ledger counters and the expiry
date, so it cannot drift from the data it describes.
"""

from collections.abc import Iterable
from datetime import date

from entitlements.domain.models import Allocation, PackageStatus, PurchasedPackage


def classify_counts(
    total_sessions: int,
    allocations: Iterable[Allocation],
    expiry_date: date,
    today: date,
) -> PackageStatus:
    """Classify from raw inputs. EXPIRED wins over DEPLETED."""
    if today >= expiry_date:
        return PackageStatus.EXPIRED
    consumed = sum(a.sessions_consumed for a in allocations)
    if total_sessions - consumed <= 0:
        return PackageStatus.DEPLETED
    return PackageStatus.ACTIVE


def classify(package: PurchasedPackage, today: date) -> PackageStatus:
    return classify_counts(
        package.total_sessions, package.allocations, package.expiry_date, today
    )


def partition(
    packages: Iterable[PurchasedPackage], today: date
) -> tuple[list[PurchasedPackage], list[PurchasedPackage]]:
    """Split packages into (active, history).

    Active packages are ordered soonest-expiring first, history most recent first.
    """
    active: list[PurchasedPackage] = []
    history: list[PurchasedPackage] = []
    for package in packages:
        if classify(package, today) is PackageStatus.ACTIVE:
            active.append(package)
        else:
            history.append(package)
    active.sort(key=lambda p: p.expiry_date)
    history.sort(key=lambda p: p.expiry_date, reverse=True)
    return active, history
