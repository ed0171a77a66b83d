"""
Reference synchronizer: keeps the per-user listing lists in step with items.

``accounts.User`` caches four lists of items (active, sold, bought and the
watchlist). The ledger calls the ``on_*`` hooks inside its own transaction
after each transition. ``reconcile_user`` and ``reconcile_all`` rebuild the
cached lists from the item table when they have drifted.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction

from .models import Item, ItemStatus

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Transition hooks
# ---------------------------------------------------------------------------

def on_create(item):
    item.seller.active_listings.add(item)


def on_purchase(item, buyer):
    buyer.bought_items.add(item)
    buyer.watchlist.remove(item)
    seller = item.seller
    seller.sold_items.add(item)
    seller.active_listings.remove(item)


def on_delist(item):
    item.seller.active_listings.remove(item)


def on_relist(item):
    item.seller.active_listings.add(item)


def on_repair(item):
    """Place a repaired item in the seller list matching its status."""
    seller = item.seller
    if item.status == ItemStatus.AVAILABLE:
        seller.active_listings.add(item)
        seller.sold_items.remove(item)
    elif item.status == ItemStatus.SOLD:
        seller.sold_items.add(item)
        seller.active_listings.remove(item)
        if item.buyer_id:
            item.buyer.bought_items.add(item)
    else:
        seller.active_listings.remove(item)
        seller.sold_items.remove(item)


# ---------------------------------------------------------------------------
# Watchlist
# ---------------------------------------------------------------------------

def add_to_watchlist(user, item):
    user.watchlist.add(item)


def remove_from_watchlist(user, item):
    user.watchlist.remove(item)


def is_watching(user, item) -> bool:
    return user.watchlist.filter(pk=item.pk).exists()


# ---------------------------------------------------------------------------
# Reconciliation
# ---------------------------------------------------------------------------

@dataclass
class ReconcileResult:
    active_listings: List[int]
    sold_items: List[int]
    fixed_count: int = 0
    updated: bool = False

    def as_dict(self) -> dict:
        return {
            "activeListings": self.active_listings,
            "soldItems": self.sold_items,
            "fixedCount": self.fixed_count,
        }


@dataclass
class SweepSummary:
    users: int = 0
    items: int = 0  # sold items walked by the bought-list pass
    fixed_item_statuses: int = 0
    fixed_user_references: int = 0
    errors: List[dict] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "users": self.users,
            "items": self.items,
            "fixedItemStatuses": self.fixed_item_statuses,
            "fixedUserReferences": self.fixed_user_references,
            "errors": list(self.errors),
        }


def _ids(manager):
    return set(manager.values_list("pk", flat=True))


def reconcile_user(user, *, repair_statuses=True) -> ReconcileResult:
    """Rebuild ``user``'s active and sold lists from the items they sell.

    With ``repair_statuses`` each owned item is first passed through the
    ledger's status repair; the result counts the items that changed. Lists
    are only written when the stored set differs from the recomputed one,
    so a second call with no mutation in between fixes nothing.
    """
    from .ledger import repair_status

    User = get_user_model()
    with transaction.atomic():
        locked = User.objects.select_for_update().get(pk=user.pk)
        owned = list(Item.objects.select_for_update().filter(seller=locked).order_by("pk"))

        fixed = 0
        if repair_statuses:
            for item in owned:
                if item.needs_status_repair():
                    repair_status(item)
                    fixed += 1

        active = [item.pk for item in owned if item.status == ItemStatus.AVAILABLE]
        sold = [item.pk for item in owned if item.status == ItemStatus.SOLD]

        updated = False
        if _ids(locked.active_listings) != set(active):
            locked.active_listings.set(active)
            updated = True
        if _ids(locked.sold_items) != set(sold):
            locked.sold_items.set(sold)
            updated = True

    if fixed or updated:
        logger.info(
            "reconciled user %s: %d active, %d sold, %d statuses fixed, lists %s",
            locked.pk, len(active), len(sold), fixed, "rewritten" if updated else "unchanged",
        )
    return ReconcileResult(active, sold, fixed, updated)


def _ensure_bought(item) -> bool:
    """Add a sold item to its buyer's bought list; True if it was missing."""
    with transaction.atomic():
        buyer = get_user_model().objects.select_for_update().get(pk=item.buyer_id)
        if buyer.bought_items.filter(pk=item.pk).exists():
            return False
        buyer.bought_items.add(item)
    logger.info("added sold item %s to bought list of user %s", item.pk, item.buyer_id)
    return True


def reconcile_all(users=None) -> SweepSummary:
    """Best-effort repair of every user's lists.

    Each user and each sold item is handled in its own transaction. A
    failure is logged and recorded in the summary and the sweep carries on;
    this function does not raise.
    """
    User = get_user_model()
    summary = SweepSummary()
    queryset = users if users is not None else User.objects.all()

    for user in queryset.order_by("pk").iterator():
        summary.users += 1
        try:
            result = reconcile_user(user)
        except Exception as exc:
            logger.exception("reconcile failed for user %s", user.pk)
            summary.errors.append({"userId": user.pk, "error": str(exc)})
            continue
        summary.fixed_item_statuses += result.fixed_count
        if result.updated:
            summary.fixed_user_references += 1

    sold = Item.objects.filter(status=ItemStatus.SOLD, buyer__isnull=False)
    if users is not None:
        sold = sold.filter(buyer__in=queryset)
    for item in sold.order_by("pk").iterator():
        summary.items += 1
        try:
            if _ensure_bought(item):
                summary.fixed_user_references += 1
        except Exception as exc:
            logger.exception("bought-list repair failed for item %s", item.pk)
            summary.errors.append({"itemId": item.pk, "error": str(exc)})

    logger.info(
        "reconciliation sweep: %d users, %d items, %d statuses fixed, %d references fixed, %d errors",
        summary.users, summary.items, summary.fixed_item_statuses,
        summary.fixed_user_references, len(summary.errors),
    )
    return summary


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

def _reconcile_on_read():
    return getattr(settings, "MARKETPLACE_RECONCILE_ON_READ", True)


def _with_people(queryset):
    return queryset.select_related("seller", "buyer")


def _checked(user, cached, authoritative, label):
    if _ids(cached) != set(authoritative.values_list("pk", flat=True)) and _reconcile_on_read():
        logger.info("%s list of user %s drifted; reconciling", label, user.pk)
        reconcile_user(user, repair_statuses=False)
    return _with_people(authoritative)


def active_listings_for(user):
    """Items ``user`` has on sale, reconciling the cached list if it drifted."""
    authoritative = Item.objects.filter(seller=user, status=ItemStatus.AVAILABLE)
    return _checked(user, user.active_listings, authoritative, "active")


def sold_items_for(user):
    authoritative = Item.objects.filter(seller=user, status=ItemStatus.SOLD)
    return _checked(user, user.sold_items, authoritative, "sold")


def bought_items_for(user):
    authoritative = Item.objects.filter(buyer=user, status=ItemStatus.SOLD)
    missing = set(authoritative.values_list("pk", flat=True)) - _ids(user.bought_items)
    if missing and _reconcile_on_read():
        logger.info("bought list of user %s missing %d items; adding", user.pk, len(missing))
        user.bought_items.add(*missing)
    return _with_people(authoritative)


def delisted_items_for(user):
    return _with_people(Item.objects.filter(seller=user, status=ItemStatus.UNAVAILABLE))


def watchlist_for(user):
    return _with_people(user.watchlist.all())


def browse(category: Optional[str] = None):
    """Available items, newest first, optionally limited to one category."""
    queryset = Item.objects.filter(status=ItemStatus.AVAILABLE)
    if category:
        queryset = queryset.filter(category=category)
    return queryset.select_related("seller")
