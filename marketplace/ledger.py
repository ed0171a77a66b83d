"""
Item ledger: the lifecycle rules for a listed item.

available --purchase--> sold
available --delist----> unavailable --relist--> available

Every transition runs in a transaction with the item row locked, and carries
its reference-list update inside the same transaction. When that update
fails the transaction rolls back, so the item change is undone, and the
caller gets ``SyncFailure``.
"""
import logging
from contextlib import contextmanager

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from . import sync
from .exceptions import MarketplaceError, NotAvailable, NotOwner, SelfPurchase, SyncFailure
from .models import Item, ItemStatus

logger = logging.getLogger(__name__)

# Fields only the ledger itself may write
PROTECTED_FIELDS = frozenset({
    "id", "pk", "photos", "status", "seller", "seller_id", "buyer", "buyer_id", "sold_at", "created_at",
})


def _locked(item):
    return Item.objects.select_for_update().get(pk=item.pk)


def _copy_state(source, target):
    target.status = source.status
    target.buyer_id = source.buyer_id
    target.sold_at = source.sold_at
    return target


@contextmanager
def _synced(action, item):
    """Run a reference-list update, turning any failure into SyncFailure."""
    try:
        yield
    except MarketplaceError:
        raise
    except Exception as exc:
        raise SyncFailure(f"Could not update listing references after {action} of item {item.pk}") from exc


def _compensated(action, item, mutate):
    """Run ``mutate`` atomically; on SyncFailure reload ``item`` from the rolled-back row."""
    try:
        with transaction.atomic():
            return mutate()
    except SyncFailure:
        logger.exception("%s of item %s rolled back: reference update failed", action, item.pk)
        item.refresh_from_db()
        raise


def create(seller, **fields) -> Item:
    """List a new item for ``seller``; it starts out available."""
    for name in PROTECTED_FIELDS - {"photos"}:
        fields.pop(name, None)
    item = Item(seller=seller, status=ItemStatus.AVAILABLE, **fields)
    item.full_clean()

    try:
        with transaction.atomic():
            item.save()
            with _synced("create", item):
                sync.on_create(item)
    except SyncFailure:
        logger.exception("listing by user %s rolled back: reference update failed", seller.pk)
        item.pk = None
        raise
    logger.info("item %s listed by user %s (%s)", item.pk, seller.pk, item.category)
    return item


def purchase(item, buyer) -> Item:
    """Sell ``item`` to ``buyer``.

    The status flip is a compare-and-set on ``status=available`` under a row
    lock, so of two racing buyers exactly one gets the item; the other sees
    ``NotAvailable``.
    """
    def mutate():
        current = _locked(item)
        if current.status != ItemStatus.AVAILABLE:
            raise NotAvailable()
        if current.seller_id == buyer.pk:
            raise SelfPurchase()
        sold_at = timezone.now()
        claimed = (
            Item.objects.filter(pk=item.pk, status=ItemStatus.AVAILABLE, buyer__isnull=True)
            .update(status=ItemStatus.SOLD, buyer=buyer, sold_at=sold_at)
        )
        if claimed != 1:
            raise NotAvailable()
        current.status, current.buyer, current.sold_at = ItemStatus.SOLD, buyer, sold_at
        with _synced("purchase", current):
            sync.on_purchase(current, buyer)
        return current

    current = _compensated("purchase", item, mutate)
    _copy_state(current, item)
    item.buyer = buyer
    logger.info("item %s sold by user %s to user %s", item.pk, item.seller_id, buyer.pk)
    return item


def delist(item, requester) -> Item:
    """Take an available item off the market."""
    def mutate():
        current = _locked(item)
        if current.seller_id != requester.pk:
            raise NotOwner()
        if current.status != ItemStatus.AVAILABLE:
            raise NotAvailable("Only available items can be delisted")
        current.status = ItemStatus.UNAVAILABLE
        current.save(update_fields=["status"])
        with _synced("delist", current):
            sync.on_delist(current)
        return current

    _copy_state(_compensated("delist", item, mutate), item)
    logger.info("item %s delisted by user %s", item.pk, requester.pk)
    return item


def relist(item, requester) -> Item:
    """Put a delisted item back on the market.

    Listing fields are not re-validated here.
    """
    def mutate():
        current = _locked(item)
        if current.seller_id != requester.pk:
            raise NotOwner()
        if current.status != ItemStatus.UNAVAILABLE:
            raise NotAvailable("Item is not currently delisted")
        current.status = ItemStatus.AVAILABLE
        current.save(update_fields=["status"])
        with _synced("relist", current):
            sync.on_relist(current)
        return current

    _copy_state(_compensated("relist", item, mutate), item)
    logger.info("item %s relisted by user %s", item.pk, requester.pk)
    return item


def repair_status(item) -> Item:
    """Bring status and sold_at back in line with the buyer linkage.

    Idempotent. An item with a buyer becomes sold (stamping sold_at if it
    was never set); an item without one becomes available. Never assigns a
    buyer.
    """
    if not item.needs_status_repair():
        return item
    before = item.status
    if item.buyer_id:
        item.status = ItemStatus.SOLD
        if item.sold_at is None:
            item.sold_at = timezone.now()
    else:
        item.status = ItemStatus.AVAILABLE
        item.sold_at = None
    item.save(update_fields=["status", "sold_at"])
    logger.info("item %s status repaired: %s -> %s", item.pk, before, item.status)
    return item


def fix_status(item, requester):
    """Seller-triggered repair of one item; returns ``(item, changed)``."""
    def mutate():
        current = _locked(item)
        if current.seller_id != requester.pk:
            raise NotOwner()
        changed = current.needs_status_repair()
        repair_status(current)
        with _synced("status repair", current):
            sync.on_repair(current)
        return current, changed

    current, changed = _compensated("status repair", item, mutate)
    _copy_state(current, item)
    return item, changed


def update(item, requester, **fields) -> Item:
    """Edit listing details on the locked row. Lifecycle fields and photos are ignored here."""
    edits = {name: value for name, value in fields.items() if name not in PROTECTED_FIELDS}
    with transaction.atomic():
        current = _locked(item)
        if current.seller_id != requester.pk:
            raise NotOwner()
        for name, value in edits.items():
            setattr(current, name, value)
        current.full_clean()
        if edits:
            current.save(update_fields=list(edits))
    for name in edits:
        setattr(item, name, getattr(current, name))
    _copy_state(current, item)
    return item


def add_photos(item, requester, photos) -> Item:
    """Append photos, keeping at most the configured number."""
    if not photos:
        raise ValidationError({"photos": "No photos uploaded."})
    limit = getattr(settings, "MARKETPLACE_MAX_PHOTOS", 4)
    with transaction.atomic():
        current = _locked(item)
        if current.seller_id != requester.pk:
            raise NotOwner()
        current.photos = (list(current.photos or []) + list(photos))[:limit]
        current.save(update_fields=["photos"])
    item.photos = current.photos
    return item
