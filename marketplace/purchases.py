"""
Purchase orchestration.

A purchase attempt moves Requested -> Validated -> Committed, or ends in
Rejected at the first failed check. Checks run in a fixed order: the item
exists, the buyer exists, the item is available, the buyer is not the
seller. The ledger then performs the sale and the reference update as one
unit.
"""
import enum
import logging
from dataclasses import dataclass

from django.contrib.auth import get_user_model

from . import ledger
from .exceptions import MarketplaceError, NotAvailable, NotFound, SelfPurchase
from .models import Item, ItemStatus

logger = logging.getLogger(__name__)


class PurchaseState(enum.Enum):
    REQUESTED = "requested"
    VALIDATED = "validated"
    COMMITTED = "committed"
    REJECTED = "rejected"


class PurchaseAttempt:
    """Tracks one purchase request through its states."""

    def __init__(self, item_id, buyer_id):
        self.item_id = item_id
        self.buyer_id = buyer_id
        self.state = PurchaseState.REQUESTED
        self.item = None
        self.buyer = None
        self.error = None

    def _advance(self, state):
        logger.debug("purchase item=%s buyer=%s: %s -> %s", self.item_id, self.buyer_id, self.state.value, state.value)
        self.state = state

    def validate(self):
        try:
            self.item = Item.objects.select_related("seller").get(pk=self.item_id)
        except (Item.DoesNotExist, ValueError, TypeError):
            raise NotFound("Item not found")
        try:
            self.buyer = get_user_model().objects.get(pk=self.buyer_id)
        except (get_user_model().DoesNotExist, ValueError, TypeError):
            raise NotFound("Buyer not found")
        if self.item.status != ItemStatus.AVAILABLE:
            raise NotAvailable()
        if self.item.seller_id == self.buyer.pk:
            raise SelfPurchase()
        self._advance(PurchaseState.VALIDATED)

    def commit(self):
        ledger.purchase(self.item, self.buyer)
        self._advance(PurchaseState.COMMITTED)

    def run(self):
        try:
            self.validate()
            self.commit()
        except MarketplaceError as exc:
            self.error = exc
            self._advance(PurchaseState.REJECTED)
            logger.info("purchase of item %s by user %s rejected: %s", self.item_id, self.buyer_id, exc.code)
            raise
        return PurchaseReceipt(self.item, self.item.seller, self.buyer)


@dataclass
class PurchaseReceipt:
    item: Item
    seller: object
    buyer: object

    @property
    def message(self) -> str:
        return f"Item purchased successfully. This item is sold to {self.buyer.full_name}"

    def as_dict(self, item_data=None) -> dict:
        """Response body; ``item_data`` is the serialized item if the caller has one."""
        if item_data is None:
            item_data = {"id": self.item.pk, "name": self.item.name, "status": self.item.status}
        item_data = dict(item_data, soldToMessage=self.item.sold_to_message)
        return {
            "message": self.message,
            "item": item_data,
            "seller": _person(self.seller),
            "buyer": _person(self.buyer),
            "purchaseDate": self.item.sold_at.isoformat() if self.item.sold_at else None,
        }


def _person(user):
    return {"name": user.full_name, "username": user.username}


def purchase_item(item_id, buyer_id) -> PurchaseReceipt:
    """Buy item ``item_id`` on behalf of user ``buyer_id``."""
    return PurchaseAttempt(item_id, buyer_id).run()
