"""
Marketplace domain models: Item with its lifecycle status and buyer/seller linkage.

The item row is the authoritative record of a listing's sale state. The
per-user reference lists on ``accounts.User`` are derived from it.
"""
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone


class ItemCategory(models.TextChoices):
    BOOKS = "Books", "Books"
    NOTES = "Notes", "Notes"
    STATIONARY = "Stationary", "Stationary"
    CLOTHES = "Clothes & Costumes", "Clothes & Costumes"
    ART = "Art", "Art"
    SPORTS = "Sports Accessories", "Sports Accessories"
    DEVICES = "Devices", "Devices"


# Categories whose listings must state whether the item still works
WORKING_STATUS_CATEGORIES = frozenset({ItemCategory.DEVICES, ItemCategory.ART, ItemCategory.SPORTS})


class ItemStatus(models.TextChoices):
    AVAILABLE = "available", "Available"
    # Reserved: no operation moves an item here today.
    PENDING = "pending", "Pending"
    SOLD = "sold", "Sold"
    UNAVAILABLE = "unavailable", "Unavailable"


class Item(models.Model):
    """A second-hand item listed by a seller."""
    name = models.CharField(max_length=160)
    category = models.CharField(max_length=32, choices=ItemCategory.choices, db_index=True)
    photos = models.JSONField(default=list, help_text="Ordered list of 1-4 photo paths")
    age = models.CharField(max_length=80)
    condition = models.CharField(max_length=80)
    working_status = models.CharField(max_length=120, blank=True)
    missing_parts = models.CharField(max_length=240)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    mrp = models.DecimalField(max_digits=10, decimal_places=2)
    is_negotiable = models.BooleanField(default=False)
    location = models.CharField(max_length=160)
    delivery_pickup = models.BooleanField(default=True)
    delivery_shipping = models.BooleanField(default=False)
    is_original_owner = models.BooleanField()
    warranty_status = models.CharField(max_length=120)
    has_receipt = models.BooleanField()
    terms_accepted = models.BooleanField(default=False)

    seller = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="items_selling")
    buyer = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="items_bought"
    )
    status = models.CharField(
        max_length=16, choices=ItemStatus.choices, default=ItemStatus.AVAILABLE, db_index=True
    )
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    sold_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["seller", "status"], name="idx_item_seller_status"),
            models.Index(fields=["category", "status"], name="idx_item_cat_status"),
            models.Index(fields=["buyer"], name="idx_item_buyer"),
        ]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.name} ({self.get_status_display()})"

    def clean(self):
        """Enforce listing rules that depend on more than one field."""
        errors = {}
        if self.category in WORKING_STATUS_CATEGORIES and not (self.working_status or "").strip():
            errors["working_status"] = f"Working status is required for {self.category}."

        photos = self.photos if isinstance(self.photos, list) else None
        low = getattr(settings, "MARKETPLACE_MIN_PHOTOS", 1)
        high = getattr(settings, "MARKETPLACE_MAX_PHOTOS", 4)
        if photos is None or not all(isinstance(p, str) and p for p in photos):
            errors["photos"] = "Photos must be a list of photo paths."
        elif not low <= len(photos) <= high:
            errors["photos"] = f"Listings need between {low} and {high} photos."

        if errors:
            raise ValidationError(errors)

    @property
    def sold_to_message(self) -> str:
        if self.status == ItemStatus.SOLD and self.buyer_id:
            return f"This item is sold to {self.buyer.full_name}"
        return ""

    def needs_status_repair(self) -> bool:
        """True when status disagrees with the buyer linkage.

        An item with a buyer must be sold with a sale timestamp; an item
        without one is expected to be available.
        """
        if self.buyer_id:
            return self.status != ItemStatus.SOLD or self.sold_at is None
        return self.status != ItemStatus.AVAILABLE or self.sold_at is not None
