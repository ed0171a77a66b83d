"""
Accounts models: custom User carrying marketplace profile fields.

Besides the profile, each user keeps four reference lists into the item
table. ``active_listings`` and ``sold_items`` mirror the items the user sells,
``bought_items`` the items they purchased, and ``watchlist`` items of interest.
They are a cache of relationships derivable from ``marketplace.Item``; the
marketplace synchronizer keeps them in step and reconciliation repairs drift.
"""
from django.contrib.auth.models import AbstractUser
from django.core.validators import RegexValidator
from django.db import models

pincode_validator = RegexValidator(r"^[0-9]{6}$", "Pincode must be exactly 6 digits.")


class User(AbstractUser):
    """Custom user model based on Django's AbstractUser."""
    # Make email unique for reliable contact flows.
    email = models.EmailField("email address", unique=True)
    college_name = models.CharField(max_length=160, blank=True)
    contact_number = models.CharField(max_length=32, blank=True)
    pincode = models.CharField(max_length=6, blank=True, validators=[pincode_validator])
    address = models.TextField(blank=True)
    profile_pic = models.ImageField(upload_to="profiles/%Y/%m/", blank=True, null=True)

    active_listings = models.ManyToManyField(
        "marketplace.Item", blank=True, related_name="active_listed_by"
    )
    sold_items = models.ManyToManyField(
        "marketplace.Item", blank=True, related_name="sold_listed_by"
    )
    bought_items = models.ManyToManyField(
        "marketplace.Item", blank=True, related_name="bought_listed_by"
    )
    watchlist = models.ManyToManyField(
        "marketplace.Item", blank=True, related_name="watched_by"
    )

    class Meta:
        ordering = ["username"]

    def __str__(self) -> str:
        """Return a human-readable representation of the user."""
        return f"User({self.username})"

    @property
    def full_name(self) -> str:
        name = f"{self.first_name} {self.last_name}".strip()
        return name or self.username
