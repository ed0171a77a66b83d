"""
DRF serializers for the marketplace API: items, user summaries and distance
queries. Lifecycle fields (status, buyer, sold_at) are read-only here; only
the ledger writes them.
"""
from django.contrib.auth import get_user_model
from rest_framework import serializers

from accounts.models import pincode_validator

from .models import Item

User = get_user_model()


class UserSummarySerializer(serializers.ModelSerializer):
    """Lightweight user serializer exposing display name and username."""
    name = serializers.CharField(source="full_name", read_only=True)

    class Meta:
        model = User
        fields = ["id", "name", "username"]


class ItemSerializer(serializers.ModelSerializer):
    """Item with seller and buyer summaries and the sold-to message."""

    seller = UserSummarySerializer(read_only=True)
    buyer = UserSummarySerializer(read_only=True)
    soldToMessage = serializers.CharField(source="sold_to_message", read_only=True)
    photos = serializers.ListField(child=serializers.CharField(max_length=255), required=False)

    class Meta:
        model = Item
        fields = [
            "id",
            "name",
            "category",
            "photos",
            "age",
            "condition",
            "working_status",
            "missing_parts",
            "price",
            "mrp",
            "is_negotiable",
            "location",
            "delivery_pickup",
            "delivery_shipping",
            "is_original_owner",
            "warranty_status",
            "has_receipt",
            "terms_accepted",
            "seller",
            "buyer",
            "status",
            "created_at",
            "sold_at",
            "soldToMessage",
        ]
        read_only_fields = ["id", "seller", "buyer", "status", "created_at", "sold_at"]


class PhotoUploadSerializer(serializers.Serializer):
    photos = serializers.ListField(child=serializers.CharField(max_length=255), allow_empty=False)


class DistanceQuerySerializer(serializers.Serializer):
    """Distance request; missing pincodes are filled in by the view."""
    fromPincode = serializers.CharField(required=False, allow_blank=True)
    toPincode = serializers.CharField(required=False, allow_blank=True)
    sellerId = serializers.IntegerField(required=False)


class PincodePairSerializer(serializers.Serializer):
    fromPincode = serializers.CharField(validators=[pincode_validator])
    toPincode = serializers.CharField(validators=[pincode_validator])


class ProfileSerializer(serializers.ModelSerializer):
    """The requester's own profile. The cached item lists are read-only."""
    name = serializers.CharField(source="full_name", read_only=True)
    active_listings = serializers.PrimaryKeyRelatedField(many=True, read_only=True)
    sold_items = serializers.PrimaryKeyRelatedField(many=True, read_only=True)
    bought_items = serializers.PrimaryKeyRelatedField(many=True, read_only=True)
    watchlist = serializers.PrimaryKeyRelatedField(many=True, read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "name",
            "email",
            "first_name",
            "last_name",
            "college_name",
            "contact_number",
            "pincode",
            "address",
            "active_listings",
            "sold_items",
            "bought_items",
            "watchlist",
        ]
        read_only_fields = ["id", "username"]
        extra_kwargs = {"pincode": {"validators": [pincode_validator]}}
