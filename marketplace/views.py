"""
HTTP boundary for the marketplace: a DRF viewset for items plus function
views for the per-user lists, distance quotes and operator repair.

Views stay thin. They resolve the authenticated user and the target item,
call into ``ledger``, ``sync``, ``purchases`` or ``distance``, and serialize
the result. Core errors are rendered by ``api_exception_handler``.
"""
import logging

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAuthenticated, IsAuthenticatedOrReadOnly
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from . import distance, ledger, sync
from .exceptions import MarketplaceError, NotFound
from .models import Item
from .permissions import IsMarketplaceAdmin
from .purchases import purchase_item
from .serializers import (
    DistanceQuerySerializer,
    ItemSerializer,
    PhotoUploadSerializer,
    PincodePairSerializer,
    ProfileSerializer,
)

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    """Render core errors as ``{"status": "error", "message", "code"}``."""
    if isinstance(exc, MarketplaceError):
        if exc.status_code >= 409:
            logger.warning("marketplace error %s on %s: %s", exc.code, context.get("view"), exc.message)
        return Response(
            {"status": "error", "message": exc.message, "code": exc.code},
            status=exc.status_code,
        )
    if isinstance(exc, DjangoValidationError):
        errors = exc.message_dict if hasattr(exc, "error_dict") else {"non_field_errors": exc.messages}
        return Response(
            {"status": "error", "message": "Validation failed", "code": "invalid", "errors": errors},
            status=status.HTTP_400_BAD_REQUEST,
        )
    return drf_exception_handler(exc, context)


def _item_payload(item, message=None):
    data = {"item": ItemSerializer(item).data}
    if message:
        data["message"] = message
    return data


class ItemViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Browse, list, edit and transition items."""
    serializer_class = ItemSerializer
    permission_classes = [IsAuthenticatedOrReadOnly]

    def get_queryset(self):
        if self.action == "list":
            return sync.browse(self.request.query_params.get("category"))
        return Item.objects.select_related("seller", "buyer")

    def get_object(self):
        try:
            item = self.get_queryset().get(pk=self.kwargs["pk"])
        except (Item.DoesNotExist, ValueError):
            raise NotFound("Item not found")
        self.check_object_permissions(self.request, item)
        return item

    def create(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        item = ledger.create(request.user, **serializer.validated_data)
        return Response(self.get_serializer(item).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        item = self.get_object()
        serializer = self.get_serializer(item, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        item = ledger.update(item, request.user, **serializer.validated_data)
        return Response(self.get_serializer(item).data)

    @action(detail=True, methods=["post"], url_path="buy")
    def buy(self, request, pk=None):
        receipt = purchase_item(pk, request.user.pk)
        return Response(receipt.as_dict(ItemSerializer(receipt.item).data))

    @action(detail=True, methods=["put"], url_path="delist")
    def delist(self, request, pk=None):
        item = ledger.delist(self.get_object(), request.user)
        return Response(_item_payload(item, "Item delisted successfully"))

    @action(detail=True, methods=["put"], url_path="relist")
    def relist(self, request, pk=None):
        item = ledger.relist(self.get_object(), request.user)
        return Response(_item_payload(item, "Item relisted successfully"))

    @action(detail=True, methods=["post"], url_path="fix-status")
    def fix_status(self, request, pk=None):
        item, changed = ledger.fix_status(self.get_object(), request.user)
        message = "Item status fixed" if changed else "Item status already consistent"
        data = _item_payload(item, message)
        data["changed"] = changed
        return Response(data)

    @action(detail=True, methods=["post"], url_path="photos")
    def photos(self, request, pk=None):
        serializer = PhotoUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        item = ledger.add_photos(self.get_object(), request.user, serializer.validated_data["photos"])
        return Response(_item_payload(item, "Photos added"))

    @action(detail=True, methods=["get", "post", "delete"], url_path="watchlist",
            permission_classes=[IsAuthenticated])
    def watchlist(self, request, pk=None):
        item = self.get_object()
        if request.method == "POST":
            sync.add_to_watchlist(request.user, item)
        elif request.method == "DELETE":
            sync.remove_from_watchlist(request.user, item)
        return Response({"itemId": item.pk, "watching": sync.is_watching(request.user, item)})


def _item_list(items):
    return Response(ItemSerializer(items, many=True).data)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def my_active_listings(request):
    return _item_list(sync.active_listings_for(request.user))


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def my_sold_items(request):
    return _item_list(sync.sold_items_for(request.user))


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def my_bought_items(request):
    return _item_list(sync.bought_items_for(request.user))


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def my_delisted_items(request):
    return _item_list(sync.delisted_items_for(request.user))


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def my_watchlist(request):
    return _item_list(sync.watchlist_for(request.user))


@api_view(["GET", "PUT", "PATCH"])
@permission_classes([IsAuthenticated])
def my_profile(request):
    """Read or edit the requester's profile; only the fields sent are changed."""
    if request.method == "GET":
        return Response(ProfileSerializer(request.user).data)
    serializer = ProfileSerializer(request.user, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    serializer.save()
    logger.info("profile of user %s updated: %s", request.user.pk, ", ".join(sorted(serializer.validated_data)))
    return Response(serializer.data)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def fix_all_my_items(request):
    """Repair item statuses and rebuild the caller's own lists."""
    result = sync.reconcile_user(request.user)
    data = result.as_dict()
    data["message"] = f"Fixed {result.fixed_count} items"
    return Response(data)


@api_view(["POST"])
@permission_classes([IsMarketplaceAdmin])
def sync_all(request):
    """Run the reconciliation sweep over every user."""
    logger.info("reconciliation sweep requested by user %s", request.user.pk)
    summary = sync.reconcile_all()
    data = summary.as_dict()
    data["message"] = "Synchronization complete"
    return Response(data)


def _pincodes_for(request, query):
    """Fill in missing pincodes from the seller or the requester."""
    to_pincode = (query.get("toPincode") or "").strip()
    seller_id = query.get("sellerId")
    if not to_pincode and seller_id is not None:
        seller = get_user_model().objects.filter(pk=seller_id).first()
        if seller is None:
            raise NotFound("Seller not found")
        if not seller.pincode:
            raise NotFound("Seller pincode not available")
        to_pincode = seller.pincode

    from_pincode = (query.get("fromPincode") or "").strip()
    if not from_pincode:
        if not request.user.pincode:
            raise NotFound("Your pincode is not set")
        from_pincode = request.user.pincode
    return from_pincode, to_pincode


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def distance_quote(request):
    """Estimate delivery distance between two pincodes."""
    query = DistanceQuerySerializer(data=request.data)
    query.is_valid(raise_exception=True)
    from_pincode, to_pincode = _pincodes_for(request, query.validated_data)

    pair = PincodePairSerializer(data={"fromPincode": from_pincode, "toPincode": to_pincode})
    pair.is_valid(raise_exception=True)

    result = distance.estimate(from_pincode, to_pincode)
    if result.distance_km is None:
        return Response(result.as_dict(), status=status.HTTP_503_SERVICE_UNAVAILABLE)
    return Response(result.as_dict())
