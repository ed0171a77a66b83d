from django.urls import include, path
from rest_framework.routers import DefaultRouter

from . import views

app_name = "marketplace"

router = DefaultRouter()
router.register(r"items", views.ItemViewSet, basename="item")

urlpatterns = [
    path("", include(router.urls)),
    # Per-user lists
    path("me/active/", views.my_active_listings, name="my_active"),
    path("me/sold/", views.my_sold_items, name="my_sold"),
    path("me/bought/", views.my_bought_items, name="my_bought"),
    path("me/delisted/", views.my_delisted_items, name="my_delisted"),
    path("me/watchlist/", views.my_watchlist, name="my_watchlist"),
    path("me/fix-all-items/", views.fix_all_my_items, name="fix_all_items"),
    path("me/profile/", views.my_profile, name="my_profile"),
    # Delivery distance quote
    path("distance/", views.distance_quote, name="distance"),
    # Operator repair
    path("admin/sync-all/", views.sync_all, name="sync_all"),
]
