"""
DRF permission classes for marketplace endpoints.
"""
from django.conf import settings
from rest_framework.permissions import BasePermission


def is_marketplace_admin(user) -> bool:
    """Superusers and members of the marketplace admin group."""
    if not (user and user.is_authenticated):
        return False
    group = getattr(settings, "MARKETPLACE_ADMIN_GROUP", "Marketplace Admin")
    return user.is_superuser or user.groups.filter(name=group).exists()


class IsMarketplaceAdmin(BasePermission):
    message = "Marketplace admin access required"

    def has_permission(self, request, view):
        return is_marketplace_admin(request.user)
