"""
Admin registrations for accounts app models.
"""
from django.contrib import admin
from django.contrib.auth import get_user_model
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from marketplace import sync

User = get_user_model()

@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    """Admin configuration for the custom User model.

    Reuses Django's built-in UserAdmin, adding the marketplace profile and
    the cached listing lists.
    """
    fieldsets = DjangoUserAdmin.fieldsets + (
        (
            "Marketplace profile",
            {"fields": ("college_name", "contact_number", "pincode", "address", "profile_pic")},
        ),
        (
            "Listing references",
            {"fields": ("active_listings", "sold_items", "bought_items", "watchlist")},
        ),
    )
    add_fieldsets = DjangoUserAdmin.add_fieldsets + (
        (
            "Marketplace profile",
            {"fields": ("email", "first_name", "last_name", "college_name", "pincode")},
        ),
    )
    filter_horizontal = DjangoUserAdmin.filter_horizontal + (
        "active_listings", "sold_items", "bought_items", "watchlist",
    )
    list_display = ("username", "email", "college_name", "pincode", "is_active", "date_joined")
    search_fields = ("username", "email", "college_name", "pincode")

    def reconcile_references(self, request, queryset):
        """Admin action: run the reconciliation sweep over the selected users."""
        summary = sync.reconcile_all(users=queryset)
        self.message_user(
            request,
            f"Reconciled {summary.users} user(s): {summary.fixed_item_statuses} item status(es) and "
            f"{summary.fixed_user_references} reference list(s) fixed, {len(summary.errors)} error(s).",
        )

    reconcile_references.short_description = "Reconcile reference lists"
    actions = ["reconcile_references"]
