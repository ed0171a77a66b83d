from django.contrib import admin

from . import ledger
from .exceptions import MarketplaceError
from .models import Item


# Item admin: inspect lifecycle fields and repair drifted statuses
class ItemAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "category",
        "price",
        "status",
        "seller",
        "buyer",
        "created_at",
        "sold_at",
    )
    list_filter = ("status", "category")
    search_fields = ("name", "seller__username", "buyer__username")
    date_hierarchy = "created_at"
    raw_id_fields = ("seller",)
    readonly_fields = ("status", "buyer", "sold_at")

    def repair_status(self, request, queryset):
        """Admin action: align status with the buyer linkage and resync the seller's lists."""
        fixed = failed = 0
        for item in queryset.select_related("seller"):
            try:
                _, changed = ledger.fix_status(item, item.seller)
            except MarketplaceError:
                failed += 1
                continue
            fixed += int(changed)
        self.message_user(request, f"Repaired {fixed} item(s); {failed} could not be resynced.")

    repair_status.short_description = "Repair status of selected items"
    actions = ["repair_status"]


admin.site.register(Item, ItemAdmin)
