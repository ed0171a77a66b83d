from django.conf import settings
from django.contrib.auth.models import Group, Permission
from django.core.management.base import BaseCommand


class Command(BaseCommand):
    help = "Create/ensure the marketplace admin group and give it item permissions"

    ITEM_PERMISSION_CODENAMES = ["view_item", "change_item"]

    def handle(self, *args, **options):
        name = getattr(settings, "MARKETPLACE_ADMIN_GROUP", "Marketplace Admin")
        group, created = Group.objects.get_or_create(name=name)

        perms = Permission.objects.filter(
            codename__in=self.ITEM_PERMISSION_CODENAMES, content_type__app_label="marketplace"
        )
        group.permissions.add(*perms)
        missing = set(self.ITEM_PERMISSION_CODENAMES) - set(perms.values_list("codename", flat=True))

        if created:
            self.stdout.write(self.style.SUCCESS(f"Created group '{name}'."))
        else:
            self.stdout.write(self.style.WARNING(f"Group '{name}' already exists."))
        if missing:
            self.stdout.write(
                self.style.ERROR(
                    "Missing permissions (ensure migrations applied): " + ", ".join(sorted(missing))
                )
            )
        else:
            self.stdout.write(self.style.SUCCESS(f"'{name}' group can manage marketplace items."))
