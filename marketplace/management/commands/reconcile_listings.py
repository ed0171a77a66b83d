import json

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from marketplace import sync


class Command(BaseCommand):
    help = "Repair item statuses and rebuild users' cached listing lists from the item table"

    def add_arguments(self, parser):
        parser.add_argument("--user", help="Only reconcile this username")
        parser.add_argument("--json", action="store_true", help="Print the summary as JSON")

    def handle(self, *args, **options):
        User = get_user_model()
        users = None
        if options["user"]:
            users = User.objects.filter(username=options["user"])
            if not users.exists():
                raise CommandError(f"User '{options['user']}' does not exist.")

        summary = sync.reconcile_all(users=users)

        if options["json"]:
            self.stdout.write(json.dumps(summary.as_dict(), indent=2))
            return

        self.stdout.write(
            self.style.SUCCESS(
                f"Checked {summary.users} user(s) and {summary.items} sold item(s): "
                f"{summary.fixed_item_statuses} status(es) fixed, "
                f"{summary.fixed_user_references} reference list(s) fixed."
            )
        )
        for error in summary.errors:
            target = f"user {error['userId']}" if "userId" in error else f"item {error['itemId']}"
            self.stdout.write(self.style.ERROR(f"{target}: {error['error']}"))
