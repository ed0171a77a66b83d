import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Item",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=160)),
                ("category", models.CharField(choices=[("Books", "Books"), ("Notes", "Notes"), ("Stationary", "Stationary"), ("Clothes & Costumes", "Clothes & Costumes"), ("Art", "Art"), ("Sports Accessories", "Sports Accessories"), ("Devices", "Devices")], db_index=True, max_length=32)),
                ("photos", models.JSONField(default=list, help_text="Ordered list of 1-4 photo paths")),
                ("age", models.CharField(max_length=80)),
                ("condition", models.CharField(max_length=80)),
                ("working_status", models.CharField(blank=True, max_length=120)),
                ("missing_parts", models.CharField(max_length=240)),
                ("price", models.DecimalField(decimal_places=2, max_digits=10)),
                ("mrp", models.DecimalField(decimal_places=2, max_digits=10)),
                ("is_negotiable", models.BooleanField(default=False)),
                ("location", models.CharField(max_length=160)),
                ("delivery_pickup", models.BooleanField(default=True)),
                ("delivery_shipping", models.BooleanField(default=False)),
                ("is_original_owner", models.BooleanField()),
                ("warranty_status", models.CharField(max_length=120)),
                ("has_receipt", models.BooleanField()),
                ("terms_accepted", models.BooleanField(default=False)),
                ("status", models.CharField(choices=[("available", "Available"), ("pending", "Pending"), ("sold", "Sold"), ("unavailable", "Unavailable")], db_index=True, default="available", max_length=16)),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("sold_at", models.DateTimeField(blank=True, null=True)),
                ("buyer", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="items_bought", to=settings.AUTH_USER_MODEL)),
                ("seller", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items_selling", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["seller", "status"], name="idx_item_seller_status"),
                    models.Index(fields=["category", "status"], name="idx_item_cat_status"),
                    models.Index(fields=["buyer"], name="idx_item_buyer"),
                ],
            },
        ),
    ]
