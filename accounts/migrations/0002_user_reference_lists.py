from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("accounts", "0001_initial"),
        ("marketplace", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="user",
            name="active_listings",
            field=models.ManyToManyField(blank=True, related_name="active_listed_by", to="marketplace.item"),
        ),
        migrations.AddField(
            model_name="user",
            name="sold_items",
            field=models.ManyToManyField(blank=True, related_name="sold_listed_by", to="marketplace.item"),
        ),
        migrations.AddField(
            model_name="user",
            name="bought_items",
            field=models.ManyToManyField(blank=True, related_name="bought_listed_by", to="marketplace.item"),
        ),
        migrations.AddField(
            model_name="user",
            name="watchlist",
            field=models.ManyToManyField(blank=True, related_name="watched_by", to="marketplace.item"),
        ),
    ]
