from django.db import migrations


def create_marketplace_admin_group(apps, schema_editor):
    Group = apps.get_model("auth", "Group")
    Group.objects.get_or_create(name="Marketplace Admin")


def remove_marketplace_admin_group(apps, schema_editor):
    Group = apps.get_model("auth", "Group")
    Group.objects.filter(name="Marketplace Admin").delete()


class Migration(migrations.Migration):

    dependencies = [
        ("marketplace", "0001_initial"),
        ("auth", "0012_alter_user_first_name_max_length"),
    ]

    operations = [
        migrations.RunPython(create_marketplace_admin_group, remove_marketplace_admin_group),
    ]
