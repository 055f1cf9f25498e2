from django.db import migrations


def seed_warehouse(apps, schema_editor):
    Warehouse = apps.get_model("core", "Warehouse")
    Location = apps.get_model("core", "Location")
    warehouse, _ = Warehouse.objects.update_or_create(
        code="WH",
        defaults={"name": "Main Warehouse", "is_active": True},
    )
    Location.objects.update_or_create(
        code="WH/STOCK",
        defaults={"name": "Stock", "warehouse": warehouse, "is_active": True},
    )


def unseed_warehouse(apps, schema_editor):
    Warehouse = apps.get_model("core", "Warehouse")
    Location = apps.get_model("core", "Location")
    Location.objects.filter(code="WH/STOCK").delete()
    Warehouse.objects.filter(code="WH").delete()


class Migration(migrations.Migration):
    dependencies = [
        ("core", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(seed_warehouse, unseed_warehouse),
    ]
