import uuid

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("catalog", "0001_initial"),
        ("core", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="StockLevel",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("quantity", models.DecimalField(decimal_places=3, default=0, max_digits=14)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "location",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_levels",
                        to="core.location",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_levels",
                        to="catalog.product",
                    ),
                ),
            ],
            options={
                "db_table": "inventory_stock_level",
                "ordering": ["product__name", "location__code"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("product", "location"),
                        name="uq_inventory_stock_level_product_location",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="StockMovement",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "kind",
                    models.CharField(
                        choices=[
                            ("receipt", "receipt"),
                            ("delivery", "delivery"),
                            ("transfer", "transfer"),
                            ("adjustment", "adjustment"),
                        ],
                        max_length=16,
                    ),
                ),
                ("quantity_delta", models.DecimalField(decimal_places=3, max_digits=14)),
                ("uom", models.CharField(max_length=8)),
                ("source_type", models.CharField(max_length=32)),
                ("source_id", models.CharField(max_length=64)),
                ("source_number", models.CharField(blank=True, default="", max_length=32)),
                ("actor", models.CharField(blank=True, default="", max_length=150)),
                ("happened_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "counterpart_location",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="counterpart_movements",
                        to="core.location",
                    ),
                ),
                (
                    "location",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="movements",
                        to="core.location",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="movements",
                        to="catalog.product",
                    ),
                ),
            ],
            options={
                "db_table": "inventory_stock_movement",
                "ordering": ["-happened_at", "id"],
                "indexes": [
                    models.Index(fields=["product", "location"], name="idx_inv_mov_product_location"),
                    models.Index(fields=["source_type", "source_id"], name="idx_inv_mov_source"),
                    models.Index(fields=["kind", "happened_at"], name="idx_inv_mov_kind_happened"),
                ],
            },
        ),
    ]
