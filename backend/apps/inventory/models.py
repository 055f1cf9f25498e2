import uuid

from django.db import models
from django.utils import timezone

from apps.catalog.models import Product
from apps.core.models import Location
from apps.inventory.exceptions import ImmutableLedgerError


class MovementKind(models.TextChoices):
    RECEIPT = "receipt", "receipt"
    DELIVERY = "delivery", "delivery"
    TRANSFER = "transfer", "transfer"
    ADJUSTMENT = "adjustment", "adjustment"


class StockLevel(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name="stock_levels")
    location = models.ForeignKey(Location, on_delete=models.PROTECT, related_name="stock_levels")
    quantity = models.DecimalField(max_digits=14, decimal_places=3, default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "inventory_stock_level"
        ordering = ["product__name", "location__code"]
        constraints = [
            models.UniqueConstraint(
                fields=["product", "location"],
                name="uq_inventory_stock_level_product_location",
            )
        ]

    def __str__(self) -> str:
        return f"{self.product_id}@{self.location_id}: {self.quantity}"


class StockMovementQuerySet(models.QuerySet):
    def update(self, **kwargs):
        raise ImmutableLedgerError("Stock movements are append-only and cannot be updated.")

    def delete(self):
        raise ImmutableLedgerError("Stock movements are append-only and cannot be deleted.")


class StockMovement(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name="movements")
    location = models.ForeignKey(Location, on_delete=models.PROTECT, related_name="movements")
    counterpart_location = models.ForeignKey(
        Location,
        on_delete=models.PROTECT,
        related_name="counterpart_movements",
        blank=True,
        null=True,
    )
    kind = models.CharField(max_length=16, choices=MovementKind.choices)
    quantity_delta = models.DecimalField(max_digits=14, decimal_places=3)
    uom = models.CharField(max_length=8)
    source_type = models.CharField(max_length=32)
    source_id = models.CharField(max_length=64)
    source_number = models.CharField(max_length=32, blank=True, default="")
    actor = models.CharField(max_length=150, blank=True, default="")
    happened_at = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = StockMovementQuerySet.as_manager()

    class Meta:
        db_table = "inventory_stock_movement"
        ordering = ["-happened_at", "id"]
        indexes = [
            models.Index(fields=["product", "location"], name="idx_inv_mov_product_location"),
            models.Index(fields=["source_type", "source_id"], name="idx_inv_mov_source"),
            models.Index(fields=["kind", "happened_at"], name="idx_inv_mov_kind_happened"),
        ]

    def __str__(self) -> str:
        return f"{self.kind} {self.quantity_delta} {self.uom} ({self.source_number or self.source_id})"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ImmutableLedgerError("Stock movements are append-only and cannot be updated.")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ImmutableLedgerError("Stock movements are append-only and cannot be deleted.")
