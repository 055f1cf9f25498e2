import uuid
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from apps.catalog.models import Product, Supplier
from apps.core.models import Location


class DocumentStatus(models.TextChoices):
    DRAFT = "draft", "draft"
    WAITING = "waiting", "waiting"
    READY = "ready", "ready"
    DONE = "done", "done"


class StockDocument(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    document_number = models.CharField(max_length=32, unique=True, editable=False)
    status = models.CharField(max_length=16, choices=DocumentStatus.choices, default=DocumentStatus.DRAFT)
    scheduled_date = models.DateField(blank=True, null=True)
    responsible = models.CharField(max_length=150, blank=True, default="")
    notes = models.TextField(blank=True, null=True)
    done_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ["-created_at", "document_number"]

    def __str__(self) -> str:
        return self.document_number

    @property
    def is_done(self) -> bool:
        return self.status == DocumentStatus.DONE


class DocumentLine(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name="%(class)ss")
    quantity = models.DecimalField(max_digits=14, decimal_places=3, default=0)
    position = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ["position", "id"]

    def __str__(self) -> str:
        return f"{self.document.document_number} #{self.position} {self.quantity}"


class Receipt(StockDocument):
    supplier = models.ForeignKey(
        Supplier,
        on_delete=models.PROTECT,
        related_name="receipts",
        blank=True,
        null=True,
    )
    location = models.ForeignKey(
        Location,
        on_delete=models.PROTECT,
        related_name="receipts",
        blank=True,
        null=True,
    )

    class Meta(StockDocument.Meta):
        db_table = "operations_receipt"


class ReceiptLine(DocumentLine):
    document = models.ForeignKey(Receipt, on_delete=models.CASCADE, related_name="lines")
    location = models.ForeignKey(
        Location,
        on_delete=models.PROTECT,
        related_name="receipt_lines",
        blank=True,
        null=True,
    )
    unit_cost = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        blank=True,
        null=True,
        validators=[MinValueValidator(Decimal("0"))],
    )

    class Meta(DocumentLine.Meta):
        db_table = "operations_receipt_line"


class Delivery(StockDocument):
    customer_name = models.CharField(max_length=255, blank=True, default="")
    delivery_address = models.TextField(blank=True, default="")
    location = models.ForeignKey(
        Location,
        on_delete=models.PROTECT,
        related_name="deliveries",
        blank=True,
        null=True,
    )

    class Meta(StockDocument.Meta):
        db_table = "operations_delivery"
        verbose_name_plural = "deliveries"


class DeliveryLine(DocumentLine):
    document = models.ForeignKey(Delivery, on_delete=models.CASCADE, related_name="lines")
    location = models.ForeignKey(
        Location,
        on_delete=models.PROTECT,
        related_name="delivery_lines",
        blank=True,
        null=True,
    )
    unit_price = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        blank=True,
        null=True,
        validators=[MinValueValidator(Decimal("0"))],
    )

    class Meta(DocumentLine.Meta):
        db_table = "operations_delivery_line"


class InternalTransfer(StockDocument):
    from_location = models.ForeignKey(
        Location,
        on_delete=models.PROTECT,
        related_name="outgoing_transfers",
        blank=True,
        null=True,
    )
    to_location = models.ForeignKey(
        Location,
        on_delete=models.PROTECT,
        related_name="incoming_transfers",
        blank=True,
        null=True,
    )

    class Meta(StockDocument.Meta):
        db_table = "operations_internal_transfer"


class InternalTransferLine(DocumentLine):
    document = models.ForeignKey(InternalTransfer, on_delete=models.CASCADE, related_name="lines")
    to_location = models.ForeignKey(
        Location,
        on_delete=models.PROTECT,
        related_name="incoming_transfer_lines",
        blank=True,
        null=True,
    )

    class Meta(DocumentLine.Meta):
        db_table = "operations_internal_transfer_line"


class Adjustment(StockDocument):
    location = models.ForeignKey(
        Location,
        on_delete=models.PROTECT,
        related_name="adjustments",
        blank=True,
        null=True,
    )
    reason = models.CharField(max_length=255, blank=True, default="")

    class Meta(StockDocument.Meta):
        db_table = "operations_adjustment"


class AdjustmentLine(DocumentLine):
    """``quantity`` holds the signed difference ``counted_quantity - current_quantity``."""

    document = models.ForeignKey(Adjustment, on_delete=models.CASCADE, related_name="lines")
    location = models.ForeignKey(
        Location,
        on_delete=models.PROTECT,
        related_name="adjustment_lines",
        blank=True,
        null=True,
    )
    counted_quantity = models.DecimalField(
        max_digits=14,
        decimal_places=3,
        blank=True,
        null=True,
        validators=[MinValueValidator(Decimal("0"))],
    )
    current_quantity = models.DecimalField(max_digits=14, decimal_places=3, blank=True, null=True)

    class Meta(DocumentLine.Meta):
        db_table = "operations_adjustment_line"


class DocumentSequence(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    code = models.CharField(max_length=16, unique=True)
    last_value = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "operations_document_sequence"
        ordering = ["code"]

    def __str__(self) -> str:
        return f"{self.code}:{self.last_value}"
