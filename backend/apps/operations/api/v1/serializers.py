from rest_framework import serializers

from apps.operations.kinds import ADJUSTMENT, DELIVERY, INTERNAL_TRANSFER, RECEIPT
from apps.operations.models import (
    Adjustment,
    AdjustmentLine,
    Delivery,
    DeliveryLine,
    InternalTransfer,
    InternalTransferLine,
    Receipt,
    ReceiptLine,
)
from apps.operations.services.documents import create_document, update_document

LINE_READ_ONLY = ("id", "position")
DOCUMENT_READ_ONLY = ("id", "document_number", "status", "done_at", "created_at", "updated_at")
DOCUMENT_FIELDS = (
    "id",
    "document_number",
    "status",
    "scheduled_date",
    "responsible",
    "notes",
    "done_at",
    "created_at",
    "updated_at",
)


class DocumentLineSerializer(serializers.ModelSerializer):
    product_sku = serializers.CharField(source="product.sku", read_only=True)
    quantity = serializers.DecimalField(max_digits=14, decimal_places=3)

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("quantity must be greater than 0.")
        return value


class ReceiptLineSerializer(DocumentLineSerializer):
    class Meta:
        model = ReceiptLine
        fields = ("id", "position", "product", "product_sku", "location", "quantity", "unit_cost")
        read_only_fields = LINE_READ_ONLY


class DeliveryLineSerializer(DocumentLineSerializer):
    class Meta:
        model = DeliveryLine
        fields = ("id", "position", "product", "product_sku", "location", "quantity", "unit_price")
        read_only_fields = LINE_READ_ONLY


class InternalTransferLineSerializer(DocumentLineSerializer):
    class Meta:
        model = InternalTransferLine
        fields = ("id", "position", "product", "product_sku", "to_location", "quantity")
        read_only_fields = LINE_READ_ONLY


class AdjustmentLineSerializer(serializers.ModelSerializer):
    product_sku = serializers.CharField(source="product.sku", read_only=True)
    counted_quantity = serializers.DecimalField(max_digits=14, decimal_places=3, min_value=0)
    difference = serializers.DecimalField(source="quantity", max_digits=14, decimal_places=3, read_only=True)

    class Meta:
        model = AdjustmentLine
        fields = (
            "id",
            "position",
            "product",
            "product_sku",
            "location",
            "counted_quantity",
            "current_quantity",
            "difference",
        )
        read_only_fields = LINE_READ_ONLY


class StockDocumentSerializer(serializers.ModelSerializer):
    document_kind = None

    def validate_lines(self, value):
        if not self.partial and not value:
            raise serializers.ValidationError("At least one line is required.")
        return value

    def create(self, validated_data):
        lines = validated_data.pop("lines", [])
        return create_document(
            self.document_kind,
            header=validated_data,
            lines=lines,
            actor=self.context.get("actor", ""),
        )

    def update(self, instance, validated_data):
        lines = validated_data.pop("lines", None)
        return update_document(self.document_kind, instance.pk, header=validated_data, lines=lines)


class ReceiptSerializer(StockDocumentSerializer):
    document_kind = RECEIPT
    lines = ReceiptLineSerializer(many=True)
    supplier_name = serializers.CharField(source="supplier.name", read_only=True, allow_null=True)
    location_code = serializers.CharField(source="location.code", read_only=True, allow_null=True)

    class Meta:
        model = Receipt
        fields = DOCUMENT_FIELDS + ("supplier", "supplier_name", "location", "location_code", "lines")
        read_only_fields = DOCUMENT_READ_ONLY


class DeliverySerializer(StockDocumentSerializer):
    document_kind = DELIVERY
    lines = DeliveryLineSerializer(many=True)
    location_code = serializers.CharField(source="location.code", read_only=True, allow_null=True)

    class Meta:
        model = Delivery
        fields = DOCUMENT_FIELDS + ("customer_name", "delivery_address", "location", "location_code", "lines")
        read_only_fields = DOCUMENT_READ_ONLY


class InternalTransferSerializer(StockDocumentSerializer):
    document_kind = INTERNAL_TRANSFER
    lines = InternalTransferLineSerializer(many=True)
    from_location_code = serializers.CharField(source="from_location.code", read_only=True, allow_null=True)
    to_location_code = serializers.CharField(source="to_location.code", read_only=True, allow_null=True)

    class Meta:
        model = InternalTransfer
        fields = DOCUMENT_FIELDS + (
            "from_location",
            "from_location_code",
            "to_location",
            "to_location_code",
            "lines",
        )
        read_only_fields = DOCUMENT_READ_ONLY


class AdjustmentSerializer(StockDocumentSerializer):
    document_kind = ADJUSTMENT
    lines = AdjustmentLineSerializer(many=True)
    location_code = serializers.CharField(source="location.code", read_only=True, allow_null=True)

    class Meta:
        model = Adjustment
        fields = DOCUMENT_FIELDS + ("location", "location_code", "reason", "lines")
        read_only_fields = DOCUMENT_READ_ONLY

