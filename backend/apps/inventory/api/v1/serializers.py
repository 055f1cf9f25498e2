from rest_framework import serializers

from apps.inventory.models import StockLevel, StockMovement


class StockLevelSerializer(serializers.ModelSerializer):
    product_sku = serializers.CharField(source="product.sku", read_only=True)
    product_name = serializers.CharField(source="product.name", read_only=True)
    location_code = serializers.CharField(source="location.code", read_only=True)
    warehouse = serializers.UUIDField(source="location.warehouse_id", read_only=True)
    quantity = serializers.DecimalField(max_digits=14, decimal_places=3, read_only=True, coerce_to_string=True)

    class Meta:
        model = StockLevel
        fields = (
            "id",
            "product",
            "product_sku",
            "product_name",
            "location",
            "location_code",
            "warehouse",
            "quantity",
            "updated_at",
        )
        read_only_fields = fields


class StockMovementSerializer(serializers.ModelSerializer):
    product_sku = serializers.CharField(source="product.sku", read_only=True)
    location_code = serializers.CharField(source="location.code", read_only=True)
    counterpart_location_code = serializers.CharField(
        source="counterpart_location.code", read_only=True, allow_null=True
    )
    quantity_delta = serializers.DecimalField(max_digits=14, decimal_places=3, coerce_to_string=True)

    class Meta:
        model = StockMovement
        fields = (
            "id",
            "product",
            "product_sku",
            "location",
            "location_code",
            "counterpart_location",
            "counterpart_location_code",
            "kind",
            "quantity_delta",
            "uom",
            "source_type",
            "source_id",
            "source_number",
            "actor",
            "happened_at",
            "created_at",
        )
        read_only_fields = fields
