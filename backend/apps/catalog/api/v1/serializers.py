from rest_framework import serializers

from apps.catalog.models import Product, ProductCategory, Supplier
from apps.inventory.services import format_quantity, total_on_hand


class SupplierSerializer(serializers.ModelSerializer):
    class Meta:
        model = Supplier
        fields = ("id", "name", "vat_number", "email", "phone", "metadata", "created_at", "updated_at")
        read_only_fields = ("id", "created_at", "updated_at")


class ProductCategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = ProductCategory
        fields = ("id", "name", "parent", "description", "created_at", "updated_at")
        read_only_fields = ("id", "created_at", "updated_at")

    def validate_parent(self, value):
        if value is not None and self.instance is not None and value.pk == self.instance.pk:
            raise serializers.ValidationError("A category cannot be its own parent.")
        return value


class ProductSerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source="category.name", read_only=True, allow_null=True)
    on_hand = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = (
            "id",
            "sku",
            "name",
            "category",
            "category_name",
            "uom",
            "default_cost",
            "default_price",
            "reorder_level",
            "active",
            "metadata",
            "on_hand",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "created_at", "updated_at")

    def validate_sku(self, value):
        normalized = value.strip().upper()
        if not normalized:
            raise serializers.ValidationError("sku is required.")
        if self.instance is not None and self.instance.sku != normalized:
            raise serializers.ValidationError("sku cannot be changed once the product exists.")
        return normalized

    def validate_reorder_level(self, value):
        if value is not None and value < 0:
            raise serializers.ValidationError("reorder_level cannot be negative.")
        return value

    def get_on_hand(self, obj):
        value = getattr(obj, "on_hand", None)
        if value is None:
            value = total_on_hand(obj)
        return format_quantity(value)
