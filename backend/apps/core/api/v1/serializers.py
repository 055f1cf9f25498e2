from rest_framework import serializers

from apps.core.models import Location, Warehouse


class WarehouseSerializer(serializers.ModelSerializer):
    class Meta:
        model = Warehouse
        fields = ("id", "code", "name", "address", "is_active", "created_at", "updated_at")
        read_only_fields = ("id", "created_at", "updated_at")
        extra_kwargs = {"is_active": {"required": False}}

    def validate_code(self, value):
        normalized = value.strip().upper().replace(" ", "_")
        if not normalized:
            raise serializers.ValidationError("Warehouse code is required.")
        return normalized


class LocationSerializer(serializers.ModelSerializer):
    warehouse_code = serializers.CharField(source="warehouse.code", read_only=True)
    warehouse_name = serializers.CharField(source="warehouse.name", read_only=True)

    class Meta:
        model = Location
        fields = (
            "id",
            "warehouse",
            "warehouse_code",
            "warehouse_name",
            "code",
            "name",
            "is_active",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "created_at", "updated_at")
        extra_kwargs = {"is_active": {"required": False}}

    def validate_code(self, value):
        normalized = value.strip().upper()
        if not normalized:
            raise serializers.ValidationError("Location code is required.")
        return normalized
