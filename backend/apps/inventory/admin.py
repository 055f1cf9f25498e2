from django.contrib import admin

from apps.inventory.models import StockLevel, StockMovement


@admin.register(StockLevel)
class StockLevelAdmin(admin.ModelAdmin):
    list_display = ("product", "location", "quantity", "updated_at")
    list_filter = ("location",)
    search_fields = ("product__sku", "product__name", "location__code")
    readonly_fields = ("product", "location", "quantity", "created_at", "updated_at")

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = ("happened_at", "kind", "product", "location", "quantity_delta", "uom", "source_number", "actor")
    list_filter = ("kind", "source_type", "location")
    search_fields = ("source_number", "source_id", "product__sku")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
