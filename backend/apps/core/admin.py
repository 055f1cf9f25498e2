from django.contrib import admin

from apps.core.models import IdempotentRequest, Location, Warehouse


class LocationInline(admin.TabularInline):
    model = Location
    extra = 0


@admin.register(Warehouse)
class WarehouseAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("code", "name")
    inlines = (LocationInline,)


@admin.register(Location)
class LocationAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "warehouse", "is_active")
    list_filter = ("warehouse", "is_active")
    search_fields = ("code", "name", "warehouse__code")


@admin.register(IdempotentRequest)
class IdempotentRequestAdmin(admin.ModelAdmin):
    list_display = ("scope", "idempotency_key", "status", "started_at", "finished_at")
    list_filter = ("scope", "status")
    search_fields = ("idempotency_key",)
