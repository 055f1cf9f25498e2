from django.contrib import admin

from apps.catalog.models import Product, ProductCategory, Supplier


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ("name", "vat_number", "email", "created_at")
    search_fields = ("name", "vat_number", "email")


@admin.register(ProductCategory)
class ProductCategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "parent")
    search_fields = ("name",)


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("sku", "name", "category", "uom", "reorder_level", "active")
    list_filter = ("uom", "active", "category")
    search_fields = ("sku", "name")
    readonly_fields = ("sku",)
