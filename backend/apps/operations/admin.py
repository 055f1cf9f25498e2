from django.contrib import admin

from apps.operations.models import (
    Adjustment,
    AdjustmentLine,
    Delivery,
    DeliveryLine,
    DocumentSequence,
    InternalTransfer,
    InternalTransferLine,
    Receipt,
    ReceiptLine,
)


class ReceiptLineInline(admin.TabularInline):
    model = ReceiptLine
    extra = 0


class DeliveryLineInline(admin.TabularInline):
    model = DeliveryLine
    extra = 0


class InternalTransferLineInline(admin.TabularInline):
    model = InternalTransferLine
    extra = 0


class AdjustmentLineInline(admin.TabularInline):
    model = AdjustmentLine
    extra = 0
    readonly_fields = ("current_quantity", "quantity")


class StockDocumentAdmin(admin.ModelAdmin):
    list_display = ("document_number", "status", "scheduled_date", "responsible", "done_at")
    list_filter = ("status",)
    search_fields = ("document_number", "responsible")
    readonly_fields = ("document_number", "status", "done_at")

    def has_add_permission(self, request):
        return False


@admin.register(Receipt)
class ReceiptAdmin(StockDocumentAdmin):
    list_display = StockDocumentAdmin.list_display + ("supplier",)
    inlines = (ReceiptLineInline,)


@admin.register(Delivery)
class DeliveryAdmin(StockDocumentAdmin):
    list_display = StockDocumentAdmin.list_display + ("customer_name",)
    inlines = (DeliveryLineInline,)


@admin.register(InternalTransfer)
class InternalTransferAdmin(StockDocumentAdmin):
    list_display = StockDocumentAdmin.list_display + ("from_location", "to_location")
    inlines = (InternalTransferLineInline,)


@admin.register(Adjustment)
class AdjustmentAdmin(StockDocumentAdmin):
    list_display = StockDocumentAdmin.list_display + ("location", "reason")
    inlines = (AdjustmentLineInline,)


@admin.register(DocumentSequence)
class DocumentSequenceAdmin(admin.ModelAdmin):
    list_display = ("code", "last_value", "updated_at")
    readonly_fields = ("code", "last_value")
