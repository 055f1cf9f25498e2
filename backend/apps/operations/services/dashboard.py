from decimal import Decimal

from django.db.models import DecimalField, F, Sum, Value
from django.db.models.functions import Coalesce

from apps.catalog.models import Product
from apps.core.models import Location, Warehouse
from apps.operations.models import Adjustment, Delivery, DocumentStatus, InternalTransfer, Receipt


def low_stock_products():
    return (
        Product.objects.filter(active=True, reorder_level__isnull=False)
        .annotate(
            on_hand=Coalesce(
                Sum("stock_levels__quantity"),
                Value(Decimal("0")),
                output_field=DecimalField(max_digits=14, decimal_places=3),
            )
        )
        .filter(on_hand__lt=F("reorder_level"))
        .order_by("name")
    )


def dashboard_stats() -> dict:
    pending = {"status__in": [DocumentStatus.DRAFT, DocumentStatus.WAITING, DocumentStatus.READY]}
    return {
        "total_products": Product.objects.filter(active=True).count(),
        "total_warehouses": Warehouse.objects.filter(is_active=True).count(),
        "total_locations": Location.objects.filter(is_active=True).count(),
        "pending_receipts": Receipt.objects.filter(**pending).count(),
        "pending_deliveries": Delivery.objects.filter(**pending).count(),
        "waiting_deliveries": Delivery.objects.filter(status=DocumentStatus.WAITING).count(),
        "draft_transfers": InternalTransfer.objects.filter(status=DocumentStatus.DRAFT).count(),
        "draft_adjustments": Adjustment.objects.filter(status=DocumentStatus.DRAFT).count(),
        "low_stock_items": low_stock_products().count(),
    }
