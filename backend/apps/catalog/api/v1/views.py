from decimal import Decimal

from django.db.models import DecimalField, Q, Sum, Value
from django.db.models.functions import Coalesce
from rest_framework import viewsets

from apps.catalog.api.v1.serializers import ProductCategorySerializer, ProductSerializer, SupplierSerializer
from apps.catalog.models import Product, ProductCategory, Supplier
from apps.core.api.v1.views import TRUTHY_PARAMS, ProtectedDestroyMixin


class SupplierViewSet(viewsets.ModelViewSet):
    queryset = Supplier.objects.all()
    serializer_class = SupplierSerializer


class ProductCategoryViewSet(viewsets.ModelViewSet):
    queryset = ProductCategory.objects.select_related("parent").all()
    serializer_class = ProductCategorySerializer


class ProductViewSet(ProtectedDestroyMixin, viewsets.ModelViewSet):
    serializer_class = ProductSerializer
    protected_detail = "Product has stock or movement history and cannot be deleted."

    def get_queryset(self):
        queryset = (
            Product.objects.select_related("category")
            .annotate(
                on_hand=Coalesce(
                    Sum("stock_levels__quantity"),
                    Value(Decimal("0")),
                    output_field=DecimalField(max_digits=14, decimal_places=3),
                )
            )
            .order_by("name")
        )
        active_only = self.request.query_params.get("active")
        if active_only in TRUTHY_PARAMS:
            queryset = queryset.filter(active=True)
        category_id = self.request.query_params.get("category")
        if category_id:
            queryset = queryset.filter(category_id=category_id)
        query = (self.request.query_params.get("q") or "").strip()
        if query:
            queryset = queryset.filter(Q(name__icontains=query) | Q(sku__icontains=query))
        return queryset
