from rest_framework import mixins, serializers, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.inventory.api.v1.serializers import StockLevelSerializer, StockMovementSerializer
from apps.inventory.models import MovementKind, StockLevel
from apps.inventory.services import find_ledger_mismatches, query_movements


def _query_uuid(request, name):
    raw = request.query_params.get(name)
    if not raw:
        return None
    try:
        return serializers.UUIDField().to_internal_value(raw)
    except serializers.ValidationError as exc:
        raise serializers.ValidationError({name: exc.detail}) from exc


class StockLevelViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    serializer_class = StockLevelSerializer

    def get_queryset(self):
        queryset = StockLevel.objects.select_related("product", "location", "location__warehouse")
        product = _query_uuid(self.request, "product")
        location = _query_uuid(self.request, "location")
        warehouse = _query_uuid(self.request, "warehouse")
        if product:
            queryset = queryset.filter(product_id=product)
        if location:
            queryset = queryset.filter(location_id=location)
        if warehouse:
            queryset = queryset.filter(location__warehouse_id=warehouse)
        return queryset.order_by("product__name", "location__code")

    @action(detail=False, methods=["get"])
    def reconciliation(self, request, *args, **kwargs):
        mismatches = find_ledger_mismatches()
        return Response({"consistent": not mismatches, "mismatches": mismatches})


class StockMovementViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    serializer_class = StockMovementSerializer

    def get_queryset(self):
        params = self.request.query_params
        kind = params.get("kind")
        if kind and kind not in MovementKind.values:
            raise serializers.ValidationError({"kind": [f"Unknown movement kind '{kind}'."]})
        date_from = self._parse_date("date_from")
        date_to = self._parse_date("date_to")
        return query_movements(
            product=_query_uuid(self.request, "product"),
            location=_query_uuid(self.request, "location"),
            kind=kind,
            source_type=params.get("source_type"),
            source_id=params.get("source_id"),
            date_from=date_from,
            date_to=date_to,
        )

    def _parse_date(self, name):
        raw = self.request.query_params.get(name)
        if not raw:
            return None
        field = serializers.DateField()
        try:
            return field.to_internal_value(raw)
        except serializers.ValidationError as exc:
            raise serializers.ValidationError({name: exc.detail}) from exc
