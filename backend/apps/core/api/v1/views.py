from django.db.models import ProtectedError
from rest_framework import viewsets
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.api.exceptions import ResourceProtected
from apps.core.api.v1.serializers import LocationSerializer, WarehouseSerializer
from apps.core.models import Location, Warehouse


TRUTHY_PARAMS = {"1", "true", "True"}


class HealthView(APIView):
    authentication_classes = []
    permission_classes = []

    def get(self, request):
        return Response({"status": "ok", "service": "stockops", "version": "v1"})


class ProtectedDestroyMixin:
    protected_detail = "Resource is still referenced and cannot be deleted."

    def perform_destroy(self, instance):
        try:
            instance.delete()
        except ProtectedError as exc:
            raise ResourceProtected(self.protected_detail) from exc


class WarehouseViewSet(ProtectedDestroyMixin, viewsets.ModelViewSet):
    serializer_class = WarehouseSerializer
    protected_detail = "Warehouse still has locations and cannot be deleted."

    def get_queryset(self):
        queryset = Warehouse.objects.all().order_by("name")
        if self.request.query_params.get("include_inactive") not in TRUTHY_PARAMS and self.action == "list":
            queryset = queryset.filter(is_active=True)
        return queryset


class LocationViewSet(ProtectedDestroyMixin, viewsets.ModelViewSet):
    serializer_class = LocationSerializer
    protected_detail = "Location is referenced by stock, movements or documents and cannot be deleted."

    def get_queryset(self):
        queryset = Location.objects.select_related("warehouse").order_by("warehouse__name", "name")
        warehouse_id = self.request.query_params.get("warehouse")
        if warehouse_id:
            queryset = queryset.filter(warehouse_id=warehouse_id)
        if self.request.query_params.get("include_inactive") not in TRUTHY_PARAMS and self.action == "list":
            queryset = queryset.filter(is_active=True)
        return queryset
