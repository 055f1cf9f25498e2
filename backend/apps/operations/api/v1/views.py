from rest_framework import serializers, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.idempotency import complete_request, fail_request, find_completed_request, start_request
from apps.operations.api.v1.serializers import (
    AdjustmentSerializer,
    DeliverySerializer,
    InternalTransferSerializer,
    ReceiptSerializer,
)
from apps.operations.kinds import ADJUSTMENT, DELIVERY, INTERNAL_TRANSFER, RECEIPT
from apps.operations.models import DocumentStatus
from apps.operations.numbering import preview_number
from apps.operations.services.dashboard import dashboard_stats
from apps.operations.services.documents import delete_document, process_document, validate_document


DEFAULT_ACTOR = "api"


class StockDocumentViewSet(viewsets.ModelViewSet):
    document_kind = None

    def get_queryset(self):
        queryset = self.document_kind.model.objects.prefetch_related("lines__product").order_by(
            "-created_at", "document_number"
        )
        status_filter = self.request.query_params.get("status")
        if status_filter:
            if status_filter not in DocumentStatus.values:
                raise serializers.ValidationError({"status": [f"Unknown status '{status_filter}'."]})
            queryset = queryset.filter(status=status_filter)
        return queryset

    def get_actor(self) -> str:
        return (self.request.headers.get("X-Actor") or "").strip() or DEFAULT_ACTOR

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context["actor"] = self.get_actor()
        return context

    def create(self, request, *args, **kwargs):
        idempotency_key = request.headers.get("Idempotency-Key")
        if not idempotency_key:
            return super().create(request, *args, **kwargs)

        scope = f"{self.document_kind.doc_type}.create"
        existing = find_completed_request(scope, idempotency_key)
        if existing:
            result = existing.result or {}
            return Response(result.get("data", {}), status=result.get("status_code", status.HTTP_200_OK))

        entry = start_request(scope, idempotency_key, request.data)

        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            fail_request(entry, status.HTTP_400_BAD_REQUEST, serializer.errors)
            raise serializers.ValidationError(serializer.errors)

        try:
            self.perform_create(serializer)
        except Exception as exc:
            status_code = getattr(exc, "status_code", status.HTTP_500_INTERNAL_SERVER_ERROR)
            fail_request(entry, status_code, {"detail": str(exc)})
            raise
        data = serializer.data
        complete_request(entry, status.HTTP_201_CREATED, data)
        headers = self.get_success_headers(data)
        return Response(data, status=status.HTTP_201_CREATED, headers=headers)

    def perform_destroy(self, instance):
        delete_document(self.document_kind, instance.pk)

    @action(detail=True, methods=["post"])
    def validate(self, request, *args, **kwargs):
        document = self.get_object()
        result = validate_document(self.document_kind, document.pk, actor=self.get_actor())
        return Response(result.as_dict(), status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"])
    def process(self, request, *args, **kwargs):
        document = self.get_object()
        result = process_document(self.document_kind, document.pk, actor=self.get_actor())
        return Response(result.as_dict(), status=status.HTTP_200_OK)

    @action(detail=False, methods=["get"], url_path="next-number")
    def next_number(self, request, *args, **kwargs):
        return Response({"document_number": preview_number(self.document_kind)})


class ReceiptViewSet(StockDocumentViewSet):
    document_kind = RECEIPT
    serializer_class = ReceiptSerializer

    def get_queryset(self):
        return super().get_queryset().select_related("supplier", "location")


class DeliveryViewSet(StockDocumentViewSet):
    document_kind = DELIVERY
    serializer_class = DeliverySerializer

    def get_queryset(self):
        return super().get_queryset().select_related("location")


class InternalTransferViewSet(StockDocumentViewSet):
    document_kind = INTERNAL_TRANSFER
    serializer_class = InternalTransferSerializer

    def get_queryset(self):
        return super().get_queryset().select_related("from_location", "to_location")


class AdjustmentViewSet(StockDocumentViewSet):
    document_kind = ADJUSTMENT
    serializer_class = AdjustmentSerializer

    def get_queryset(self):
        return super().get_queryset().select_related("location")


class DashboardStatsView(APIView):
    def get(self, request):
        return Response(dashboard_stats())
