from django.urls import path
from rest_framework.routers import DefaultRouter

from apps.operations.api.v1.views import (
    AdjustmentViewSet,
    DashboardStatsView,
    DeliveryViewSet,
    InternalTransferViewSet,
    ReceiptViewSet,
)


router = DefaultRouter()
router.register("receipts", ReceiptViewSet, basename="receipt")
router.register("deliveries", DeliveryViewSet, basename="delivery")
router.register("internal-transfers", InternalTransferViewSet, basename="internal-transfer")
router.register("adjustments", AdjustmentViewSet, basename="adjustment")

urlpatterns = [
    path("dashboard/stats", DashboardStatsView.as_view(), name="dashboard-stats"),
]

urlpatterns += router.urls
