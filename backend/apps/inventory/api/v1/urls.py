from rest_framework.routers import DefaultRouter

from apps.inventory.api.v1.views import StockLevelViewSet, StockMovementViewSet


router = DefaultRouter()
router.register("stock-levels", StockLevelViewSet, basename="stock-level")
router.register("stock-movements", StockMovementViewSet, basename="stock-movement")

urlpatterns = router.urls
