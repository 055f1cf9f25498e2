from django.urls import path
from rest_framework.routers import DefaultRouter

from apps.core.api.v1.views import HealthView, LocationViewSet, WarehouseViewSet


router = DefaultRouter()
router.register("warehouses", WarehouseViewSet, basename="warehouse")
router.register("locations", LocationViewSet, basename="location")

urlpatterns = [
    path("health", HealthView.as_view(), name="health"),
]

urlpatterns += router.urls
