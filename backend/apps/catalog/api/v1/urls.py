from rest_framework.routers import DefaultRouter

from apps.catalog.api.v1.views import ProductCategoryViewSet, ProductViewSet, SupplierViewSet


router = DefaultRouter()
router.register("suppliers", SupplierViewSet, basename="supplier")
router.register("product-categories", ProductCategoryViewSet, basename="product-category")
router.register("products", ProductViewSet, basename="product")

urlpatterns = router.urls
