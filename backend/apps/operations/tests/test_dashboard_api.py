from decimal import Decimal

from rest_framework import status
from rest_framework.test import APITestCase

from apps.catalog.models import Product
from apps.core.models import Location, Warehouse
from apps.operations.kinds import DELIVERY
from apps.operations.services.documents import create_document, validate_document
from apps.operations.tests.fixtures import StockFixtureMixin


class DashboardStatsApiTests(StockFixtureMixin, APITestCase):
    def setUp(self):
        self.client.credentials(HTTP_X_API_KEY="dev-api-key")
        self.build_stock_fixtures()

    def test_dashboard_counts(self):
        self.product.reorder_level = Decimal("10")
        self.product.save(update_fields=["reorder_level", "updated_at"])
        self.other_product.reorder_level = Decimal("2")
        self.other_product.save(update_fields=["reorder_level", "updated_at"])
        Product.objects.create(sku="OLD-1", name="Retired part", active=False, reorder_level=Decimal("5"))

        self.receive(self.product, self.stock, "4")
        self.receive(self.other_product, self.stock, "3")
        waiting = create_document(
            DELIVERY,
            header={"delivery_address": "Quay 4", "location": self.stock},
            lines=[{"product": self.product, "quantity": Decimal("9")}],
        )
        validate_document(DELIVERY, waiting.id)

        response = self.client.get("/api/v1/dashboard/stats")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.json()
        self.assertEqual(body["total_products"], 2)
        self.assertEqual(body["total_warehouses"], Warehouse.objects.filter(is_active=True).count())
        self.assertEqual(body["total_locations"], Location.objects.filter(is_active=True).count())
        self.assertEqual(body["pending_receipts"], 0)
        self.assertEqual(body["pending_deliveries"], 1)
        self.assertEqual(body["waiting_deliveries"], 1)
        self.assertEqual(body["low_stock_items"], 1)

    def test_dashboard_requires_api_key(self):
        self.client.credentials()

        response = self.client.get("/api/v1/dashboard/stats")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
