from decimal import Decimal

from rest_framework import status
from rest_framework.test import APITestCase

from apps.inventory.models import StockMovement
from apps.inventory.services import available_quantity
from apps.operations.models import Delivery
from apps.operations.tests.fixtures import StockFixtureMixin


class DeliveryApiTests(StockFixtureMixin, APITestCase):
    def setUp(self):
        self.client.credentials(HTTP_X_API_KEY="dev-api-key")
        self.build_stock_fixtures()
        self.receive(self.product, self.stock, "5")

    def _create(self, quantity, **overrides):
        payload = {
            "customer_name": "Gulf Windows LLC",
            "delivery_address": "Plot 12, Industrial Area",
            "location": str(self.stock.id),
            "lines": [{"product": str(self.product.id), "quantity": quantity, "unit_price": "9.9000"}],
        }
        payload.update(overrides)
        response = self.client.post("/api/v1/deliveries/", payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        return response.json()

    def _post(self, delivery, action):
        return self.client.post(f"/api/v1/deliveries/{delivery['id']}/{action}/", format="json")

    def test_create_delivery_is_numbered_out(self):
        delivery = self._create("2")

        self.assertEqual(delivery["document_number"], "WH/OUT/0001")
        self.assertEqual(delivery["status"], "draft")

    def test_insufficient_stock_routes_to_waiting(self):
        delivery = self._create("10")

        response = self._post(delivery, "validate")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.json()
        self.assertEqual(body["status"], "waiting")
        self.assertEqual(len(body["line_errors"]), 1)
        self.assertEqual(body["line_errors"][0]["reason"], "insufficient_stock")
        self.assertEqual(body["line_errors"][0]["requested"], "10.000")
        self.assertEqual(body["line_errors"][0]["available"], "5.000")
        self.assertEqual(available_quantity(self.product.id, self.stock.id), Decimal("5"))
        self.assertFalse(StockMovement.objects.filter(kind="delivery").exists())

    def test_waiting_delivery_becomes_ready_once_stock_arrives(self):
        delivery = self._create("10")
        self._post(delivery, "validate")

        self.assertEqual(self._post(delivery, "validate").json()["status"], "waiting")

        self.receive(self.product, self.stock, "10")
        response = self._post(delivery, "validate")

        self.assertEqual(response.json()["status"], "ready")
        self.assertEqual(response.json()["line_errors"], [])

    def test_validate_from_ready_applies_delivery(self):
        delivery = self._create("3")
        self.assertEqual(self._post(delivery, "validate").json()["status"], "ready")

        response = self._post(delivery, "validate")

        self.assertEqual(response.json()["status"], "done")
        self.assertEqual(available_quantity(self.product.id, self.stock.id), Decimal("2"))
        movement = StockMovement.objects.get(source_id=delivery["id"])
        self.assertEqual(movement.quantity_delta, Decimal("-3"))
        self.assertEqual(movement.kind, "delivery")

    def test_process_from_ready_applies_delivery_once(self):
        delivery = self._create("3")
        self._post(delivery, "validate")

        self.assertEqual(self._post(delivery, "process").json()["status"], "done")
        response = self._post(delivery, "process")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(available_quantity(self.product.id, self.stock.id), Decimal("2"))
        self.assertEqual(StockMovement.objects.filter(source_id=delivery["id"]).count(), 1)

    def test_ready_delivery_goes_back_to_waiting_when_stock_is_gone(self):
        first = self._create("4")
        second = self._create("4")
        self._post(first, "validate")
        self._post(second, "validate")

        self.assertEqual(self._post(first, "process").json()["status"], "done")
        response = self._post(second, "process")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["status"], "waiting")
        self.assertEqual(response.json()["line_errors"][0]["available"], "1.000")
        self.assertEqual(available_quantity(self.product.id, self.stock.id), Decimal("1"))
        self.assertFalse(StockMovement.objects.filter(source_id=second["id"]).exists())

    def test_lines_on_the_same_product_are_checked_together(self):
        delivery = self._create(
            "3",
            lines=[
                {"product": str(self.product.id), "quantity": "3"},
                {"product": str(self.product.id), "quantity": "3"},
            ],
        )

        response = self._post(delivery, "validate")

        self.assertEqual(response.json()["status"], "waiting")
        self.assertEqual(len(response.json()["line_errors"]), 2)

    def test_process_from_draft_is_rejected(self):
        delivery = self._create("1")

        response = self._post(delivery, "process")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.json()["code"], "invalid_transition")

    def test_missing_delivery_address_fails_validation(self):
        delivery = self._create("1", delivery_address="")

        response = self._post(delivery, "validate")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("delivery_address", response.json()["field_errors"])
        self.assertEqual(Delivery.objects.get(pk=delivery["id"]).status, "draft")

    def test_waiting_delivery_cannot_be_edited(self):
        delivery = self._create("10")
        self._post(delivery, "validate")

        response = self.client.patch(f"/api/v1/deliveries/{delivery['id']}/", {"notes": "rush"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.json()["code"], "document_locked")
