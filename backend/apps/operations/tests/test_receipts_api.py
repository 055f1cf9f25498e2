from decimal import Decimal

from rest_framework import status
from rest_framework.test import APITestCase

from apps.core.models import IdempotentRequest
from apps.inventory.models import StockMovement
from apps.inventory.services import available_quantity, find_ledger_mismatches
from apps.operations.models import Receipt
from apps.operations.tests.fixtures import StockFixtureMixin, first_line_errors


class ReceiptApiTests(StockFixtureMixin, APITestCase):
    def setUp(self):
        self.client.credentials(HTTP_X_API_KEY="dev-api-key")
        self.build_stock_fixtures()

    def _payload(self, quantity="5", **overrides):
        payload = {
            "supplier": str(self.supplier.id),
            "location": str(self.stock.id),
            "scheduled_date": "2026-03-02",
            "lines": [{"product": str(self.product.id), "quantity": quantity, "unit_cost": "2.5000"}],
        }
        payload.update(overrides)
        return payload

    def _create(self, **kwargs):
        response = self.client.post("/api/v1/receipts/", self._payload(**kwargs), format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        return response.json()

    def test_create_receipt_returns_numbered_draft(self):
        response = self.client.post("/api/v1/receipts/", self._payload(), format="json", HTTP_X_ACTOR="alice")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        body = response.json()
        self.assertEqual(body["document_number"], "WH/IN/0001")
        self.assertEqual(body["status"], "draft")
        self.assertEqual(body["responsible"], "alice")
        self.assertEqual(body["lines"][0]["position"], 1)
        self.assertEqual(body["lines"][0]["quantity"], "5.000")
        self.assertEqual(body["lines"][0]["product_sku"], "ROD-8")

    def test_create_requires_lines(self):
        response = self.client.post("/api/v1/receipts/", self._payload(lines=[]), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()["code"], "validation_error")
        self.assertIn("lines", response.json()["field_errors"])

    def test_create_rejects_non_positive_quantity(self):
        response = self.client.post("/api/v1/receipts/", self._payload(quantity="0"), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("quantity", first_line_errors(response.json()))
        self.assertEqual(Receipt.objects.count(), 0)

    def test_create_with_idempotency_key_replays_response(self):
        first = self.client.post(
            "/api/v1/receipts/",
            self._payload(),
            format="json",
            HTTP_IDEMPOTENCY_KEY="receipt-001",
        )
        second = self.client.post(
            "/api/v1/receipts/",
            self._payload(),
            format="json",
            HTTP_IDEMPOTENCY_KEY="receipt-001",
        )

        self.assertEqual(first.status_code, status.HTTP_201_CREATED)
        self.assertEqual(second.status_code, status.HTTP_201_CREATED)
        self.assertEqual(first.json()["id"], second.json()["id"])
        self.assertEqual(Receipt.objects.count(), 1)
        self.assertEqual(IdempotentRequest.objects.get().status, IdempotentRequest.Status.COMPLETED)

    def test_invalid_payload_with_idempotency_key_records_failure(self):
        response = self.client.post(
            "/api/v1/receipts/",
            self._payload(quantity="-1"),
            format="json",
            HTTP_IDEMPOTENCY_KEY="receipt-bad",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(IdempotentRequest.objects.get().status, IdempotentRequest.Status.FAILED)

    def test_receipt_validate_then_process_increases_stock(self):
        self.receive(self.product, self.stock, "20")
        receipt = self._create()
        self.assertEqual(receipt["document_number"], "WH/IN/0002")

        response = self.client.post(f"/api/v1/receipts/{receipt['id']}/validate/", format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["status"], "ready")
        self.assertEqual(available_quantity(self.product.id, self.stock.id), Decimal("20"))

        response = self.client.post(f"/api/v1/receipts/{receipt['id']}/process/", format="json", HTTP_X_ACTOR="bob")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            response.json(),
            {"id": receipt["id"], "document_number": "WH/IN/0002", "status": "done", "line_errors": []},
        )
        self.assertEqual(available_quantity(self.product.id, self.stock.id), Decimal("25"))

        movement = StockMovement.objects.get(source_id=receipt["id"])
        self.assertEqual(movement.quantity_delta, Decimal("5"))
        self.assertEqual(movement.kind, "receipt")
        self.assertEqual(movement.source_type, "receipt")
        self.assertEqual(movement.source_number, "WH/IN/0002")
        self.assertEqual(movement.actor, "bob")
        self.assertEqual(movement.uom, "m")
        self.assertIsNotNone(Receipt.objects.get(pk=receipt["id"]).done_at)
        self.assertEqual(find_ledger_mismatches(), [])

    def test_reprocessing_done_receipt_is_rejected(self):
        receipt = self._create()
        self.client.post(f"/api/v1/receipts/{receipt['id']}/validate/", format="json")
        self.client.post(f"/api/v1/receipts/{receipt['id']}/process/", format="json")

        for action in ("process", "validate"):
            response = self.client.post(f"/api/v1/receipts/{receipt['id']}/{action}/", format="json")
            self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
            self.assertEqual(response.json()["code"], "invalid_transition")

        self.assertEqual(available_quantity(self.product.id, self.stock.id), Decimal("5"))
        self.assertEqual(StockMovement.objects.filter(source_id=receipt["id"]).count(), 1)

    def test_process_from_draft_is_rejected(self):
        receipt = self._create()

        response = self.client.post(f"/api/v1/receipts/{receipt['id']}/process/", format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(Receipt.objects.get(pk=receipt["id"]).status, "draft")

    def test_validate_without_supplier_reports_field_error(self):
        receipt = self._create(supplier=None)

        response = self.client.post(f"/api/v1/receipts/{receipt['id']}/validate/", format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        body = response.json()
        self.assertEqual(body["code"], "document_validation_error")
        self.assertIn("supplier", body["field_errors"])
        self.assertEqual(Receipt.objects.get(pk=receipt["id"]).status, "draft")

    def test_validate_without_any_location_reports_line_error(self):
        receipt = self._create(location=None)

        response = self.client.post(f"/api/v1/receipts/{receipt['id']}/validate/", format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        line_error = response.json()["line_errors"][0]
        self.assertEqual(line_error["reason"], "missing_location")
        self.assertEqual(line_error["product"], str(self.product.id))

    def test_line_location_overrides_header(self):
        payload = self._payload()
        payload["lines"][0]["location"] = str(self.shelf.id)
        receipt = self.client.post("/api/v1/receipts/", payload, format="json").json()

        self.client.post(f"/api/v1/receipts/{receipt['id']}/validate/", format="json")
        self.client.post(f"/api/v1/receipts/{receipt['id']}/process/", format="json")

        self.assertEqual(available_quantity(self.product.id, self.shelf.id), Decimal("5"))
        self.assertEqual(available_quantity(self.product.id, self.stock.id), Decimal("0"))

    def test_update_replaces_lines_while_draft(self):
        receipt = self._create()
        payload = self._payload()
        payload["lines"] = [
            {"product": str(self.product.id), "quantity": "7"},
            {"product": str(self.other_product.id), "quantity": "1.5"},
        ]

        response = self.client.put(f"/api/v1/receipts/{receipt['id']}/", payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        lines = response.json()["lines"]
        self.assertEqual([line["position"] for line in lines], [1, 2])
        self.assertEqual([line["quantity"] for line in lines], ["7.000", "1.500"])
        self.assertEqual(response.json()["document_number"], receipt["document_number"])

    def test_partial_update_keeps_lines(self):
        receipt = self._create()

        response = self.client.patch(f"/api/v1/receipts/{receipt['id']}/", {"notes": "Dock 3"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["notes"], "Dock 3")
        self.assertEqual(len(response.json()["lines"]), 1)

    def test_non_draft_receipt_cannot_be_edited_or_deleted(self):
        receipt = self._create()
        self.client.post(f"/api/v1/receipts/{receipt['id']}/validate/", format="json")

        response = self.client.patch(f"/api/v1/receipts/{receipt['id']}/", {"notes": "late"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.json()["code"], "document_locked")

        response = self.client.delete(f"/api/v1/receipts/{receipt['id']}/")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertTrue(Receipt.objects.filter(pk=receipt["id"]).exists())

    def test_delete_draft_and_numbers_keep_increasing(self):
        self._create()
        second = self._create()

        response = self.client.delete(f"/api/v1/receipts/{second['id']}/")
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

        self.assertEqual(self._create()["document_number"], "WH/IN/0003")

    def test_next_number_preview(self):
        self._create()

        response = self.client.get("/api/v1/receipts/next-number/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json(), {"document_number": "WH/IN/0002"})

    def test_list_filters_by_status(self):
        draft = self._create()
        ready = self._create()
        self.client.post(f"/api/v1/receipts/{ready['id']}/validate/", format="json")

        response = self.client.get("/api/v1/receipts/", {"status": "draft"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row["id"] for row in response.json()], [draft["id"]])

        response = self.client.get("/api/v1/receipts/", {"status": "shipped"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_receipt_returns_404(self):
        response = self.client.post(
            "/api/v1/receipts/00000000-0000-0000-0000-000000000000/validate/",
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.json()["code"], "not_found")

    def test_requires_api_key(self):
        self.client.credentials()

        response = self.client.get("/api/v1/receipts/")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
