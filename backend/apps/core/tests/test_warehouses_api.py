from rest_framework import status
from rest_framework.test import APITestCase

from apps.core.models import Location, Warehouse


class HealthApiTests(APITestCase):
    def test_health_does_not_require_api_key(self):
        response = self.client.get("/api/v1/health")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["service"], "stockops")

    def test_missing_api_key_returns_401(self):
        response = self.client.get("/api/v1/warehouses/")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.json()["code"], "authentication_failed")

    def test_invalid_api_key_returns_401(self):
        self.client.credentials(HTTP_X_API_KEY="wrong-key")

        response = self.client.get("/api/v1/warehouses/")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.json()["detail"], "Invalid API key.")


class WarehouseApiTests(APITestCase):
    def setUp(self):
        self.client.credentials(HTTP_X_API_KEY="dev-api-key")

    def test_default_warehouse_is_seeded(self):
        response = self.client.get("/api/v1/warehouses/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        codes = [row["code"] for row in response.json()]
        self.assertIn("WH", codes)
        self.assertTrue(Location.objects.filter(code="WH/STOCK").exists())

    def test_create_warehouse_normalizes_code(self):
        response = self.client.post(
            "/api/v1/warehouses/",
            {"code": "east hub", "name": "East Hub", "address": "12 Dock Road"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.json()["code"], "EAST_HUB")
        self.assertTrue(Warehouse.objects.filter(code="EAST_HUB").exists())

    def test_list_hides_inactive_unless_requested(self):
        Warehouse.objects.create(code="OLD", name="Old Site", is_active=False)

        default_codes = [row["code"] for row in self.client.get("/api/v1/warehouses/").json()]
        all_codes = [row["code"] for row in self.client.get("/api/v1/warehouses/?include_inactive=1").json()]

        self.assertNotIn("OLD", default_codes)
        self.assertIn("OLD", all_codes)

    def test_delete_warehouse_with_locations_returns_409(self):
        warehouse = Warehouse.objects.create(code="B", name="Backup")
        Location.objects.create(warehouse=warehouse, code="B/STOCK", name="Stock")

        response = self.client.delete(f"/api/v1/warehouses/{warehouse.id}/")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.json()["code"], "protected")
        self.assertTrue(Warehouse.objects.filter(pk=warehouse.pk).exists())


class LocationApiTests(APITestCase):
    def setUp(self):
        self.client.credentials(HTTP_X_API_KEY="dev-api-key")
        self.warehouse = Warehouse.objects.create(code="NORTH", name="North")

    def test_create_location_returns_201(self):
        response = self.client.post(
            "/api/v1/locations/",
            {"warehouse": str(self.warehouse.id), "code": "north/shelf-a", "name": "Shelf A"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        body = response.json()
        self.assertEqual(body["code"], "NORTH/SHELF-A")
        self.assertEqual(body["warehouse_code"], "NORTH")

    def test_filter_locations_by_warehouse(self):
        Location.objects.create(warehouse=self.warehouse, code="NORTH/A", name="A")
        Location.objects.create(warehouse=self.warehouse, code="NORTH/B", name="B")

        response = self.client.get(f"/api/v1/locations/?warehouse={self.warehouse.id}")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row["code"] for row in response.json()], ["NORTH/A", "NORTH/B"])

    def test_delete_unused_location_returns_204(self):
        location = Location.objects.create(warehouse=self.warehouse, code="NORTH/TMP", name="Tmp")

        response = self.client.delete(f"/api/v1/locations/{location.id}/")

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Location.objects.filter(pk=location.pk).exists())
