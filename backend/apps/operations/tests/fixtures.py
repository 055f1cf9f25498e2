from decimal import Decimal

from apps.catalog.models import Product, Supplier
from apps.core.models import Location, Warehouse
from apps.operations.kinds import RECEIPT
from apps.operations.services.documents import create_document, process_document, validate_document


class StockFixtureMixin:
    def build_stock_fixtures(self):
        self.warehouse = Warehouse.objects.create(code="MAIN", name="Main")
        self.stock = Location.objects.create(warehouse=self.warehouse, code="MAIN/STOCK", name="Stock")
        self.shelf = Location.objects.create(warehouse=self.warehouse, code="MAIN/SHELF", name="Shelf")
        self.supplier = Supplier.objects.create(name="Acme Metals")
        self.product = Product.objects.create(sku="ROD-8", name="Steel rod 8mm", uom="m")
        self.other_product = Product.objects.create(sku="ROD-12", name="Steel rod 12mm", uom="m")

    def receive(self, product, location, quantity):
        receipt = create_document(
            RECEIPT,
            header={"supplier": self.supplier, "location": location},
            lines=[{"product": product, "quantity": Decimal(quantity)}],
            actor="fixture",
        )
        validate_document(RECEIPT, receipt.id)
        process_document(RECEIPT, receipt.id)
        return receipt


def first_line_errors(body):
    # DRF renders nested list errors as a list or as a dict keyed by index.
    errors = body["field_errors"]["lines"]
    return errors[0] if isinstance(errors, list) else errors["0"]
