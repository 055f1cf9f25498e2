from decimal import Decimal

from rest_framework import status
from rest_framework.exceptions import APIException


class ImmutableLedgerError(Exception):
    pass


class NegativeStockError(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Stock level would become negative."
    default_code = "negative_stock"

    def __init__(self, *, product_id, location_id, on_hand: Decimal, delta: Decimal):
        self.product_id = product_id
        self.location_id = location_id
        self.on_hand = on_hand
        self.delta = delta
        self.line_errors = [
            {
                "product": str(product_id),
                "location": str(location_id),
                "requested": str(-delta),
                "available": str(on_hand),
                "reason": "negative_stock",
            }
        ]
        super().__init__(
            f"Applying {delta} to product {product_id} at location {location_id} "
            f"would leave {on_hand + delta} on hand."
        )
