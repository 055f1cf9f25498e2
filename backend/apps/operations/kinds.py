import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable

from apps.inventory.models import MovementKind
from apps.inventory.services import StockEffect
from apps.operations.models import (
    Adjustment,
    AdjustmentLine,
    Delivery,
    DeliveryLine,
    DocumentStatus,
    InternalTransfer,
    InternalTransferLine,
    Receipt,
    ReceiptLine,
)


class Availability:
    """What happens when an outbound line asks for more than the location holds."""

    IGNORE = "ignore"
    ROUTE_TO_WAITING = "route_to_waiting"
    REJECT = "reject"


@dataclass(frozen=True)
class DocumentKind:
    doc_type: str
    code: str
    model: type
    line_model: type
    movement_kind: str
    validate_transitions: dict
    process_transitions: dict
    required_fields: tuple
    availability: str
    line_locations: Callable
    outbound_location: Callable | None
    effects: Callable

    @property
    def prefix(self) -> str:
        return f"WH/{self.code}/"

    @property
    def number_pattern(self):
        return re.compile(rf"^WH/{re.escape(self.code)}/(\d+)$")

    def format_number(self, value: int) -> str:
        return f"{self.prefix}{value:04d}"

    def line_counts(self, line) -> bool:
        if self.line_model is AdjustmentLine:
            return line.counted_quantity is not None
        return line.quantity is not None and line.quantity > 0


def _own_or_header_location(document, line):
    return (line.location_id or document.location_id,)


def _transfer_locations(document, line):
    return (document.from_location_id, line.to_location_id or document.to_location_id)


def _receipt_effects(document, line):
    (location_id,) = _own_or_header_location(document, line)
    return [StockEffect(product_id=line.product_id, location_id=location_id, delta=line.quantity, line_id=line.id)]


def _delivery_effects(document, line):
    (location_id,) = _own_or_header_location(document, line)
    return [StockEffect(product_id=line.product_id, location_id=location_id, delta=-line.quantity, line_id=line.id)]


def _transfer_effects(document, line):
    source_id, target_id = _transfer_locations(document, line)
    return [
        StockEffect(
            product_id=line.product_id,
            location_id=source_id,
            delta=-line.quantity,
            counterpart_location_id=target_id,
            line_id=line.id,
        ),
        StockEffect(
            product_id=line.product_id,
            location_id=target_id,
            delta=line.quantity,
            counterpart_location_id=source_id,
            line_id=line.id,
        ),
    ]


def _adjustment_effects(document, line):
    (location_id,) = _own_or_header_location(document, line)
    delta = (line.counted_quantity or Decimal("0")) - (line.current_quantity or Decimal("0"))
    if delta == 0:
        return []
    return [StockEffect(product_id=line.product_id, location_id=location_id, delta=delta, line_id=line.id)]


RECEIPT = DocumentKind(
    doc_type="receipt",
    code="IN",
    model=Receipt,
    line_model=ReceiptLine,
    movement_kind=MovementKind.RECEIPT,
    validate_transitions={DocumentStatus.DRAFT: DocumentStatus.READY},
    process_transitions={DocumentStatus.READY: DocumentStatus.DONE},
    required_fields=("supplier",),
    availability=Availability.IGNORE,
    line_locations=_own_or_header_location,
    outbound_location=None,
    effects=_receipt_effects,
)

DELIVERY = DocumentKind(
    doc_type="delivery",
    code="OUT",
    model=Delivery,
    line_model=DeliveryLine,
    movement_kind=MovementKind.DELIVERY,
    validate_transitions={
        DocumentStatus.DRAFT: DocumentStatus.READY,
        DocumentStatus.WAITING: DocumentStatus.READY,
        DocumentStatus.READY: DocumentStatus.DONE,
    },
    process_transitions={DocumentStatus.READY: DocumentStatus.DONE},
    required_fields=("delivery_address",),
    availability=Availability.ROUTE_TO_WAITING,
    line_locations=_own_or_header_location,
    outbound_location=lambda document, line: line.location_id or document.location_id,
    effects=_delivery_effects,
)

INTERNAL_TRANSFER = DocumentKind(
    doc_type="internal_transfer",
    code="INT",
    model=InternalTransfer,
    line_model=InternalTransferLine,
    movement_kind=MovementKind.TRANSFER,
    validate_transitions={DocumentStatus.DRAFT: DocumentStatus.DONE},
    process_transitions={DocumentStatus.DRAFT: DocumentStatus.DONE},
    required_fields=("from_location", "to_location"),
    availability=Availability.REJECT,
    line_locations=_transfer_locations,
    outbound_location=lambda document, line: document.from_location_id,
    effects=_transfer_effects,
)

ADJUSTMENT = DocumentKind(
    doc_type="adjustment",
    code="ADJ",
    model=Adjustment,
    line_model=AdjustmentLine,
    movement_kind=MovementKind.ADJUSTMENT,
    validate_transitions={DocumentStatus.DRAFT: DocumentStatus.DONE},
    process_transitions={DocumentStatus.DRAFT: DocumentStatus.DONE},
    required_fields=("location",),
    availability=Availability.IGNORE,
    line_locations=_own_or_header_location,
    outbound_location=None,
    effects=_adjustment_effects,
)

KINDS = {kind.doc_type: kind for kind in (RECEIPT, DELIVERY, INTERNAL_TRANSFER, ADJUSTMENT)}


def get_kind(doc_type: str) -> DocumentKind:
    try:
        return KINDS[doc_type]
    except KeyError as exc:
        raise ValueError(f"Unknown document type '{doc_type}'.") from exc
