import logging
from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import DecimalField, F, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from apps.inventory.exceptions import NegativeStockError
from apps.inventory.models import StockLevel, StockMovement

logger = logging.getLogger(__name__)

QUANTITY_ZERO = Decimal("0.000")
QUANTITY_PLACES = Decimal("0.001")


@dataclass(frozen=True)
class StockEffect:
    """One signed quantity change against a (product, location) key."""

    product_id: object
    location_id: object
    delta: Decimal
    counterpart_location_id: object = None
    line_id: object = None

    @property
    def key(self):
        return (str(self.product_id), str(self.location_id))


def format_quantity(value) -> str:
    return str(Decimal(value or 0).quantize(QUANTITY_PLACES))


def total_on_hand(product) -> Decimal:
    total = StockLevel.objects.filter(product=product).aggregate(total=Sum("quantity"))["total"]
    return total or QUANTITY_ZERO


def available_quantity(product_id, location_id) -> Decimal:
    quantity = (
        StockLevel.objects.filter(product_id=product_id, location_id=location_id)
        .values_list("quantity", flat=True)
        .first()
    )
    return quantity if quantity is not None else QUANTITY_ZERO


def level_lock_query(product_id, location_id):
    # No ordering joins: only the stock row itself may be locked.
    return (
        StockLevel.objects.select_for_update(of=("self",))
        .filter(product_id=product_id, location_id=location_id)
        .order_by()
    )


def _lock_level(product_id, location_id) -> StockLevel | None:
    return level_lock_query(product_id, location_id).first()


def lock_levels(keys) -> dict:
    """
    Lock the stock rows for ``keys`` in a stable order and return their quantities.

    Missing rows read as zero. Keys are ``(product_id, location_id)`` pairs.
    """
    quantities = {}
    for product_id, location_id in sorted(set(keys), key=lambda key: (str(key[0]), str(key[1]))):
        level = _lock_level(product_id, location_id)
        quantities[(str(product_id), str(location_id))] = level.quantity if level is not None else QUANTITY_ZERO
    return quantities


@transaction.atomic
def apply_delta(*, product_id, location_id, delta: Decimal, allow_negative: bool | None = None) -> StockLevel:
    """
    Add ``delta`` to the on-hand quantity of (product, location).

    The row is locked for the rest of the enclosing transaction. A missing row
    is created lazily; a missing row can never receive a negative delta.
    """
    if allow_negative is None:
        allow_negative = getattr(settings, "STOCKOPS_ALLOW_NEGATIVE_STOCK", False)

    level = _lock_level(product_id, location_id)
    if level is None:
        if delta < 0:
            logger.warning(
                "Rejected %s on missing stock row product=%s location=%s", delta, product_id, location_id
            )
            raise NegativeStockError(
                product_id=product_id,
                location_id=location_id,
                on_hand=QUANTITY_ZERO,
                delta=delta,
            )
        try:
            with transaction.atomic():
                return StockLevel.objects.create(product_id=product_id, location_id=location_id, quantity=delta)
        except IntegrityError:
            # Another transaction inserted the same key first.
            level = _lock_level(product_id, location_id)
            if level is None:
                raise

    if delta == 0:
        return level

    if level.quantity + delta < 0 and not allow_negative:
        logger.warning(
            "Rejected %s on product=%s location=%s with %s on hand",
            delta,
            product_id,
            location_id,
            level.quantity,
        )
        raise NegativeStockError(
            product_id=product_id,
            location_id=location_id,
            on_hand=level.quantity,
            delta=delta,
        )

    StockLevel.objects.filter(pk=level.pk).update(quantity=F("quantity") + delta, updated_at=timezone.now())
    level.refresh_from_db(fields=["quantity", "updated_at"])
    return level


def record_movement(
    *,
    effect: StockEffect,
    kind: str,
    uom: str,
    source_type: str,
    source_id,
    source_number: str = "",
    actor: str = "",
    happened_at=None,
) -> StockMovement:
    if effect.delta == 0:
        raise ValueError("A movement must carry a non-zero quantity.")
    return StockMovement.objects.create(
        product_id=effect.product_id,
        location_id=effect.location_id,
        counterpart_location_id=effect.counterpart_location_id,
        kind=kind,
        quantity_delta=effect.delta,
        uom=uom,
        source_type=source_type,
        source_id=str(source_id),
        source_number=source_number or "",
        actor=actor or "",
        happened_at=happened_at or timezone.now(),
    )


def query_movements(
    *,
    product=None,
    location=None,
    kind=None,
    source_type=None,
    source_id=None,
    date_from=None,
    date_to=None,
):
    queryset = StockMovement.objects.select_related("product", "location", "counterpart_location")
    if product:
        queryset = queryset.filter(product_id=product)
    if location:
        queryset = queryset.filter(location_id=location)
    if kind:
        queryset = queryset.filter(kind=kind)
    if source_type:
        queryset = queryset.filter(source_type=source_type)
    if source_id:
        queryset = queryset.filter(source_id=str(source_id))
    if date_from:
        queryset = queryset.filter(happened_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(happened_at__date__lte=date_to)
    return queryset.order_by("-happened_at", "id")


def ledger_balance(product_id, location_id) -> Decimal:
    total = StockMovement.objects.filter(product_id=product_id, location_id=location_id).aggregate(
        total=Coalesce(
            Sum("quantity_delta"),
            Value(QUANTITY_ZERO),
            output_field=DecimalField(max_digits=14, decimal_places=3),
        )
    )["total"]
    return total


def find_ledger_mismatches() -> list[dict]:
    """
    Compare every stock row with the sum of its ledger entries.

    Pairs that only exist on one side are compared against zero.
    """
    ledger = {
        (str(row["product_id"]), str(row["location_id"])): row["total"] or QUANTITY_ZERO
        for row in StockMovement.objects.values("product_id", "location_id").annotate(total=Sum("quantity_delta"))
    }
    levels = {
        (str(row["product_id"]), str(row["location_id"])): row["quantity"]
        for row in StockLevel.objects.values("product_id", "location_id", "quantity")
    }

    mismatches = []
    for key in sorted(set(ledger) | set(levels)):
        on_hand = levels.get(key, QUANTITY_ZERO)
        ledger_total = ledger.get(key, QUANTITY_ZERO)
        if on_hand != ledger_total:
            mismatches.append(
                {
                    "product": key[0],
                    "location": key[1],
                    "quantity": format_quantity(on_hand),
                    "ledger_total": format_quantity(ledger_total),
                    "difference": format_quantity(on_hand - ledger_total),
                }
            )
    return mismatches
