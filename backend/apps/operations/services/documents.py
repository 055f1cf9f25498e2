import logging
from collections import defaultdict
from dataclasses import dataclass, field

from django.conf import settings
from django.db import OperationalError, transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound

from apps.inventory.services import (
    QUANTITY_ZERO,
    apply_delta,
    available_quantity,
    format_quantity,
    lock_levels,
    record_movement,
)
from apps.operations.exceptions import DocumentLocked, DocumentValidationError, InvalidTransition, StockConflict
from apps.operations.kinds import ADJUSTMENT, Availability
from apps.operations.models import DocumentStatus
from apps.operations.numbering import next_number

logger = logging.getLogger(__name__)


@dataclass
class TransitionResult:
    document: object
    line_errors: list = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "id": str(self.document.id),
            "document_number": self.document.document_number,
            "status": self.document.status,
            "line_errors": self.line_errors,
        }


def _max_attempts() -> int:
    return max(1, int(getattr(settings, "STOCKOPS_APPLY_MAX_ATTEMPTS", 3)))


def _with_retry(operation, description: str):
    attempts = _max_attempts()
    for attempt in range(1, attempts + 1):
        try:
            return operation()
        except OperationalError as exc:
            logger.warning("%s failed on attempt %s/%s: %s", description, attempt, attempts, exc)
            if attempt == attempts:
                raise StockConflict() from exc


def _lock(kind, document_id):
    document = kind.model.objects.select_for_update().filter(pk=document_id).first()
    if document is None:
        raise NotFound(f"{kind.doc_type} {document_id} does not exist.")
    return document


def _ensure_draft(document):
    if document.status != DocumentStatus.DRAFT:
        raise DocumentLocked(f"{document.document_number} is {document.status} and can no longer be changed.")


def _snapshot_adjustment_line(document, line):
    location_id = line.location_id or document.location_id
    if line.current_quantity is None and location_id is not None:
        line.current_quantity = available_quantity(line.product_id, location_id)
    if line.counted_quantity is not None and line.current_quantity is not None:
        line.quantity = line.counted_quantity - line.current_quantity
    else:
        line.quantity = QUANTITY_ZERO


def _resnapshot_header_lines(document):
    """Recount lines that follow the header location after it has moved."""
    for line in document.lines.filter(location__isnull=True):
        line.current_quantity = None
        _snapshot_adjustment_line(document, line)
        line.save(update_fields=["current_quantity", "quantity", "updated_at"])


def _write_lines(kind, document, lines_data):
    lines = []
    for position, data in enumerate(lines_data, start=1):
        line = kind.line_model(document=document, position=position, **data)
        if kind is ADJUSTMENT:
            _snapshot_adjustment_line(document, line)
        lines.append(line)
    kind.line_model.objects.bulk_create(lines)
    return lines


def create_document(kind, *, header: dict, lines: list, actor: str = ""):
    def _create():
        with transaction.atomic():
            document = kind.model(**header)
            document.document_number = next_number(kind)
            if not document.responsible:
                document.responsible = actor or ""
            document.save(force_insert=True)
            _write_lines(kind, document, lines)
        return document

    document = _with_retry(_create, f"create {kind.doc_type}")
    logger.info("Created %s %s with %s line(s)", kind.doc_type, document.document_number, len(lines))
    return document


@transaction.atomic
def update_document(kind, document_id, *, header: dict, lines: list | None = None):
    document = _lock(kind, document_id)
    _ensure_draft(document)
    previous_location_id = getattr(document, "location_id", None)
    for name, value in header.items():
        setattr(document, name, value)
    document.save()
    if lines is not None:
        document.lines.all().delete()
        _write_lines(kind, document, lines)
    elif kind is ADJUSTMENT and document.location_id != previous_location_id:
        _resnapshot_header_lines(document)
    logger.info("Updated %s %s", kind.doc_type, document.document_number)
    return document


@transaction.atomic
def delete_document(kind, document_id):
    document = _lock(kind, document_id)
    _ensure_draft(document)
    number = document.document_number
    document.delete()
    logger.info("Deleted draft %s %s", kind.doc_type, number)


def _is_missing(document, name: str) -> bool:
    model_field = document._meta.get_field(name)
    value = getattr(document, model_field.attname)
    if isinstance(value, str):
        return not value.strip()
    return value is None


def _check_preconditions(kind, document, lines):
    field_errors = {}
    line_errors = []

    for name in kind.required_fields:
        if _is_missing(document, name):
            field_errors[name] = ["This field is required before validation."]

    if "from_location" in kind.required_fields and not field_errors:
        if document.from_location_id == document.to_location_id:
            field_errors["to_location"] = ["Destination must differ from the source location."]

    countable = [line for line in lines if kind.line_counts(line)]
    if not countable:
        if kind is ADJUSTMENT:
            field_errors["lines"] = ["At least one line with a counted quantity is required."]
        else:
            field_errors["lines"] = ["At least one line with a positive quantity is required."]

    for line in countable:
        locations = kind.line_locations(document, line)
        if any(location_id is None for location_id in locations):
            line_errors.append(_line_error(line, None, reason="missing_location"))
        elif len(locations) == 2 and locations[0] == locations[1]:
            line_errors.append(_line_error(line, locations[0], reason="same_location"))

    if field_errors or line_errors:
        raise DocumentValidationError(
            f"{document.document_number} is not ready for validation.",
            field_errors=field_errors,
            line_errors=line_errors,
        )
    return countable


def _line_error(line, location_id, *, reason, requested=None, available=None) -> dict:
    return {
        "line": str(line.id),
        "position": line.position,
        "product": str(line.product_id),
        "location": str(location_id) if location_id is not None else None,
        "requested": format_quantity(requested if requested is not None else line.quantity),
        "available": format_quantity(available) if available is not None else None,
        "reason": reason,
    }


def _find_shortages(kind, document, lines) -> list:
    if kind.availability == Availability.IGNORE:
        return []

    requested = defaultdict(lambda: QUANTITY_ZERO)
    keyed_lines = []
    for line in lines:
        key = (line.product_id, kind.outbound_location(document, line))
        requested[key] += line.quantity
        keyed_lines.append((key, line))

    on_hand = lock_levels(requested.keys())
    shortages = []
    for key, line in keyed_lines:
        available = on_hand[(str(key[0]), str(key[1]))]
        if requested[key] > available:
            shortages.append(
                _line_error(line, key[1], reason="insufficient_stock", requested=line.quantity, available=available)
            )
    return shortages


def _set_status(document, status: str):
    document.status = status
    document.save(update_fields=["status", "updated_at"])


def _apply(kind, document, lines, actor: str):
    if kind is ADJUSTMENT:
        for line in lines:
            if line.current_quantity is None:
                _snapshot_adjustment_line(document, line)
                line.save(update_fields=["current_quantity", "quantity", "updated_at"])

    effects = [effect for line in lines for effect in kind.effects(document, line)]
    uoms = {line.id: line.product.uom for line in lines}
    lock_levels((effect.product_id, effect.location_id) for effect in effects)

    happened_at = timezone.now()
    for effect in sorted(effects, key=lambda effect: effect.key):
        apply_delta(product_id=effect.product_id, location_id=effect.location_id, delta=effect.delta)
        record_movement(
            effect=effect,
            kind=kind.movement_kind,
            uom=uoms[effect.line_id],
            source_type=kind.doc_type,
            source_id=document.id,
            source_number=document.document_number,
            actor=actor,
            happened_at=happened_at,
        )

    document.status = DocumentStatus.DONE
    document.done_at = happened_at
    document.save(update_fields=["status", "done_at", "updated_at"])
    logger.info(
        "Applied %s: %s movement(s) from %s line(s)",
        document.document_number,
        len(effects),
        len(lines),
    )


def _transition(kind, document_id, transitions: dict, action: str, actor: str) -> TransitionResult:
    with transaction.atomic():
        document = _lock(kind, document_id)
        current = document.status
        target = transitions.get(current)
        if target is None:
            raise InvalidTransition(f"Cannot {action} {document.document_number} while it is {current}.")

        lines = list(document.lines.select_related("product").order_by("position", "id"))
        countable = _check_preconditions(kind, document, lines)

        shortages = _find_shortages(kind, document, countable)
        if shortages:
            if kind.availability == Availability.REJECT:
                raise DocumentValidationError(
                    f"Source location does not hold enough stock for {document.document_number}.",
                    line_errors=shortages,
                )
            _set_status(document, DocumentStatus.WAITING)
            logger.info(
                "%s %s: %s -> waiting (%s short line(s))",
                action,
                document.document_number,
                current,
                len(shortages),
            )
            return TransitionResult(document, shortages)

        if target == DocumentStatus.DONE:
            _apply(kind, document, countable, actor)
        else:
            _set_status(document, target)
        logger.info("%s %s: %s -> %s", action, document.document_number, current, document.status)
        return TransitionResult(document)


def validate_document(kind, document_id, *, actor: str = "") -> TransitionResult:
    return _with_retry(
        lambda: _transition(kind, document_id, kind.validate_transitions, "validate", actor),
        f"validate {kind.doc_type} {document_id}",
    )


def process_document(kind, document_id, *, actor: str = "") -> TransitionResult:
    return _with_retry(
        lambda: _transition(kind, document_id, kind.process_transitions, "process", actor),
        f"process {kind.doc_type} {document_id}",
    )
