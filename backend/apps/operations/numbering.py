import logging

from django.db import IntegrityError, transaction

from apps.operations.models import DocumentSequence

logger = logging.getLogger(__name__)


def highest_existing_number(kind) -> int:
    pattern = kind.number_pattern
    highest = 0
    numbers = kind.model.objects.filter(document_number__startswith=kind.prefix).values_list(
        "document_number", flat=True
    )
    for number in numbers:
        match = pattern.match(number)
        if match:
            highest = max(highest, int(match.group(1)))
    return highest


def sequence_lock_query(kind):
    return DocumentSequence.objects.select_for_update(of=("self",)).filter(code=kind.code).order_by()


def _locked_sequence(kind) -> DocumentSequence:
    sequence = sequence_lock_query(kind).first()
    if sequence is not None:
        return sequence
    try:
        with transaction.atomic():
            DocumentSequence.objects.create(code=kind.code, last_value=highest_existing_number(kind))
    except IntegrityError:
        logger.info("Sequence %s created concurrently", kind.code)
    return sequence_lock_query(kind).get()


@transaction.atomic
def next_number(kind) -> str:
    """
    Consume the next document number for ``kind``.

    The counter row stays locked until the caller's transaction commits, so the
    header insert must happen inside the same transaction.
    """
    sequence = _locked_sequence(kind)
    sequence.last_value += 1
    sequence.save(update_fields=["last_value", "updated_at"])
    return kind.format_number(sequence.last_value)


def preview_number(kind) -> str:
    sequence = DocumentSequence.objects.filter(code=kind.code).first()
    last_value = sequence.last_value if sequence is not None else highest_existing_number(kind)
    return kind.format_number(last_value + 1)
