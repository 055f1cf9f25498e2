import json

from django.utils import timezone

from apps.core.models import IdempotentRequest


def normalize_payload(data):
    return json.loads(json.dumps(data, default=str))


def find_completed_request(scope: str, idempotency_key: str | None):
    if not idempotency_key:
        return None
    return (
        IdempotentRequest.objects.filter(
            scope=scope,
            idempotency_key=idempotency_key,
            status=IdempotentRequest.Status.COMPLETED,
        )
        .order_by("-started_at")
        .first()
    )


def start_request(scope: str, idempotency_key: str, payload):
    return IdempotentRequest.objects.create(
        scope=scope,
        idempotency_key=idempotency_key,
        status=IdempotentRequest.Status.STARTED,
        payload=normalize_payload(payload),
    )


def complete_request(entry: IdempotentRequest, status_code: int, data):
    entry.status = IdempotentRequest.Status.COMPLETED
    entry.finished_at = timezone.now()
    entry.result = {
        "status_code": status_code,
        "data": normalize_payload(data),
    }
    entry.save(update_fields=["status", "finished_at", "result", "updated_at"])


def fail_request(entry: IdempotentRequest, status_code: int, errors):
    entry.status = IdempotentRequest.Status.FAILED
    entry.finished_at = timezone.now()
    entry.result = {
        "status_code": status_code,
        "errors": normalize_payload(errors),
    }
    entry.save(update_fields=["status", "finished_at", "result", "updated_at"])
