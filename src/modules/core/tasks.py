"""Background tasks of the core module."""

from __future__ import annotations

from typing import Any, Dict

import structlog
from celery import shared_task
from django.db import transaction

from modules.core.models import EventStatus, OutboxEvent
from shared.infrastructure.bus import event_bus

logger = structlog.get_logger(__name__)

OUTBOX_BATCH_SIZE = 100
OUTBOX_MAX_RETRIES = 5


@shared_task(name="core.debug_task")
def debug_task() -> Dict[str, str]:
    """Diagnostic task confirming that the Celery worker is wired up."""
    logger.info("debug_task.executed", status="ok")
    return {"status": "ok", "message": "Celery is working"}


@shared_task(name="core.publish_outbox_events")
def publish_outbox_events(batch_size: int = OUTBOX_BATCH_SIZE) -> Dict[str, Any]:
    """Relay pending outbox rows to the in-process event bus.

    Rows are handled oldest first.  Each row is locked and re-checked so
    that two relays running at once never publish the same event twice.
    A handler failure marks only that row ``FAILED``.
    """
    pending_ids = list(OutboxEvent.objects.pending().values_list("id", flat=True)[:batch_size])

    published = failed = 0
    for event_id in pending_ids:
        with transaction.atomic():
            row = (
                OutboxEvent.objects.select_for_update()
                .filter(id=event_id, status=EventStatus.PENDING)
                .first()
            )
            if row is None:
                continue

            log = logger.bind(
                outbox_id=str(row.id),
                event_type=row.event_type,
                aggregate_id=row.aggregate_id,
            )
            try:
                event_bus.publish(row.to_domain_event())
            except Exception as exc:
                row.mark_as_failed(f"{type(exc).__name__}: {exc}")
                log.exception("outbox.publish_failed", retry_count=row.retry_count)
                failed += 1
            else:
                row.mark_as_published()
                log.info("outbox.published")
                published += 1

    if pending_ids:
        logger.info("outbox.relay_finished", published=published, failed=failed)
    return {"published": published, "failed": failed}


@shared_task(name="core.requeue_failed_outbox_events")
def requeue_failed_outbox_events(max_retries: int = OUTBOX_MAX_RETRIES) -> Dict[str, int]:
    """Put FAILED rows below *max_retries* attempts back in line, then relay them.

    Rows that reached the limit stay FAILED for manual inspection.
    """
    requeued = 0
    with transaction.atomic():
        for row in OutboxEvent.objects.retryable(max_retries).select_for_update():
            row.requeue()
            requeued += 1

    logger.info("outbox.requeued", count=requeued, max_retries=max_retries)
    if requeued:
        transaction.on_commit(publish_outbox_events.delay)
    return {"requeued": requeued}
