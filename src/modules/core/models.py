"""Base abstract model and domain infrastructure shared by every module.

Provides:
- ``BaseModel``: UUIDv7 primary key + created_at / updated_at timestamps.
- ``OutboxEvent``: transactional outbox rows for committed domain events.

``save()`` guard ensures ``updated_at`` is included when ``update_fields``
is specified (Django skips ``auto_now`` fields otherwise).
"""

from __future__ import annotations

import uuid6
from django.db import models
from django.utils import timezone

from shared.domain.events import DomainEvent

# ---------------------------------------------------------------------------
# BaseModel
# ---------------------------------------------------------------------------


class BaseModel(models.Model):
    """Abstract base with UUIDv7 PK and timestamp bookkeeping."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid6.uuid7,
        editable=False,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    def save(self, *args, **kwargs) -> None:
        """Ensure ``updated_at`` is refreshed even when ``update_fields`` is passed."""
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "updated_at" not in update_fields:
            kwargs["update_fields"] = list(update_fields) + ["updated_at"]
        super().save(*args, **kwargs)



# ---------------------------------------------------------------------------
# Transactional Outbox
# ---------------------------------------------------------------------------


class EventStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    PUBLISHED = "PUBLISHED", "Published"
    FAILED = "FAILED", "Failed"


class OutboxEventQuerySet(models.QuerySet):
    def pending(self) -> "OutboxEventQuerySet":
        """Rows awaiting relay, oldest first."""
        return self.filter(status=EventStatus.PENDING).order_by("created_at", "id")

    def retryable(self, max_retries: int) -> "OutboxEventQuerySet":
        return self.filter(status=EventStatus.FAILED, retry_count__lt=max_retries)

    def for_aggregate(self, aggregate_id: object) -> "OutboxEventQuerySet":
        return self.filter(aggregate_id=str(aggregate_id))


class OutboxEvent(BaseModel):
    """A domain event waiting to be (or already) relayed to the event bus.

    Rows are written by repositories in the same transaction as the
    aggregate change that raised the event, so an order and its
    ``OrderCreated`` row commit or roll back together.
    ``modules.core.tasks.publish_outbox_events`` relays ``PENDING`` rows;
    a handler failure leaves the row ``FAILED`` with the error recorded,
    and ``requeue`` puts it back in line.
    """

    event_type = models.CharField(max_length=100)
    payload = models.JSONField()
    aggregate_id = models.CharField(max_length=255)
    topic = models.CharField(max_length=100)
    status = models.CharField(
        max_length=20,
        choices=EventStatus.choices,
        default=EventStatus.PENDING,
    )
    processed_at = models.DateTimeField(null=True, blank=True, default=None)
    error_message = models.TextField(null=True, blank=True, default=None)  # noqa: DJ01
    retry_count = models.PositiveIntegerField(default=0)

    objects = OutboxEventQuerySet.as_manager()

    class Meta:
        db_table = "outbox_events"
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["aggregate_id"], name="outbox_aggregate_id_idx"),
            models.Index(fields=["status", "created_at"], name="outbox_status_created_idx"),
        ]

    @classmethod
    def from_domain_event(cls, event: DomainEvent, topic: str) -> OutboxEvent:
        """Unsaved row carrying *event*'s JSON payload."""
        return cls(
            event_type=event.event_name,
            aggregate_id=str(event.aggregate_id),
            payload=event.to_payload(),
            topic=topic,
        )

    def to_domain_event(self) -> DomainEvent:
        return DomainEvent.from_payload(self.event_type, self.payload)

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    def mark_as_published(self) -> None:
        self.status = EventStatus.PUBLISHED
        self.processed_at = timezone.now()
        self.error_message = None
        self.save(update_fields=["status", "processed_at", "error_message"])

    def mark_as_failed(self, error: str) -> None:
        """Record *error* and count the attempt."""
        self.status = EventStatus.FAILED
        self.error_message = error
        self.retry_count += 1
        self.save(update_fields=["status", "error_message", "retry_count"])

    def requeue(self) -> None:
        """Return a FAILED row to PENDING; the last error is kept for reference."""
        if self.status != EventStatus.FAILED:
            raise ValueError(f"Only failed events can be requeued (status: {self.status}).")
        self.status = EventStatus.PENDING
        self.save(update_fields=["status"])

    def __str__(self) -> str:
        return f"{self.event_type} [{self.status}] ({self.aggregate_id})"
