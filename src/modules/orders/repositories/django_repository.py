"""Django ORM implementation of the Order repository.

``save`` also writes the aggregate's pending domain events to the
transactional outbox, so events are committed or rolled back together
with the order itself.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import models, transaction

from modules.core.models import OutboxEvent
from modules.orders.constants import INITIAL_STATUS, OUTBOX_TOPIC
from modules.orders.models import Order, OrderItem, OrderStatusHistory
from modules.orders.repositories.interfaces import IOrderRepository
from modules.orders.reservation import ReservedLine, order_total

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    def _with_relations(self) -> "models.QuerySet[Order]":
        return Order.objects.select_related("user").prefetch_related(
            "items__product", "status_history"
        )

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, user_id: Any, lines: Sequence[ReservedLine]) -> Order:
        if not lines:
            raise ValueError("An order needs at least one line.")

        order = Order(user_id=user_id, status=INITIAL_STATUS, total=order_total(lines))
        order.save()

        for line in lines:
            OrderItem(
                order=order,
                product_id=line.product_id,
                quantity=line.quantity,
                unit_price=line.unit_price,
            ).save()

        logger.info(
            "order.persisted",
            order_id=str(order.id),
            item_count=len(lines),
            total=str(order.total),
        )
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: Any) -> Optional[Order]:
        """Returns ``None`` for non-existent or malformed IDs."""
        try:
            return self._with_relations().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: Any) -> Optional[Order]:
        try:
            return Order.objects.select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """Supported filter keys are any ``Order`` ORM look-ups, e.g.
        ``status``, ``user_id``, ``total__gte``.
        """
        return list(self.queryset(filters))

    def queryset(self, filters: Optional[Dict[str, Any]] = None) -> "models.QuerySet[Order]":
        queryset = self._with_relations().order_by("-created_at", "-id")
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def item_quantities(self, order_id: Any) -> List[Tuple[UUID, int]]:
        try:
            rows = OrderItem.objects.filter(order_id=order_id)
        except (ValueError, ValidationError):
            return []
        return list(rows.order_by("created_at", "id").values_list("product_id", "quantity"))

    # ------------------------------------------------------------------
    # Save / Delete (IRepository contract)
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Order) -> Order:
        """Persist the order and move its pending events to the outbox."""
        entity.save()

        events = entity.domain_events
        OutboxEvent.objects.bulk_create(
            [OutboxEvent.from_domain_event(event, OUTBOX_TOPIC) for event in events]
        )
        entity.clear_domain_events()

        logger.info("order.saved", order_id=str(entity.id), event_count=len(events))
        return entity

    @transaction.atomic
    def delete(self, id: Any) -> bool:
        order = self.get_by_id(id)
        if not order:
            return False
        order.delete()
        logger.info("order.deleted", order_id=str(id))
        return True

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def add_history(
        self,
        order_id: Any,
        new_status: str,
        old_status: Optional[str] = None,
        changed_by_id: Optional[Any] = None,
        notes: str = "",
    ) -> OrderStatusHistory:
        history = OrderStatusHistory.objects.create(
            order_id=order_id,
            old_status=old_status,
            new_status=new_status,
            changed_by_id=changed_by_id,
            notes=notes,
        )
        logger.info(
            "order.history_added",
            order_id=str(order_id),
            old_status=old_status,
            new_status=new_status,
        )
        return history
