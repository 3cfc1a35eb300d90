"""Event handlers for Orders domain events.

They run when the outbox relay publishes a committed event.
"""

from __future__ import annotations

import structlog

from modules.orders.events import OrderCancelled, OrderCreated, OrderStatusChanged
from shared.domain.bus import IEventBus, IEventHandler

logger = structlog.get_logger(__name__)


class OrderCreatedHandler(IEventHandler[OrderCreated]):
    def handle(self, event: OrderCreated) -> None:
        logger.info(
            "order.event.created",
            order_id=str(event.aggregate_id),
            user_id=event.user_id,
            total=event.total,
            item_count=event.item_count,
        )


class OrderCancelledHandler(IEventHandler[OrderCancelled]):
    def handle(self, event: OrderCancelled) -> None:
        logger.info(
            "order.event.cancelled",
            order_id=str(event.aggregate_id),
            cancelled_by=event.cancelled_by,
            stock_restored=event.stock_restored,
        )


class OrderStatusChangedHandler(IEventHandler[OrderStatusChanged]):
    def handle(self, event: OrderStatusChanged) -> None:
        logger.info(
            "order.event.status_changed",
            order_id=str(event.aggregate_id),
            old_status=event.old_status,
            new_status=event.new_status,
            changed_by=event.changed_by,
        )


order_created_handler = OrderCreatedHandler()
order_cancelled_handler = OrderCancelledHandler()
order_status_changed_handler = OrderStatusChangedHandler()

SUBSCRIPTIONS: tuple[tuple[type, IEventHandler], ...] = (
    (OrderCreated, order_created_handler),
    (OrderCancelled, order_cancelled_handler),
    (OrderStatusChanged, order_status_changed_handler),
)


def register_handlers(bus: IEventBus) -> None:
    """Subscribe the order handlers; safe to call more than once."""
    for event_class, handler in SUBSCRIPTIONS:
        bus.subscribe(event_class, handler)
