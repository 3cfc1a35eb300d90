"""Unit tests for the domain event primitives and the in-memory bus."""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from datetime import datetime
from uuid import UUID, uuid4

import pytest

from modules.orders.events import OrderCancelled, OrderCreated, OrderStatusChanged
from shared.domain.events import DomainEvent, DomainEventMixin, UnknownEventType
from shared.infrastructure.bus import InMemoryEventBus

pytestmark = pytest.mark.unit


class RecordingHandler:
    def __init__(self):
        self.events = []

    def handle(self, event):
        self.events.append(event)


class TestDomainEvent:
    def test_event_name_is_class_name(self):
        event = OrderCancelled(aggregate_id=uuid4(), cancelled_by="u-1")
        assert event.event_name == "OrderCancelled"

    def test_events_are_immutable(self):
        event = OrderCancelled(aggregate_id=uuid4(), cancelled_by="u-1")
        with pytest.raises(FrozenInstanceError):
            event.cancelled_by = "someone-else"

    def test_payload_is_json_compatible(self):
        order_id = uuid4()
        payload = OrderCreated(
            aggregate_id=order_id, user_id="u-1", total="12.50", item_count=2
        ).to_payload()

        assert payload["aggregate_id"] == str(order_id)
        assert isinstance(payload["event_id"], str)
        assert isinstance(payload["occurred_on"], str)
        assert payload["total"] == "12.50"

    def test_from_payload_rebuilds_event(self):
        original = OrderStatusChanged(
            aggregate_id=uuid4(), old_status="PENDING", new_status="PAID", changed_by="a-1"
        )

        rebuilt = DomainEvent.from_payload("OrderStatusChanged", original.to_payload())

        assert rebuilt == original
        assert isinstance(rebuilt.aggregate_id, UUID)
        assert isinstance(rebuilt.occurred_on, datetime)

    def test_unknown_event_name(self):
        with pytest.raises(UnknownEventType):
            DomainEvent.resolve("NoSuchEvent")


class TestDomainEventMixin:
    def test_collects_and_clears_events(self):
        aggregate = DomainEventMixin()
        event = OrderCancelled(aggregate_id=uuid4(), cancelled_by="u-1")

        aggregate.add_domain_event(event)
        assert aggregate.domain_events == [event]

        aggregate.clear_domain_events()
        assert aggregate.domain_events == []

    def test_domain_events_returns_a_copy(self):
        aggregate = DomainEventMixin()
        aggregate.domain_events.append("ignored")
        assert aggregate.domain_events == []


class TestInMemoryEventBus:
    def test_publish_reaches_subscribed_handlers_only(self):
        bus = InMemoryEventBus()
        created_handler = RecordingHandler()
        cancelled_handler = RecordingHandler()
        bus.subscribe(OrderCreated, created_handler)
        bus.subscribe(OrderCancelled, cancelled_handler)

        event = OrderCreated(aggregate_id=uuid4(), user_id="u-1", total="1.00", item_count=1)
        bus.publish(event)

        assert created_handler.events == [event]
        assert cancelled_handler.events == []

    def test_subscribing_twice_delivers_once(self):
        bus = InMemoryEventBus()
        handler = RecordingHandler()
        bus.subscribe(OrderCancelled, handler)
        bus.subscribe(OrderCancelled, handler)

        bus.publish(OrderCancelled(aggregate_id=uuid4(), cancelled_by="u-1"))

        assert len(handler.events) == 1

    def test_unsubscribe(self):
        bus = InMemoryEventBus()
        handler = RecordingHandler()
        bus.subscribe(OrderCancelled, handler)
        bus.unsubscribe(OrderCancelled, handler)

        bus.publish(OrderCancelled(aggregate_id=uuid4(), cancelled_by="u-1"))

        assert handler.events == []
        assert bus.handlers_for(OrderCancelled) == []

    def test_handler_error_propagates(self):
        bus = InMemoryEventBus()

        class Exploding:
            def handle(self, event):
                raise RuntimeError("boom")

        bus.subscribe(OrderCancelled, Exploding())
        with pytest.raises(RuntimeError):
            bus.publish(OrderCancelled(aggregate_id=uuid4(), cancelled_by="u-1"))
