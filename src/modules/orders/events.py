"""Domain events for the Orders bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from shared.domain.events import DomainEvent


@dataclass(frozen=True, kw_only=True)
class OrderCreated(DomainEvent):
    """Raised when an order is placed."""

    user_id: str
    total: str
    item_count: int


@dataclass(frozen=True, kw_only=True)
class OrderCancelled(DomainEvent):
    """Raised when a customer cancels a pending order."""

    cancelled_by: str
    stock_restored: bool = False


@dataclass(frozen=True, kw_only=True)
class OrderStatusChanged(DomainEvent):
    """Raised when an administrator sets a new status."""

    old_status: str
    new_status: str
    changed_by: Optional[str] = None
