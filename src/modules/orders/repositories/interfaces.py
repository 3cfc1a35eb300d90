"""Order repository interface.

Extends ``IRepository[Order]`` with the operations of the Order
aggregate: creation together with its items, status history and
row-locked reads.  Mutations are expected to run inside the caller's
unit of work.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderStatusHistory
    from modules.orders.reservation import ReservedLine


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root."""

    @abstractmethod
    def create(self, user_id: Any, lines: Sequence[ReservedLine]) -> Order:
        """Persist a PENDING order with one item per line and the summed total."""

    @abstractmethod
    def get_by_id(self, id: Any) -> Optional[Order]:
        """Retrieve an order with prefetched items and status history."""

    @abstractmethod
    def get_for_update(self, id: Any) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE)."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """List orders, newest first, with optional filters."""

    @abstractmethod
    def item_quantities(self, order_id: Any) -> List[Tuple[UUID, int]]:
        """``(product_id, quantity)`` for every line of the order."""

    @abstractmethod
    def add_history(
        self,
        order_id: Any,
        new_status: str,
        old_status: Optional[str] = None,
        changed_by_id: Optional[Any] = None,
        notes: str = "",
    ) -> OrderStatusHistory:
        """Record a status change in the order's audit trail."""
