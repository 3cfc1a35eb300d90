"""Product repository interface.

Besides plain CRUD, this is the catalog's mutation boundary for order
placement: row locking and guarded stock changes, all usable inside the
caller's unit of work.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Iterable, Optional

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.products.models import Product


class IProductRepository(IRepository["Product"]):
    """Repository contract for catalog products."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> "models.QuerySet[Product]":
        """List products with optional filters."""

    @abstractmethod
    def get_by_name(self, name: str) -> Optional[Product]:
        """Case-insensitive exact look-up by name."""

    @abstractmethod
    def lock_for_update(self, ids: Iterable[Any]) -> Dict[Any, Product]:
        """Lock the given product rows (SELECT FOR UPDATE) in id order.

        Missing ids are simply absent from the result.  Must run inside a
        transaction.
        """

    @abstractmethod
    def decrement_stock(self, id: Any, amount: int) -> int:
        """Subtract *amount* from stock; return the new stock.

        Raises ``InsufficientStock`` without changing anything when the
        current stock is lower than *amount*.
        """

    @abstractmethod
    def increment_stock(self, id: Any, amount: int) -> int:
        """Add *amount* to stock; return the new stock."""

    @abstractmethod
    def has_order_items(self, id: Any) -> bool:
        """Whether any order line references the product."""
