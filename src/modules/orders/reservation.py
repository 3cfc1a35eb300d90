"""Inventory reservation for order placement.

``StockReservation.reserve`` validates and decrements stock for every
requested line inside the caller's unit of work.  If any line fails the
exception propagates and the unit of work rolls back every decrement made
for earlier lines, so a failed placement leaves stock untouched.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, List, Sequence
from uuid import UUID

import structlog

from modules.products.exceptions import InactiveProduct, InsufficientStock, ProductNotFound

if TYPE_CHECKING:
    from modules.core.unit_of_work import UnitOfWork
    from modules.orders.dtos import CreateOrderItemDTO
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ReservedLine:
    """A validated line whose stock has already been taken."""

    product_id: UUID
    quantity: int
    unit_price: Decimal

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


def order_total(lines: Sequence[ReservedLine]) -> Decimal:
    return sum((line.subtotal for line in lines), Decimal("0.00"))


class StockReservation:
    """Validates and decrements stock through the catalog repository."""

    def __init__(self, product_repository: IProductRepository) -> None:
        self._products = product_repository

    def reserve(
        self,
        uow: UnitOfWork,
        items: Sequence[CreateOrderItemDTO],
    ) -> List[ReservedLine]:
        """Reserve stock for *items*, in input order.

        For each line: the product must exist, be active and have at least
        the requested quantity left (after earlier lines of the same
        request).  The line's price is the product's current price.

        Raises:
            ProductNotFound, InactiveProduct, InsufficientStock
        """
        if not uow.active:
            raise RuntimeError("Stock can only be reserved inside an open UnitOfWork.")

        products = self._products.lock_for_update(item.product_id for item in items)
        lines: List[ReservedLine] = []

        for item in items:
            product = products.get(item.product_id)
            if product is None:
                raise ProductNotFound(f"Product {item.product_id} not found.")
            if not product.is_active:
                raise InactiveProduct(f"Product {product.name} is not available.")
            if product.stock_quantity < item.quantity:
                raise InsufficientStock(
                    f"Insufficient stock for product {product.name}. "
                    f"Available: {product.stock_quantity}, requested: {item.quantity}.",
                    product_id=product.id,
                    requested=item.quantity,
                    available=product.stock_quantity,
                )

            remaining = self._products.decrement_stock(product.id, item.quantity)
            product.stock_quantity = remaining

            logger.info(
                "order.stock_reserved",
                product_id=str(product.id),
                quantity=item.quantity,
                remaining=remaining,
            )
            lines.append(
                ReservedLine(
                    product_id=product.id,
                    quantity=item.quantity,
                    unit_price=product.price,
                )
            )

        return lines
