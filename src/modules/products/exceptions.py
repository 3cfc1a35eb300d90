"""Product domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import (
    ConflictError,
    InsufficientStockError,
    NotFoundError,
    UnavailableError,
)


class ProductNotFound(NotFoundError):
    default_message = "Product not found."


class ProductAlreadyExists(ConflictError):
    """Another product already uses the same name (case-insensitive)."""

    default_message = "A product with this name already exists."


class ProductInUse(ConflictError):
    """The product is referenced by order lines and cannot be deleted."""

    default_message = (
        "Cannot delete product with existing orders. Consider deactivating instead."
    )


class InactiveProduct(UnavailableError):
    default_message = "Product is not available."


class InsufficientStock(InsufficientStockError):
    def __init__(
        self,
        message: str | None = None,
        *,
        product_id: object = None,
        requested: int | None = None,
        available: int | None = None,
    ) -> None:
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(message)
