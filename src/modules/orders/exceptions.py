"""Order domain exceptions.

Catalog failures raised while placing an order (``ProductNotFound``,
``InactiveProduct``, ``InsufficientStock``) come from
``modules.products.exceptions`` and propagate unchanged.
"""

from __future__ import annotations

from modules.core.exceptions import InvalidTransitionError, NotFoundError


class OrderNotFound(NotFoundError):
    default_message = "Order not found."


class InvalidOrderStatus(InvalidTransitionError):
    """The order's current status does not allow the requested change."""

    default_message = "Only pending orders can be cancelled."
