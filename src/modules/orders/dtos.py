"""Order DTOs for the Service Layer.

Immutable Pydantic v2 contracts between the API layer (DRF serializers)
and ``OrderService``.  The owning user is never part of the payload; it
is the authenticated caller.
"""

from __future__ import annotations

from typing import List
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from modules.orders.constants import OrderStatus


class CreateOrderItemDTO(BaseModel):
    """One requested line.  ``unit_price`` is resolved from the catalog."""

    model_config = ConfigDict(frozen=True)

    product_id: UUID
    quantity: int = Field(ge=1)


class CreateOrderDTO(BaseModel):
    """Order placement request.

    Lines are processed in the given order.  The same product may appear
    on several lines; each line is checked against the stock left by the
    previous ones.
    """

    model_config = ConfigDict(frozen=True)

    items: List[CreateOrderItemDTO] = Field(min_length=1)


class UpdateOrderStatusDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: OrderStatus
    notes: str = ""
