from __future__ import annotations

from uuid import uuid4

import pytest
from pydantic import ValidationError

from modules.orders.constants import OrderStatus
from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO, UpdateOrderStatusDTO

pytestmark = pytest.mark.unit


def test_items_must_not_be_empty():
    with pytest.raises(ValidationError):
        CreateOrderDTO(items=[])


@pytest.mark.parametrize("quantity", [0, -1])
def test_quantity_must_be_positive(quantity):
    with pytest.raises(ValidationError):
        CreateOrderItemDTO(product_id=uuid4(), quantity=quantity)


def test_duplicate_products_are_allowed():
    product_id = uuid4()
    dto = CreateOrderDTO(
        items=[
            CreateOrderItemDTO(product_id=product_id, quantity=1),
            CreateOrderItemDTO(product_id=product_id, quantity=2),
        ]
    )
    assert len(dto.items) == 2


def test_dto_is_frozen():
    item = CreateOrderItemDTO(product_id=uuid4(), quantity=1)
    with pytest.raises(ValidationError):
        item.quantity = 5


def test_status_dto_rejects_unknown_status():
    with pytest.raises(ValidationError):
        UpdateOrderStatusDTO(status="LOST")
    assert UpdateOrderStatusDTO(status="PAID").status == OrderStatus.PAID
