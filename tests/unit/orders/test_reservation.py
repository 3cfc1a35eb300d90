"""Unit tests for StockReservation."""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest

from modules.core.unit_of_work import UnitOfWork
from modules.orders.dtos import CreateOrderItemDTO
from modules.orders.reservation import ReservedLine, StockReservation, order_total
from modules.products.exceptions import InactiveProduct, InsufficientStock, ProductNotFound
from modules.products.repositories.django_repository import ProductDjangoRepository

pytestmark = pytest.mark.unit


@pytest.fixture()
def reservation():
    return StockReservation(ProductDjangoRepository())


def _item(product, quantity):
    return CreateOrderItemDTO(product_id=product.id, quantity=quantity)


def test_requires_open_unit_of_work(reservation, make_product):
    product = make_product()
    with pytest.raises(RuntimeError):
        reservation.reserve(UnitOfWork(), [_item(product, 1)])


def test_reserves_and_snapshots_price(reservation, make_product):
    product = make_product(price=Decimal("12.50"), stock_quantity=10)
    with UnitOfWork() as uow:
        lines = reservation.reserve(uow, [_item(product, 3)])

    assert lines == [ReservedLine(product_id=product.id, quantity=3, unit_price=Decimal("12.50"))]
    product.refresh_from_db()
    assert product.stock_quantity == 7


def test_lines_keep_input_order(reservation, make_product):
    first = make_product(name="Zeta")
    second = make_product(name="Alpha")
    with UnitOfWork() as uow:
        lines = reservation.reserve(uow, [_item(first, 1), _item(second, 2)])
    assert [line.product_id for line in lines] == [first.id, second.id]


def test_duplicate_lines_see_earlier_decrement(reservation, make_product):
    product = make_product(stock_quantity=5)
    with pytest.raises(InsufficientStock):
        with UnitOfWork() as uow:
            reservation.reserve(uow, [_item(product, 3), _item(product, 3)])

    product.refresh_from_db()
    assert product.stock_quantity == 5


def test_duplicate_lines_within_stock(reservation, make_product):
    product = make_product(stock_quantity=5)
    with UnitOfWork() as uow:
        lines = reservation.reserve(uow, [_item(product, 2), _item(product, 3)])
    assert len(lines) == 2
    product.refresh_from_db()
    assert product.stock_quantity == 0


def test_unknown_product(reservation):
    missing = CreateOrderItemDTO(product_id=uuid4(), quantity=1)
    with pytest.raises(ProductNotFound):
        with UnitOfWork() as uow:
            reservation.reserve(uow, [missing])


def test_inactive_product(reservation, make_product):
    product = make_product(is_active=False)
    with pytest.raises(InactiveProduct):
        with UnitOfWork() as uow:
            reservation.reserve(uow, [_item(product, 1)])


def test_failure_on_later_line_rolls_back_earlier_lines(reservation, make_product):
    plenty = make_product(stock_quantity=10)
    scarce = make_product(stock_quantity=1)
    with pytest.raises(InsufficientStock) as exc_info:
        with UnitOfWork() as uow:
            reservation.reserve(uow, [_item(plenty, 4), _item(scarce, 2)])

    assert exc_info.value.requested == 2
    assert exc_info.value.available == 1
    plenty.refresh_from_db()
    scarce.refresh_from_db()
    assert plenty.stock_quantity == 10
    assert scarce.stock_quantity == 1


def test_exact_stock_is_allowed(reservation, make_product):
    product = make_product(stock_quantity=4)
    with UnitOfWork() as uow:
        reservation.reserve(uow, [_item(product, 4)])
    product.refresh_from_db()
    assert product.stock_quantity == 0


def test_order_total_is_exact():
    lines = [
        ReservedLine(product_id=uuid4(), quantity=3, unit_price=Decimal("0.10")),
        ReservedLine(product_id=uuid4(), quantity=1, unit_price=Decimal("19.99")),
    ]
    assert order_total(lines) == Decimal("20.29")
