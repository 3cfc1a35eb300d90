from __future__ import annotations

from decimal import Decimal

import pytest
from django.db import IntegrityError, transaction

from modules.orders.constants import CANCELLABLE_STATES, OrderStatus
from modules.orders.models import Order, OrderItem

pytestmark = pytest.mark.unit


@pytest.fixture()
def order(customer):
    return Order.objects.create(user=customer, total=Decimal("0.00"))


def test_defaults_to_pending(order):
    assert order.status == OrderStatus.PENDING
    assert order.can_be_cancelled


@pytest.mark.parametrize("status", [s for s in OrderStatus if s not in CANCELLABLE_STATES])
def test_only_pending_is_cancellable(order, status):
    order.status = status
    assert not order.can_be_cancelled


def test_item_subtotal_computed_on_save(order, make_product):
    product = make_product(price=Decimal("3.33"))
    item = OrderItem.objects.create(
        order=order, product=product, quantity=3, unit_price=Decimal("3.33")
    )
    assert item.subtotal == Decimal("9.99")


def test_quantity_check_constraint(order, make_product):
    product = make_product()
    with pytest.raises(IntegrityError), transaction.atomic():
        OrderItem.objects.create(order=order, product=product, quantity=0, unit_price=Decimal("1"))


def test_negative_total_rejected(customer):
    with pytest.raises(IntegrityError), transaction.atomic():
        Order.objects.create(user=customer, total=Decimal("-1.00"))
