"""Order service layer (Use Cases).

Order placement, cancellation, administrative status changes and the
ownership-aware queries.  Every write runs in an explicit
``UnitOfWork`` that holds the locks of the resources it touches until the
transaction has committed or rolled back.

Rules enforced here:
- Only customers (role USER) place orders, for themselves.
- Placement is all-or-nothing: any unavailable product or short stock
  aborts the order with stock unchanged.
- Customers cancel their own orders, and only while PENDING.
- Administrators may set any status; doing so never touches stock.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

import structlog
from django.conf import settings

from modules.accounts.authorization import Action, Caller, ensure_authorized
from modules.core.tasks import publish_outbox_events
from modules.core.unit_of_work import UnitOfWork, order_key, product_key
from modules.orders.constants import INITIAL_STATUS, OrderStatus
from modules.orders.events import OrderCancelled, OrderCreated, OrderStatusChanged
from modules.orders.exceptions import InvalidOrderStatus, OrderNotFound
from modules.orders.reservation import StockReservation

if TYPE_CHECKING:
    from modules.orders.dtos import CreateOrderDTO
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class OrderService:
    """Application service for Order use-cases.

    Receives repositories via constructor injection (DIP).
    ``restore_stock_on_cancel`` defaults to the
    ``ORDERS_RESTORE_STOCK_ON_CANCEL`` setting.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        product_repository: IProductRepository,
        unit_of_work: Callable[..., UnitOfWork] = UnitOfWork,
        restore_stock_on_cancel: Optional[bool] = None,
    ) -> None:
        self._order_repo = order_repository
        self._product_repo = product_repository
        self._uow = unit_of_work
        self._reservation = StockReservation(product_repository)
        if restore_stock_on_cancel is None:
            restore_stock_on_cancel = getattr(settings, "ORDERS_RESTORE_STOCK_ON_CANCEL", False)
        self._restore_stock_on_cancel = restore_stock_on_cancel

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_order(self, caller: Caller, dto: CreateOrderDTO) -> Order:
        """Place an order for *caller* with atomic stock reservation.

        Steps, inside one unit of work locking every product in the cart:
        1. Reserve stock line by line (exists, active, enough stock;
           price snapshot; decrement).
        2. Persist the order in PENDING with its items and total.
        3. Record the initial history entry and ``OrderCreated``.

        Raises:
            AccessDenied: caller is not a customer.
            ProductNotFound, InactiveProduct, InsufficientStock: the order
                is rejected and no stock changes.
        """
        ensure_authorized(Action.PLACE_ORDER, caller)
        log = logger.bind(user_id=str(caller.user_id), item_count=len(dto.items))
        log.info("order.creation_started")

        keys = [product_key(item.product_id) for item in dto.items]
        with self._uow(lock_keys=keys) as uow:
            lines = self._reservation.reserve(uow, dto.items)
            order = self._order_repo.create(caller.user_id, lines)

            order.add_domain_event(
                OrderCreated(
                    aggregate_id=order.id,
                    user_id=str(caller.user_id),
                    total=str(order.total),
                    item_count=len(lines),
                )
            )
            self._order_repo.save(order)
            self._order_repo.add_history(
                order_id=order.id,
                new_status=INITIAL_STATUS,
                changed_by_id=caller.user_id,
                notes="Order created",
            )
            uow.on_commit(publish_outbox_events.delay)
            result = self._order_repo.get_by_id(order.id)

        log.info("order.created", order_id=str(order.id), total=str(order.total))
        return result

    def update_status(
        self,
        order_id: Any,
        new_status: str,
        caller: Caller,
        notes: str = "",
    ) -> Order:
        """Set any status on an order (administrators only).

        No transition graph applies and stock is never adjusted, even
        when the new status is CANCELLED.

        Raises:
            AccessDenied: caller is not an administrator.
            OrderNotFound: order does not exist.
        """
        ensure_authorized(Action.UPDATE_ORDER_STATUS, caller)
        new_status = _parse_status(new_status)

        with self._uow(lock_keys=[order_key(order_id)]) as uow:
            order = self._order_repo.get_for_update(order_id)
            if not order:
                raise OrderNotFound(f"Order {order_id} not found.")

            old_status = order.status
            log = logger.bind(order_id=str(order.id), old_status=old_status, new_status=new_status)

            order.status = new_status
            order.add_domain_event(
                OrderStatusChanged(
                    aggregate_id=order.id,
                    old_status=old_status,
                    new_status=new_status,
                    changed_by=str(caller.user_id),
                )
            )
            self._order_repo.save(order)
            self._order_repo.add_history(
                order_id=order.id,
                new_status=new_status,
                old_status=old_status,
                changed_by_id=caller.user_id,
                notes=notes,
            )
            uow.on_commit(publish_outbox_events.delay)
            result = self._order_repo.get_by_id(order.id)

        log.info("order.status_updated")
        return result

    def cancel_order(self, order_id: Any, caller: Caller) -> Order:
        """Cancel a PENDING order on behalf of its owner.

        Stock is restored only when ``restore_stock_on_cancel`` is enabled.

        Raises:
            OrderNotFound: order does not exist.
            AccessDenied: caller is not the customer who owns the order.
            InvalidOrderStatus: order is no longer PENDING.
        """
        # Order lines never change after placement, so reading them before
        # the product locks are taken is safe; the locks need their ids.
        quantities = (
            self._order_repo.item_quantities(order_id) if self._restore_stock_on_cancel else []
        )
        keys = [order_key(order_id)]
        if quantities:
            keys += [product_key(product_id) for product_id, _ in quantities]

        with self._uow(lock_keys=keys) as uow:
            order = self._order_repo.get_for_update(order_id)
            if not order:
                raise OrderNotFound(f"Order {order_id} not found.")

            ensure_authorized(Action.CANCEL_ORDER, caller, resource_owner_id=order.user_id)

            log = logger.bind(order_id=str(order.id), current_status=order.status)
            if not order.can_be_cancelled:
                log.warning("order.cancel_not_allowed")
                raise InvalidOrderStatus(
                    f"Only pending orders can be cancelled (current status: {order.status})."
                )

            if self._restore_stock_on_cancel:
                for product_id, quantity in quantities:
                    restored = self._product_repo.increment_stock(product_id, quantity)
                    log.info(
                        "order.stock_released",
                        product_id=str(product_id),
                        quantity=quantity,
                        restored_stock=restored,
                    )

            old_status = order.status
            order.status = OrderStatus.CANCELLED
            order.add_domain_event(
                OrderCancelled(
                    aggregate_id=order.id,
                    cancelled_by=str(caller.user_id),
                    stock_restored=self._restore_stock_on_cancel,
                )
            )
            self._order_repo.save(order)
            self._order_repo.add_history(
                order_id=order.id,
                new_status=OrderStatus.CANCELLED,
                old_status=old_status,
                changed_by_id=caller.user_id,
                notes="Order cancelled by customer",
            )
            uow.on_commit(publish_outbox_events.delay)
            result = self._order_repo.get_by_id(order.id)

        log.info("order.cancelled", stock_restored=self._restore_stock_on_cancel)
        return result

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order_for_caller(self, order_id: Any, caller: Caller) -> Order:
        """Return the order if *caller* owns it or is an administrator.

        Raises:
            OrderNotFound: order does not exist.
            AccessDenied: caller is a customer who does not own it.
        """
        order = self._order_repo.get_by_id(order_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        ensure_authorized(Action.VIEW_ORDER, caller, resource_owner_id=order.user_id)
        return order

    def list_orders(
        self,
        caller: Caller,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[Order]:
        """Every order, newest first (administrators only)."""
        ensure_authorized(Action.LIST_ALL_ORDERS, caller)
        return self._order_repo.list(filters)

    def list_orders_by_status(self, status: str, caller: Caller) -> List[Order]:
        ensure_authorized(Action.LIST_ALL_ORDERS, caller)
        return self._order_repo.list({"status": _parse_status(status)})

    def list_orders_for_user(self, caller: Caller) -> List[Order]:
        """The caller's own orders, newest first."""
        ensure_authorized(Action.LIST_OWN_ORDERS, caller)
        return self._order_repo.list({"user_id": caller.user_id})


def _parse_status(value: str) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        raise InvalidOrderStatus(f"Unknown order status: {value}.") from None
