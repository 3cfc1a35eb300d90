"""Order API views.

Exposes ``OrderService`` via HTTP.  Authorization is decided by the
service from the authenticated caller; domain errors propagate to the
envelope exception handler.
"""

from __future__ import annotations

from typing import Any

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.accounts.authorization import Action, Caller, ensure_authorized
from modules.core.exceptions import parse_dto
from modules.core.responses import created, ok
from modules.orders.dtos import CreateOrderDTO, UpdateOrderStatusDTO
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    CreateOrderSerializer,
    OrderSerializer,
    StatusQuerySerializer,
    UpdateOrderStatusSerializer,
)
from modules.orders.services import OrderService
from modules.products.repositories.django_repository import ProductDjangoRepository


class OrderViewSet(GenericViewSet):
    """Does **not** extend ``ModelViewSet``: all ORM access goes through
    the service/repository layer.
    """

    queryset = Order.objects.all()
    serializer_class = OrderSerializer
    filterset_class = OrderFilter
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    ordering_fields = ["created_at", "total", "status"]
    ordering = ["-created_at", "-id"]

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._repo = OrderDjangoRepository()
        self._service = OrderService(
            order_repository=self._repo,
            product_repository=ProductDjangoRepository(),
        )

    def get_throttles(self) -> list[BaseThrottle]:
        """Per-action throttling scopes."""
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "order_creation"
        elif self.action in {"list", "retrieve", "by_status", "my_orders"}:
            throttle_scope = "order_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    def _caller(self, request: Request) -> Caller:
        return Caller.from_user(request.user)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    @extend_schema(request=CreateOrderSerializer, responses={201: OrderSerializer})
    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/"""
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = parse_dto(CreateOrderDTO, **serializer.validated_data)

        order = self._service.create_order(self._caller(request), dto)
        return created(OrderSerializer(order).data, "Order created successfully")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/ (ADMIN)

        Filtering (status, user, date range, total range) is handled by
        ``OrderFilter``.
        """
        caller = self._caller(request)
        ensure_authorized(Action.LIST_ALL_ORDERS, caller)
        queryset = self.filter_queryset(self._repo.queryset())
        return ok(OrderSerializer(queryset, many=True).data, "Orders retrieved successfully")

    @extend_schema(
        parameters=[OpenApiParameter("status", str, required=True)],
        responses={200: OrderSerializer(many=True)},
    )
    @action(detail=False, methods=["get"], url_path="status", url_name="by-status")
    def by_status(self, request: Request) -> Response:
        """GET /api/v1/orders/status/?status=PAID (ADMIN)"""
        query = StatusQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        orders = self._service.list_orders_by_status(
            query.validated_data["status"], self._caller(request)
        )
        return ok(OrderSerializer(orders, many=True).data, "Orders retrieved successfully")

    @action(detail=False, methods=["get"], url_path="my-orders", url_name="my-orders")
    def my_orders(self, request: Request) -> Response:
        """GET /api/v1/orders/my-orders/"""
        orders = self._service.list_orders_for_user(self._caller(request))
        return ok(OrderSerializer(orders, many=True).data, "Orders retrieved successfully")

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/ (owner or ADMIN)"""
        order = self._service.get_order_for_caller(pk, self._caller(request))
        return ok(OrderSerializer(order).data, "Order retrieved successfully")

    # ------------------------------------------------------------------
    # Status changes
    # ------------------------------------------------------------------

    @extend_schema(request=UpdateOrderStatusSerializer, responses={200: OrderSerializer})
    @action(detail=True, methods=["put"], url_path="status", url_name="update-status")
    def update_status(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/orders/{pk}/status/ (ADMIN)"""
        serializer = UpdateOrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = parse_dto(UpdateOrderStatusDTO, **serializer.validated_data)

        order = self._service.update_status(
            pk, dto.status, self._caller(request), notes=dto.notes
        )
        return ok(OrderSerializer(order).data, "Order status updated successfully")

    @extend_schema(request=None, responses={200: OrderSerializer})
    @action(detail=True, methods=["put"])
    def cancel(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/orders/{pk}/cancel/ (owning USER)"""
        order = self._service.cancel_order(pk, self._caller(request))
        return ok(OrderSerializer(order).data, "Order cancelled successfully")
