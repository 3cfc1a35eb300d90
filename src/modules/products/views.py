"""Product API views.

Browsing is public; catalog changes require the ADMIN role, enforced by
``ProductService``.  Domain errors propagate to the envelope exception
handler.
"""

from __future__ import annotations

from typing import Any

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.filters import OrderingFilter
from rest_framework.permissions import IsAuthenticatedOrReadOnly
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.accounts.authorization import Caller
from modules.accounts.constants import UserRole
from modules.core.exceptions import parse_dto
from modules.core.responses import created, ok
from modules.products.dtos import CreateProductDTO, UpdateProductDTO
from modules.products.filters import ProductFilter
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.serializers import ProductSerializer, ProductWriteSerializer
from modules.products.services import ProductService

TRUTHY = {"1", "true", "yes", "on"}


class ProductViewSet(GenericViewSet):
    """Catalog endpoints backed by ``ProductService``.

    Does **not** extend ``ModelViewSet``: all ORM access goes through the
    service/repository layer.
    """

    queryset = Product.objects.all()
    serializer_class = ProductSerializer
    permission_classes = [IsAuthenticatedOrReadOnly]
    filterset_class = ProductFilter
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    ordering_fields = ["name", "price", "stock_quantity", "created_at"]
    ordering = ["name"]

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._service = ProductService(repository=ProductDjangoRepository())

    def _caller(self, request: Request) -> Caller:
        return Caller.from_user(request.user)

    def _is_admin(self, request: Request) -> bool:
        return request.user.is_authenticated and request.user.role == UserRole.ADMIN

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/products/

        ``include_inactive=true`` is honoured for administrators only.
        """
        include_inactive = (
            request.query_params.get("include_inactive", "").lower() in TRUTHY
            and self._is_admin(request)
        )
        queryset = self.filter_queryset(
            self._service.list_products(include_inactive=include_inactive)
        )
        return ok(ProductSerializer(queryset, many=True).data, "Products retrieved successfully")

    @action(detail=False, methods=["get"])
    def active(self, request: Request) -> Response:
        """GET /api/v1/products/active/"""
        products = self._service.list_active_products()
        return ok(ProductSerializer(products, many=True).data, "Active products retrieved successfully")

    @action(detail=False, methods=["get"])
    def search(self, request: Request) -> Response:
        """GET /api/v1/products/search/?q=term"""
        term = request.query_params.get("q", "").strip()
        if not term:
            raise ValidationError({"q": ["This query parameter is required."]})
        products = self._service.search_products(term)
        return ok(ProductSerializer(products, many=True).data, "Search results retrieved successfully")

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/products/{pk}/"""
        product = self._service.get_product(pk)
        return ok(ProductSerializer(product).data, "Product retrieved successfully")

    # ------------------------------------------------------------------
    # Commands (ADMIN)
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/products/"""
        serializer = ProductWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = parse_dto(CreateProductDTO, **serializer.validated_data)

        product = self._service.create_product(dto, self._caller(request))
        return created(ProductSerializer(product).data, "Product created successfully")

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/products/{pk}/ (only supplied fields change)"""
        serializer = ProductWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        dto = parse_dto(UpdateProductDTO, **serializer.validated_data)

        product = self._service.update_product(pk, dto, self._caller(request))
        return ok(ProductSerializer(product).data, "Product updated successfully")

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/products/{pk}/"""
        return self.update(request, pk)

    @action(detail=True, methods=["put"])
    def deactivate(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/products/{pk}/deactivate/"""
        product = self._service.deactivate_product(pk, self._caller(request))
        return ok(ProductSerializer(product).data, "Product deactivated successfully")

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/products/{pk}/"""
        self._service.delete_product(pk, self._caller(request))
        return ok(None, "Product deleted successfully")
