"""Django ORM implementation of the Product repository.

Stock changes are single guarded ``UPDATE`` statements, so the stock
column can never be driven below zero even by writers that skipped the
row lock.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import models, transaction
from django.db.models import F
from django.utils import timezone

from modules.products.exceptions import InsufficientStock, ProductNotFound
from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    def get_by_id(self, id: Any) -> Optional[Product]:
        """Returns ``None`` for non-existent or malformed IDs."""
        try:
            return Product.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_by_name(self, name: str) -> Optional[Product]:
        return Product.objects.filter(name__iexact=name.strip()).first()

    def list(self, filters: Optional[Dict[str, Any]] = None) -> "models.QuerySet[Product]":
        """Examples of valid filters::

        {"is_active": True}
        {"name__icontains": "lamp", "price__lte": "50.00"}
        """
        queryset = Product.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    @transaction.atomic
    def save(self, entity: Product) -> Product:
        is_new = entity._state.adding
        entity.save()
        logger.info("product.saved", product_id=str(entity.id), is_new=is_new)
        return entity

    @transaction.atomic
    def delete(self, id: Any) -> bool:
        deleted, _ = Product.objects.filter(id=id).delete()
        if deleted:
            logger.info("product.deleted", product_id=str(id))
        return bool(deleted)

    # ------------------------------------------------------------------
    # Stock (order placement boundary)
    # ------------------------------------------------------------------

    def lock_for_update(self, ids: Iterable[Any]) -> Dict[Any, Product]:
        unique_ids = sorted({str(i) for i in ids})
        try:
            rows = Product.objects.select_for_update().filter(id__in=unique_ids).order_by("id")
            return {product.id: product for product in rows}
        except (ValueError, ValidationError):
            return {}

    def decrement_stock(self, id: Any, amount: int) -> int:
        updated = Product.objects.filter(id=id, stock_quantity__gte=amount).update(
            stock_quantity=F("stock_quantity") - amount,
            updated_at=timezone.now(),
        )
        if not updated:
            current = Product.objects.filter(id=id).values_list("stock_quantity", flat=True).first()
            if current is None:
                raise ProductNotFound(f"Product {id} not found.")
            raise InsufficientStock(
                f"Insufficient stock for product {id}: requested {amount}, available {current}.",
                product_id=id,
                requested=amount,
                available=current,
            )
        return self._current_stock(id)

    def increment_stock(self, id: Any, amount: int) -> int:
        updated = Product.objects.filter(id=id).update(
            stock_quantity=F("stock_quantity") + amount,
            updated_at=timezone.now(),
        )
        if not updated:
            raise ProductNotFound(f"Product {id} not found.")
        return self._current_stock(id)

    def has_order_items(self, id: Any) -> bool:
        return Product.objects.filter(id=id, order_items__isnull=False).exists()

    @staticmethod
    def _current_stock(id: Any) -> int:
        return Product.objects.filter(id=id).values_list("stock_quantity", flat=True).get()
