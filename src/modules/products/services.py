"""Product service layer (Use Cases).

Catalog administration and browsing.  Every command requires an
administrator ``Caller``; queries are public.

- Names are unique case-insensitively.
- Deleting a product that appears in any order is refused; deactivating
  it is the supported alternative.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

import structlog
from django.db import models, transaction

from modules.accounts.authorization import Action, Caller, ensure_authorized
from modules.products.exceptions import ProductAlreadyExists, ProductInUse, ProductNotFound
from modules.products.models import Product

if TYPE_CHECKING:
    from modules.products.dtos import CreateProductDTO, UpdateProductDTO
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductService:
    """Application service for Product use-cases.

    Receives an ``IProductRepository`` via constructor injection (DIP).
    """

    def __init__(self, repository: IProductRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_product(self, dto: CreateProductDTO, caller: Caller) -> Product:
        """Raises ``ProductAlreadyExists`` if the name is taken."""
        ensure_authorized(Action.MANAGE_CATALOG, caller)
        log = logger.bind(name=dto.name)

        if self._repo.get_by_name(dto.name):
            log.warning("product.duplicate_name")
            raise ProductAlreadyExists(f"Product '{dto.name}' already exists.")

        product = Product(
            name=dto.name,
            description=dto.description,
            price=dto.price,
            stock_quantity=dto.stock_quantity,
            is_active=dto.is_active,
        )
        product = self._repo.save(product)
        log.info("product.created", product_id=str(product.id))
        return product

    @transaction.atomic
    def update_product(self, id: Any, dto: UpdateProductDTO, caller: Caller) -> Product:
        """Apply the supplied fields only.

        Raises:
            ProductNotFound: the product does not exist.
            ProductAlreadyExists: the new name belongs to another product.
        """
        ensure_authorized(Action.MANAGE_CATALOG, caller)
        product = self.get_product(id)
        log = logger.bind(product_id=str(product.id))

        changes = dto.changes()
        new_name = changes.get("name")
        if new_name is not None:
            clash = self._repo.get_by_name(new_name)
            if clash is not None and clash.id != product.id:
                log.warning("product.duplicate_name", name=new_name)
                raise ProductAlreadyExists(f"Product '{new_name}' already exists.")

        for field, value in changes.items():
            setattr(product, field, value)

        product = self._repo.save(product)
        log.info("product.updated", fields=sorted(changes))
        return product

    @transaction.atomic
    def deactivate_product(self, id: Any, caller: Caller) -> Product:
        ensure_authorized(Action.MANAGE_CATALOG, caller)
        product = self.get_product(id)
        if product.is_active:
            product.is_active = False
            product = self._repo.save(product)
        logger.info("product.deactivated", product_id=str(product.id))
        return product

    @transaction.atomic
    def delete_product(self, id: Any, caller: Caller) -> None:
        """Hard-delete a product that no order references.

        Raises:
            ProductNotFound: the product does not exist.
            ProductInUse: at least one order line references it.
        """
        ensure_authorized(Action.MANAGE_CATALOG, caller)
        product = self.get_product(id)

        if self._repo.has_order_items(product.id):
            logger.warning("product.delete_refused", product_id=str(product.id))
            raise ProductInUse()

        self._repo.delete(product.id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_product(self, id: Any) -> Product:
        """Raises ``ProductNotFound`` if the product does not exist."""
        product = self._repo.get_by_id(id)
        if not product:
            raise ProductNotFound(f"Product {id} not found.")
        return product

    def list_products(
        self,
        include_inactive: bool = False,
        filters: Optional[Dict[str, Any]] = None,
    ) -> "models.QuerySet[Product]":
        criteria = dict(filters or {})
        if not include_inactive:
            criteria["is_active"] = True
        return self._repo.list(criteria)

    def list_active_products(self) -> "models.QuerySet[Product]":
        return self._repo.list({"is_active": True})

    def search_products(self, term: str) -> "models.QuerySet[Product]":
        """Active products whose name contains *term*, ignoring case."""
        return self._repo.list({"is_active": True, "name__icontains": term.strip()})
