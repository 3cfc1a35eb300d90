"""Product catalog model.

- Price is non-negative and has two decimal places.
- Stock can never go below zero (database check constraint).
- Inactive products stay in the catalog but cannot be ordered.
- A product referenced by an order line cannot be hard-deleted
  (``OrderItem.product`` is PROTECT); deactivate it instead.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel

PRODUCT_NAME_MAX_LENGTH = 120


class Product(BaseModel):
    name = models.CharField(max_length=PRODUCT_NAME_MAX_LENGTH)
    description = models.TextField(blank=True, default="")
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    stock_quantity = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "products"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["is_active"], name="products_active_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gte=0),
                name="products_price_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(stock_quantity__gte=0),
                name="products_stock_non_negative",
            ),
        ]

    def clean(self) -> None:
        super().clean()
        if self.price is not None and self.price < 0:
            raise ValidationError({"price": "Price cannot be negative."})
        if self.stock_quantity is not None and self.stock_quantity < 0:
            raise ValidationError({"stock_quantity": "Stock quantity cannot be negative."})

    def is_available(self, quantity: int) -> bool:
        """True when the product can be sold in *quantity* units."""
        return self.is_active and self.stock_quantity >= quantity

    def __str__(self) -> str:
        return self.name
