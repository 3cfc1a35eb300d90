"""Product DTOs for the Service Layer.

Immutable Pydantic v2 contracts between the API layer and
``ProductService``.

- ``CreateProductDTO``: input for product creation.
- ``UpdateProductDTO``: partial update; ``None`` means "leave unchanged".
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modules.products.models import PRODUCT_NAME_MAX_LENGTH


class CreateProductDTO(BaseModel):
    """Validates non-negative ``price`` and ``stock_quantity`` and a non-blank name."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(max_length=PRODUCT_NAME_MAX_LENGTH)
    description: str = ""
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    stock_quantity: int = Field(default=0, ge=0)
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def name_must_not_be_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name must not be blank.")
        return v


class UpdateProductDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str | None = Field(default=None, max_length=PRODUCT_NAME_MAX_LENGTH)
    description: str | None = None
    price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    stock_quantity: int | None = Field(default=None, ge=0)
    is_active: bool | None = None

    @field_validator("name")
    @classmethod
    def name_must_not_be_blank(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Name must not be blank.")
        return v

    def changes(self) -> Dict[str, Any]:
        """Fields supplied with a non-null value."""
        return {key: value for key, value in self.model_dump().items() if value is not None}
