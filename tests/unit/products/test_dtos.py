from decimal import Decimal

import pytest
from pydantic import ValidationError

from modules.products.dtos import CreateProductDTO, UpdateProductDTO

pytestmark = pytest.mark.unit


class TestCreateProductDTO:
    def test_strips_name(self):
        dto = CreateProductDTO(name="  Lamp  ", price=Decimal("1.00"))
        assert dto.name == "Lamp"
        assert dto.stock_quantity == 0

    @pytest.mark.parametrize("name", ["", "   "])
    def test_blank_name_rejected(self, name):
        with pytest.raises(ValidationError):
            CreateProductDTO(name=name, price=Decimal("1.00"))

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            CreateProductDTO(name="Lamp", price=Decimal("-0.01"))

    def test_negative_stock_rejected(self):
        with pytest.raises(ValidationError):
            CreateProductDTO(name="Lamp", price=Decimal("1.00"), stock_quantity=-1)

    def test_price_precision_enforced(self):
        with pytest.raises(ValidationError):
            CreateProductDTO(name="Lamp", price=Decimal("1.999"))

    def test_frozen(self):
        dto = CreateProductDTO(name="Lamp", price=Decimal("1.00"))
        with pytest.raises(ValidationError):
            dto.name = "Other"


class TestUpdateProductDTO:
    def test_changes_only_supplied_fields(self):
        dto = UpdateProductDTO(price=Decimal("2.00"), is_active=False)
        assert dto.changes() == {"price": Decimal("2.00"), "is_active": False}

    def test_empty_update_has_no_changes(self):
        assert UpdateProductDTO().changes() == {}

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError):
            UpdateProductDTO(name=" ")
