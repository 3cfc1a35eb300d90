"""Unit tests for ProductService."""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest

from modules.accounts.exceptions import AccessDenied
from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO
from modules.products.dtos import CreateProductDTO, UpdateProductDTO
from modules.products.exceptions import ProductAlreadyExists, ProductInUse, ProductNotFound
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.services import ProductService

pytestmark = pytest.mark.unit


@pytest.fixture()
def service() -> ProductService:
    return ProductService(ProductDjangoRepository())


def _create_dto(**overrides) -> CreateProductDTO:
    data = {"name": "Desk Lamp", "price": Decimal("49.90"), "stock_quantity": 5}
    data.update(overrides)
    return CreateProductDTO(**data)


class TestCreateProduct:
    def test_admin_creates_product(self, service, admin_caller):
        product = service.create_product(_create_dto(), admin_caller)

        assert product.id is not None
        assert product.name == "Desk Lamp"
        assert product.price == Decimal("49.90")
        assert product.is_active is True

    def test_customer_cannot_create(self, service, customer_caller):
        with pytest.raises(AccessDenied):
            service.create_product(_create_dto(), customer_caller)
        assert not Product.objects.exists()

    def test_duplicate_name_ignores_case(self, service, admin_caller):
        service.create_product(_create_dto(), admin_caller)
        with pytest.raises(ProductAlreadyExists):
            service.create_product(_create_dto(name="desk lamp"), admin_caller)


class TestUpdateProduct:
    def test_applies_supplied_fields_only(self, service, admin_caller, make_product):
        product = make_product(name="Chair", price=Decimal("80.00"), stock_quantity=3)

        updated = service.update_product(
            product.id, UpdateProductDTO(price=Decimal("75.00")), admin_caller
        )

        assert updated.price == Decimal("75.00")
        assert updated.name == "Chair"
        assert updated.stock_quantity == 3

    def test_rename_to_existing_name_conflicts(self, service, admin_caller, make_product):
        make_product(name="Chair")
        table = make_product(name="Table")

        with pytest.raises(ProductAlreadyExists):
            service.update_product(table.id, UpdateProductDTO(name="CHAIR"), admin_caller)

    def test_keeping_own_name_is_allowed(self, service, admin_caller, make_product):
        chair = make_product(name="Chair")
        updated = service.update_product(
            chair.id, UpdateProductDTO(name="Chair", stock_quantity=9), admin_caller
        )
        assert updated.stock_quantity == 9

    def test_unknown_product(self, service, admin_caller):
        with pytest.raises(ProductNotFound):
            service.update_product(uuid4(), UpdateProductDTO(price=Decimal("1.00")), admin_caller)

    def test_customer_cannot_update(self, service, customer_caller, make_product):
        product = make_product()
        with pytest.raises(AccessDenied):
            service.update_product(product.id, UpdateProductDTO(stock_quantity=1), customer_caller)


class TestDeactivateAndDelete:
    def test_deactivate(self, service, admin_caller, make_product):
        product = make_product()
        service.deactivate_product(product.id, admin_caller)
        product.refresh_from_db()
        assert product.is_active is False

    def test_delete_unreferenced_product(self, service, admin_caller, make_product):
        product = make_product()
        service.delete_product(product.id, admin_caller)
        assert not Product.objects.filter(id=product.id).exists()

    def test_delete_product_in_use_refused(
        self, service, admin_caller, customer_caller, order_service, make_product
    ):
        product = make_product()
        order_service.create_order(
            customer_caller,
            CreateOrderDTO(items=[CreateOrderItemDTO(product_id=product.id, quantity=1)]),
        )

        with pytest.raises(ProductInUse):
            service.delete_product(product.id, admin_caller)
        assert Product.objects.filter(id=product.id).exists()

    def test_delete_unknown_product(self, service, admin_caller):
        with pytest.raises(ProductNotFound):
            service.delete_product(uuid4(), admin_caller)


class TestQueries:
    def test_get_product_malformed_id(self, service):
        with pytest.raises(ProductNotFound):
            service.get_product("not-a-uuid")

    def test_list_hides_inactive_by_default(self, service, make_product):
        active = make_product(name="Active")
        make_product(name="Retired", is_active=False)

        assert list(service.list_products()) == [active]
        assert service.list_products(include_inactive=True).count() == 2

    def test_list_active_products(self, service, make_product):
        make_product(name="Retired", is_active=False)
        lamp = make_product(name="Lamp")
        assert list(service.list_active_products()) == [lamp]

    def test_search_matches_partial_name(self, service, make_product):
        lamp = make_product(name="Desk Lamp")
        make_product(name="Chair")
        make_product(name="Floor Lamp", is_active=False)

        assert list(service.search_products("  lamp ")) == [lamp]
