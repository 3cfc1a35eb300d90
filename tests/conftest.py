import logging
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from modules.accounts.authorization import Caller
from modules.accounts.constants import UserRole
from modules.accounts.models import User
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository

TEST_PASSWORD = "s3cret-pass"


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_user():
    counter = {"n": 0}

    def _make(role=UserRole.USER, **overrides) -> User:
        counter["n"] += 1
        email = overrides.pop("email", f"user{counter['n']}@example.com")
        name = overrides.pop("name", f"User {counter['n']}")
        return User.objects.create_user(
            email, password=TEST_PASSWORD, name=name, role=role, **overrides
        )

    return _make


@pytest.fixture()
def make_product():
    counter = {"n": 0}

    def _make(**overrides) -> Product:
        counter["n"] += 1
        defaults = {
            "name": f"Product {counter['n']}",
            "description": "",
            "price": Decimal("10.00"),
            "stock_quantity": 10,
            "is_active": True,
        }
        defaults.update(overrides)
        return Product.objects.create(**defaults)

    return _make


# ---------------------------------------------------------------------------
# Actors
# ---------------------------------------------------------------------------


@pytest.fixture()
def customer(make_user) -> User:
    return make_user(email="customer@example.com", name="Ana Customer")


@pytest.fixture()
def other_customer(make_user) -> User:
    return make_user(email="other@example.com", name="Bruno Other")


@pytest.fixture()
def admin(make_user) -> User:
    return make_user(role=UserRole.ADMIN, email="admin@example.com", name="Carla Admin")


@pytest.fixture()
def customer_caller(customer) -> Caller:
    return Caller.from_user(customer)


@pytest.fixture()
def other_caller(other_customer) -> Caller:
    return Caller.from_user(other_customer)


@pytest.fixture()
def admin_caller(admin) -> Caller:
    return Caller.from_user(admin)


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


@pytest.fixture()
def order_service() -> OrderService:
    return OrderService(
        order_repository=OrderDjangoRepository(),
        product_repository=ProductDjangoRepository(),
        restore_stock_on_cancel=False,
    )


# ---------------------------------------------------------------------------
# API clients
# ---------------------------------------------------------------------------


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def customer_client(customer):
    client = APIClient()
    client.force_authenticate(user=customer)
    return client


@pytest.fixture()
def other_client(other_customer):
    client = APIClient()
    client.force_authenticate(user=other_customer)
    return client


@pytest.fixture()
def admin_client(admin):
    client = APIClient()
    client.force_authenticate(user=admin)
    return client


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


@pytest.fixture()
def log_events(caplog):
    """Structured event dicts emitted through structlog during the test."""
    caplog.set_level(logging.DEBUG)

    def _events(name: str | None = None) -> list[dict]:
        events = [r.msg for r in caplog.records if isinstance(r.msg, dict)]
        if name is not None:
            events = [e for e in events if e.get("event") == name]
        return events

    return _events
