from __future__ import annotations

import random
from decimal import Decimal

from django.core.management.base import BaseCommand

from modules.accounts.authorization import Caller
from modules.accounts.constants import UserRole
from modules.accounts.models import User
from modules.core.exceptions import DomainError
from modules.orders.constants import OrderStatus
from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository

SEED_PASSWORD = "password123"


class Command(BaseCommand):
    help = "Seed database with realistic development data."

    def add_arguments(self, parser):
        parser.add_argument("--orders", type=int, default=20, help="Number of orders to place.")

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        admin, customers = self._seed_users()
        products = self._seed_products()
        orders_created = self._seed_orders(admin, customers, products, options["orders"])

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"customers={len(customers)}, "
                f"products={len(products)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_users(self) -> tuple[User, list[User]]:
        self.stdout.write("Creating users...")
        admin = User.objects.filter(email="admin@example.com").first()
        if admin is None:
            admin = User.objects.create_superuser(
                "admin@example.com", password=SEED_PASSWORD, name="Admin"
            )

        customers: list[User] = []
        seed_customers = [
            ("Ana Souza", "ana@example.com"),
            ("Bruno Lima", "bruno@example.com"),
            ("Carla Mendes", "carla@example.com"),
            ("Daniel Costa", "daniel@example.com"),
            ("Helena Ferreira", "helena@example.com"),
        ]
        for name, email in seed_customers:
            user = User.objects.filter(email=email).first()
            if user is None:
                user = User.objects.create_user(
                    email, password=SEED_PASSWORD, name=name, role=UserRole.USER
                )
            customers.append(user)
        self.stdout.write(self.style.SUCCESS("Creating users... Done!"))
        return admin, customers

    def _seed_products(self) -> list[Product]:
        self.stdout.write("Creating products...")
        products: list[Product] = []
        catalog = [
            ("Monitor 27\"", "Electronics", Decimal("1299.90")),
            ("Mechanical Keyboard", "Electronics", Decimal("399.90")),
            ("Gaming Mouse", "Electronics", Decimal("249.90")),
            ("Notebook 14\"", "Electronics", Decimal("3999.00")),
            ("Headset", "Electronics", Decimal("299.90")),
            ("Office Desk", "Furniture", Decimal("899.00")),
            ("Ergonomic Chair", "Furniture", Decimal("1499.00")),
            ("Bookshelf", "Furniture", Decimal("699.00")),
            ("A4 Paper", "Office", Decimal("29.90")),
            ("Blue Pen", "Office", Decimal("4.90")),
            ("Notebook Stand", "Office", Decimal("149.90")),
            ("LED Lamp", "Office", Decimal("59.90")),
        ]
        for name, category, price in catalog:
            product, _ = Product.objects.get_or_create(
                name=name,
                defaults={
                    "description": category,
                    "price": price,
                    "stock_quantity": random.randint(10, 200),
                    "is_active": True,
                },
            )
            products.append(product)
        self.stdout.write(self.style.SUCCESS("Creating products... Done!"))
        return products

    def _seed_orders(
        self,
        admin: User,
        customers: list[User],
        products: list[Product],
        count: int,
    ) -> int:
        """Place orders through ``OrderService`` so stock stays consistent."""
        self.stdout.write("Creating orders...")
        if not customers or not products:
            self.stdout.write(self.style.WARNING("Skipping orders (no customers/products)."))
            return 0

        service = OrderService(
            order_repository=OrderDjangoRepository(),
            product_repository=ProductDjangoRepository(),
        )
        admin_caller = Caller.from_user(admin)
        follow_up = [OrderStatus.PAID, OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.DELIVERED]

        orders_created = 0
        for _ in range(count):
            customer = random.choice(customers)
            lines = random.sample(products, k=random.randint(1, 3))
            dto = CreateOrderDTO(
                items=[
                    CreateOrderItemDTO(product_id=product.id, quantity=random.randint(1, 3))
                    for product in lines
                ]
            )
            try:
                order = service.create_order(Caller.from_user(customer), dto)
            except DomainError as exc:
                self.stdout.write(self.style.WARNING(f"Order skipped: {exc.message}"))
                continue

            roll = random.random()
            if roll < 0.2:
                service.cancel_order(order.id, Caller.from_user(customer))
            elif roll < 0.8:
                service.update_status(order.id, random.choice(follow_up), admin_caller)
            orders_created += 1

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return orders_created
