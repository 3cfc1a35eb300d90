from django.apps import AppConfig


class OrdersConfig(AppConfig):
    """Wires the order event handlers into the process-wide bus."""

    name = "modules.orders"
    label = "orders"
    verbose_name = "Orders"

    def ready(self) -> None:
        from modules.orders.handlers import register_handlers
        from shared.infrastructure.bus import event_bus

        register_handlers(event_bus)
