"""Order domain constants.

Status changes by administrators are unrestricted; only customer
cancellation is gated on the current status.
"""

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    PAID = "PAID", "Paid"
    PROCESSING = "PROCESSING", "Processing"
    SHIPPED = "SHIPPED", "Shipped"
    DELIVERED = "DELIVERED", "Delivered"
    CANCELLED = "CANCELLED", "Cancelled"


INITIAL_STATUS = OrderStatus.PENDING

CANCELLABLE_STATES: frozenset[str] = frozenset({OrderStatus.PENDING})

OUTBOX_TOPIC = "orders"
