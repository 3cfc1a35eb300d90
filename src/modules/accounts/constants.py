"""Account domain constants."""

from django.db import models


class UserRole(models.TextChoices):
    USER = "USER", "User"
    ADMIN = "ADMIN", "Administrator"


DEFAULT_ROLE = UserRole.USER

PASSWORD_MIN_LENGTH = 8
