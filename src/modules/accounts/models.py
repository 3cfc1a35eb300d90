"""User account model.

``email`` is the login identifier.  ``role`` drives every authorization
decision in the API; ``is_staff`` is derived from it so that the Django
admin only admits administrators.
"""

from __future__ import annotations

from typing import Any

from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models

from modules.accounts.constants import DEFAULT_ROLE, UserRole
from modules.core.models import BaseModel


class UserManager(BaseUserManager):
    use_in_migrations = True

    def create_user(
        self,
        email: str,
        password: str | None = None,
        **extra_fields: Any,
    ) -> User:
        if not email:
            raise ValueError("Users must have an email address.")
        extra_fields.setdefault("role", DEFAULT_ROLE)
        user = self.model(email=self.normalize_email(email), **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(
        self,
        email: str,
        password: str | None = None,
        **extra_fields: Any,
    ) -> User:
        extra_fields["role"] = UserRole.ADMIN
        extra_fields["is_superuser"] = True
        return self.create_user(email, password, **extra_fields)


class User(BaseModel, AbstractBaseUser, PermissionsMixin):
    name: models.CharField = models.CharField(max_length=120)
    email: models.EmailField = models.EmailField(unique=True)
    role: models.CharField = models.CharField(
        max_length=10,
        choices=UserRole.choices,
        default=DEFAULT_ROLE,
    )
    is_active: models.BooleanField = models.BooleanField(default=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    EMAIL_FIELD = "email"
    REQUIRED_FIELDS = ["name"]

    class Meta:
        db_table = "users"
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["role"], name="users_role_idx"),
        ]

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_staff(self) -> bool:
        return self.is_admin

    def __str__(self) -> str:
        return f"{self.email} ({self.role})"
