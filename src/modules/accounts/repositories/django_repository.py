"""Django ORM implementation of the User repository."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.accounts.models import User
from modules.accounts.repositories.interfaces import IUserRepository

logger = structlog.get_logger(__name__)


class UserDjangoRepository(IUserRepository):
    """Concrete User repository backed by Django ORM."""

    def get_by_id(self, id: Any) -> Optional[User]:
        """Returns ``None`` for non-existent or malformed IDs."""
        try:
            return User.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_by_email(self, email: str) -> Optional[User]:
        return User.objects.filter(email__iexact=email).first()

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[User]:
        queryset = User.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    @transaction.atomic
    def create_user(self, name: str, email: str, password: str, role: str) -> User:
        user = User.objects.create_user(email=email, password=password, name=name, role=role)
        logger.info("user.saved", user_id=str(user.id), is_new=True)
        return user

    @transaction.atomic
    def save(self, entity: User) -> User:
        is_new = entity._state.adding
        entity.save()
        logger.info("user.saved", user_id=str(entity.id), is_new=is_new)
        return entity

    @transaction.atomic
    def delete(self, id: Any) -> bool:
        user = self.get_by_id(id)
        if not user:
            return False
        user.delete()
        logger.info("user.deleted", user_id=str(id))
        return True
