"""User repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.accounts.models import User


class IUserRepository(IRepository["User"]):
    """Repository contract for user accounts."""

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive look-up by login email."""

    @abstractmethod
    def create_user(self, name: str, email: str, password: str, role: str) -> User:
        """Create a user, hashing *password*."""
