"""Account service layer (Use Cases).

Registration, credential checks and user administration.  Token
issuance stays in the API layer (SimpleJWT); this service only decides
who the user is.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

import structlog
from django.db import IntegrityError, transaction

from modules.accounts.authorization import Action, Caller, ensure_authorized
from modules.accounts.constants import UserRole
from modules.accounts.exceptions import (
    EmailAlreadyRegistered,
    InvalidCredentials,
    UserNotFound,
)

if TYPE_CHECKING:
    from modules.accounts.dtos import LoginDTO, RegisterUserDTO
    from modules.accounts.models import User
    from modules.accounts.repositories.interfaces import IUserRepository

logger = structlog.get_logger(__name__)


class AccountService:
    """Application service for user accounts.

    Receives an ``IUserRepository`` via constructor injection.
    """

    def __init__(self, repository: IUserRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def register(self, dto: RegisterUserDTO) -> User:
        """Create a customer account (role USER).

        Raises:
            EmailAlreadyRegistered: the email is taken (any letter case).
        """
        log = logger.bind(email=dto.email)

        if self._repo.get_by_email(dto.email):
            log.warning("user.duplicate_email")
            raise EmailAlreadyRegistered()

        try:
            with transaction.atomic():
                user = self._repo.create_user(
                    name=dto.name,
                    email=dto.email,
                    password=dto.password,
                    role=UserRole.USER,
                )
        except IntegrityError as exc:
            log.warning("user.duplicate_email", race=True)
            raise EmailAlreadyRegistered() from exc

        log.info("user.registered", user_id=str(user.id))
        return user

    def authenticate(self, dto: LoginDTO) -> User:
        """Resolve a user from email and password.

        Raises:
            InvalidCredentials: unknown email, wrong password or inactive
                account; the three cases are indistinguishable to the caller.
        """
        user = self._repo.get_by_email(dto.email)
        if user is None or not user.is_active or not user.check_password(dto.password):
            logger.warning("user.login_failed", email=dto.email)
            raise InvalidCredentials()

        logger.info("user.logged_in", user_id=str(user.id))
        return user

    @transaction.atomic
    def promote_to_admin(self, user_id: Any, caller: Caller) -> User:
        """Grant the ADMIN role.

        Raises:
            AccessDenied: caller is not an administrator.
            UserNotFound: no such user.
        """
        ensure_authorized(Action.MANAGE_USERS, caller)

        user = self._repo.get_by_id(user_id)
        if not user:
            raise UserNotFound(f"User {user_id} not found.")

        if user.role != UserRole.ADMIN:
            user.role = UserRole.ADMIN
            self._repo.save(user)
            logger.info(
                "user.promoted",
                user_id=str(user.id),
                promoted_by=str(caller.user_id),
            )
        return user

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_user(self, user_id: Any) -> User:
        """Raises ``UserNotFound`` if the user does not exist."""
        user = self._repo.get_by_id(user_id)
        if not user:
            raise UserNotFound(f"User {user_id} not found.")
        return user

    def get_user_for_caller(self, user_id: Any, caller: Caller) -> User:
        ensure_authorized(Action.MANAGE_USERS, caller)
        return self.get_user(user_id)

    def list_users(
        self,
        caller: Caller,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[User]:
        ensure_authorized(Action.MANAGE_USERS, caller)
        return self._repo.list(filters)
