"""Role and ownership rules for every protected operation.

``is_authorized`` is a pure function of the action, the caller and the
owner of the resource (when there is one), so it can be checked without
touching the database.  Services call ``ensure_authorized`` before doing
any work.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Optional
from uuid import UUID

import structlog

from modules.accounts.constants import UserRole
from modules.accounts.exceptions import AccessDenied

if TYPE_CHECKING:
    from modules.accounts.models import User

logger = structlog.get_logger(__name__)


class Action(StrEnum):
    PLACE_ORDER = "place_order"
    VIEW_ORDER = "view_order"
    LIST_OWN_ORDERS = "list_own_orders"
    CANCEL_ORDER = "cancel_order"
    UPDATE_ORDER_STATUS = "update_order_status"
    LIST_ALL_ORDERS = "list_all_orders"
    MANAGE_CATALOG = "manage_catalog"
    MANAGE_USERS = "manage_users"


ADMIN_ONLY: frozenset[Action] = frozenset(
    {
        Action.UPDATE_ORDER_STATUS,
        Action.LIST_ALL_ORDERS,
        Action.MANAGE_CATALOG,
        Action.MANAGE_USERS,
    }
)


@dataclass(frozen=True)
class Caller:
    """Identity of whoever is invoking a service operation."""

    user_id: UUID
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @classmethod
    def from_user(cls, user: User) -> Caller:
        return cls(user_id=user.id, role=user.role)


def is_authorized(
    action: Action,
    caller_role: str,
    caller_id: Any,
    resource_owner_id: Optional[Any] = None,
) -> bool:
    """Decide whether *caller* may perform *action*.

    - ``PLACE_ORDER``: customers only; administrators do not place orders.
    - ``CANCEL_ORDER``: the customer who owns the order.
    - ``VIEW_ORDER``: the owner, or any administrator.
    - ``LIST_OWN_ORDERS``: any authenticated role.
    - everything else: administrators only.
    """
    is_owner = resource_owner_id is not None and str(caller_id) == str(resource_owner_id)

    if action == Action.PLACE_ORDER:
        return caller_role == UserRole.USER
    if action == Action.CANCEL_ORDER:
        return caller_role == UserRole.USER and is_owner
    if action == Action.VIEW_ORDER:
        return caller_role == UserRole.ADMIN or is_owner
    if action == Action.LIST_OWN_ORDERS:
        return caller_role in (UserRole.USER, UserRole.ADMIN)
    if action in ADMIN_ONLY:
        return caller_role == UserRole.ADMIN
    return False


def ensure_authorized(
    action: Action,
    caller: Caller,
    resource_owner_id: Optional[Any] = None,
) -> None:
    """Raise ``AccessDenied`` unless *caller* may perform *action*."""
    if is_authorized(action, caller.role, caller.user_id, resource_owner_id):
        return
    logger.warning(
        "authorization.denied",
        action=str(action),
        caller_id=str(caller.user_id),
        caller_role=caller.role,
    )
    raise AccessDenied()
