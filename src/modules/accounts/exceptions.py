"""Account domain exceptions."""

from __future__ import annotations

from rest_framework import status

from modules.core.exceptions import ConflictError, DomainError, NotFoundError, UnauthorizedError


class UserNotFound(NotFoundError):
    default_message = "User not found."


class EmailAlreadyRegistered(ConflictError):
    default_message = "Email is already registered."


class InvalidCredentials(DomainError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid email or password."


class AccessDenied(UnauthorizedError):
    """The caller's role or ownership does not permit the action."""
