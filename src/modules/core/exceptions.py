"""Error taxonomy shared by every module and its HTTP translation.

Services raise subclasses of ``DomainError``; module-level exception
modules (``modules.products.exceptions`` etc.) specialise them.  The DRF
``EXCEPTION_HANDLER`` below renders both domain errors and framework
errors inside the uniform response envelope.
"""

from __future__ import annotations

from typing import Any

import structlog
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

from modules.core.responses import envelope

logger = structlog.get_logger(__name__)


class DomainError(Exception):
    """Base class for recoverable, user-facing business errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Request could not be processed."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class NotFoundError(DomainError):
    """A referenced product, order or user does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found."


class UnavailableError(DomainError):
    """A referenced resource exists but cannot be used (e.g. inactive)."""

    default_message = "Resource is not available."


class InsufficientStockError(DomainError):
    """Requested quantity exceeds the available stock."""

    default_message = "Insufficient stock."


class InvalidTransitionError(DomainError):
    """Illegal status change (e.g. cancelling a non-pending order)."""

    default_message = "Invalid status transition."


class UnauthorizedError(DomainError):
    """Ownership or role violation."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You do not have permission to perform this action."


class ConflictError(DomainError):
    """Uniqueness or referential conflict (duplicate email, product in use)."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource conflict."


# ---------------------------------------------------------------------------
# DRF exception handler
# ---------------------------------------------------------------------------


def envelope_exception_handler(exc: Exception, context: dict[str, Any]) -> Response | None:
    """Render domain and DRF errors as ``{"success": false, ...}`` envelopes.

    Returns ``None`` for unexpected exceptions so Django's 500 handling
    (and logging) still applies.
    """
    view = context.get("view")
    view_name = type(view).__name__ if view is not None else None

    if isinstance(exc, DomainError):
        logger.warning(
            "api.domain_error",
            error=type(exc).__name__,
            detail=exc.message,
            status_code=exc.status_code,
            view=view_name,
        )
        return Response(
            envelope(data=None, message=exc.message, success=False),
            status=exc.status_code,
        )

    response = exception_handler(exc, context)
    if response is None:
        return None

    errors = None
    if isinstance(exc, ValidationError):
        message = "Validation failed."
        errors = response.data
    elif isinstance(response.data, dict) and "detail" in response.data:
        message = str(response.data["detail"])
    else:
        message = str(response.data)

    logger.info(
        "api.request_rejected",
        error=type(exc).__name__,
        status_code=response.status_code,
        view=view_name,
    )
    response.data = envelope(data=None, message=message, success=False, errors=errors)
    return response


def parse_dto(dto_class: type[BaseModel], **data: Any) -> Any:
    """Build a service DTO, reporting Pydantic errors as a DRF 400."""
    try:
        return dto_class(**data)
    except PydanticValidationError as exc:
        errors: dict[str, list[str]] = {}
        for error in exc.errors():
            field = ".".join(str(part) for part in error["loc"]) or "non_field_errors"
            errors.setdefault(field, []).append(error["msg"])
        raise ValidationError(errors) from exc
