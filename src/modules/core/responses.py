"""Uniform response envelope: ``{"success", "message", "data"}``."""

from __future__ import annotations

from typing import Any

from rest_framework import status as http_status
from rest_framework.response import Response


def envelope(
    data: Any = None,
    message: str = "",
    success: bool = True,
    errors: Any = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {"success": success, "message": message, "data": data}
    if errors is not None:
        body["errors"] = errors
    return body


def ok(data: Any = None, message: str = "", status: int = http_status.HTTP_200_OK) -> Response:
    """Successful DRF response wrapped in the envelope."""
    return Response(envelope(data=data, message=message), status=status)


def created(data: Any = None, message: str = "") -> Response:
    return ok(data, message, status=http_status.HTTP_201_CREATED)
