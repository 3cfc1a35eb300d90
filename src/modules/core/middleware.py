"""Request correlation and access logging."""

import re
import time
import uuid
from contextvars import ContextVar
from typing import Callable

import structlog
from django.http import HttpRequest, HttpResponse

REQUEST_ID_HEADER = "X-Request-ID"
# Client supplied IDs are echoed into logs and headers; keep them printable and short.
_VALID_REQUEST_ID = re.compile(r"[A-Za-z0-9._:\-]{1,128}")

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

logger = structlog.get_logger(__name__)


def get_correlation_id() -> str:
    """Correlation ID of the request being served, or ``""`` outside a request."""
    return correlation_id_var.get()


def resolve_correlation_id(header_value: str | None) -> str:
    if header_value and _VALID_REQUEST_ID.fullmatch(header_value):
        return header_value
    return str(uuid.uuid4())


class CorrelationIdMiddleware:
    """Bind a correlation ID to every log line emitted while serving a request.

    A well-formed incoming ``X-Request-ID`` is reused; anything else is
    replaced by a fresh UUID4.  The ID is bound into structlog's context
    variables and echoed back in the response header.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        cid = resolve_correlation_id(request.headers.get(REQUEST_ID_HEADER))
        token = correlation_id_var.set(cid)
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(correlation_id=cid)

        started = time.monotonic()
        log = logger.bind(method=request.method, path=request.path)
        log.info("request_started")
        try:
            response = self.get_response(request)
            log.info(
                "request_finished",
                status_code=response.status_code,
                duration_ms=round((time.monotonic() - started) * 1000, 2),
            )
            response[REQUEST_ID_HEADER] = cid
            return response
        finally:
            correlation_id_var.reset(token)
