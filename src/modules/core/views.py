"""Liveness endpoint for load balancers and container orchestrators."""

import time
from typing import Any, Callable, Dict

import structlog
from django.core.cache import cache
from django.db import connections
from django.http import HttpRequest, JsonResponse
from django.utils import timezone

logger = structlog.get_logger(__name__)

HEALTH_CACHE_KEY = "orders:health_check"


def _probe_database() -> None:
    conn = connections["default"]
    conn.ensure_connection()
    with conn.cursor() as cursor:
        cursor.execute("SELECT 1")
        cursor.fetchone()


def _probe_cache() -> None:
    cache.set(HEALTH_CACHE_KEY, "ok", 10)
    if cache.get(HEALTH_CACHE_KEY) != "ok":
        raise ConnectionError("Cache read-back mismatch")


PROBES: Dict[str, Callable[[], None]] = {
    "database": _probe_database,
    "cache": _probe_cache,
}


def _run_probe(name: str, probe: Callable[[], None]) -> Dict[str, Any]:
    start = time.monotonic()
    try:
        probe()
    except Exception:
        logger.exception("health_check.probe_failed", service=name)
        return {"status": "down"}
    return {"status": "up", "response_time_ms": round((time.monotonic() - start) * 1000, 2)}


def health_check(request: HttpRequest) -> JsonResponse:
    """200 when every dependency answers, 503 otherwise."""
    services = {name: _run_probe(name, probe) for name, probe in PROBES.items()}
    healthy = all(result["status"] == "up" for result in services.values())
    status = "healthy" if healthy else "unhealthy"

    logger.info("health_check.completed", status=status)
    return JsonResponse(
        {"status": status, "timestamp": timezone.now().isoformat(), "services": services},
        status=200 if healthy else 503,
    )
