import time

import structlog
from django.core.cache import cache
from django.db import DatabaseError, connection
from django.http import JsonResponse
from django.utils import timezone

from modules.core.models import EventStatus, OutboxEvent

logger = structlog.get_logger(__name__)

_CACHE_PROBE_KEY = "health:probe"


def _timed(probe):
    """Run ``probe`` and describe the outcome as a service entry."""
    started = time.perf_counter()
    probe()
    return {
        "status": "up",
        "response_time_ms": round((time.perf_counter() - started) * 1000, 2),
    }


def _ping_database():
    with connection.cursor() as cursor:
        cursor.execute("SELECT 1")
        cursor.fetchone()


def _ping_cache():
    cache.set(_CACHE_PROBE_KEY, "ok", 10)
    if cache.get(_CACHE_PROBE_KEY) != "ok":
        raise ConnectionError("cache read-back mismatch")


def _outbox_backlog():
    events = OutboxEvent.objects
    return {
        "pending": events.filter(status=EventStatus.PENDING).count(),
        "failed": events.filter(status=EventStatus.FAILED).count(),
    }


def health_check(request):
    """Liveness probe for the database and cache, plus the outbox backlog.

    A large backlog only means the relay worker is behind; it does not make
    the service unhealthy.
    """
    services = {}

    try:
        services["database"] = _timed(_ping_database)
    except DatabaseError:
        logger.exception("health.database_down")
        services["database"] = {"status": "down"}

    try:
        services["cache"] = _timed(_ping_cache)
    except Exception:
        logger.exception("health.cache_down")
        services["cache"] = {"status": "down"}

    if services["database"]["status"] == "up":
        services["outbox"] = _outbox_backlog()

    healthy = all(
        entry.get("status") == "up"
        for name, entry in services.items()
        if name != "outbox"
    )
    verdict = "healthy" if healthy else "unhealthy"
    logger.info("health.checked", status=verdict)

    return JsonResponse(
        {"status": verdict, "timestamp": timezone.now().isoformat(), "services": services},
        status=200 if healthy else 503,
    )
