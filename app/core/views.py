"""
Core views providing infrastructure endpoints.

Views here are not part of the business domain; they exist for
deployment tooling (Docker health checks, load balancers, probes).
"""

from channels.layers import get_channel_layer
from django.core.cache import cache
from django.db import connection
from django.http import JsonResponse


def _database_status() -> str:
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
    except Exception:
        return "disconnected"
    return "connected"


def _cache_status() -> str:
    try:
        cache.set("health_check", "ok", timeout=1)
        if cache.get("health_check") == "ok":
            return "connected"
    except Exception:
        pass
    return "disconnected"


def health_check(request):
    """
    Health check endpoint for monitoring and orchestration.

    Returns:
        JsonResponse with status and component health:
        - status: "healthy" or "unhealthy"
        - database: "connected" or "disconnected"
        - cache: "connected" or "disconnected"
        - channel_layer: "configured" or "missing"

    HTTP Status Codes:
        200: Database reachable (cache and realtime degrade gracefully)
        503: Database unreachable

    Example Response:
        {
            "status": "healthy",
            "database": "connected",
            "cache": "connected",
            "channel_layer": "configured"
        }
    """
    database = _database_status()
    is_healthy = database == "connected"

    health_status = {
        "status": "healthy" if is_healthy else "unhealthy",
        "database": database,
        # Cache failure is not critical; realtime push is best-effort
        "cache": _cache_status(),
        "channel_layer": "configured" if get_channel_layer() is not None else "missing",
    }

    return JsonResponse(health_status, status=200 if is_healthy else 503)
