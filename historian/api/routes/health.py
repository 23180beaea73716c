"""Health check endpoints for the Historian API.

- /health - Service health including LLM credential presence
- /health/db - Connection pool and schema health
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter

from historian.config import APP_VERSION
from historian.infrastructure import settings
from historian.llm.gemini import llm_credentials_configured
from historian.observability.telemetry import get_latency_stats

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """Health check endpoint.

    Returns service status, version, and credential readiness for
    Vertex AI / Gemini (does not make an API call, only checks presence).
    """
    return {
        "status": "healthy",
        "service": "Historian API",
        "version": APP_VERSION,
        "timestamp": datetime.now(UTC).isoformat(),
        "llm": {
            "ready": llm_credentials_configured(),
            "gemini_api_key": bool(settings.GEMINI_API_KEY),
            "google_cloud_project": bool(settings.GOOGLE_CLOUD_PROJECT),
            "latency": get_latency_stats("enrichment.client.latency"),
        },
        "access_gate": {"configured": bool(settings.HISTORIAN_ACCESS_KEY)},
    }


@router.get("/health/db")
async def database_health() -> dict[str, Any]:
    """
    Database health check endpoint.

    Returns connection pool health metrics and whether the schema is intact.
    Alerts if pool usage exceeds 80%.
    """
    from historian.infrastructure.database import get_db_connection, get_pool_stats
    from historian.infrastructure.database_schema import validate_schema

    try:
        with get_db_connection() as conn:
            validate_schema(conn)
        schema_ok = True
    except (FileNotFoundError, ValueError):
        schema_ok = False

    stats = get_pool_stats()
    usage_percent = stats["usage_percent"]
    degraded = usage_percent > 80 or not schema_ok

    return {
        "status": "degraded" if degraded else "healthy",
        "schema": schema_ok,
        "pool": stats,
        "warning": "Pool usage high" if usage_percent > 80 else None,
    }
