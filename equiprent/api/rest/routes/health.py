"""
Health check endpoints.

Provides:
- /health - Overall health status
- /health/live - Liveness check
"""

from datetime import datetime, timezone
from typing import Literal

from fastapi import APIRouter

from equiprent import __version__
from equiprent.api.rest.models import HealthResponse
from equiprent.api.rest.dependencies import get_app_state

router = APIRouter(prefix="/api/v1/health", tags=["Health"])


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """
    Overall health check.

    Returns status of the document and object stores.
    """
    state = get_app_state()
    components = {"api": "healthy"}

    try:
        services = state.services
        services.document_store.get("machines", "__health__")
        components["document_store"] = "healthy"
        services.object_store.exists(services.object_store.resolve_url("__health__"))
        components["object_store"] = "healthy"
    except Exception as e:
        components.setdefault("document_store", "unhealthy")
        components.setdefault("object_store", "unhealthy")
        components["error"] = type(e).__name__

    overall_status: Literal["healthy", "degraded", "unhealthy"] = (
        "unhealthy" if "unhealthy" in components.values() else "healthy"
    )
    return HealthResponse(
        status=overall_status,
        version=__version__,
        timestamp=datetime.now(timezone.utc),
        components=components,
    )


@router.get("/live")
def liveness_check() -> dict:
    """
    Liveness check for orchestrators.

    Returns 200 if process is alive.
    """
    return {
        "alive": True,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
