"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


def _get_osrm_health_check():
    """Lazy import to avoid startup failures."""
    from ...services.directions.osrm_client import check_health as osrm_health_check
    return osrm_health_check


@router.get("/health/directions", status_code=status.HTTP_200_OK)
def health_directions() -> dict:
    """Check the configured route geometry provider."""
    provider = settings.directions_provider
    if provider == "google":
        # No free probe endpoint; a configured key is the best we can report
        return {"service": provider, "healthy": bool(settings.google_api_key)}
    try:
        osrm_health_check = _get_osrm_health_check()
        return {"service": provider, "healthy": osrm_health_check()}
    except Exception as e:
        return {"service": provider, "healthy": False, "error": str(e)}
