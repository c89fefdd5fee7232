from fastapi import APIRouter, Depends

from insight_api.core.config import Settings
from insight_api.deps.state import get_settings

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health(settings: Settings = Depends(get_settings)) -> dict[str, str | bool]:
    """
    Liveness check.

    This is the one GET path the SPA fallback does not answer; it sits under
    `/api` so it cannot collide with a client-side route.
    """
    return {
        "status": "ok",
        "service": settings.api_name,
        "version": settings.api_version,
        "upstream_configured": bool(settings.dashscope_api_key),
    }
