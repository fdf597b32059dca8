from __future__ import annotations

from fastapi import APIRouter
from core.config import get_settings

router = APIRouter(tags=["health"])

@router.get("/health", summary="Health check")
def health():
    """
    Health endpoint minimale.
    """
    settings = get_settings()
    return {
        "status": "ok",
        "line_profile": settings.market_line_profile,
        "context_default_last": settings.context_default_last,
        "prometheus_enabled": settings.enable_prometheus_exporter,
    }
