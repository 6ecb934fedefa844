"""Health and readiness check routes."""

import logging

from fastapi import APIRouter, Request

from config import settings

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/ready")
async def ready() -> dict:
    """Lightweight readiness check — no external calls."""
    return {"status": "ok", "service": "letterbox-api", "commit": settings.git_sha}


@router.get("/health")
async def health(request: Request) -> dict:
    """Readiness plus config warnings and label cache size."""
    warnings = settings.validate()
    return {
        "status": "degraded" if warnings else "ok",
        "service": "letterbox-api",
        "commit": settings.git_sha,
        "config_warnings": warnings,
        "label_cache_entries": len(request.app.state.newsletter_label_cache),
    }
