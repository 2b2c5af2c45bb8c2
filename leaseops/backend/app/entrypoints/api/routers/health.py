# app/entrypoints/api/routers/health.py
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from ..deps import require_api_key
from ....config import settings

router = APIRouter(tags=["health"])


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/debug/config", dependencies=[Depends(require_api_key)])
def debug_config() -> dict[str, Any]:
    def _redact(v: str | None) -> str | None:
        if not v:
            return v
        if len(v) <= 8:
            return "***"
        return v[:4] + "***" + v[-4:]

    return {
        "ENV": settings.ENV,
        "LEASEOPS_DB_URL": settings.LEASEOPS_DB_URL,
        "RAPIDAPI_HOST": settings.RAPIDAPI_HOST,
        "RAPIDAPI_KEY": _redact(settings.RAPIDAPI_KEY),
        "LISTING_DOMAIN": settings.LISTING_DOMAIN,
        "MAX_LISTING_PHOTOS": settings.MAX_LISTING_PHOTOS,
        "AUDIT_WEBHOOK_SET": bool(settings.AUDIT_WEBHOOK_URL),
        "AUDIT_DISPATCH_ENABLED": settings.AUDIT_DISPATCH_ENABLED,
    }
