# app/entrypoints/api/deps.py
from __future__ import annotations

from fastapi import Header, HTTPException

from ...config import settings
from ...db import AsyncSessionLocal
from ...service_layer.sync_guard import SyncGuard, sync_guard
from ...service_layer.use_cases.import_listing import ListingImportPipeline


def require_api_key(x_api_key: str | None = Header(default=None, alias="X-API-Key")) -> None:
    if settings.API_KEY:
        if not x_api_key or x_api_key != settings.API_KEY:
            raise HTTPException(status_code=401, detail="Invalid API key")


def get_pipeline() -> ListingImportPipeline:
    # clients read settings at construction, so tests can override this dependency
    return ListingImportPipeline()


def get_sync_guard() -> SyncGuard:
    return sync_guard


def get_audit_session_factory():
    # audit events are written after the response, outside the request session
    return AsyncSessionLocal
