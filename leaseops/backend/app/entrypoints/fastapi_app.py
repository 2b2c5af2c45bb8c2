# app/entrypoints/fastapi_app.py
from __future__ import annotations

import logging

from fastapi import FastAPI

from ..config import settings
from ..db import engine
from ..jobs.scheduler import build_scheduler
from ..models import Base
from .api.routers import health, jobs, listings


def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = FastAPI(title="LeaseOps - Listing Import")
    scheduler = build_scheduler() if settings.AUDIT_DISPATCH_ENABLED else None

    @app.on_event("startup")
    async def _startup() -> None:
        # Single place where DB tables are created in dev.
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        if scheduler is not None:
            scheduler.start()

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        if scheduler is not None:
            scheduler.shutdown(wait=False)

    # Routers
    app.include_router(health.router)
    app.include_router(listings.router)
    app.include_router(jobs.router)

    return app
