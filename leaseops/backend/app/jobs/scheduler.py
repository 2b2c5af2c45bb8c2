# app/jobs/scheduler.py
from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from sqlalchemy import select, func, or_

from ..config import settings
from ..db import async_session
from ..models import OutboxEvent, OutboxStatus
from ..integrations.services.outbox import dispatch_pending_events

log = logging.getLogger(__name__)


async def _run_dispatch_quiet() -> None:
    """
    Quiet-by-default posture:
    - If no audit webhook is configured, do nothing.
    - If there are no due outbox events, do nothing.
    """
    if not settings.AUDIT_WEBHOOK_URL:
        return

    async with async_session() as session:
        pending = (
            await session.execute(
                select(func.count())
                .select_from(OutboxEvent)
                .where(OutboxEvent.status == OutboxStatus.pending)
                .where(or_(OutboxEvent.next_attempt_at.is_(None), OutboxEvent.next_attempt_at <= datetime.utcnow()))
            )
        ).scalar_one()

        if int(pending) == 0:
            return

    # do actual dispatch outside the count transaction
    async with async_session() as session:
        result = await dispatch_pending_events(session=session)
        await session.commit()
    log.info("audit dispatch delivered=%s failed=%s", result["delivered"], result["failed"])


def build_scheduler() -> AsyncIOScheduler:
    sched = AsyncIOScheduler()

    sched.add_job(
        lambda: asyncio.create_task(_run_dispatch_quiet()),
        "interval",
        minutes=settings.AUDIT_DISPATCH_INTERVAL_MINUTES,
    )

    return sched
