from __future__ import annotations

import json
import logging
import random
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from ...config import settings
from ...models import OutboxEvent, OutboxStatus
from ..base import AuditEnvelope, AuditSink
from ..webhook import WebhookSink

log = logging.getLogger(__name__)


# Backoff configuration
_BACKOFF_BASE_SECONDS = 5.0
_BACKOFF_CAP_SECONDS = 3600.0  # 1 hour cap


async def enqueue_event(session: AsyncSession, event_type: str, payload: dict[str, Any]) -> OutboxEvent:
    ev = OutboxEvent(
        event_type=event_type,
        payload_json=json.dumps(payload, default=str),
        status=OutboxStatus.pending,
        attempts=0,
        last_error=None,
        next_attempt_at=None,
    )
    session.add(ev)
    await session.flush()
    return ev


def build_sinks() -> list[AuditSink]:
    if not settings.AUDIT_WEBHOOK_URL:
        return []
    return [WebhookSink(url=settings.AUDIT_WEBHOOK_URL, secret=settings.AUDIT_WEBHOOK_SECRET)]


def _compute_backoff_seconds(attempts_after_increment: int) -> float:
    """
    Exponential backoff with jitter.
    attempts_after_increment: 1,2,3,... (after we increment attempts)
    """
    exp = _BACKOFF_BASE_SECONDS * (2 ** max(0, attempts_after_increment - 1))
    capped = min(exp, _BACKOFF_CAP_SECONDS)
    jitter = random.uniform(0.0, min(_BACKOFF_BASE_SECONDS, capped))
    return capped + jitter


async def dispatch_pending_events(
    session: AsyncSession,
    batch_size: int | None = None,
    max_attempts: int | None = None,
    sinks: list[AuditSink] | None = None,
) -> dict[str, Any]:
    """
    Deliver pending audit events to the configured sinks.
    Quiet-by-default:
      - If there are no sinks, returns immediately without doing any HTTP calls.
    Reliability:
      - Exponential backoff + jitter on failures, stored in next_attempt_at.
      - Marks as failed if max attempts reached.
    """
    batch_size = batch_size or settings.AUDIT_DISPATCH_BATCH_SIZE
    max_attempts = max_attempts or settings.AUDIT_MAX_ATTEMPTS

    sinks = build_sinks() if sinks is None else sinks
    if not sinks:
        return {"delivered": 0, "failed": 0, "sinks": 0, "events": 0, "skipped_no_sinks": 1}

    now = datetime.utcnow()

    stmt = (
        select(OutboxEvent)
        .where(OutboxEvent.status == OutboxStatus.pending)
        .where(OutboxEvent.attempts < max_attempts)
        .where(or_(OutboxEvent.next_attempt_at.is_(None), OutboxEvent.next_attempt_at <= now))
        .order_by(OutboxEvent.id.asc())
        .limit(batch_size)
    )
    events = (await session.execute(stmt)).scalars().all()

    delivered = 0
    failed = 0

    for ev in events:
        envelope = AuditEnvelope.from_payload(ev.id, ev.event_type, json.loads(ev.payload_json), ev.created_at)

        ok_all = True
        last_err = None

        for sink in sinks:
            res = await sink.deliver(envelope)
            if not res.ok:
                ok_all = False
                last_err = res.error

        # update attempt accounting
        ev.attempts += 1
        ev.last_error = last_err

        if ok_all:
            ev.status = OutboxStatus.delivered
            ev.delivered_at = datetime.utcnow()
            ev.next_attempt_at = None
            delivered += 1
        else:
            if ev.attempts >= max_attempts:
                ev.status = OutboxStatus.failed
                ev.next_attempt_at = None
                log.warning(
                    "audit event gave up id=%s type=%s org=%s attempts=%s err=%s",
                    ev.id,
                    ev.event_type,
                    envelope.organization_id,
                    ev.attempts,
                    last_err,
                )
                failed += 1
            else:
                backoff_s = _compute_backoff_seconds(ev.attempts)
                ev.next_attempt_at = datetime.utcnow() + timedelta(seconds=backoff_s)

        await session.flush()

    return {
        "delivered": delivered,
        "failed": failed,
        "sinks": len(sinks),
        "events": len(events),
        "skipped_no_sinks": 0,
    }
