from __future__ import annotations

import asyncio
import logging

from app.config import settings
from app.jobs.scheduler import build_scheduler


def _quiet_logging() -> None:
    # Root defaults
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(levelname)s:%(name)s:%(message)s",
    )

    # Quiet the usual offenders
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)


async def main() -> None:
    _quiet_logging()
    log = logging.getLogger(__name__)

    if not settings.AUDIT_WEBHOOK_URL:
        log.warning("AUDIT_WEBHOOK_URL is not set; audit events will stay pending")

    scheduler = build_scheduler()
    scheduler.start()
    log.info("Audit dispatch scheduler started (every %s min)", settings.AUDIT_DISPATCH_INTERVAL_MINUTES)

    try:
        while True:
            await asyncio.sleep(3600)
    except (KeyboardInterrupt, asyncio.CancelledError):
        scheduler.shutdown()
        log.info("Scheduler stopped")


if __name__ == "__main__":
    asyncio.run(main())
