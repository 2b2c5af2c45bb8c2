# app/service_layer/sync_guard.py
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from ..domain.errors import SyncInProgress


class SyncGuard:
    """
    At most one sync in flight per (organization, property) in this process.
    A second caller is rejected rather than queued, so two diff panels never overlap.
    """

    def __init__(self) -> None:
        self._inflight: set[tuple[str, int]] = set()

    def is_busy(self, organization_id: str, property_id: int) -> bool:
        return (organization_id, property_id) in self._inflight

    @asynccontextmanager
    async def hold(self, organization_id: str, property_id: int) -> AsyncIterator[None]:
        key = (organization_id, property_id)
        # check-and-add has no await in between, so it is atomic on the event loop
        if key in self._inflight:
            raise SyncInProgress(f"A sync for property {property_id} is already running.")
        self._inflight.add(key)
        try:
            yield
        finally:
            self._inflight.discard(key)


sync_guard = SyncGuard()
