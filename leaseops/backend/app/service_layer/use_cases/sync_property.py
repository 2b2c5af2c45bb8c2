# app/service_layer/use_cases/sync_property.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from ...adapters.repos.properties import PropertyRepository
from ...domain.errors import CommitCoercionFailure
from ...domain.reconcile import FieldDiff, compute_diffs, plan_commit
from ...domain.types import ImportResult
from ..sync_guard import SyncGuard, sync_guard
from .import_listing import ListingImportPipeline

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncOutcome:
    result: ImportResult
    diffs: list[FieldDiff]

    @property
    def no_differences(self) -> bool:
        # a blocked page observed nothing, which is not the same as nothing changed
        return not self.diffs and not self.result.limited_data

    @property
    def status(self) -> str:
        if self.diffs:
            return "changes"
        return "no_differences" if self.no_differences else "limited_data"


@dataclass(frozen=True)
class CommitOutcome:
    applied_fields: list[str]
    failures: tuple[CommitCoercionFailure, ...]
    skipped: tuple[str, ...]

    @property
    def applied(self) -> int:
        return len(self.applied_fields)


async def sync_property(
    session: AsyncSession,
    *,
    property_id: int,
    organization_id: str,
    listing_url: str,
    pipeline: ListingImportPipeline,
    guard: SyncGuard = sync_guard,
) -> SyncOutcome:
    """
    Extract fresh data for an existing property and diff it against the stored row.
    Reads only; the row is untouched until commit_property_diffs.
    """
    async with guard.hold(organization_id, property_id):
        prop = await PropertyRepository(session).get_for_org(organization_id, property_id)
        result = await pipeline.run(listing_url, organization_id)
        diffs = compute_diffs(prop, result.snapshot, unobserved=result.unobserved)

    log.info(
        "property sync property_id=%s org=%s tier=%s diffs=%d",
        property_id,
        organization_id,
        result.tier.value,
        len(diffs),
    )
    return SyncOutcome(result=result, diffs=diffs)


async def commit_property_diffs(
    session: AsyncSession,
    *,
    property_id: int,
    organization_id: str,
    diffs: Iterable[FieldDiff],
) -> CommitOutcome:
    """
    Apply the approved diffs in one update. Coercion failures are reported per field
    and never stop the other approved fields. Caller owns the transaction commit.
    """
    repo = PropertyRepository(session)
    prop = await repo.get_for_org(organization_id, property_id)

    plan = plan_commit(diffs)
    written = await repo.update_fields(prop, plan.values)

    for f in plan.failures:
        log.warning(
            "sync commit field rejected property_id=%s org=%s field=%s reason=%s",
            property_id,
            organization_id,
            f.field_key,
            f.reason,
        )
    return CommitOutcome(applied_fields=written, failures=plan.failures, skipped=plan.skipped)
