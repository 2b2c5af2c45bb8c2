# app/entrypoints/api/routers/listings.py
from __future__ import annotations

import logging
from typing import Any, Callable

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_audit_session_factory, get_pipeline, get_sync_guard, require_api_key
from ....adapters.repos.properties import PropertyRepository
from ....db import get_session
from ....domain.errors import (
    IdentifierUnresolved,
    InvalidListingUrl,
    ListingImportError,
    PropertyNotFound,
    SyncInProgress,
)
from ....domain.reconcile import DiffDecision, FieldDiff, format_for_display
from ....models import Property
from ....schemas import (
    CommitFailureOut,
    CommitOut,
    CommitRequest,
    FieldDiffOut,
    ImportOut,
    ImportRequest,
    PropertyOut,
    SaveImportRequest,
    SyncOut,
    SyncRequest,
)
from ....service_layer import audit
from ....service_layer.sync_guard import SyncGuard
from ....service_layer.use_cases.import_listing import ListingImportPipeline
from ....service_layer.use_cases.sync_property import commit_property_diffs, sync_property

log = logging.getLogger(__name__)

router = APIRouter(tags=["listings"], dependencies=[Depends(require_api_key)])

_STATUS_BY_ERROR: tuple[tuple[type[ListingImportError], int], ...] = (
    (InvalidListingUrl, 400),
    (IdentifierUnresolved, 422),
    (PropertyNotFound, 404),
    (SyncInProgress, 409),
)


def _http_error(e: ListingImportError) -> HTTPException:
    for cls, status in _STATUS_BY_ERROR:
        if isinstance(e, cls):
            return HTTPException(status_code=status, detail={"error": e.category, "message": str(e)})
    return HTTPException(status_code=502, detail={"error": e.category, "message": str(e)})


def _enum_value(v: Any) -> Any:
    return getattr(v, "value", v)


def _property_out(prop: Property) -> PropertyOut:
    return PropertyOut(
        id=prop.id,
        organization_id=prop.organization_id,
        address=prop.address,
        city=prop.city,
        state=prop.state,
        zip_code=prop.zip_code,
        bedrooms=prop.bedrooms,
        bathrooms=prop.bathrooms,
        square_feet=prop.square_feet,
        property_type=_enum_value(prop.property_type),
        rent_price=prop.rent_price,
        deposit_amount=prop.deposit_amount,
        application_fee=prop.application_fee,
        description=prop.description,
        pet_policy=prop.pet_policy,
        status=_enum_value(prop.status),
        special_notes=prop.special_notes,
        source_listing_id=prop.source_listing_id,
        created_at=prop.created_at,
    )


def _diff_out(d: FieldDiff) -> FieldDiffOut:
    shown_current, shown_incoming = format_for_display(d)
    return FieldDiffOut(
        field_key=d.field_key,
        label=d.label,
        current_display=d.current_display,
        incoming_display=d.incoming_display,
        display_current=shown_current,
        display_incoming=shown_incoming,
        decision=d.decision.value,
    )


@router.post("/listings/import", response_model=ImportOut)
async def import_listing(
    body: ImportRequest,
    background_tasks: BackgroundTasks,
    pipeline: ListingImportPipeline = Depends(get_pipeline),
    audit_sessions: Callable[[], Any] = Depends(get_audit_session_factory),
) -> ImportOut:
    try:
        result = await pipeline.run(body.listing_url, body.organization_id)
    except ListingImportError as e:
        log.error(
            "listing import failed url=%s org=%s category=%s err=%s",
            body.listing_url,
            body.organization_id,
            e.category,
            e,
        )
        # BackgroundTasks only run with a returned response
        await audit.record_audit_event(
            audit.LISTING_IMPORT_FAILED,
            audit.import_failed_payload(body.listing_url, body.organization_id, e),
            audit_sessions,
        )
        raise _http_error(e)

    log.info(
        "listing import url=%s org=%s tier=%s strategies=%s",
        result.source_url,
        body.organization_id,
        result.tier.value,
        ",".join(result.strategies) or "-",
    )
    return ImportOut(
        source_url=result.source_url,
        listing_id=result.listing_id,
        tier=result.tier.value,
        strategies=list(result.strategies),
        limited_data=result.limited_data,
        provider_meta=result.provider_meta,
        **result.as_property_fields(),
    )


@router.post("/listings/import/save", response_model=PropertyOut, status_code=201)
async def save_import(
    body: SaveImportRequest,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_session),
    audit_sessions: Callable[[], Any] = Depends(get_audit_session_factory),
) -> PropertyOut:
    fields = body.model_dump(exclude={"organization_id"})
    try:
        prop = await PropertyRepository(session).create_from_import(body.organization_id, fields)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    await session.commit()

    log.info("listing import saved property_id=%s org=%s", prop.id, body.organization_id)
    background_tasks.add_task(
        audit.record_audit_event,
        audit.LISTING_IMPORTED,
        audit.import_saved_payload(prop),
        audit_sessions,
    )
    return _property_out(prop)


@router.post("/properties/{property_id}/sync", response_model=SyncOut)
async def sync_listing(
    property_id: int,
    body: SyncRequest,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_session),
    pipeline: ListingImportPipeline = Depends(get_pipeline),
    guard: SyncGuard = Depends(get_sync_guard),
    audit_sessions: Callable[[], Any] = Depends(get_audit_session_factory),
) -> SyncOut:
    try:
        outcome = await sync_property(
            session,
            property_id=property_id,
            organization_id=body.organization_id,
            listing_url=body.listing_url,
            pipeline=pipeline,
            guard=guard,
        )
    except ListingImportError as e:
        log.error(
            "property sync failed property_id=%s url=%s org=%s category=%s err=%s",
            property_id,
            body.listing_url,
            body.organization_id,
            e.category,
            e,
        )
        await audit.record_audit_event(
            audit.PROPERTY_SYNC_FAILED,
            audit.sync_failed_payload(property_id, body.listing_url, body.organization_id, e),
            audit_sessions,
        )
        raise _http_error(e)

    background_tasks.add_task(
        audit.record_audit_event,
        audit.PROPERTY_SYNCED,
        audit.synced_payload(property_id, body.organization_id, outcome.result, outcome.diffs),
        audit_sessions,
    )
    return SyncOut(
        status=outcome.status,
        property_id=property_id,
        tier=outcome.result.tier.value,
        limited_data=outcome.result.limited_data,
        strategies=list(outcome.result.strategies),
        diffs=[_diff_out(d) for d in outcome.diffs],
    )


@router.post("/properties/{property_id}/sync/commit", response_model=CommitOut)
async def commit_sync(
    property_id: int,
    body: CommitRequest,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_session),
    audit_sessions: Callable[[], Any] = Depends(get_audit_session_factory),
) -> CommitOut:
    diffs = [
        FieldDiff(
            field_key=d.field_key,
            label=d.label or d.field_key,
            current_display=d.current_display,
            incoming_display=d.incoming_display,
            decision=DiffDecision(d.decision),
        )
        for d in body.diffs
    ]
    try:
        outcome = await commit_property_diffs(
            session,
            property_id=property_id,
            organization_id=body.organization_id,
            diffs=diffs,
        )
    except PropertyNotFound as e:
        raise _http_error(e)
    await session.commit()

    failed_fields = [f.field_key for f in outcome.failures]
    background_tasks.add_task(
        audit.record_audit_event,
        audit.PROPERTY_SYNC_COMMITTED,
        audit.committed_payload(property_id, body.organization_id, outcome.applied_fields, failed_fields),
        audit_sessions,
    )
    return CommitOut(
        applied=outcome.applied,
        applied_fields=outcome.applied_fields,
        skipped=list(outcome.skipped),
        failures=[
            CommitFailureOut(field_key=f.field_key, incoming_display=f.incoming, error=f.reason)
            for f in outcome.failures
        ],
    )
