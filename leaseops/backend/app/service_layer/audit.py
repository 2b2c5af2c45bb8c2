# app/service_layer/audit.py
from __future__ import annotations

import logging
from typing import Any, Callable

from ..db import AsyncSessionLocal
from ..domain.errors import ListingImportError
from ..domain.reconcile import FieldDiff
from ..domain.types import ImportResult
from ..models import Property
from ..integrations.services.outbox import enqueue_event

log = logging.getLogger(__name__)

LISTING_IMPORTED = "listing.imported"
LISTING_IMPORT_FAILED = "listing.import_failed"
PROPERTY_SYNCED = "property.synced"
PROPERTY_SYNC_COMMITTED = "property.sync_committed"
PROPERTY_SYNC_FAILED = "property.sync_failed"


def import_saved_payload(prop: Property) -> dict[str, Any]:
    return {
        "organization_id": prop.organization_id,
        "property_id": prop.id,
        "source_url": prop.source_url,
        "listing_id": prop.source_listing_id,
        "address": prop.address,
        "city": prop.city,
        "state": prop.state,
        "price": prop.rent_price,
    }


def import_failed_payload(listing_url: str, organization_id: str, err: ListingImportError) -> dict[str, Any]:
    return {
        "organization_id": organization_id,
        "source_url": listing_url,
        "error_category": err.category,
        "error": str(err),
    }


def sync_failed_payload(
    property_id: int,
    listing_url: str,
    organization_id: str,
    err: ListingImportError,
) -> dict[str, Any]:
    return {"property_id": property_id, **import_failed_payload(listing_url, organization_id, err)}


def synced_payload(
    property_id: int,
    organization_id: str,
    result: ImportResult,
    diffs: list[FieldDiff],
) -> dict[str, Any]:
    return {
        "organization_id": organization_id,
        "property_id": property_id,
        "source_url": result.source_url,
        "tier": result.tier.value,
        "changed_fields": [d.field_key for d in diffs],
    }


def committed_payload(
    property_id: int,
    organization_id: str,
    applied_fields: list[str],
    failed_fields: list[str],
) -> dict[str, Any]:
    return {
        "organization_id": organization_id,
        "property_id": property_id,
        "applied_fields": applied_fields,
        "failed_fields": failed_fields,
    }


async def record_audit_event(
    event_type: str,
    payload: dict[str, Any],
    session_factory: Callable[[], Any] = AsyncSessionLocal,
) -> None:
    """
    Persist an audit event in its own transaction. Runs after the response is sent,
    so a failure here is logged and never reaches the caller.
    """
    try:
        async with session_factory() as session:
            await enqueue_event(session, event_type, payload)
            await session.commit()
    except Exception:
        log.exception("audit event not recorded type=%s org=%s", event_type, payload.get("organization_id"))
