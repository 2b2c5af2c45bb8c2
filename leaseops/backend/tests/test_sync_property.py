import asyncio
import json

import pytest

from app.adapters.repos.properties import PropertyRepository
from app.domain.errors import PropertyNotFound, SyncInProgress
from app.domain.reconcile import FieldDiff, apply_decisions
from app.domain.types import SNAPSHOT_FIELDS, ExtractedSnapshot, ExtractionTier, ImportResult
from app.models import Property, PropertyStatus, PropertyType
from app.service_layer.sync_guard import SyncGuard
from app.service_layer.use_cases.sync_property import commit_property_diffs, sync_property

URL = "https://www.zillow.com/homedetails/14504-Ardenall-Ave-East-Cleveland-OH-44112/33444982_zpid/"


def _result(snapshot: ExtractedSnapshot, observed: set[str]) -> ImportResult:
    return ImportResult(
        source_url=URL,
        listing_id="33444982",
        address=None,
        snapshot=snapshot,
        tier=ExtractionTier.page,
        strategies=("regex",),
        unobserved=frozenset(SNAPSHOT_FIELDS) - observed,
    )


class StubPipeline:
    def __init__(self, result: ImportResult, gate: asyncio.Event | None = None):
        self.result = result
        self.gate = gate
        self.entered = asyncio.Event()
        self.calls = 0

    async def run(self, listing_url: str, organization_id: str) -> ImportResult:
        self.calls += 1
        self.entered.set()
        if self.gate is not None:
            await self.gate.wait()
        return self.result


SCENARIO = _result(
    ExtractedSnapshot(bedrooms=3, price=1000, pet_policy="Cats ok"),
    {"bedrooms", "price", "pet_policy"},
)


@pytest.mark.asyncio
async def test_sync_then_selective_commit(async_session_maker, seeded_property):
    guard = SyncGuard()
    async with async_session_maker() as session:
        outcome = await sync_property(
            session,
            property_id=seeded_property.id,
            organization_id="org-1",
            listing_url=URL,
            pipeline=StubPipeline(SCENARIO),
            guard=guard,
        )

    assert [d.field_key for d in outcome.diffs] == ["bedrooms", "pet_policy"]
    assert outcome.no_differences is False

    # reviewer unticks bedrooms
    reviewed = apply_decisions(outcome.diffs, {"bedrooms": False})

    async with async_session_maker() as session:
        committed = await commit_property_diffs(
            session,
            property_id=seeded_property.id,
            organization_id="org-1",
            diffs=reviewed,
        )
        await session.commit()

    assert committed.applied_fields == ["pet_policy"]
    assert committed.skipped == ("bedrooms",)
    assert committed.failures == ()

    async with async_session_maker() as session:
        row = await session.get(Property, seeded_property.id)
        assert row.bedrooms == 2
        assert row.pet_policy == "Cats ok"
        assert row.rent_price == 1000.0


@pytest.mark.asyncio
async def test_sync_reports_no_differences(async_session_maker, seeded_property):
    same = _result(ExtractedSnapshot(bedrooms=2, price=1000.0), {"bedrooms", "price"})
    async with async_session_maker() as session:
        outcome = await sync_property(
            session,
            property_id=seeded_property.id,
            organization_id="org-1",
            listing_url=URL,
            pipeline=StubPipeline(same),
            guard=SyncGuard(),
        )
    assert outcome.no_differences is True
    assert outcome.status == "no_differences"


@pytest.mark.asyncio
async def test_sync_against_blocked_page_is_not_no_differences(async_session_maker, seeded_property):
    blocked = ImportResult(
        source_url=URL,
        listing_id="33444982",
        address=None,
        snapshot=ExtractedSnapshot(),
        tier=ExtractionTier.address_only,
        unobserved=frozenset(SNAPSHOT_FIELDS),
    )
    async with async_session_maker() as session:
        outcome = await sync_property(
            session,
            property_id=seeded_property.id,
            organization_id="org-1",
            listing_url=URL,
            pipeline=StubPipeline(blocked),
            guard=SyncGuard(),
        )
    assert outcome.diffs == []
    assert outcome.no_differences is False
    assert outcome.status == "limited_data"


@pytest.mark.asyncio
async def test_sync_is_scoped_to_organization(async_session_maker, seeded_property):
    pipeline = StubPipeline(SCENARIO)
    async with async_session_maker() as session:
        with pytest.raises(PropertyNotFound):
            await sync_property(
                session,
                property_id=seeded_property.id,
                organization_id="someone-else",
                listing_url=URL,
                pipeline=pipeline,
                guard=SyncGuard(),
            )
    assert pipeline.calls == 0


@pytest.mark.asyncio
async def test_second_sync_for_same_property_is_rejected(async_session_maker, seeded_property):
    guard = SyncGuard()
    gate = asyncio.Event()
    slow = StubPipeline(SCENARIO, gate=gate)

    async def _first():
        async with async_session_maker() as session:
            return await sync_property(
                session,
                property_id=seeded_property.id,
                organization_id="org-1",
                listing_url=URL,
                pipeline=slow,
                guard=guard,
            )

    task = asyncio.create_task(_first())
    await slow.entered.wait()
    assert guard.is_busy("org-1", seeded_property.id)

    async with async_session_maker() as session:
        with pytest.raises(SyncInProgress):
            await sync_property(
                session,
                property_id=seeded_property.id,
                organization_id="org-1",
                listing_url=URL,
                pipeline=StubPipeline(SCENARIO),
                guard=guard,
            )

    gate.set()
    outcome = await task
    assert len(outcome.diffs) == 2
    assert guard.is_busy("org-1", seeded_property.id) is False


@pytest.mark.asyncio
async def test_commit_applies_what_coerces(async_session_maker, seeded_property):
    diffs = [
        FieldDiff("bedrooms", "Bedrooms", "2", "2.5"),
        FieldDiff("rent_price", "Monthly Rent", "1000", "1150"),
        FieldDiff("property_type", "Property Type", "house", "duplex"),
    ]
    async with async_session_maker() as session:
        committed = await commit_property_diffs(
            session, property_id=seeded_property.id, organization_id="org-1", diffs=diffs
        )
        await session.commit()

    assert committed.applied == 2
    assert [f.field_key for f in committed.failures] == ["bedrooms"]

    async with async_session_maker() as session:
        row = await session.get(Property, seeded_property.id)
        assert row.bedrooms == 2
        assert row.rent_price == 1150.0
        assert row.property_type == PropertyType.duplex


@pytest.mark.asyncio
async def test_create_from_import(async_session_maker):
    fields = {
        "address": "14504 Ardenall Ave",
        "city": "East Cleveland",
        "state": "oh",
        "zip_code": "44112",
        "bedrooms": 3,
        "bathrooms": 1.0,
        "rent_price": 1195.0,
        "property_type": "house",
        "photos": ["https://img.example/1.jpg"],
        "source_listing_id": "33444982",
        "source_url": URL,
    }
    async with async_session_maker() as session:
        prop = await PropertyRepository(session).create_from_import("org-1", fields)
        await session.commit()

    assert prop.id is not None
    assert prop.state == "OH"
    assert prop.status == PropertyStatus.available
    assert prop.section_8_accepted is True
    assert prop.hud_inspection_ready is True
    assert prop.special_notes == "Imported from Zillow (ZPID: 33444982)"
    assert json.loads(prop.photos_json) == ["https://img.example/1.jpg"]


@pytest.mark.asyncio
async def test_create_from_import_requires_rent(async_session_maker):
    fields = {"address": "1 Main St", "city": "Cleveland", "state": "OH", "zip_code": "44101", "rent_price": 0}
    async with async_session_maker() as session:
        with pytest.raises(ValueError):
            await PropertyRepository(session).create_from_import("org-1", fields)


@pytest.mark.asyncio
async def test_update_fields_refuses_other_columns(async_session_maker, seeded_property):
    async with async_session_maker() as session:
        repo = PropertyRepository(session)
        prop = await repo.get_for_org("org-1", seeded_property.id)
        with pytest.raises(ValueError):
            await repo.update_fields(prop, {"organization_id": "org-2"})
