# app/adapters/repos/properties.py
from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...domain.errors import PropertyNotFound
from ...models import Property, PropertyStatus, PropertyType

# Columns a sync commit may write. Everything else on the row is off limits here.
UPDATABLE_COLUMNS: frozenset[str] = frozenset(
    {
        "bedrooms",
        "bathrooms",
        "square_feet",
        "rent_price",
        "deposit_amount",
        "application_fee",
        "property_type",
        "description",
        "pet_policy",
    }
)


class PropertyRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_for_org(self, organization_id: str, property_id: int) -> Property:
        q = select(Property).where(
            Property.id == property_id,
            Property.organization_id == organization_id,
        )
        prop = (await self.session.execute(q)).scalars().first()
        if prop is None:
            raise PropertyNotFound(f"Property {property_id} not found for organization {organization_id}")
        return prop

    async def update_fields(self, prop: Property, values: dict[str, Any]) -> list[str]:
        """
        Write exactly `values` onto the row (one flush). Returns the keys written,
        in the order given.
        """
        unknown = set(values) - UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Refusing to update non-reconcilable columns: {sorted(unknown)}")

        written: list[str] = []
        for key, value in values.items():
            if key == "property_type":
                value = PropertyType(value)
            setattr(prop, key, value)
            written.append(key)

        if written:
            prop.updated_at = datetime.utcnow()
            await self.session.flush()
        return written

    async def create_from_import(self, organization_id: str, fields: dict[str, Any]) -> Property:
        """
        New property from reviewed import fields (address + snapshot columns).
        Required: address, city, state, zip_code, rent_price > 0.
        """
        address = (fields.get("address") or "").strip()
        city = (fields.get("city") or "").strip()
        state = (fields.get("state") or "").strip().upper()
        zip_code = (fields.get("zip_code") or "").strip()

        if not (address and city and state and zip_code):
            raise ValueError(f"Missing required address fields: {address=}, {city=}, {state=}, {zip_code=}")
        if len(state) != 2:
            raise ValueError(f"State must be a 2-letter code, got {state!r}")

        rent = float(fields.get("rent_price") or 0)
        if rent <= 0:
            raise ValueError("Rent price is required and must be greater than $0.")

        listing_id = fields.get("source_listing_id")
        prop = Property(
            organization_id=organization_id,
            address=address,
            city=city,
            state=state,
            zip_code=zip_code,
            bedrooms=int(fields.get("bedrooms") or 0),
            bathrooms=float(fields.get("bathrooms") or 0),
            square_feet=int(fields["square_feet"]) if fields.get("square_feet") else None,
            property_type=PropertyType(fields.get("property_type") or PropertyType.house.value),
            rent_price=rent,
            deposit_amount=float(fields["deposit_amount"]) if fields.get("deposit_amount") else None,
            application_fee=float(fields["application_fee"]) if fields.get("application_fee") else None,
            description=fields.get("description") or None,
            pet_policy=fields.get("pet_policy") or None,
            year_built=int(fields["year_built"]) if fields.get("year_built") else None,
            photos_json=json.dumps(list(fields.get("photos") or [])),
            status=PropertyStatus(fields.get("status") or PropertyStatus.available.value),
            section_8_accepted=bool(fields.get("section_8_accepted", True)),
            hud_inspection_ready=bool(fields.get("hud_inspection_ready", True)),
            special_notes=f"Imported from Zillow (ZPID: {listing_id})" if listing_id else "Imported from Zillow",
            source_listing_id=str(listing_id) if listing_id else None,
            source_url=fields.get("source_url"),
        )
        self.session.add(prop)
        await self.session.flush()
        return prop
