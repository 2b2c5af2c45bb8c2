# app/domain/types.py
from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any


class ExtractionTier(str, Enum):
    api = "api"
    page = "page"
    address_only = "address_only"


@dataclass(frozen=True)
class ParsedAddress:
    street: str
    city: str
    state: str
    zip: str


@dataclass(frozen=True)
class ExtractedSnapshot:
    """
    Immutable result of one extraction. 0 / None / () mean "unknown", not error.
    """

    price: float = 0
    bedrooms: int = 0
    bathrooms: float = 0
    sqft: int | None = None
    property_type: str = "house"
    description: str | None = None
    pet_policy: str | None = None
    photos: tuple[str, ...] = ()
    year_built: int | None = None
    deposit_amount: float | None = None
    application_fee: float | None = None


SNAPSHOT_FIELDS: tuple[str, ...] = tuple(f.name for f in fields(ExtractedSnapshot))

# A strategy's partial result: any subset of SNAPSHOT_FIELDS. property_type stays None
# until some strategy recognizes it, so "house" never blocks a later strategy.
PartialSnapshot = dict[str, Any]


def is_unset(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return value == 0
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


@dataclass(frozen=True)
class ImportResult:
    source_url: str
    listing_id: str | None
    address: ParsedAddress | None
    snapshot: ExtractedSnapshot
    tier: ExtractionTier
    strategies: tuple[str, ...] = ()
    # snapshot attributes holding defaults only (nobody observed them)
    unobserved: frozenset[str] = frozenset()
    provider_meta: dict[str, Any] = field(default_factory=dict)

    @property
    def limited_data(self) -> bool:
        return self.tier == ExtractionTier.address_only

    def as_property_fields(self) -> dict[str, Any]:
        """Snapshot + address under the stored property's column names."""
        s = self.snapshot
        a = self.address
        return {
            "address": a.street if a else "",
            "city": a.city if a else "",
            "state": a.state if a else "",
            "zip_code": a.zip if a else "",
            "bedrooms": s.bedrooms,
            "bathrooms": s.bathrooms,
            "square_feet": s.sqft,
            "property_type": s.property_type,
            "rent_price": s.price,
            "deposit_amount": s.deposit_amount,
            "application_fee": s.application_fee,
            "description": s.description,
            "pet_policy": s.pet_policy,
            "photos": list(s.photos),
            "year_built": s.year_built,
        }
