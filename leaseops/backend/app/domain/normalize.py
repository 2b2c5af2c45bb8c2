# app/domain/normalize.py
from __future__ import annotations

import re

CANONICAL_TYPES: tuple[str, ...] = ("house", "apartment", "duplex", "townhouse", "condo")
DEFAULT_TYPE = "house"

# Provider homeType vocabulary (API + embedded app state)
PROVIDER_HOME_TYPES: dict[str, str] = {
    "SINGLE_FAMILY": "house",
    "MULTI_FAMILY": "duplex",
    "APARTMENT": "apartment",
    "CONDO": "condo",
    "TOWNHOUSE": "townhouse",
    "MANUFACTURED": "house",
    "LOT": "house",
}

# schema.org @type values seen in structured-data blocks
SCHEMA_TYPES: dict[str, str] = {
    "SingleFamilyResidence": "house",
    "House": "house",
    "Residence": "house",
    "Apartment": "apartment",
    "ApartmentComplex": "apartment",
}


def map_provider_home_type(raw: object) -> str:
    """Fixed lookup; anything unrecognized (or missing) is a house."""
    if raw is None:
        return DEFAULT_TYPE
    return PROVIDER_HOME_TYPES.get(str(raw).strip().upper(), DEFAULT_TYPE)


def map_schema_type(raw: object) -> str | None:
    """None when the @type says nothing about the kind of home."""
    types = raw if isinstance(raw, list) else [raw]
    for t in types:
        if isinstance(t, str) and t in SCHEMA_TYPES:
            return SCHEMA_TYPES[t]
    return None


def property_type_from_text(text: str | None) -> str | None:
    """
    Coarse keyword match over free text. Most specific words first, so
    "townhouse" is not read as "house".
    """
    if not text:
        return None
    s = " " + re.sub(r"[\s_/|-]+", " ", text.lower()) + " "

    if any(k in s for k in ["townhouse", "townhome", "town home", "town house", "rowhouse"]):
        return "townhouse"
    if any(k in s for k in ["condo", "condominium"]):
        return "condo"
    if any(k in s for k in ["duplex", "multi family", "multifamily", "triplex", "fourplex"]):
        return "duplex"
    if any(k in s for k in ["apartment", " apt "]):
        return "apartment"
    if any(k in s for k in ["single family", "singlefamily", "house", "detached"]):
        return "house"
    return None


def coerce_property_type(raw: object) -> str | None:
    """Strict: only canonical values (any case) pass. Used when committing diffs."""
    if raw is None:
        return None
    s = str(raw).strip().lower()
    return s if s in CANONICAL_TYPES else None
