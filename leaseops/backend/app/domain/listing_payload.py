# app/domain/listing_payload.py
from __future__ import annotations

from typing import Any

from .normalize import map_provider_home_type
from .parsing import first_nested, number_from_text, to_float, to_int
from .photos import normalize_photos
from .types import PartialSnapshot


def partial_from_property(data: dict[str, Any]) -> PartialSnapshot:
    """
    Map a provider property object (API response body, or the `property` object in the
    page's embedded app state) to snapshot fields. Missing keys are simply absent.
    """
    if not isinstance(data, dict):
        return {}

    out: PartialSnapshot = {}

    price = first_nested(data, "rentZestimate", "price", "listPrice")
    if price is not None:
        out["price"] = number_from_text(price)

    beds = first_nested(data, "bedrooms", "resoFacts.bedrooms", "beds")
    if beds is not None:
        out["bedrooms"] = to_int(beds)

    baths = first_nested(data, "bathrooms", "resoFacts.bathrooms", "resoFacts.bathroomsFloat", "baths")
    if baths is not None:
        out["bathrooms"] = to_float(baths)

    area = first_nested(data, "livingArea", "livingAreaValue", "resoFacts.livingArea")
    if area is not None:
        out["sqft"] = to_int(number_from_text(area))

    home_type = first_nested(data, "homeType", "propertyType", "homeTypeDimension")
    if home_type is not None:
        out["property_type"] = map_provider_home_type(home_type)

    desc = first_nested(data, "description")
    if isinstance(desc, str):
        out["description"] = desc.strip()

    year = first_nested(data, "yearBuilt", "resoFacts.yearBuilt")
    if year is not None:
        out["year_built"] = to_int(year)

    photos = normalize_photos(data)
    if photos:
        out["photos"] = photos

    return out


def provider_meta(data: dict[str, Any]) -> dict[str, Any]:
    """Reference-only provider estimates kept alongside an import."""
    if not isinstance(data, dict):
        return {}
    return {
        "zestimate": to_float(data.get("zestimate")),
        "rent_zestimate": to_float(data.get("rentZestimate")),
    }
