# app/connectors/listing/structured_data.py
from __future__ import annotations

from typing import Any, Iterator

from ...domain.normalize import map_schema_type
from ...domain.parsing import first_nested, number_from_text, to_float, to_int
from ...domain.photos import normalize_photos
from ...domain.types import PartialSnapshot
from .document import PageDocument

RESIDENCE_TYPES = {
    "SingleFamilyResidence",
    "House",
    "Residence",
    "Apartment",
    "ApartmentComplex",
    "Accommodation",
}


def _items(blob: Any) -> Iterator[dict[str, Any]]:
    if isinstance(blob, list):
        for b in blob:
            yield from _items(b)
    elif isinstance(blob, dict):
        graph = blob.get("@graph")
        if isinstance(graph, list):
            yield from _items(graph)
        yield blob


def _is_residence(item: dict[str, Any]) -> bool:
    t = item.get("@type")
    types = t if isinstance(t, list) else [t]
    return any(isinstance(x, str) and x in RESIDENCE_TYPES for x in types)


def find_residence(doc: PageDocument) -> dict[str, Any] | None:
    for blob in doc.script_json(type="application/ld+json"):
        for item in _items(blob):
            if _is_residence(item):
                return item
    return None


def extract_structured_data(doc: PageDocument) -> PartialSnapshot | None:
    """schema.org residence block (application/ld+json)."""
    item = find_residence(doc)
    if item is None:
        return None

    out: PartialSnapshot = {}

    area = first_nested(item, "floorSize.value", "floorSize")
    if area is not None and not isinstance(area, dict):
        out["sqft"] = to_int(number_from_text(area))

    # numberOfRooms counts every room, not bedrooms
    beds = first_nested(item, "numberOfBedrooms")
    if beds is not None:
        out["bedrooms"] = to_int(number_from_text(beds))

    baths = first_nested(item, "numberOfBathroomsTotal", "numberOfFullBathrooms")
    if baths is not None:
        out["bathrooms"] = to_float(number_from_text(baths))

    price = first_nested(item, "offers.price", "offers.priceSpecification.price")
    if price is not None:
        out["price"] = number_from_text(price)

    desc = item.get("description")
    if isinstance(desc, str):
        out["description"] = desc.strip()

    year = first_nested(item, "yearBuilt")
    if year is not None:
        out["year_built"] = to_int(year)

    pt = map_schema_type(item.get("@type"))
    if pt:
        out["property_type"] = pt

    images = item.get("image") or item.get("photo")
    if isinstance(images, (str, dict)):
        images = [images]
    if isinstance(images, list):
        photos = normalize_photos({"images": images})
        if photos:
            out["photos"] = photos

    return out
