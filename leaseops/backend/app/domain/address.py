# app/domain/address.py
from __future__ import annotations

import re
from typing import Any

from .parsing import get_first
from .types import ParsedAddress

DEFAULT_CITY = "Cleveland"

# Case-insensitive. First match scanning left-to-right ends the street.
STREET_SUFFIXES: frozenset[str] = frozenset(
    {
        "st", "street",
        "ave", "avenue",
        "blvd", "boulevard",
        "dr", "drive",
        "rd", "road",
        "ct", "court",
        "ln", "lane",
        "way",
        "pl", "place",
        "cir", "circle",
        "ter", "terrace",
        "pkwy", "parkway",
        "hwy", "highway",
        "trail",
        "loop",
        "run",
        "path",
        "walk",
    }
)

_EMBEDDED_ID_RE = re.compile(r"\d{6,}")
_ZIP_RE = re.compile(r"\d{5}")
_STATE_RE = re.compile(r"[A-Za-z]{2}")


def _title(tokens: list[str]) -> str:
    # Token-wise so "3rd" stays "3rd" (str.title() would give "3Rd").
    return " ".join(t[:1].upper() + t[1:].lower() for t in tokens)


def parse_address_slug(slug: str | None, *, default_city: str = DEFAULT_CITY) -> ParsedAddress | None:
    """
    Heuristic split of a listing URL slug into street / city / state / zip.

      "14504-Ardenall-Ave-East-Cleveland-OH-44112-33444982"
      -> ParsedAddress("14504 Ardenall Ave", "East Cleveland", "OH", "44112")

    Zip and state are peeled off the right end first; the street ends at the first
    street-type suffix. A city whose name contains a suffix word ("... Parkway") is
    mis-split in favor of the street reading; that trade-off is deliberate.
    """
    if not slug:
        return None

    tokens = [t for t in slug.strip().strip("/").split("-") if t]

    if tokens and _EMBEDDED_ID_RE.fullmatch(tokens[-1]):
        tokens.pop()

    zipcode = ""
    if tokens and _ZIP_RE.fullmatch(tokens[-1]):
        zipcode = tokens.pop()

    state = ""
    if tokens and _STATE_RE.fullmatch(tokens[-1]):
        state = tokens.pop().upper()

    street_tokens: list[str] | None = None
    city_tokens: list[str] = []
    for i, tok in enumerate(tokens):
        if tok.lower() in STREET_SUFFIXES:
            street_tokens = tokens[: i + 1]
            city_tokens = tokens[i + 1 :]
            break

    if street_tokens is None:
        if len(tokens) < 3:
            return None
        street_tokens = tokens[:3]
        city_tokens = tokens[3:]

    city = _title(city_tokens)
    return ParsedAddress(
        street=_title(street_tokens),
        city=city or default_city,
        state=state,
        zip=zipcode,
    )


def address_from_payload(payload: dict[str, Any]) -> ParsedAddress | None:
    """
    Address from a provider property payload. Handles the nested
    {"address": {"streetAddress", "city", "state", "zipcode"}} shape and flat keys.
    """
    nested = payload.get("address")
    if not isinstance(nested, dict):
        nested = {}

    street = get_first(nested, "streetAddress", "line1") or get_first(payload, "streetAddress")
    if not street and isinstance(payload.get("address"), str):
        street = payload["address"]
    if not street:
        return None

    city = get_first(nested, "city") or get_first(payload, "city") or ""
    state = get_first(nested, "state", "stateCode") or get_first(payload, "state", "stateCode") or ""
    zipc = (
        get_first(nested, "zipcode", "zipCode", "postalCode")
        or get_first(payload, "zipcode", "zipCode", "postalCode")
        or ""
    )

    state = str(state).strip().upper()
    if len(state) != 2:
        state = ""

    return ParsedAddress(
        street=str(street).strip(),
        city=str(city).strip(),
        state=state,
        zip=str(zipc).strip()[:5],
    )
