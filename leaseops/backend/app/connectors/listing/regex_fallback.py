# app/connectors/listing/regex_fallback.py
from __future__ import annotations

import re
from typing import Any, Callable

from ...domain.normalize import property_type_from_text
from ...domain.parsing import number_from_text, to_float, to_int
from ...domain.photos import normalize_photos
from ...domain.types import PartialSnapshot
from .document import PageDocument

PRICE_PATTERNS = (
    re.compile(r"\$\s?(\d{1,3}(?:,\d{3})+|\d+)\+?\s*/\s*mo(?:nth)?\b", re.I),
    re.compile(r"\"price\"\s*:\s*\"?\$?(\d[\d,]*)", re.I),
)
BEDS_RE = re.compile(r"\b(\d{1,2})\s*(?:bd|bds|beds?|bedrooms?)\b", re.I)
BATHS_RE = re.compile(r"\b(\d{1,2}(?:\.\d)?)\s*(?:ba|baths?|bathrooms?)\b", re.I)
SQFT_RE = re.compile(r"\b(\d{1,3}(?:,\d{3})+|\d{3,5})\s*(?:sq\.?\s*ft\.?|sqft|square\s+feet)", re.I)
TYPE_RE = re.compile(r"\b(single[\s-]family|townhouse|townhome|condo(?:minium)?|duplex|apartment)\b", re.I)
PET_RE = re.compile(
    r"\b(cats?\s+(?:and|&)\s+dogs?\s+(?:ok|allowed|welcome)"
    r"|(?:small\s+)?dogs?\s+(?:ok|allowed|welcome)"
    r"|cats?\s+(?:ok|allowed|welcome)"
    r"|pets?\s+(?:ok|allowed|negotiable|considered|welcome)"
    r"|no\s+pets(?:\s+allowed)?)\b",
    re.I,
)
DEPOSIT_RE = re.compile(r"security\s+deposit\W{0,3}\$\s?(\d[\d,]*)", re.I)
APP_FEE_RE = re.compile(r"application\s+fee\W{0,3}\$\s?(\d[\d,]*)", re.I)

# Provider CDN: https://photos.zillowstatic.com/fp/<hash>-<variant>.jpg
PHOTO_RE = re.compile(r"https://photos\.zillowstatic\.com/fp/([0-9a-f]{16,})-([A-Za-z0-9_]+)\.(?:jpg|jpeg|webp|png)")


def _price(doc: PageDocument) -> float | None:
    for pat in PRICE_PATTERNS:
        m = pat.search(doc.html)
        if m:
            v = number_from_text(m.group(1))
            if v:
                return v
    return None


def _first_number(pat: re.Pattern[str], cast: Callable[[Any], Any]) -> Callable[[PageDocument], Any]:
    def _find(doc: PageDocument) -> Any:
        m = pat.search(doc.visible_text)
        return cast(number_from_text(m.group(1))) if m else None

    return _find


def _property_type(doc: PageDocument) -> str | None:
    m = TYPE_RE.search(doc.visible_text)
    return property_type_from_text(m.group(1)) if m else None


def _pet_policy(doc: PageDocument) -> str | None:
    m = PET_RE.search(doc.visible_text)
    if not m:
        return None
    phrase = re.sub(r"\s+", " ", m.group(1)).strip()
    return phrase[:1].upper() + phrase[1:]


def _description(doc: PageDocument) -> str | None:
    return doc.meta_content("description", "og:description")


def _variant_size(variant: str) -> int:
    nums = re.findall(r"\d+", variant)
    return max((int(n) for n in nums), default=0)


def _photos(doc: PageDocument) -> list[str]:
    # One URL per photo hash, keeping the largest variant seen for it.
    best: dict[str, tuple[int, str]] = {}
    order: list[str] = []
    for m in PHOTO_RE.finditer(doc.html):
        h, variant, url = m.group(1), m.group(2), m.group(0)
        size = _variant_size(variant)
        if h not in best:
            order.append(h)
            best[h] = (size, url)
        elif size > best[h][0]:
            best[h] = (size, url)
    return normalize_photos([best[h][1] for h in order])


# Each entry runs independently; a miss just leaves that field unset.
# Price and photos match the raw page, the rest only the visible text.
REGEX_FIELDS: tuple[tuple[str, Callable[[PageDocument], Any]], ...] = (
    ("price", _price),
    ("bedrooms", _first_number(BEDS_RE, to_int)),
    ("bathrooms", _first_number(BATHS_RE, to_float)),
    ("sqft", _first_number(SQFT_RE, to_int)),
    ("property_type", _property_type),
    ("pet_policy", _pet_policy),
    ("description", _description),
    ("deposit_amount", _first_number(DEPOSIT_RE, to_float)),
    ("application_fee", _first_number(APP_FEE_RE, to_float)),
    ("photos", _photos),
)


def extract_regex_fallback(doc: PageDocument) -> PartialSnapshot | None:
    out: PartialSnapshot = {}
    for field_name, find in REGEX_FIELDS:
        value = find(doc)
        if value:
            out[field_name] = value
    return out or None
