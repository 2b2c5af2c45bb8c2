# app/domain/extraction.py
from __future__ import annotations

from typing import Any, Callable, Iterable, TypeVar

from .normalize import DEFAULT_TYPE
from .parsing import to_float, to_int
from .photos import MAX_PHOTOS
from .types import SNAPSHOT_FIELDS, ExtractedSnapshot, PartialSnapshot, is_unset

Doc = TypeVar("Doc")
Strategy = Callable[[Doc], PartialSnapshot | None]


def merge_partials(base: PartialSnapshot, incoming: PartialSnapshot | None) -> tuple[PartialSnapshot, bool]:
    """
    First non-default value wins: `incoming` only fills fields `base` left unset.
    Returns (merged, whether incoming contributed anything).
    """
    merged = dict(base)
    contributed = False
    for k, v in (incoming or {}).items():
        if k not in SNAPSHOT_FIELDS or is_unset(v):
            continue
        if is_unset(merged.get(k)):
            merged[k] = v
            contributed = True
    return merged, contributed


def run_strategies(
    doc: Doc,
    strategies: Iterable[tuple[str, Strategy]],
    seed: PartialSnapshot | None = None,
) -> tuple[PartialSnapshot, list[str]]:
    """Left fold over an ordered strategy list. Returns the partial and contributing names."""
    merged: PartialSnapshot = dict(seed or {})
    used: list[str] = []
    for name, strategy in strategies:
        merged, contributed = merge_partials(merged, strategy(doc))
        if contributed:
            used.append(name)
    return merged, used


def build_snapshot(partial: PartialSnapshot, photo_limit: int = MAX_PHOTOS) -> tuple[ExtractedSnapshot, frozenset[str]]:
    """
    Freeze a partial into a snapshot with the "unknown" defaults filled in.
    Also returns the snapshot attributes nobody actually provided.
    """
    unobserved = frozenset(k for k in SNAPSHOT_FIELDS if is_unset(partial.get(k)))

    photos = [p for p in (partial.get("photos") or []) if isinstance(p, str) and p]
    limit = max(0, min(photo_limit, MAX_PHOTOS))

    snap = ExtractedSnapshot(
        price=to_float(partial.get("price")) or 0,
        bedrooms=to_int(partial.get("bedrooms")) or 0,
        bathrooms=to_float(partial.get("bathrooms")) or 0,
        sqft=to_int(partial.get("sqft")) or None,
        property_type=partial.get("property_type") or DEFAULT_TYPE,
        description=_text(partial.get("description")),
        pet_policy=_text(partial.get("pet_policy")),
        photos=tuple(photos[:limit]),
        year_built=to_int(partial.get("year_built")) or None,
        deposit_amount=to_float(partial.get("deposit_amount")) or None,
        application_fee=to_float(partial.get("application_fee")) or None,
    )
    return snap, unobserved


def _text(v: Any) -> str | None:
    if v is None:
        return None
    s = str(v).strip()
    return s or None
