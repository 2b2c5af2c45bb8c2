# app/domain/photos.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

MAX_PHOTOS = 15


class PhotoShape(str, Enum):
    responsive = "responsive"  # responsivePhotos[].mixedSources.{jpeg,webp}[]
    descriptors = "descriptors"  # photos[]/images[] of {url|href|contentUrl}
    strings = "strings"  # photos[]/images[] of plain URL strings
    original = "original"  # originalPhotos[].mixedSources.jpeg[]


@dataclass(frozen=True)
class PhotoSet:
    shape: PhotoShape
    urls: tuple[str, ...]


def _is_url(v: Any) -> bool:
    return isinstance(v, str) and v.strip().lower().startswith(("http://", "https://"))


def _largest_source(sources: Any) -> str | None:
    """Widest variant in a [{url, width}, ...] list; the last entry if no widths."""
    if not isinstance(sources, list):
        return None
    candidates = [s for s in sources if isinstance(s, dict) and _is_url(s.get("url"))]
    if not candidates:
        return None
    if any(isinstance(c.get("width"), (int, float)) for c in candidates):
        best = max(candidates, key=lambda c: c.get("width") if isinstance(c.get("width"), (int, float)) else -1)
        return best["url"]
    return candidates[-1]["url"]


def _largest_mixed(photo: Any) -> str | None:
    if not isinstance(photo, dict):
        return None
    mixed = photo.get("mixedSources")
    if not isinstance(mixed, dict):
        return None
    return _largest_source(mixed.get("jpeg")) or _largest_source(mixed.get("webp"))


def _lists(payload: dict[str, Any], *keys: str) -> list[Any]:
    out: list[Any] = []
    for k in keys:
        v = payload.get(k)
        if isinstance(v, list):
            out.extend(v)
    return out


def _responsive(payload: dict[str, Any]) -> list[str]:
    return [u for u in (_largest_mixed(p) for p in _lists(payload, "responsivePhotos")) if u]


def _descriptors(payload: dict[str, Any]) -> list[str]:
    urls: list[str] = []
    for item in _lists(payload, "photos", "images"):
        if not isinstance(item, dict):
            continue
        u = _largest_mixed(item)
        if not u:
            u = next((item[k] for k in ("url", "href", "contentUrl") if _is_url(item.get(k))), None)
        if u:
            urls.append(u)
    return urls


def _strings(payload: dict[str, Any]) -> list[str]:
    return [s.strip() for s in _lists(payload, "photos", "images") if _is_url(s)]


def _original(payload: dict[str, Any]) -> list[str]:
    return [u for u in (_largest_mixed(p) for p in _lists(payload, "originalPhotos")) if u]


# Tried in this order; first shape that yields anything wins, shapes are never merged.
PHOTO_SHAPES: tuple[tuple[PhotoShape, Callable[[dict[str, Any]], list[str]]], ...] = (
    (PhotoShape.responsive, _responsive),
    (PhotoShape.descriptors, _descriptors),
    (PhotoShape.strings, _strings),
    (PhotoShape.original, _original),
)


def match_photo_shape(payload: Any, limit: int = MAX_PHOTOS) -> PhotoSet | None:
    if isinstance(payload, list):
        payload = {"photos": payload}
    if not isinstance(payload, dict):
        return None

    for shape, extract in PHOTO_SHAPES:
        urls = extract(payload)
        if not urls:
            continue
        # de-dupe keep order
        seen: set[str] = set()
        uniq: list[str] = []
        for u in urls:
            if u not in seen:
                uniq.append(u)
                seen.add(u)
        return PhotoSet(shape=shape, urls=tuple(uniq[: max(0, min(limit, MAX_PHOTOS))]))
    return None


def normalize_photos(payload: Any, limit: int = MAX_PHOTOS) -> list[str]:
    matched = match_photo_shape(payload, limit=limit)
    return list(matched.urls) if matched else []
