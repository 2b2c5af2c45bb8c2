# app/connectors/listing/app_state.py
from __future__ import annotations

import enum
import json
from typing import Any, Callable

from ...domain.listing_payload import partial_from_property
from ...domain.parsing import get_nested
from ...domain.types import PartialSnapshot
from .document import PageDocument


class AppStateShape(str, enum.Enum):
    # <script id="__NEXT_DATA__">: props.pageProps.componentProps.gdpClientCache
    next_gdp_cache = "next_gdp_cache"
    # <script id="hdpApolloPreloadedData">: apiCache
    apollo_api_cache = "apollo_api_cache"


def _maybe_json(v: Any) -> Any:
    # The cache objects are usually JSON strings embedded inside JSON.
    if isinstance(v, str):
        try:
            return json.loads(v)
        except json.JSONDecodeError:
            return None
    return v


def _property_in_cache(cache: Any) -> dict[str, Any] | None:
    cache = _maybe_json(cache)
    if not isinstance(cache, dict):
        return None
    for entry in cache.values():
        entry = _maybe_json(entry)
        if isinstance(entry, dict) and isinstance(entry.get("property"), dict):
            return entry["property"]
    return None


def _next_gdp_cache(doc: PageDocument) -> dict[str, Any] | None:
    for blob in doc.script_json(id="__NEXT_DATA__"):
        if not isinstance(blob, dict):
            continue
        prop = _property_in_cache(get_nested(blob, "props.pageProps.componentProps.gdpClientCache"))
        if prop:
            return prop
    return None


def _apollo_api_cache(doc: PageDocument) -> dict[str, Any] | None:
    for blob in doc.script_json(id="hdpApolloPreloadedData"):
        if not isinstance(blob, dict):
            continue
        prop = _property_in_cache(blob.get("apiCache"))
        if prop:
            return prop
    return None


APP_STATE_SHAPES: tuple[tuple[AppStateShape, Callable[[PageDocument], dict[str, Any] | None]], ...] = (
    (AppStateShape.next_gdp_cache, _next_gdp_cache),
    (AppStateShape.apollo_api_cache, _apollo_api_cache),
)


def find_app_state_property(doc: PageDocument) -> tuple[AppStateShape, dict[str, Any]] | None:
    for shape, find in APP_STATE_SHAPES:
        prop = find(doc)
        if prop:
            return shape, prop
    return None


def extract_app_state(doc: PageDocument) -> PartialSnapshot | None:
    """Front-end state cache; richest field set when the page renders from it."""
    found = find_app_state_property(doc)
    if found is None:
        return None
    _, prop = found
    return partial_from_property(prop)
