# app/domain/listing_url.py
from __future__ import annotations

import re
from urllib.parse import parse_qs, unquote, urlsplit

from .errors import InvalidListingUrl

DEFAULT_DOMAIN = "zillow.com"
DEFAULT_ID_MARKER = "_zpid"
DEFAULT_PATH_SEGMENT = "homedetails"

# Query params that may carry the listing id, in priority order.
DEFAULT_ID_PARAMS: tuple[str, ...] = ("zpid", "id")


def _host_matches(host: str, domain: str) -> bool:
    host = host.lower().rstrip(".")
    domain = domain.lower()
    return host == domain or host.endswith("." + domain)


def validate_listing_url(url: str, *, domain: str = DEFAULT_DOMAIN) -> str:
    """
    Returns the stripped URL if it is an http(s) URL on the provider's domain.
    Raises InvalidListingUrl otherwise; nothing downstream runs for those.
    """
    raw = (url or "").strip()
    if not raw:
        raise InvalidListingUrl("Listing URL is empty.")
    try:
        parts = urlsplit(raw)
    except ValueError as e:
        raise InvalidListingUrl(f"Malformed listing URL: {raw!r}") from e

    if parts.scheme.lower() not in ("http", "https") or not parts.hostname:
        raise InvalidListingUrl(f"Not an http(s) URL: {raw!r}")
    if not _host_matches(parts.hostname, domain):
        raise InvalidListingUrl(
            f"Please enter a valid {domain} listing URL, e.g. https://www.{domain}/{DEFAULT_PATH_SEGMENT}/.../12345678{DEFAULT_ID_MARKER}/"
        )
    return raw


def resolve_listing_id(
    url: str,
    *,
    id_marker: str = DEFAULT_ID_MARKER,
    id_params: tuple[str, ...] = DEFAULT_ID_PARAMS,
) -> str | None:
    """
    Canonical listing id from any URL shape, or None.

      .../12345678_zpid/   -> "12345678"
      ...?zpid=12345678    -> "12345678"
      ...?id=98765         -> "98765"

    None is the normal answer for non-listing URLs; this never raises.
    """
    if not url:
        return None

    m = re.search(r"/(\d+)" + re.escape(id_marker), url)
    if m:
        return m.group(1)

    try:
        query = urlsplit(url).query
    except ValueError:
        return None
    params = parse_qs(query)
    for name in id_params:
        for value in params.get(name, []):
            value = value.strip()
            if value.isdigit():
                return value
    return None


def listing_slug(
    url: str,
    *,
    path_segment: str = DEFAULT_PATH_SEGMENT,
    id_marker: str = DEFAULT_ID_MARKER,
) -> str | None:
    """
    The human-readable address segment of a listing URL:
      /homedetails/14504-Ardenall-Ave-East-Cleveland-OH-44112/33444982_zpid/
    -> "14504-Ardenall-Ave-East-Cleveland-OH-44112"
    """
    try:
        path = urlsplit(url).path
    except ValueError:
        return None
    parts = [unquote(p) for p in path.split("/") if p]

    lowered = [p.lower() for p in parts]
    if path_segment.lower() in lowered:
        i = lowered.index(path_segment.lower())
        if i + 1 < len(parts) and not parts[i + 1].endswith(id_marker):
            return parts[i + 1]

    # No marker segment: take the hyphenated segment right before "<id>_zpid"
    for i, p in enumerate(parts):
        if p.endswith(id_marker) and i > 0 and "-" in parts[i - 1]:
            return parts[i - 1]
    return None
