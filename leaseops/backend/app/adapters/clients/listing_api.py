# app/adapters/clients/listing_api.py
from __future__ import annotations

import logging
from typing import Any

import httpx

from ...config import settings
from ...domain.errors import UpstreamUnavailable
from .http_resilience import bounded_request, redact_headers

log = logging.getLogger(__name__)


class ListingApiClient:
    """
    Authoritative property-data API (RapidAPI Zillow endpoint).
    Returns the raw property dict; mapping to snapshot fields happens in the domain.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str | None = None,
        host: str | None = None,
        timeout_s: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key if api_key is not None else settings.RAPIDAPI_KEY
        self._base_url = (base_url or settings.RAPIDAPI_BASE_URL or "").rstrip("/")
        self._host = host or settings.RAPIDAPI_HOST
        self._timeout_s = timeout_s if timeout_s is not None else settings.API_HTTP_TIMEOUT_S
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def _headers(self) -> dict[str, str]:
        if not self._api_key:
            raise UpstreamUnavailable("RAPIDAPI_KEY is not set")
        return {
            "accept": "application/json",
            "X-RapidAPI-Key": self._api_key,
            "X-RapidAPI-Host": self._host,
        }

    async def fetch_property(self, listing_id: str) -> dict[str, Any]:
        url = f"{self._base_url}/property"
        params = {"zpid": listing_id}
        headers = self._headers()
        log.debug("listing api GET %s params=%s headers=%s", url, params, redact_headers(headers, ("X-RapidAPI-Key",)))

        try:
            r = await bounded_request(
                "GET",
                url,
                timeout_s=self._timeout_s,
                headers=headers,
                params=params,
                transport=self._transport,
            )
        except httpx.HTTPStatusError as e:
            raise UpstreamUnavailable(
                f"Listing API returned {e.response.status_code}: {e.response.text[:300]}"
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamUnavailable(f"Listing API unreachable: {e!r}") from e

        try:
            data = r.json()
        except ValueError as e:
            raise UpstreamUnavailable("Listing API returned a non-JSON body") from e

        if not isinstance(data, dict) or not data:
            raise UpstreamUnavailable("Listing API returned an empty or non-object body")
        return data
