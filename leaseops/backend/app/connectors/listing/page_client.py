# app/connectors/listing/page_client.py
from __future__ import annotations

import logging

import certifi
import httpx

from ...adapters.clients.http_resilience import bounded_request
from ...config import settings
from ...domain.errors import PageFetchFailed

log = logging.getLogger(__name__)


class ListingPageClient:
    """
    Fetches the public listing page as a browser would.

    SSL strategy:
      - default: verify SSL using certifi bundle
      - dev-only escape hatch: LISTING_VERIFY_SSL=0 (do not use in prod)
    """

    def __init__(
        self,
        *,
        timeout_s: float | None = None,
        user_agent: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout_s = timeout_s if timeout_s is not None else settings.PAGE_HTTP_TIMEOUT_S
        self.user_agent = user_agent or settings.LISTING_USER_AGENT
        self._transport = transport

    def _http_verify(self) -> bool | str:
        """
        httpx 'verify' can be:
          - True/False
          - path to CA bundle
        """
        if not settings.LISTING_VERIFY_SSL:
            return False
        if settings.LISTING_CA_BUNDLE:
            return settings.LISTING_CA_BUNDLE
        return certifi.where()

    def _headers(self) -> dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
            "Cache-Control": "no-cache",
            "Pragma": "no-cache",
            "Sec-Fetch-Dest": "document",
            "Sec-Fetch-Mode": "navigate",
            "Sec-Fetch-Site": "none",
            "Upgrade-Insecure-Requests": "1",
        }

    async def fetch_html(self, url: str) -> str:
        try:
            r = await bounded_request(
                "GET",
                url,
                timeout_s=self.timeout_s,
                headers=self._headers(),
                follow_redirects=True,
                verify=self._http_verify(),
                transport=self._transport,
            )
        except httpx.HTTPStatusError as e:
            raise PageFetchFailed(f"Listing page returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise PageFetchFailed(f"Listing page unreachable: {e!r}") from e

        html = r.text
        if not html or not html.strip():
            raise PageFetchFailed("Listing page body was empty")
        return html
