# app/service_layer/use_cases/import_listing.py
from __future__ import annotations

import logging
from typing import Any, Iterable

from ...adapters.clients.listing_api import ListingApiClient
from ...config import settings
from ...connectors.listing.app_state import find_app_state_property
from ...connectors.listing.document import PageDocument
from ...connectors.listing.page_client import ListingPageClient
from ...connectors.listing.strategies import PAGE_STRATEGIES
from ...connectors.listing.structured_data import find_residence
from ...domain.address import address_from_payload, parse_address_slug
from ...domain.errors import IdentifierUnresolved, PageFetchFailed, UpstreamUnavailable
from ...domain.extraction import Strategy, build_snapshot, run_strategies
from ...domain.listing_payload import partial_from_property, provider_meta
from ...domain.listing_url import listing_slug, resolve_listing_id, validate_listing_url
from ...domain.types import (
    SNAPSHOT_FIELDS,
    ExtractedSnapshot,
    ExtractionTier,
    ImportResult,
    ParsedAddress,
)

log = logging.getLogger(__name__)


def _page_address(doc: PageDocument) -> ParsedAddress | None:
    """Address from page content; only consulted when the URL slug would not parse."""
    found = find_app_state_property(doc)
    if found is not None:
        addr = address_from_payload(found[1])
        if addr:
            return addr

    residence = find_residence(doc)
    if residence and isinstance(residence.get("address"), dict):
        a = residence["address"]
        return address_from_payload(
            {
                "streetAddress": a.get("streetAddress"),
                "city": a.get("addressLocality"),
                "state": a.get("addressRegion"),
                "zipcode": a.get("postalCode"),
            }
        )
    return None


class ListingImportPipeline:
    """
    URL -> ImportResult. Tiers, each tried only when the previous one is unavailable
    or failed:

      1. authoritative API (needs a key and a listing id); success ends the run
      2. page fetch + ordered strategies (structured data, app state, regex)
      3. fetch failed / nothing extracted: address from the URL slug only

    Never writes anything. Pure given its inputs apart from the two HTTP calls.
    """

    def __init__(
        self,
        api_client: ListingApiClient | None = None,
        page_client: ListingPageClient | None = None,
        strategies: Iterable[tuple[str, Strategy]] = PAGE_STRATEGIES,
    ) -> None:
        self.api = api_client or ListingApiClient()
        self.page = page_client or ListingPageClient()
        self.strategies = tuple(strategies)

    async def run(self, listing_url: str, organization_id: str) -> ImportResult:
        url = validate_listing_url(listing_url, domain=settings.LISTING_DOMAIN)

        listing_id = resolve_listing_id(
            url,
            id_marker=settings.LISTING_ID_MARKER,
            id_params=(settings.LISTING_ID_PARAM, "id"),
        )
        slug_address = parse_address_slug(
            listing_slug(url, path_segment=settings.LISTING_PATH_SEGMENT, id_marker=settings.LISTING_ID_MARKER),
            default_city=settings.DEFAULT_CITY,
        )

        if listing_id is None and slug_address is None:
            raise IdentifierUnresolved(
                "Could not find a listing id or an address in this URL. "
                f"Use a URL like: {settings.LISTING_DOMAIN}/{settings.LISTING_PATH_SEGMENT}/.../12345678{settings.LISTING_ID_MARKER}/"
            )

        if self.api.configured and listing_id:
            result = await self._from_api(url, listing_id, slug_address, organization_id)
            if result is not None:
                return result

        return await self._from_page(url, listing_id, slug_address, organization_id)

    async def _from_api(
        self,
        url: str,
        listing_id: str,
        slug_address: ParsedAddress | None,
        organization_id: str,
    ) -> ImportResult | None:
        try:
            data = await self.api.fetch_property(listing_id)
        except UpstreamUnavailable as e:
            log.warning(
                "listing api tier unavailable, falling back to page fetch url=%s org=%s err=%s",
                url,
                organization_id,
                e,
            )
            return None

        snapshot, unobserved = build_snapshot(partial_from_property(data), settings.MAX_LISTING_PHOTOS)
        return ImportResult(
            source_url=url,
            listing_id=listing_id,
            address=slug_address or address_from_payload(data),
            snapshot=snapshot,
            tier=ExtractionTier.api,
            strategies=("api",),
            unobserved=unobserved,
            provider_meta=provider_meta(data),
        )

    async def _from_page(
        self,
        url: str,
        listing_id: str | None,
        slug_address: ParsedAddress | None,
        organization_id: str,
    ) -> ImportResult:
        try:
            html = await self.page.fetch_html(url)
        except PageFetchFailed as e:
            log.warning("listing page degraded to address-only url=%s org=%s err=%s", url, organization_id, e)
            return self._address_only(url, listing_id, slug_address)

        doc = PageDocument.from_html(url, html)
        partial, used = run_strategies(doc, self.strategies)
        if not used:
            log.warning("listing page yielded no fields url=%s org=%s", url, organization_id)
            return self._address_only(url, listing_id, slug_address or _page_address(doc))

        snapshot, unobserved = build_snapshot(partial, settings.MAX_LISTING_PHOTOS)
        meta: dict[str, Any] = {}
        found = find_app_state_property(doc)
        if found is not None:
            meta = provider_meta(found[1])

        return ImportResult(
            source_url=url,
            listing_id=listing_id,
            address=slug_address or _page_address(doc),
            snapshot=snapshot,
            tier=ExtractionTier.page,
            strategies=tuple(used),
            unobserved=unobserved,
            provider_meta=meta,
        )

    @staticmethod
    def _address_only(url: str, listing_id: str | None, address: ParsedAddress | None) -> ImportResult:
        return ImportResult(
            source_url=url,
            listing_id=listing_id,
            address=address,
            snapshot=ExtractedSnapshot(),
            tier=ExtractionTier.address_only,
            unobserved=frozenset(SNAPSHOT_FIELDS),
        )
