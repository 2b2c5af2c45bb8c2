import json

import httpx
import pytest

from app.adapters.clients.listing_api import ListingApiClient
from app.connectors.listing.page_client import ListingPageClient
from app.domain.errors import IdentifierUnresolved, InvalidListingUrl, UpstreamUnavailable
from app.domain.types import ExtractedSnapshot, ExtractionTier, ParsedAddress
from app.service_layer.use_cases.import_listing import ListingImportPipeline

URL = "https://www.zillow.com/homedetails/14504-Ardenall-Ave-East-Cleveland-OH-44112/33444982_zpid/"
SLUG_ADDRESS = ParsedAddress(street="14504 Ardenall Ave", city="East Cleveland", state="OH", zip="44112")

API_BODY = {
    "zpid": 33444982,
    "address": {"streetAddress": "14504 Ardenall Ave", "city": "East Cleveland", "state": "OH", "zipcode": "44112"},
    "bedrooms": 3,
    "bathrooms": 1,
    "livingArea": 1188,
    "rentZestimate": 1195,
    "zestimate": 89000,
    "homeType": "SINGLE_FAMILY",
    "description": "Three bedroom colonial.",
    "yearBuilt": 1921,
}


def _api(calls: list, status: int = 200, body=API_BODY, key: str = "test-key") -> ListingApiClient:
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if isinstance(body, (dict, list)):
            return httpx.Response(status, json=body)
        return httpx.Response(status, text=body)

    return ListingApiClient(api_key=key, base_url="https://api.test", transport=httpx.MockTransport(handler))


def _page(calls: list, html: str = "", status: int = 200) -> ListingPageClient:
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(status, text=html)

    return ListingPageClient(transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_api_success_never_fetches_page():
    api_calls, page_calls = [], []
    pipeline = ListingImportPipeline(api_client=_api(api_calls), page_client=_page(page_calls, "<html/>"))

    result = await pipeline.run(URL, "org-1")

    assert page_calls == []
    assert len(api_calls) == 1
    req = api_calls[0]
    assert req.url.params["zpid"] == "33444982"
    assert req.headers["X-RapidAPI-Key"] == "test-key"

    assert result.tier == ExtractionTier.api
    assert result.strategies == ("api",)
    assert result.listing_id == "33444982"
    assert result.address == SLUG_ADDRESS
    assert result.snapshot.price == 1195
    assert result.snapshot.bedrooms == 3
    assert result.snapshot.sqft == 1188
    assert result.snapshot.property_type == "house"
    assert result.snapshot.year_built == 1921
    assert result.provider_meta == {"zestimate": 89000.0, "rent_zestimate": 1195.0}
    assert result.limited_data is False


@pytest.mark.asyncio
@pytest.mark.parametrize("status,body", [(503, {"message": "down"}), (200, "<html>not json</html>"), (200, {})])
async def test_api_failure_falls_through_to_page(status, body):
    api_calls, page_calls = [], []
    pipeline = ListingImportPipeline(
        api_client=_api(api_calls, status=status, body=body),
        page_client=_page(page_calls, "<div>$1,300/mo</div><div>3 beds</div>"),
    )

    result = await pipeline.run(URL, "org-1")

    assert len(api_calls) == 1
    assert len(page_calls) == 1
    assert result.tier == ExtractionTier.page
    assert result.strategies == ("regex",)
    assert result.snapshot.price == 1300
    assert result.snapshot.bedrooms == 3


@pytest.mark.asyncio
async def test_api_client_raises_upstream_unavailable():
    with pytest.raises(UpstreamUnavailable):
        await _api([], status=429, body={"message": "quota"}).fetch_property("1")


@pytest.mark.asyncio
async def test_unconfigured_api_is_skipped():
    api_calls, page_calls = [], []
    pipeline = ListingImportPipeline(
        api_client=_api(api_calls, key=""),
        page_client=_page(page_calls, "<div>$950/month</div>"),
    )

    result = await pipeline.run(URL, "org-1")

    assert api_calls == []
    assert result.tier == ExtractionTier.page
    assert result.snapshot.price == 950


@pytest.mark.asyncio
async def test_page_fetch_failure_degrades_to_address_only():
    page_calls = []
    pipeline = ListingImportPipeline(api_client=_api([], key=""), page_client=_page(page_calls, "blocked", status=403))

    result = await pipeline.run(URL, "org-1")

    assert len(page_calls) == 1
    assert result.tier == ExtractionTier.address_only
    assert result.limited_data is True
    assert result.address == SLUG_ADDRESS
    assert result.listing_id == "33444982"
    assert result.snapshot == ExtractedSnapshot()
    assert result.strategies == ()


@pytest.mark.asyncio
async def test_empty_page_body_degrades():
    pipeline = ListingImportPipeline(api_client=_api([], key=""), page_client=_page([], "   "))
    result = await pipeline.run(URL, "org-1")
    assert result.limited_data is True


@pytest.mark.asyncio
async def test_page_without_any_fields_is_limited_data():
    pipeline = ListingImportPipeline(api_client=_api([], key=""), page_client=_page([], "<p>Please verify you are a human</p>"))
    result = await pipeline.run(URL, "org-1")
    assert result.tier == ExtractionTier.address_only
    assert result.address == SLUG_ADDRESS


@pytest.mark.asyncio
async def test_page_tier_keeps_provider_meta_from_app_state():
    prop = {"bedrooms": 2, "rentZestimate": 1100, "zestimate": 75000}
    cache = json.dumps({"Query": {"property": prop}})
    blob = {"props": {"pageProps": {"componentProps": {"gdpClientCache": cache}}}}
    html = f'<html><body><script id="__NEXT_DATA__">{json.dumps(blob)}</script></body></html>'

    pipeline = ListingImportPipeline(api_client=_api([], key=""), page_client=_page([], html))
    result = await pipeline.run(URL, "org-1")

    assert result.tier == ExtractionTier.page
    assert result.strategies == ("app_state",)
    assert result.snapshot.price == 1100
    assert result.provider_meta == {"zestimate": 75000.0, "rent_zestimate": 1100.0}
    # nobody reported a type
    assert "property_type" in result.unobserved


@pytest.mark.asyncio
async def test_query_id_only_url_uses_api_address():
    api_calls = []
    pipeline = ListingImportPipeline(api_client=_api(api_calls), page_client=_page([], ""))

    result = await pipeline.run("https://www.zillow.com/rental-manager/?id=98765", "org-1")

    assert api_calls[0].url.params["zpid"] == "98765"
    assert result.listing_id == "98765"
    assert result.address == SLUG_ADDRESS


@pytest.mark.asyncio
async def test_invalid_url_makes_no_network_call():
    api_calls, page_calls = [], []
    pipeline = ListingImportPipeline(api_client=_api(api_calls), page_client=_page(page_calls, "<html/>"))

    with pytest.raises(InvalidListingUrl):
        await pipeline.run("https://example.com/listing/123", "org-1")

    assert api_calls == []
    assert page_calls == []


@pytest.mark.asyncio
async def test_unresolvable_provider_url():
    api_calls, page_calls = [], []
    pipeline = ListingImportPipeline(api_client=_api(api_calls), page_client=_page(page_calls, "<html/>"))

    with pytest.raises(IdentifierUnresolved):
        await pipeline.run("https://www.zillow.com/cleveland-oh/rentals/", "org-1")

    assert api_calls == []
    assert page_calls == []
