import json

from app.connectors.listing.app_state import AppStateShape, extract_app_state, find_app_state_property
from app.connectors.listing.document import PageDocument
from app.connectors.listing.regex_fallback import extract_regex_fallback
from app.connectors.listing.strategies import PAGE_STRATEGIES
from app.connectors.listing.structured_data import extract_structured_data
from app.domain.extraction import build_snapshot, merge_partials, run_strategies

URL = "https://www.zillow.com/homedetails/14504-Ardenall-Ave-East-Cleveland-OH-44112/33444982_zpid/"

APP_STATE_PROPERTY = {
    "bedrooms": 3,
    "bathrooms": 2,
    "livingArea": 1400,
    "rentZestimate": 1450,
    "zestimate": 210000,
    "homeType": "TOWNHOUSE",
    "description": "Updated townhouse near the park.",
    "yearBuilt": 1954,
    "responsivePhotos": [
        {"mixedSources": {"jpeg": [{"url": "https://img.example/t-384.jpg", "width": 384}, {"url": "https://img.example/t-1536.jpg", "width": 1536}]}}
    ],
}


def _doc(body: str) -> PageDocument:
    return PageDocument.from_html(URL, f"<html><head></head><body>{body}</body></html>")


def _ld_json(obj) -> str:
    return f'<script type="application/ld+json">{json.dumps(obj)}</script>'


def _next_data(prop) -> str:
    cache = json.dumps({'ForSaleShopperPlatformFullRenderQuery{"zpid":33444982}': {"property": prop}})
    blob = {"props": {"pageProps": {"componentProps": {"gdpClientCache": cache}}}}
    return f'<script id="__NEXT_DATA__" type="application/json">{json.dumps(blob)}</script>'


def _apollo(prop) -> str:
    blob = {"apiCache": json.dumps({"VariantQuery": {"property": prop}})}
    return f'<script id="hdpApolloPreloadedData" type="application/json">{json.dumps(blob)}</script>'


RESIDENCE = {
    "@context": "https://schema.org",
    "@type": "SingleFamilyResidence",
    "floorSize": {"@type": "QuantitativeValue", "value": "1,024"},
    "numberOfBedrooms": 3,
    "numberOfBathroomsTotal": 1.5,
    "offers": {"@type": "Offer", "price": 1250},
    "description": "Brick colonial with a fenced yard.",
    "image": ["https://img.example/ld-1.jpg", "https://img.example/ld-2.jpg"],
}


def test_structured_data_alone():
    got = extract_structured_data(_doc(_ld_json(RESIDENCE)))
    assert got == {
        "sqft": 1024,
        "bedrooms": 3,
        "bathrooms": 1.5,
        "price": 1250.0,
        "description": "Brick colonial with a fenced yard.",
        "property_type": "house",
        "photos": ["https://img.example/ld-1.jpg", "https://img.example/ld-2.jpg"],
    }


def test_structured_data_inside_graph():
    got = extract_structured_data(_doc(_ld_json({"@graph": [{"@type": "WebPage"}, RESIDENCE]})))
    assert got is not None
    assert got["price"] == 1250.0


def test_structured_data_ignores_other_types_and_bad_json():
    body = _ld_json({"@type": "BreadcrumbList"}) + '<script type="application/ld+json">{not json</script>'
    assert extract_structured_data(_doc(body)) is None


def test_structured_data_room_count_is_not_bedrooms():
    got = extract_structured_data(_doc(_ld_json({"@type": "SingleFamilyResidence", "numberOfRooms": 7})))
    assert got == {"property_type": "house"}


def test_app_state_next_data_cache():
    doc = _doc(_next_data(APP_STATE_PROPERTY))
    found = find_app_state_property(doc)
    assert found is not None
    assert found[0] == AppStateShape.next_gdp_cache

    got = extract_app_state(doc)
    assert got["price"] == 1450.0
    assert got["bedrooms"] == 3
    assert got["bathrooms"] == 2.0
    assert got["sqft"] == 1400
    assert got["property_type"] == "townhouse"
    assert got["year_built"] == 1954
    assert got["photos"] == ["https://img.example/t-1536.jpg"]


def test_app_state_apollo_cache():
    doc = _doc(_apollo({"bedrooms": 4, "price": 1800, "homeType": "MULTI_FAMILY"}))
    found = find_app_state_property(doc)
    assert found is not None
    assert found[0] == AppStateShape.apollo_api_cache
    got = extract_app_state(doc)
    assert got == {"price": 1800.0, "bedrooms": 4, "property_type": "duplex"}


def test_app_state_absent():
    assert extract_app_state(_doc("<p>nothing here</p>")) is None


def test_regex_only_page():
    # no structured data, no app-state cache
    doc = _doc("<div>$1,300/mo</div><div>3 beds</div>")
    assert extract_structured_data(doc) is None
    assert extract_app_state(doc) is None
    assert extract_regex_fallback(doc) == {"price": 1300.0, "bedrooms": 3}

    partial, used = run_strategies(doc, PAGE_STRATEGIES)
    assert used == ["regex"]
    snap, unobserved = build_snapshot(partial)
    assert snap.price == 1300
    assert snap.bedrooms == 3
    assert snap.bathrooms == 0
    assert snap.sqft is None
    assert snap.property_type == "house"
    assert snap.description is None
    assert snap.photos == ()
    assert "property_type" in unobserved
    assert "price" not in unobserved


def test_regex_extras():
    body = (
        "<p>2 bd | 1.5 ba | 1,100 sqft</p>"
        "<p>Condo for rent. Cats ok.</p>"
        "<p>Security deposit: $1,300</p><p>Application fee $45</p>"
        '<img src="https://photos.zillowstatic.com/fp/0123456789abcdef0123-cc_ft_384.jpg">'
        '<img src="https://photos.zillowstatic.com/fp/0123456789abcdef0123-cc_ft_1536.jpg">'
        '<img src="https://photos.zillowstatic.com/fp/fedcba9876543210fedc-cc_ft_768.jpg">'
    )
    got = extract_regex_fallback(_doc(body))
    assert got["bedrooms"] == 2
    assert got["bathrooms"] == 1.5
    assert got["sqft"] == 1100
    assert got["property_type"] == "condo"
    assert got["pet_policy"] == "Cats ok"
    assert got["deposit_amount"] == 1300.0
    assert got["application_fee"] == 45.0
    assert got["photos"] == [
        "https://photos.zillowstatic.com/fp/0123456789abcdef0123-cc_ft_1536.jpg",
        "https://photos.zillowstatic.com/fp/fedcba9876543210fedc-cc_ft_768.jpg",
    ]
    assert "price" not in got


def test_regex_nothing_found():
    assert extract_regex_fallback(_doc("<p>Hello</p>")) is None


def test_regex_ignores_inline_script_text():
    body = (
        '<script>var a="12 ba"; var b="9 beds"; var c="9,999 sqft";</script>'
        "<p>2 bd | 1 ba</p>"
        '<script>{"price":"1200"}</script>'
    )
    got = extract_regex_fallback(_doc(body))
    assert got["bedrooms"] == 2
    assert got["bathrooms"] == 1.0
    assert "sqft" not in got
    # price JSON still comes from the raw page
    assert got["price"] == 1200.0


def test_earlier_strategy_wins_later_fills_gaps():
    doc = _doc(_ld_json(RESIDENCE) + "<p>Dogs welcome</p>")
    partial, used = run_strategies(doc, PAGE_STRATEGIES)
    assert used == ["structured_data", "regex"]
    assert partial["price"] == 1250.0
    assert partial["bedrooms"] == 3
    assert partial["pet_policy"] == "Dogs welcome"


def test_merge_partials_first_non_default_wins():
    merged, contributed = merge_partials({"price": 0, "bedrooms": 2}, {"price": 900, "bedrooms": 5, "bogus": 1})
    assert merged == {"price": 900, "bedrooms": 2}
    assert contributed is True

    merged, contributed = merge_partials({"price": 900}, {"price": 1000, "description": "   "})
    assert merged == {"price": 900}
    assert contributed is False

    assert merge_partials({}, None) == ({}, False)
