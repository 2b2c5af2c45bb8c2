import pytest

from app.domain.errors import InvalidListingUrl
from app.domain.listing_url import listing_slug, resolve_listing_id, validate_listing_url


def test_id_from_path_marker():
    url = "https://www.zillow.com/homedetails/14504-Ardenall-Ave-East-Cleveland-OH-44112/33444982_zpid/"
    assert resolve_listing_id(url) == "33444982"


def test_id_from_query_params():
    assert resolve_listing_id("https://www.zillow.com/homes/?zpid=12345678") == "12345678"
    # no path identifier, generic id param
    assert resolve_listing_id("https://www.zillow.com/rental-manager/?id=98765") == "98765"


def test_path_marker_beats_query():
    url = "https://www.zillow.com/homedetails/x/111_zpid/?zpid=222"
    assert resolve_listing_id(url) == "111"


def test_non_listing_urls_resolve_to_none():
    assert resolve_listing_id("") is None
    assert resolve_listing_id("https://www.zillow.com/cleveland-oh/rentals/") is None
    assert resolve_listing_id("https://www.zillow.com/homes/?zpid=abc") is None


def test_validate_accepts_provider_hosts():
    assert validate_listing_url("  https://www.zillow.com/homedetails/a/1_zpid/ ") == (
        "https://www.zillow.com/homedetails/a/1_zpid/"
    )
    assert validate_listing_url("http://zillow.com/homedetails/a/1_zpid/")


@pytest.mark.parametrize(
    "url",
    [
        "https://example.com/listing/123",
        "https://zillow.com.evil.example/homedetails/a/1_zpid/",
        "ftp://www.zillow.com/homedetails/a/1_zpid/",
        "not a url",
        "",
    ],
)
def test_validate_rejects_other_urls(url):
    with pytest.raises(InvalidListingUrl):
        validate_listing_url(url)


def test_slug_after_path_segment():
    url = "https://www.zillow.com/homedetails/14504-Ardenall-Ave-East-Cleveland-OH-44112/33444982_zpid/"
    assert listing_slug(url) == "14504-Ardenall-Ave-East-Cleveland-OH-44112"


def test_slug_before_id_marker_without_path_segment():
    url = "https://www.zillow.com/b/123-Main-St-Cleveland-OH-44101/555_zpid/"
    assert listing_slug(url) == "123-Main-St-Cleveland-OH-44101"


def test_slug_missing():
    assert listing_slug("https://www.zillow.com/homedetails/33444982_zpid/") is None
    assert listing_slug("https://www.zillow.com/rental-manager/?id=98765") is None
