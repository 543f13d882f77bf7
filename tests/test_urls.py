import pytest
from bs4 import BeautifulSoup

from site_clipper import urls


@pytest.mark.parametrize("a, b", [
    ("https://example.com/docs", "https://example.com/docs/"),
    ("https://example.com/docs", "https://example.com/docs#install"),
    ("https://example.com/docs/", "https://example.com/docs#top"),
    ("https://example.com", "https://example.com/"),
    ("https://Example.COM/docs", "https://example.com/docs"),
])
def test_normalize_url_equivalent_forms(a, b):
    assert urls.normalize_url(a) == urls.normalize_url(b)


def test_normalize_url_preserves_root_and_query():
    assert urls.normalize_url("https://example.com/") == "https://example.com/"
    assert urls.normalize_url("https://example.com/search/?q=1#r") == "https://example.com/search?q=1"


def test_normalize_url_strips_only_one_trailing_slash():
    assert urls.normalize_url("https://example.com/docs//") == "https://example.com/docs/"


def test_normalize_url_keeps_path_case_and_userinfo():
    assert urls.normalize_url("https://User@Example.com/Docs") == "https://User@example.com/Docs"


def test_normalize_url_resolves_relative_against_base():
    assert urls.normalize_url("../guide/", "https://example.com/docs/api/") == "https://example.com/docs/guide"


@pytest.mark.parametrize("bad", [
    "",
    "mailto:someone@example.com",
    "javascript:void(0)",
    "https://",
    "http://[::1",
    "http://example.com:notaport/",
])
def test_normalize_url_rejects_unusable_input(bad):
    with pytest.raises(urls.InvalidUrlError):
        urls.normalize_url(bad)


def test_extract_links_keeps_document_order_and_drops_non_http():
    html = """
    <a href="/b">b</a>
    <a href="#section">anchor only</a>
    <a href="mailto:me@example.com">mail</a>
    <a href="javascript:alert(1)">js</a>
    <a>no href</a>
    <map><area href="/c" alt="c"></map>
    <a href="https://other.com/a">external</a>
    <a href="/b">duplicate</a>
    """
    soup = BeautifulSoup(html, "html.parser")

    links = urls.extract_links(soup, "https://example.com/docs/")

    assert links == [
        "https://example.com/b",
        "https://example.com/c",
        "https://other.com/a",
        "https://example.com/b",
    ]


def test_extract_links_resolves_relative_to_page_and_base_element():
    soup = BeautifulSoup('<a href="intro">i</a>', "html.parser")
    assert urls.extract_links(soup, "https://example.com/docs/") == ["https://example.com/docs/intro"]
    assert urls.extract_links(soup, "https://example.com/docs") == ["https://example.com/intro"]

    with_base = BeautifulSoup('<base href="/manual/"><a href="intro">i</a>', "html.parser")
    assert urls.extract_links(with_base, "https://example.com/docs/") == ["https://example.com/manual/intro"]


@pytest.mark.parametrize("link, expected", [
    ("https://example.com/docs/#top", "https://example.com/docs/"),
    ("https://example.com", "https://example.com/"),
    ("https://example.com/a?x=1#f", "https://example.com/a?x=1"),
])
def test_request_url_keeps_trailing_slash_and_drops_fragment(link, expected):
    assert urls.request_url(link) == expected


def test_split_patterns_drops_blanks():
    assert urls.split_patterns(" login, ,/admin ,") == ["login", "/admin"]
    assert urls.split_patterns(None) == []
    assert urls.split_patterns("") == []


def test_matches_pattern_substring_and_glob():
    url = "https://example.com/docs/api/v2"
    assert urls.matches_pattern(url, "/api/")
    assert not urls.matches_pattern(url, "/blog/")
    assert urls.matches_pattern(url, "*/docs/*/v?")
    assert not urls.matches_pattern(url, "*/docs/*/v3")


def test_is_sub_url_respects_origin_and_path_boundary():
    seed = "https://example.com/docs"
    assert urls.is_sub_url("https://example.com/docs", seed)
    assert urls.is_sub_url("https://example.com/docs/intro", seed)
    assert not urls.is_sub_url("https://example.com/docs-old", seed)
    assert not urls.is_sub_url("https://example.com/blog", seed)
    assert not urls.is_sub_url("http://example.com/docs/intro", seed)
    assert not urls.is_sub_url("https://docs.example.com/docs/intro", seed)


def test_is_sub_url_root_seed_allows_whole_host():
    assert urls.is_sub_url("https://example.com/anything/at/all", "https://example.com/")
