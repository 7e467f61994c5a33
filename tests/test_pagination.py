import pytest

from catalog_models import CatalogItem, ListingPage
from html_utils import parse_html
from pagination import PageState, fetch_all_pages, has_next_by_envelope, has_next_by_selector, page_state


def listing(n, has_next):
    return ListingPage(items=(CatalogItem(url=f'/{n}', title=str(n)),), has_next_page=has_next)


def test_selector_presence_decides_next_page():
    soup = parse_html(b'<div class="nav-previous"><a>Older</a></div>')
    assert has_next_by_selector(soup, 'div.nav-previous') is True
    assert has_next_by_selector(soup, 'a.nextpostslink') is False
    assert has_next_by_selector(soup, None) is False


@pytest.mark.parametrize("items, expected", [
    ({'next_page_url': 'https://lib.test/filterlist?page=3'}, True),
    ({'next_page_url': ''}, True),
    ({'next_page_url': None}, False),
    ({}, False),
])
def test_envelope_next_page_url(items, expected):
    assert has_next_by_envelope(items) is expected


def test_page_state():
    assert page_state(listing(1, True)) is PageState.HAS_MORE
    assert page_state(listing(1, False)) is PageState.EXHAUSTED
    assert page_state(ListingPage.empty()) is PageState.EXHAUSTED


def test_fetch_all_pages_stops_when_exhausted():
    requested = []

    def fetch(n):
        requested.append(n)
        return listing(n, has_next=n < 3)

    pages = fetch_all_pages(fetch)
    assert requested == [1, 2, 3]
    assert [p.items[0].title for p in pages] == ['1', '2', '3']


def test_fetch_all_pages_honours_cap_and_start():
    requested = []

    def fetch(n):
        requested.append(n)
        return listing(n, has_next=True)

    pages = fetch_all_pages(fetch, start=4, max_pages=2)
    assert requested == [4, 5]
    assert len(pages) == 2


def test_failed_page_propagates():
    def fetch(n):
        if n == 2:
            raise RuntimeError("boom")
        return listing(n, has_next=True)

    with pytest.raises(RuntimeError):
        fetch_all_pages(fetch)
