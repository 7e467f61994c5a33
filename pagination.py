"""
Pagination - the per-page continuation decision

Each fetch is independent: the caller passes the page number and the parsed
page alone says whether another one exists. Nothing is remembered between
calls.
"""

import logging
from enum import Enum
from typing import Callable, List, Optional

from bs4 import BeautifulSoup

from catalog_models import ListingPage

logger = logging.getLogger(__name__)


class PageState(Enum):
    INIT = 'init'
    FETCHING = 'fetching'
    HAS_MORE = 'has_more'
    EXHAUSTED = 'exhausted'


def page_state(page: ListingPage) -> PageState:
    return PageState.HAS_MORE if page.has_next_page else PageState.EXHAUSTED


def has_next_by_selector(soup: BeautifulSoup, next_selector: Optional[str]) -> bool:
    """HTML listings: more pages exist exactly when the "next" link is in the DOM"""
    if not next_selector:
        return False
    return soup.select_one(next_selector) is not None


def has_next_by_envelope(items: dict) -> bool:
    """JSON listings: more pages exist exactly when next_page_url is non-null"""
    return items.get('next_page_url') is not None


def fetch_all_pages(fetch_page: Callable[[int], ListingPage], start: int = 1,
                    max_pages: Optional[int] = None) -> List[ListingPage]:
    """
    Drive `fetch_page` from `start` until a page reports no successor.

    `max_pages` caps the walk for sources that never stop paginating.
    """
    pages = []
    state = PageState.INIT
    page_number = start
    while state != PageState.EXHAUSTED:
        if max_pages is not None and len(pages) >= max_pages:
            logger.info(f"Stopping after {max_pages} pages")
            break
        state = PageState.FETCHING
        page = fetch_page(page_number)
        pages.append(page)
        state = page_state(page)
        page_number += 1
    return pages
