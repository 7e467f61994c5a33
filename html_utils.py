"""
HTML helpers - node extraction shared by the HTML-based adapters
"""

import re
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, Comment, NavigableString
from bs4.element import Tag

from catalog_models import CatalogItem, MangaStatus

logger = logging.getLogger(__name__)


def parse_html(body: bytes) -> BeautifulSoup:
    return BeautifulSoup(body, 'html.parser')


def own_text(node: Tag) -> str:
    """Text of the node itself, ignoring text inside child elements"""
    parts = [
        str(child) for child in node.children
        if isinstance(child, NavigableString) and not isinstance(child, Comment)
    ]
    return ' '.join(''.join(parts).split())


def node_text(node: Tag) -> str:
    return ' '.join(node.get_text(' ').split())


def abs_url(node: Tag, attr: str, base_url: str) -> str:
    value = (node.get(attr) or '').strip()
    if not value:
        return ''
    return urljoin(base_url, value)


def image_url(img: Tag, base_url: str) -> str:
    # Lazy-loading themes keep the real image in data-src and a placeholder in src
    attr = 'data-src' if img.has_attr('data-src') else 'src'
    return abs_url(img, attr, base_url)


def url_without_domain(url: str) -> str:
    """Strip scheme and host, keeping path, query and fragment"""
    parsed = urlparse(url.strip())
    out = parsed.path or '/'
    if parsed.query:
        out += '?' + parsed.query
    if parsed.fragment:
        out += '#' + parsed.fragment
    return out


def lookup_status(label: Optional[str], table: Dict[str, MangaStatus]) -> MangaStatus:
    if not label:
        return MangaStatus.UNKNOWN
    return table.get(label.strip(), MangaStatus.UNKNOWN)


def parse_chapter_number(name: str, pattern: re.Pattern) -> Optional[float]:
    match = pattern.search(name)
    if not match:
        return None
    try:
        return float(match.group(1).replace(',', '.'))
    except ValueError:
        return None


def first_text(root: Tag, selector: Optional[str]) -> Optional[str]:
    if not selector:
        return None
    node = root.select_one(selector)
    if node is None:
        return None
    return node_text(node) or None


def all_texts(root: Tag, selector: Optional[str]) -> List[str]:
    if not selector:
        return []
    return [t for t in (node_text(n) for n in root.select(selector)) if t]


@dataclass(frozen=True)
class CardSelectors:
    """CSS selectors for one item card; optional fields may be None"""
    title: str
    thumbnail: Optional[str] = 'img'
    author: Optional[str] = None
    artist: Optional[str] = None
    genres: Optional[str] = None
    status: Optional[str] = None


def extract_card(element: Tag, selectors: CardSelectors, base_url: str,
                 status_table: Optional[Dict[str, MangaStatus]] = None) -> Optional[CatalogItem]:
    """
    Build a CatalogItem from one listing card.

    Returns None when the card has no title link, since an item without
    url or title cannot be listed. Everything else is best effort.
    """
    link = element.select_one(selectors.title)
    if link is None or not link.get('href'):
        logger.debug("Skipping card without a title link")
        return None
    title = own_text(link)
    if not title:
        logger.debug(f"Skipping card with empty title: {link.get('href')}")
        return None

    item = CatalogItem(url=url_without_domain(link['href']), title=title)

    if selectors.thumbnail:
        img = element.select_one(selectors.thumbnail)
        if img is not None:
            item.thumbnail_url = image_url(img, base_url) or None

    item.author = first_text(element, selectors.author)
    item.artist = first_text(element, selectors.artist)
    item.genres = all_texts(element, selectors.genres)

    if selectors.status and status_table is not None:
        item.status = lookup_status(first_text(element, selectors.status), status_table)

    return item


def extract_cards(soup: BeautifulSoup, item_selector: str, selectors: CardSelectors,
                  base_url: str, status_table: Optional[Dict[str, MangaStatus]] = None) -> List[CatalogItem]:
    items = []
    for element in soup.select(item_selector):
        item = extract_card(element, selectors, base_url, status_table)
        if item is not None:
            items.append(item)
    return items

