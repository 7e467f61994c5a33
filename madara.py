"""
Madara Adapter - WordPress "Madara" theme manga sites

Listings are server-rendered HTML. A listing has another page exactly when
the theme's "next" navigation link is present.
"""

import re
import logging
from threading import Event
from typing import List, Optional
from urllib.parse import urlencode, urljoin

from catalog_models import (CatalogItem, ChapterEntry, FilterSpec, ListingPage, MangaStatus,
                            PageRef, dedupe_by_url)
from date_utils import EN_ES, DateResolver
from exceptions import UpstreamError
from filters import encode_filters
from html_utils import (CardSelectors, all_texts, extract_cards, first_text, image_url, lookup_status, node_text,
                        own_text, parse_chapter_number, parse_html, url_without_domain)
from http_client import HttpClient
from pagination import has_next_by_selector

logger = logging.getLogger(__name__)

CHAPTER_NUMBER_PATTERN = re.compile(r'(?:chapter|ch\.|cap[ií]tulo|cap\.)\s*(\d+(?:[.,]\d+)?)', re.IGNORECASE)


class MadaraAdapter:
    """Adapter for one Madara theme site"""

    supports_latest = True

    # Listing selectors
    POPULAR_SELECTOR = 'div.page-item-detail'
    LATEST_SELECTOR = 'div.item__wrap'
    SEARCH_SELECTOR = 'div.c-tabs-item__content'
    NEXT_PAGE_SELECTOR = 'div.nav-previous, nav.navigation-ajax, a.nextpostslink'

    CARD = CardSelectors(title='div.post-title a')
    SEARCH_CARD = CardSelectors(
        title='div.post-title a',
        author='div.mg_author div.summary-content a',
        artist='div.mg_artists div.summary-content a',
        genres='div.mg_genres div.summary-content a',
        status='div.mg_status div.summary-content a',
    )

    # Details / chapters / pages
    DETAILS_TITLE_SELECTOR = 'div.post-title h3, div.post-title h1'
    CHAPTER_SELECTOR = 'div.listing-chapters_wrap li.wp-manga-chapter'
    CHAPTER_DATE_SELECTOR = 'span.chapter-release-date i'
    PAGE_SELECTOR = 'div.page-break'

    STATUS_TABLE = {
        'OnGoing': MangaStatus.ONGOING,
        'Ongoing': MangaStatus.ONGOING,
        'Completed': MangaStatus.COMPLETED,
    }

    def __init__(self, name: str, base_url: str, lang: str = 'en',
                 date_format: str = '%B %d, %Y',
                 http: Optional[HttpClient] = None,
                 date_resolver: Optional[DateResolver] = None):
        self.name = name
        self.base_url = base_url.rstrip('/')
        self.lang = lang
        self.http = http or HttpClient()
        self.date_resolver = date_resolver or DateResolver(pattern=date_format, vocabulary=EN_ES)

    def __repr__(self):
        return f"MadaraAdapter({self.name!r}, {self.base_url!r})"

    def default_filters(self) -> FilterSpec:
        return FilterSpec()

    def _url(self, path: str) -> str:
        return urljoin(self.base_url + '/', path)

    def _get_soup(self, url: str, cancel_event: Optional[Event]):
        resp = self.http.get(url, headers={'Referer': self.base_url + '/'}, cancel_event=cancel_event)
        return parse_html(resp.body)

    def _listing(self, url: str, item_selector: str, card: CardSelectors,
                 next_selector: Optional[str], cancel_event: Optional[Event]) -> ListingPage:
        soup = self._get_soup(url, cancel_event)
        items = extract_cards(soup, item_selector, card, self.base_url, self.STATUS_TABLE)
        return ListingPage(items=tuple(items), has_next_page=has_next_by_selector(soup, next_selector))

    # === Listings ===

    def fetch_popular(self, page: int, cancel_event: Optional[Event] = None) -> ListingPage:
        url = self._url(f"manga/page/{page}/?m_orderby=views")
        result = self._listing(url, self.POPULAR_SELECTOR, self.CARD, self.NEXT_PAGE_SELECTOR, cancel_event)
        logger.info(f"[{self.name}] popular page {page}: {len(result.items)} items, next={result.has_next_page}")
        return result

    def fetch_latest(self, page: int, cancel_event: Optional[Event] = None) -> ListingPage:
        """The front page only; `page` is ignored and there is never a next page"""
        result = self._listing(self.base_url + '/', self.LATEST_SELECTOR, self.CARD, None, cancel_event)
        # The same series shows up once per updated chapter slot
        items = dedupe_by_url(result.items)
        logger.info(f"[{self.name}] latest: {len(items)} unique of {len(result.items)} items")
        return ListingPage(items=tuple(items), has_next_page=False)

    def fetch_search(self, page: int, query: str, filters: Optional[FilterSpec] = None,
                     cancel_event: Optional[Event] = None) -> ListingPage:
        params = [('s', query), ('post_type', 'wp-manga')]
        params.extend(encode_filters(filters, self.default_filters()))
        url = self._url(f"page/{page}/?{urlencode(params)}")
        result = self._listing(url, self.SEARCH_SELECTOR, self.SEARCH_CARD, self.NEXT_PAGE_SELECTOR, cancel_event)
        logger.info(f"[{self.name}] search '{query}' page {page}: {len(result.items)} items")
        return result

    # === Details ===

    def fetch_details(self, item_url: str, cancel_event: Optional[Event] = None) -> CatalogItem:
        soup = self._get_soup(self._url(item_url), cancel_event)

        title_elem = soup.select_one(self.DETAILS_TITLE_SELECTOR)
        title = own_text(title_elem) if title_elem is not None else ''
        if not title:
            raise UpstreamError("Details page has no title", url=self._url(item_url))

        item = CatalogItem(url=url_without_domain(item_url), title=title)
        item.author = first_text(soup, 'div.author-content')
        item.artist = first_text(soup, 'div.artist-content')
        item.genres = all_texts(soup, 'div.genres-content a')

        for row in soup.select('div.post-status div.post-content_item'):
            heading = first_text(row, 'div.summary-heading') or ''
            if 'status' in heading.lower():
                label = first_text(row, 'div.summary-content')
                item.status = lookup_status(label, self.STATUS_TABLE)
                break

        paragraphs = [node_text(p) for p in soup.select('div.description-summary div.summary__content p')]
        if paragraphs:
            item.description = '\n\n'.join(paragraphs)

        cover = soup.select_one('div.summary_image img')
        if cover is not None:
            item.thumbnail_url = image_url(cover, self.base_url) or None

        logger.info(f"[{self.name}] details for {item.title}")
        return item

    # === Chapters ===

    def _chapter_from_element(self, element) -> Optional[ChapterEntry]:
        link = element.select_one('a')
        if link is None or not link.get('href'):
            return None
        href = link['href'].strip()
        if not href.endswith('?style=list'):
            href += '?style=list'

        name = node_text(link)
        chapter = ChapterEntry(url=url_without_domain(href), name=name)
        chapter.chapter_number = parse_chapter_number(name, CHAPTER_NUMBER_PATTERN)

        date_elem = element.select_one(self.CHAPTER_DATE_SELECTOR)
        if date_elem is not None:
            chapter.date_upload = self.date_resolver.resolve(node_text(date_elem))
        else:
            # Fresh uploads show "x hours ago" in a link title instead
            recent = element.select_one('span.chapter-release-date a[title]')
            if recent is not None:
                chapter.date_upload = self.date_resolver.resolve(recent['title'])
        return chapter

    def fetch_chapter_list(self, item_url: str, cancel_event: Optional[Event] = None) -> List[ChapterEntry]:
        soup = self._get_soup(self._url(item_url), cancel_event)
        chapters = []
        for element in soup.select(self.CHAPTER_SELECTOR):
            chapter = self._chapter_from_element(element)
            if chapter is not None:
                chapters.append(chapter)
        logger.info(f"[{self.name}] found {len(chapters)} chapters for {item_url}")
        return chapters

    # === Pages ===

    def fetch_pages(self, chapter_url: str, cancel_event: Optional[Event] = None) -> List[PageRef]:
        soup = self._get_soup(self._url(chapter_url), cancel_event)
        urls = []
        for element in soup.select(self.PAGE_SELECTOR):
            img = element.select_one('img')
            if img is None:
                continue
            src = image_url(img, self._url(chapter_url))
            if src:
                urls.append(src)
        logger.info(f"[{self.name}] found {len(urls)} pages for {chapter_url}")
        return [PageRef(index=i, image_url=src) for i, src in enumerate(urls)]
