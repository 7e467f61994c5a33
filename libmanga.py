"""
LibManga Adapter - token-gated JSON catalog sites (mangalib.me and siblings)

Catalog listings are POSTs to /filterlist that only succeed with the CSRF
token scraped from the login page. Search also merges the site's popup
suggestions, and chapter pages hide their image list in a base64 payload.
"""

import re
import logging
from threading import Event
from typing import List, Optional
from urllib.parse import urlencode, urljoin

from catalog_models import (CatalogItem, ChapterEntry, FilterSpec, ListingPage, MangaStatus, PageRef,
                            SortGroup, TriStateGroup, TriStateOption, dedupe_by_url)
from date_utils import RU, DateResolver
from exceptions import UpstreamError
from filters import encode_filters
from html_utils import (abs_url, all_texts, first_text, lookup_status, node_text, parse_chapter_number,
                        parse_html, url_without_domain)
from http_client import FetchResult, HttpClient
from page_decoder import decode_page_list
from pagination import has_next_by_envelope
from search_merge import search_with_suggestions
from session_token import SessionToken, extract_token

logger = logging.getLogger(__name__)

CHAPTER_NUMBER_PATTERN = re.compile(r'Глава\s(\d+(?:[.,]\d+)?)')

SORT_OPTIONS = [
    ('Рейтинг', 'rate'),
    ('Имя', 'name'),
    ('Просмотры', 'views'),
    ('Дата', 'created_at'),
    ('Кол-во глав', 'chap_count'),
]

# Option ids come from window.__FILTER_ITEMS__ on /manga-list
CATEGORIES = [
    ('Манга', '1'),
    ('OEL-манга', '4'),
    ('Манхва', '5'),
    ('Маньхуа', '6'),
    ('Сингл', '7'),
    ('Руманга', '8'),
    ('Комикс западный', '9'),
]

STATUSES = [
    ('Продолжается', '1'),
    ('Завершен', '2'),
    ('Заморожен', '3'),
]

GENRES = [
    ('арт', '32'), ('боевик', '34'), ('боевые искусства', '35'), ('вампиры', '36'),
    ('веб', '78'), ('гарем', '37'), ('гендерная интрига', '38'), ('героическое фэнтези', '39'),
    ('детектив', '40'), ('дзёсэй', '41'), ('додзинси', '42'), ('драма', '43'),
    ('ёнкома', '75'), ('игра', '44'), ('история', '45'), ('киберпанк', '46'),
    ('кодомо', '76'), ('комедия', '47'), ('махо-сёдзё', '48'), ('меха', '49'),
    ('мистика', '50'), ('научная фантастика', '51'), ('омегаверс', '77'), ('повседневность', '52'),
    ('постапокалиптика', '53'), ('приключения', '54'), ('психология', '55'), ('романтика', '56'),
    ('самурайский боевик', '57'), ('сверхъестественное', '58'), ('сёдзё', '59'), ('сёдзё-ай', '60'),
    ('сёнэн', '61'), ('сёнэн-ай', '62'), ('спорт', '63'), ('сэйнэн', '64'),
    ('трагедия', '65'), ('триллер', '66'), ('ужасы', '67'), ('фантастика', '68'),
    ('фэнтези', '69'), ('школа', '70'), ('эротика', '71'), ('этти', '72'),
    ('юри', '73'), ('яой', '74'),
]


def _options(pairs) -> List[TriStateOption]:
    return [TriStateOption(name=name, id=option_id) for name, option_id in pairs]


class LibMangaAdapter:
    """Adapter for one LibManga-engine site"""

    supports_latest = True

    LATEST_SELECTOR = 'div.updates__left'
    CHAPTER_SELECTOR = 'div.chapter-item'

    STATUS_TABLE = {
        'продолжается': MangaStatus.ONGOING,
        'завершен': MangaStatus.COMPLETED,
    }

    def __init__(self, name: str, base_url: str, static_url: str, lang: str = 'ru',
                 http: Optional[HttpClient] = None,
                 date_resolver: Optional[DateResolver] = None):
        self.name = name
        self.base_url = base_url.rstrip('/')
        self.static_url = static_url
        self.lang = lang
        self.http = http or HttpClient()
        self.date_resolver = date_resolver or DateResolver(pattern='%d.%m.%Y', vocabulary=RU)
        self.token = SessionToken()

    def __repr__(self):
        return f"LibMangaAdapter({self.name!r}, {self.base_url!r})"

    def default_filters(self) -> FilterSpec:
        return FilterSpec(groups=[
            TriStateGroup(title='Категории', include_key='types[]', options=_options(CATEGORIES)),
            TriStateGroup(title='Статус', include_key='status[]', options=_options(STATUSES)),
            TriStateGroup(title='Жанры', include_key='includeGenres[]', exclude_key='excludeGenres[]',
                          options=_options(GENRES)),
            SortGroup(title='Сортировка', options=list(SORT_OPTIONS), index=0, ascending=False),
        ])

    def _url(self, path: str) -> str:
        return urljoin(self.base_url + '/', path)

    # === Session token ===

    def _acquire_token(self, cancel_event: Optional[Event]) -> str:
        resp = self.http.get(self._url('/login'), cancel_event=cancel_event)
        return extract_token(resp.text, resp.url)

    def ensure_token(self, cancel_event: Optional[Event] = None) -> str:
        return self.token.ensure(lambda: self._acquire_token(cancel_event))

    def _xhr_headers(self) -> dict:
        return {
            'Accept': 'application/json, text/plain, */*',
            'X-Requested-With': 'XMLHttpRequest',
        }

    def _catalog_headers(self) -> dict:
        headers = self._xhr_headers()
        headers['x-csrf-token'] = self.token.value
        return headers

    # === Catalog API ===

    def _item_from_record(self, record) -> Optional[CatalogItem]:
        if not isinstance(record, dict):
            return None
        title = record.get('name')
        slug = record.get('slug')
        if not isinstance(title, str) or not title or not isinstance(slug, str) or not slug:
            logger.debug(f"[{self.name}] skipping record without name/slug: {record!r}")
            return None

        cover = record.get('cover')
        has_cover = (isinstance(cover, int) and not isinstance(cover, bool)) or \
            (isinstance(cover, str) and cover.isdigit())
        if has_cover:
            thumbnail = f"{self.base_url}/uploads/cover/{slug}/cover/cover_250x350.jpg"
        else:
            thumbnail = f"{self.base_url}/uploads/no-image.png"

        return CatalogItem(url='/' + slug, title=title, thumbnail_url=thumbnail)

    def _items_from_records(self, records) -> List[CatalogItem]:
        items = []
        for record in records:
            item = self._item_from_record(record)
            if item is not None:
                items.append(item)
        return items

    def parse_catalog(self, resp: FetchResult) -> ListingPage:
        """Parse a /filterlist envelope: {"items": {"data": [...], "next_page_url": ...}}"""
        envelope = resp.json()
        items = envelope.get('items') if isinstance(envelope, dict) else None
        records = items.get('data') if isinstance(items, dict) else None
        if not isinstance(records, list):
            logger.warning(f"[{self.name}] catalog response without items.data, treating as empty")
            return ListingPage.empty()
        return ListingPage(items=tuple(self._items_from_records(records)),
                           has_next_page=has_next_by_envelope(items))

    def _fetch_catalog(self, url: str, cancel_event: Optional[Event]) -> ListingPage:
        self.ensure_token(cancel_event)
        resp = self.http.post(url, headers=self._catalog_headers(), cancel_event=cancel_event)
        return self.parse_catalog(resp)

    def _fetch_suggestions(self, query: str, cancel_event: Optional[Event]) -> List[CatalogItem]:
        url = self._url('/search') + '?' + urlencode([('query', query)])
        resp = self.http.get(url, headers=self._xhr_headers(), cancel_event=cancel_event)
        records = resp.json()
        if not isinstance(records, list):
            logger.warning(f"[{self.name}] suggestion response is not a list, ignoring it")
            return []
        return self._items_from_records(records)

    # === Listings ===

    def fetch_popular(self, page: int, cancel_event: Optional[Event] = None) -> ListingPage:
        url = self._url('/filterlist') + '?' + urlencode([('dir', 'desc'), ('sort', 'views'), ('page', page)])
        result = self._fetch_catalog(url, cancel_event)
        logger.info(f"[{self.name}] popular page {page}: {len(result.items)} items, next={result.has_next_page}")
        return result

    def fetch_latest(self, page: int, cancel_event: Optional[Event] = None) -> ListingPage:
        """Front page update feed; `page` is ignored and there is never a next page"""
        resp = self.http.get(self.base_url, cancel_event=cancel_event)
        soup = parse_html(resp.body)

        items = []
        for element in soup.select(self.LATEST_SELECTOR):
            link = element.select_one('a')
            img = link.select_one('img') if link is not None else None
            if img is None or not link.get('href'):
                continue
            title = (img.get('alt') or '').strip()
            if not title:
                continue
            thumbnail = abs_url(img, 'data-src', self.base_url).replace('cover_thumb', 'cover_250x350')
            items.append(CatalogItem(url=url_without_domain(link['href']), title=title,
                                     thumbnail_url=thumbnail or None))

        unique = dedupe_by_url(items)
        logger.info(f"[{self.name}] latest: {len(unique)} unique of {len(items)} items")
        return ListingPage(items=tuple(unique), has_next_page=False)

    def fetch_search(self, page: int, query: str, filters: Optional[FilterSpec] = None,
                     cancel_event: Optional[Event] = None) -> ListingPage:
        params = [('page', str(page))]
        if query:
            params.append(('name', query))
        params.extend(encode_filters(filters, self.default_filters()))
        url = self._url('/filterlist') + '?' + urlencode(params)

        return search_with_suggestions(
            query,
            lambda: self._fetch_suggestions(query, cancel_event),
            lambda: self._fetch_catalog(url, cancel_event),
        )

    # === Details ===

    def fetch_details(self, item_url: str, cancel_event: Optional[Event] = None) -> CatalogItem:
        resp = self.http.get(self._url(item_url), cancel_event=cancel_event)
        soup = parse_html(resp.body)
        body = soup.select_one('div.section__body')
        if body is None:
            raise UpstreamError("Details page has no section body", url=resp.url)

        title = first_text(body, '.manga__title')
        if not title:
            raise UpstreamError("Details page has no title", url=resp.url)

        item = CatalogItem(url=url_without_domain(item_url), title=title)
        cover = body.select_one('.manga__cover')
        if cover is not None:
            item.thumbnail_url = abs_url(cover, 'src', self.base_url) or None
        item.author = ', '.join(all_texts(body, '.info-list__row:nth-child(2) > a')) or None
        item.artist = ', '.join(all_texts(body, '.info-list__row:nth-child(3) > a')) or None
        item.status = lookup_status(
            first_text(body, '.info-list__row:has(strong:-soup-contains("Перевод")) span.m-label_info'),
            self.STATUS_TABLE,
        )
        item.genres = all_texts(body, '.info-list__row:has(strong:-soup-contains("Жанры")) > a')
        item.description = first_text(body, '.info-desc__content')

        logger.info(f"[{self.name}] details for {item.title}")
        return item

    # === Chapters ===

    def fetch_chapter_list(self, item_url: str, cancel_event: Optional[Event] = None) -> List[ChapterEntry]:
        resp = self.http.get(self._url(item_url), cancel_event=cancel_event)
        soup = parse_html(resp.body)

        chapters = []
        for element in soup.select(self.CHAPTER_SELECTOR):
            link = element.select_one('div.chapter-item__name > a')
            if link is None or not link.get('href'):
                continue
            name = node_text(link)
            chapters.append(ChapterEntry(
                url=url_without_domain(link['href']),
                name=name,
                date_upload=self.date_resolver.resolve(first_text(element, 'div.chapter-item__date')),
                chapter_number=parse_chapter_number(name, CHAPTER_NUMBER_PATTERN),
            ))

        logger.info(f"[{self.name}] found {len(chapters)} chapters for {item_url}")
        return chapters

    # === Pages ===

    def fetch_pages(self, chapter_url: str, cancel_event: Optional[Event] = None) -> List[PageRef]:
        resp = self.http.get(self._url(chapter_url), cancel_event=cancel_event)
        pages = decode_page_list(parse_html(resp.body), self.static_url)
        logger.info(f"[{self.name}] {len(pages)} pages for {chapter_url}")
        return pages
