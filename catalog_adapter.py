"""
Catalog Adapter contract - what every site adapter provides

Adapters are plain classes that satisfy this protocol; they share helpers
(html_utils, date_utils, filters, ...) rather than a base class.
"""

from threading import Event
from typing import List, Optional, Protocol, runtime_checkable

from catalog_models import CatalogItem, ChapterEntry, FilterSpec, ListingPage, PageRef


@runtime_checkable
class CatalogAdapter(Protocol):
    name: str
    base_url: str
    lang: str
    supports_latest: bool  # callers must not call fetch_latest when False

    def default_filters(self) -> FilterSpec:
        ...

    def fetch_popular(self, page: int, cancel_event: Optional[Event] = None) -> ListingPage:
        ...

    def fetch_latest(self, page: int, cancel_event: Optional[Event] = None) -> ListingPage:
        ...

    def fetch_search(self, page: int, query: str, filters: Optional[FilterSpec] = None,
                     cancel_event: Optional[Event] = None) -> ListingPage:
        ...

    def fetch_details(self, item_url: str, cancel_event: Optional[Event] = None) -> CatalogItem:
        ...

    def fetch_chapter_list(self, item_url: str, cancel_event: Optional[Event] = None) -> List[ChapterEntry]:
        ...

    def fetch_pages(self, chapter_url: str, cancel_event: Optional[Event] = None) -> List[PageRef]:
        ...
