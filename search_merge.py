"""
Search Merge - combine quick suggestions with the full catalog search

Suggestions come first in their returned order. Catalog items follow unless
a suggestion already carries exactly the same title. Titles are compared
as-is, so the same series with different capitalization shows up twice.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Sequence

from catalog_models import CatalogItem, ListingPage

logger = logging.getLogger(__name__)


def merge_results(suggestions: Sequence[CatalogItem], catalog: ListingPage) -> ListingPage:
    merged = list(suggestions)
    suggested_titles = {item.title for item in suggestions}
    merged.extend(item for item in catalog.items if item.title not in suggested_titles)
    return ListingPage(items=tuple(merged), has_next_page=catalog.has_next_page)


def search_with_suggestions(query: str,
                            fetch_suggestions: Callable[[], List[CatalogItem]],
                            fetch_catalog: Callable[[], ListingPage]) -> ListingPage:
    """Run both lookups in parallel and merge; an empty query skips suggestions"""
    if not query:
        return fetch_catalog()

    with ThreadPoolExecutor(max_workers=2) as pool:
        suggestion_future = pool.submit(fetch_suggestions)
        catalog_future = pool.submit(fetch_catalog)
        catalog = catalog_future.result()
        suggestions = suggestion_future.result()

    result = merge_results(suggestions, catalog)
    logger.info(f"Search '{query}': {len(suggestions)} suggestions + "
                f"{len(catalog.items)} catalog -> {len(result.items)} results")
    return result
