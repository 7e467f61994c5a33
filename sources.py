"""
Source Registry - the configured catalog sites and lookup by name or URL
"""

import logging
from threading import Lock
from typing import Dict, List, Optional
from urllib.parse import urlparse

import config
from catalog_adapter import CatalogAdapter
from http_client import HttpClient
from libmanga import LibMangaAdapter
from madara import MadaraAdapter

logger = logging.getLogger(__name__)


def build_sources(http: Optional[HttpClient] = None) -> Dict[str, CatalogAdapter]:
    """Create one adapter per configured site, keyed by display name"""
    http = http or HttpClient()
    sources: Dict[str, CatalogAdapter] = {}

    for name, base_url in config.parse_site_list(config.MADARA_SITES).items():
        sources[name] = MadaraAdapter(name, base_url, http=http)

    if config.MANGALIB_URL:
        sources['MangaLib'] = LibMangaAdapter('MangaLib', config.MANGALIB_URL, config.MANGALIB_STATIC_URL, http=http)
    if config.HENTAILIB_URL:
        sources['HentaiLib'] = LibMangaAdapter('HentaiLib', config.HENTAILIB_URL, config.HENTAILIB_STATIC_URL,
                                               http=http)

    logger.info(f"Configured {len(sources)} sources: {', '.join(sources)}")
    return sources


class SourceRegistry:
    """Holds adapters for the lifetime of the process so session tokens are reused"""

    def __init__(self, sources: Dict[str, CatalogAdapter]):
        self._sources = dict(sources)

    def names(self) -> List[str]:
        return list(self._sources)

    def get(self, name: str) -> CatalogAdapter:
        for key, adapter in self._sources.items():
            if key.lower() == name.lower():
                return adapter
        raise KeyError(f"Unknown source: {name}")

    def for_url(self, url: str) -> CatalogAdapter:
        """Pick the adapter whose base URL host matches the URL's host"""
        host = urlparse(url).netloc.lower()
        if host.startswith('www.'):
            host = host[4:]
        for adapter in self._sources.values():
            base_host = urlparse(adapter.base_url).netloc.lower()
            if base_host.startswith('www.'):
                base_host = base_host[4:]
            if host == base_host:
                return adapter
        raise ValueError(f"No source registered for host: {host}")


# Global registry instance
_registry = None
_registry_lock = Lock()


def get_registry() -> SourceRegistry:
    """Get or create the global registry."""
    global _registry
    if _registry is None:
        with _registry_lock:
            if _registry is None:
                _registry = SourceRegistry(build_sources())
    return _registry


def get_source(name: str) -> CatalogAdapter:
    return get_registry().get(name)


def get_source_for_url(url: str) -> CatalogAdapter:
    return get_registry().for_url(url)


def list_sources() -> List[str]:
    return get_registry().names()
