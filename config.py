"""
Configuration - environment driven settings for the catalog adapters

Values come from the process environment, optionally seeded from a .env file.
"""

import os
import logging
from typing import Dict

from dotenv import load_dotenv

load_dotenv()  # Loads variables from .env

logger = logging.getLogger(__name__)

USER_AGENTS = [
    # Chrome on Windows (most common)
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36',
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/130.0.0.0 Safari/537.36',
    # Chrome on Mac
    'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36',
    # Firefox
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0',
]


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, '')
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={raw!r}, using {default}")
        return default


REQUEST_TIMEOUT = _int_env('CATALOG_TIMEOUT', 20)
POOL_SIZE = _int_env('CATALOG_POOL_SIZE', 10)
USER_AGENT = os.getenv('CATALOG_USER_AGENT', '')  # empty = pick one from USER_AGENTS per client
TIMEZONE = os.getenv('CATALOG_TIMEZONE', 'UTC')
LOG_LEVEL = os.getenv('CATALOG_LOG_LEVEL', 'INFO').upper()

# Madara theme sites as "Name=https://host,Other=https://host2"
DEFAULT_MADARA_SITES = 'ManhuaUS=https://manhuaus.com,DaoTranslate=https://daotranslate.com'
MADARA_SITES = os.getenv('MADARA_SITES', DEFAULT_MADARA_SITES)

MANGALIB_URL = os.getenv('MANGALIB_URL', 'https://mangalib.me')
MANGALIB_STATIC_URL = os.getenv('MANGALIB_STATIC_URL', 'https://img3.mangalib.me')
HENTAILIB_URL = os.getenv('HENTAILIB_URL', 'https://hentailib.me')
HENTAILIB_STATIC_URL = os.getenv('HENTAILIB_STATIC_URL', 'https://img2.hentailib.me')


def parse_site_list(raw: str) -> Dict[str, str]:
    """Parse "Name=url,Name2=url2" into an ordered name -> base url mapping"""
    sites = {}
    for entry in raw.split(','):
        entry = entry.strip()
        if not entry:
            continue
        if '=' not in entry:
            logger.warning(f"Skipping malformed site entry: {entry!r}")
            continue
        name, url = entry.split('=', 1)
        sites[name.strip()] = url.strip().rstrip('/')
    return sites
