"""
Session Token - lazily acquired anti-forgery token, one per adapter

The token is scraped from an authenticated page the first time a gated
request needs it and then reused for the adapter's lifetime. Concurrent
first use collapses into a single page fetch.
"""

import re
import logging
from threading import Lock
from typing import Callable

from exceptions import AuthTokenNotFound

logger = logging.getLogger(__name__)

TOKEN_PATTERN = re.compile(r'_token" content="(.*?)"')


def extract_token(html: str, source_url: str) -> str:
    match = TOKEN_PATTERN.search(html)
    if not match:
        logger.warning(f"Session token pattern not found on {source_url}")
        raise AuthTokenNotFound(source_url)
    return match.group(1)


class SessionToken:
    """Holds one token value; empty string means not fetched yet"""

    def __init__(self):
        self.value = ''
        self._lock = Lock()

    def is_set(self) -> bool:
        return bool(self.value)

    def ensure(self, acquire: Callable[[], str]) -> str:
        """
        Return the cached token, calling `acquire` once to fetch it if unset.

        `acquire` runs under the lock so concurrent callers wait for the
        in-flight fetch instead of issuing their own. If it raises, the
        token stays unset and the next caller tries again.
        """
        if self.value:
            return self.value
        with self._lock:
            if not self.value:
                token = acquire()
                self.value = token
                logger.info("Session token acquired")
            return self.value

    def clear(self):
        """Forget the token so the next gated request fetches a fresh one"""
        with self._lock:
            self.value = ''
