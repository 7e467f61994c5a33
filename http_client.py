"""
HTTP Client - the transport every adapter goes through

Wraps a pooled requests.Session. Responses are read in chunks so a caller's
cancel event can abort a transfer that is already in flight.
"""

import json
import random
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter

import config
from exceptions import OperationCancelled, UpstreamError

logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    status: int
    url: str
    body: bytes
    headers: Dict[str, str] = field(default_factory=dict)
    encoding: Optional[str] = None

    @property
    def text(self) -> str:
        return self.body.decode(self.encoding or 'utf-8', errors='replace')

    def json(self) -> Any:
        """Parse the body as JSON, raising UpstreamError when it is not JSON at all"""
        try:
            return json.loads(self.text)
        except ValueError as e:
            raise UpstreamError(f"Response is not valid JSON: {e}", url=self.url, status=self.status)


def check_cancelled(cancel_event: Optional[threading.Event], url: str) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise OperationCancelled(f"Cancelled while fetching {url}")


class HttpClient:
    """Pooled transport with a stable per-instance User-Agent"""

    CHUNK_SIZE = 64 * 1024

    def __init__(self, timeout: Optional[int] = None, user_agent: Optional[str] = None,
                 session: Optional[requests.Session] = None):
        self.timeout = timeout or config.REQUEST_TIMEOUT
        self.user_agent = user_agent or config.USER_AGENT or random.choice(config.USER_AGENTS)
        self.session = session or requests.Session()

        adapter = HTTPAdapter(pool_connections=config.POOL_SIZE, pool_maxsize=config.POOL_SIZE)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    def default_headers(self) -> Dict[str, str]:
        return {
            'User-Agent': self.user_agent,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8',
            'Accept-Language': 'en-US,en;q=0.5',
            'Connection': 'keep-alive',
        }

    def fetch(self, method: str, url: str, headers: Optional[Dict[str, str]] = None,
              data: Optional[Any] = None,
              cancel_event: Optional[threading.Event] = None) -> FetchResult:
        """
        Perform one request and return the fully read response.

        Raises UpstreamError on transport failure or a non-2xx status and
        OperationCancelled when `cancel_event` is set before or during the
        transfer.
        """
        check_cancelled(cancel_event, url)

        merged = self.default_headers()
        if headers:
            merged.update(headers)

        try:
            resp = self.session.request(method, url, headers=merged, data=data,
                                        timeout=self.timeout, stream=True)
        except requests.RequestException as e:
            logger.warning(f"{method} {url} failed: {type(e).__name__}: {e}")
            raise UpstreamError(f"Request failed: {e}", url=url) from e

        try:
            if not 200 <= resp.status_code < 300:
                logger.warning(f"{method} {url} returned HTTP {resp.status_code}")
                raise UpstreamError("Unexpected response status", url=url, status=resp.status_code)

            chunks = []
            for chunk in resp.iter_content(chunk_size=self.CHUNK_SIZE):
                check_cancelled(cancel_event, url)
                if chunk:
                    chunks.append(chunk)
            body = b''.join(chunks)
        except requests.RequestException as e:
            logger.warning(f"{method} {url} body read failed: {e}")
            raise UpstreamError(f"Reading response failed: {e}", url=url) from e
        finally:
            resp.close()

        # requests guesses latin-1 for text/* without a charset; only trust an explicit one
        content_type = resp.headers.get('Content-Type', '')
        encoding = resp.encoding if 'charset=' in content_type.lower() else None

        logger.debug(f"{method} {url} -> {resp.status_code} ({len(body)} bytes)")
        return FetchResult(
            status=resp.status_code,
            url=resp.url or url,
            body=body,
            headers=dict(resp.headers),
            encoding=encoding,
        )

    def get(self, url: str, **kwargs) -> FetchResult:
        return self.fetch('GET', url, **kwargs)

    def post(self, url: str, **kwargs) -> FetchResult:
        return self.fetch('POST', url, **kwargs)
