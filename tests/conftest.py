import threading
import time
from datetime import datetime
from typing import List, Optional

import pytest
import pytz

from date_utils import EN_ES, RU, DateResolver
from exceptions import OperationCancelled, UpstreamError
from http_client import FetchResult

FIXED_NOW = datetime(2020, 7, 21, 15, 30, 45, tzinfo=pytz.utc)


class FakeHttp:
    """Scripted stand-in for HttpClient: routes match on method + URL prefix"""

    def __init__(self):
        self.routes = []
        self.calls: List[dict] = []
        self._lock = threading.Lock()

    def add(self, method: str, url_prefix: str, body, status: int = 200, delay: float = 0.0):
        if isinstance(body, str):
            body = body.encode('utf-8')
        self.routes.append((method, url_prefix, body, status, delay))

    def calls_to(self, url_prefix: str, method: Optional[str] = None) -> List[dict]:
        return [c for c in self.calls
                if c['url'].startswith(url_prefix) and (method is None or c['method'] == method)]

    def fetch(self, method, url, headers=None, data=None, cancel_event=None) -> FetchResult:
        with self._lock:
            self.calls.append({'method': method, 'url': url, 'headers': dict(headers or {})})
        if cancel_event is not None and cancel_event.is_set():
            raise OperationCancelled(f"Cancelled while fetching {url}")
        # Longest matching prefix wins
        matches = [r for r in self.routes if r[0] == method and url.startswith(r[1])]
        if not matches:
            raise UpstreamError("No route", url=url, status=404)
        _, _, body, status, delay = max(matches, key=lambda r: len(r[1]))
        if delay:
            time.sleep(delay)
        if not 200 <= status < 300:
            raise UpstreamError("Unexpected response status", url=url, status=status)
        return FetchResult(status=status, url=url, body=body, headers={})

    def get(self, url, **kwargs):
        return self.fetch('GET', url, **kwargs)

    def post(self, url, **kwargs):
        return self.fetch('POST', url, **kwargs)


@pytest.fixture
def fake_http():
    return FakeHttp()


@pytest.fixture
def en_resolver():
    return DateResolver(pattern='%B %d, %Y', vocabulary=EN_ES, tz=pytz.utc, clock=lambda: FIXED_NOW)


@pytest.fixture
def ru_resolver():
    return DateResolver(pattern='%d.%m.%Y', vocabulary=RU, tz=pytz.utc, clock=lambda: FIXED_NOW)
