import json

import pytest

import catalog_cli
from catalog_models import CatalogItem, ListingPage, MangaStatus
from exceptions import UpstreamError


class StubAdapter:
    name = 'Stub'
    supports_latest = False

    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def fetch_popular(self, page):
        self.calls.append(('popular', page))
        if self.error:
            raise self.error
        return ListingPage(items=(CatalogItem(url='/a', title='A', status=MangaStatus.ONGOING),),
                           has_next_page=True)

    def fetch_search(self, page, query):
        self.calls.append(('search', page, query))
        return ListingPage.empty()


@pytest.fixture
def stub(monkeypatch):
    adapter = StubAdapter()
    monkeypatch.setattr(catalog_cli, 'get_source', lambda name: adapter)
    return adapter


def test_popular_prints_json(stub, capsys):
    assert catalog_cli.main(['popular', 'Stub', '--page', '3']) == 0
    out = json.loads(capsys.readouterr().out)
    assert stub.calls == [('popular', 3)]
    assert out['has_next_page'] is True
    assert out['items'][0]['title'] == 'A'
    assert out['items'][0]['status'] == 'ONGOING'


def test_search_passes_query(stub):
    assert catalog_cli.main(['search', 'Stub', 'solo leveling']) == 0
    assert stub.calls == [('search', 1, 'solo leveling')]


def test_latest_unsupported_is_an_error(stub):
    assert catalog_cli.main(['latest', 'Stub']) == 1


def test_adapter_error_exit_code(monkeypatch):
    adapter = StubAdapter(error=UpstreamError("down", url='https://x', status=503))
    monkeypatch.setattr(catalog_cli, 'get_source', lambda name: adapter)
    assert catalog_cli.main(['popular', 'Stub']) == 1


def test_unknown_source_exit_code(monkeypatch):
    def missing(name):
        raise KeyError(f"Unknown source: {name}")

    monkeypatch.setattr(catalog_cli, 'get_source', missing)
    assert catalog_cli.main(['details', 'Nope', '/x']) == 2


def test_sources_lists_names(monkeypatch, capsys):
    monkeypatch.setattr(catalog_cli, 'list_sources', lambda: ['One', 'Two'])
    assert catalog_cli.main(['sources']) == 0
    assert json.loads(capsys.readouterr().out) == ['One', 'Two']
