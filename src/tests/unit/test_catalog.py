"""Unit tests for catalog/client.py and catalog/sets.py"""

from urllib.parse import parse_qs, urlparse

import pytest

from deckpress.catalog.client import CatalogClient
from deckpress.catalog.sets import SetCatalog
from deckpress.errors import FetchError
from deckpress.result import failure, success


class RoutedResponse:
    def __init__(self, status_code, payload):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        return self._payload


class RoutedSession:
    """requests.Session stand-in answering by path."""

    def __init__(self, routes):
        self.routes = routes
        self.urls = []

    def get(self, url, headers=None, timeout=None):
        self.urls.append(url)
        parsed = urlparse(url)
        key = (parsed.path, tuple(sorted((k, v[0]) for k, v in parse_qs(parsed.query).items())))
        status, payload = self.routes.get(key, (404, {"object": "error", "details": "Not found"}))
        return RoutedResponse(status, payload)

    def close(self):
        pass


BOLT = {"object": "card", "id": "bolt-lea", "name": "Lightning Bolt", "set": "lea"}


def _client(routes):
    return CatalogClient(base_url="https://api.test/", session=RoutedSession(routes), timeout=1)


class TestCatalogClient:
    """Tests for catalog lookups returning Results."""

    def test_by_name_fuzzy(self):
        client = _client({("/cards/named", (("fuzzy", "bolt"),)): (200, BOLT)})

        result = client.by_name("bolt")

        assert result["ok"] is True
        assert result["value"]["name"] == "Lightning Bolt"

    def test_by_name_not_found(self):
        result = _client({}).by_name("Blorp")

        assert result["ok"] is False
        assert "Not found" in result["error"]

    def test_by_name_and_set_exact(self):
        routes = {("/cards/named", (("exact", "Lightning Bolt"), ("set", "lea"))): (200, BOLT)}

        result = _client(routes).by_name_and_set("Lightning Bolt", "LEA")

        assert result["ok"] is True

    def test_by_name_and_set_name_mismatch(self):
        """A different card coming back is reported as a mismatch."""
        other = dict(BOLT, name="Chain Lightning")
        routes = {("/cards/named", (("exact", "Lightning Bolt"), ("set", "lea"))): (200, other)}

        result = _client(routes).by_name_and_set("Lightning Bolt", "lea")

        assert result["ok"] is False
        assert "NameMismatchError" in result["error"]
        assert "Chain Lightning" in result["error"]

    def test_by_name_and_set_ignores_case(self):
        routes = {("/cards/named", (("exact", "lightning bolt"), ("set", "lea"))): (200, BOLT)}
        assert _client(routes).by_name_and_set("lightning bolt", "lea")["ok"] is True

    def test_by_id(self):
        routes = {("/cards/bolt-lea", ()): (200, BOLT)}
        assert _client(routes).by_id("bolt-lea")["value"] == BOLT

    def test_all_sets_unwraps_list(self):
        sets = [{"code": "lea", "name": "Alpha"}]
        routes = {("/sets", ()): (200, {"object": "list", "data": sets})}

        assert _client(routes).all_sets()["value"] == sets

    def test_all_sets_wrong_shape_is_failure(self):
        """A payload that is not a list object is reported, not raised."""
        routes = {("/sets", ()): (200, ["lea"])}

        result = _client(routes).all_sets()

        assert result["ok"] is False
        assert result["error"].startswith("AttributeError:")

    def test_search_passes_parameters(self):
        client = _client({})
        client.search("t:goblin", unique="art", order="released", page=2)

        query = parse_qs(urlparse(client.session.urls[0]).query)
        assert query == {"q": ["t:goblin"], "unique": ["art"], "order": ["released"], "page": ["2"]}

    def test_stats_count_errors(self):
        client = _client({})
        client.by_id("missing")
        assert client.stats == {"requests": 1, "errors": 1}


SETS = [
    {"code": "dom", "name": "Dominaria", "released_at": "2018-04-27", "card_count": 280},
    {"code": "dmu", "name": "Dominaria United", "released_at": "2022-09-09", "card_count": 281},
    {"code": "pdmu", "name": "Dominaria United Promos", "released_at": "2022-09-09", "card_count": 0},
    {"code": "lea", "name": "Limited Edition Alpha", "released_at": "1993-08-05", "card_count": 295},
]


class CountingLoader:
    def __init__(self, results):
        self.results = list(results)
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.results.pop(0) if len(self.results) > 1 else self.results[0]


class TestSetCatalog:
    """Tests for the cached set list."""

    def test_loads_once(self):
        loader = CountingLoader([success(SETS)])
        catalog = SetCatalog(loader)

        catalog.get()
        catalog.get()

        assert loader.calls == 1
        assert catalog.is_loaded

    def test_invalidate_forces_reload(self):
        loader = CountingLoader([success(SETS)])
        catalog = SetCatalog(loader)
        catalog.get()

        catalog.invalidate()
        catalog.get()

        assert loader.calls == 2

    def test_ttl_expiry(self):
        now = [0.0]
        loader = CountingLoader([success(SETS)])
        catalog = SetCatalog(loader, clock=lambda: now[0], ttl_seconds=60)

        catalog.get()
        now[0] = 59
        catalog.get()
        assert loader.calls == 1

        now[0] = 60
        catalog.get()
        assert loader.calls == 2

    def test_failed_load_not_cached(self):
        loader = CountingLoader([failure("offline"), success(SETS)])
        catalog = SetCatalog(loader)

        with pytest.raises(FetchError, match="offline"):
            catalog.get()

        assert catalog.get() == SETS
        assert loader.calls == 2

    def test_search_newest_first_with_cards_only(self):
        catalog = SetCatalog(CountingLoader([success(SETS)]))

        codes = [entry["code"] for entry in catalog.search("dominaria")]

        assert codes == ["dmu", "dom"]

    def test_search_matches_code_and_limits(self):
        catalog = SetCatalog(CountingLoader([success(SETS)]))

        assert [entry["code"] for entry in catalog.search("LEA")] == ["lea"]
        assert len(catalog.search("", limit=2)) == 2
