"""Shared fixtures: an in-memory lookup client and a cache in a temp dir."""

from typing import Dict, List, Optional

import pytest

from converter.cache import SymbolCache
from converter.core import Candidate, Resolver, SymbolLookupClient
from converter.progress import ProgressReporter


class FakeLookupClient(SymbolLookupClient):
    """Serves canned candidates per search term and records every search."""

    def __init__(self, results: Optional[Dict[str, List[Candidate]]] = None, error: Optional[Exception] = None):
        super().__init__()
        self.results = results or {}
        self.error = error
        self.calls: List[str] = []
        self.closed = False

    def search(self, term):
        self.calls.append(term)
        if self.error is not None:
            raise self.error
        return list(self.results.get(term, []))

    def close(self):
        self.closed = True


APPLE = Candidate(symbol="AAPL", name="Apple Inc.", currency="USD", exchange="NMS", score=100.0)
VODAFONE_LSE = Candidate(symbol="VOD.L", name="Vodafone Group Plc", currency="GBp", exchange="LSE", score=50.0)
VODAFONE_US = Candidate(symbol="VOD", name="Vodafone Group Plc ADR", currency="USD", exchange="NMS", score=80.0)


@pytest.fixture
def cache_path(tmp_path):
    return str(tmp_path / "cache" / "symbols.json")


@pytest.fixture
def cache(cache_path):
    store = SymbolCache(cache_path)
    store.load()
    return store


@pytest.fixture
def client():
    return FakeLookupClient(
        {
            "US0378331005": [APPLE],
            "AAPL": [APPLE],
            "GB00BH4HKS39": [VODAFONE_US, VODAFONE_LSE],
            "VOD": [VODAFONE_US, VODAFONE_LSE],
        }
    )


@pytest.fixture
def reporter():
    return ProgressReporter(quiet=True)


@pytest.fixture
def resolver(client, cache, reporter):
    return Resolver(client, cache, reporter=reporter)
