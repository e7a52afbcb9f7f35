"""Tests for the durable symbol cache."""

import json
import os

import pytest

from converter.cache import SymbolCache
from converter.core import NO_MATCH, CacheKey, DataSource, KeyKind, ResolvedSymbol


APPLE = ResolvedSymbol(symbol="AAPL", currency="USD", canonical_name="Apple Inc.")
MANUAL = ResolvedSymbol(symbol="PRIVATE-FUND", currency="EUR", data_source=DataSource.MANUAL)

ISIN_KEY = CacheKey(KeyKind.ISIN, "US0378331005")
SYMBOL_KEY = CacheKey(KeyKind.SYMBOL, "AAPL|USD")
DEAD_KEY = CacheKey(KeyKind.SYMBOL, "DEAD|GBP")


class TestLoad:
    """Tests for restoring the cache from disk."""

    def test_missing_file_is_empty(self, cache_path):
        cache = SymbolCache(cache_path)
        assert cache.load() == (0, 0)
        assert len(cache) == 0

    def test_invalid_json_is_treated_as_empty(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_text("{not json", encoding="utf-8")

        cache = SymbolCache(str(path))
        assert cache.load() == (0, 0)

    def test_undecodable_bytes_are_treated_as_empty(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_bytes(b'{"isinSymbolCache": {"\xff\xfe": null}, "symbolCache": {}}')

        cache = SymbolCache(str(path))
        assert cache.load() == (0, 0)
        assert not cache.dirty

    def test_wrong_shape_is_treated_as_empty(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_text(json.dumps(["AAPL"]), encoding="utf-8")

        assert SymbolCache(str(path)).load() == (0, 0)

    def test_section_of_wrong_type_is_treated_as_empty(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_text(json.dumps({"isinSymbolCache": [], "symbolCache": {}}), encoding="utf-8")

        assert SymbolCache(str(path)).load() == (0, 0)

    def test_malformed_entries_are_skipped(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_text(
            json.dumps(
                {
                    "isinSymbolCache": {
                        "US0378331005": {"symbol": "AAPL", "currency": "USD"},
                        "XX0000000000": {"symbol": "", "currency": "USD"},
                        "YY0000000000": "garbage",
                    },
                    "symbolCache": {"AAPL|USD": {"symbol": "AAPL", "currency": "USD", "dataSource": "BOGUS"}},
                }
            ),
            encoding="utf-8",
        )

        cache = SymbolCache(str(path))
        assert cache.load() == (1, 0)
        assert cache.get(ISIN_KEY) == ResolvedSymbol("AAPL", "USD")

    def test_load_discards_previous_in_memory_state(self, cache_path):
        cache = SymbolCache(cache_path)
        cache.put(ISIN_KEY, APPLE)
        assert cache.load() == (0, 0)
        assert cache.get(ISIN_KEY) is None


class TestAccess:
    """Tests for get/put semantics."""

    def test_absent_key_returns_none(self, cache):
        assert cache.get(ISIN_KEY) is None
        assert ISIN_KEY not in cache

    def test_put_then_get(self, cache):
        cache.put(ISIN_KEY, APPLE)
        assert cache.get(ISIN_KEY) == APPLE
        assert ISIN_KEY in cache
        assert cache.dirty

    def test_tombstone_is_distinct_from_absent(self, cache):
        cache.put(DEAD_KEY, NO_MATCH)
        assert cache.get(DEAD_KEY) is NO_MATCH

    def test_put_overwrites(self, cache):
        cache.put(SYMBOL_KEY, NO_MATCH)
        cache.put(SYMBOL_KEY, APPLE)
        assert cache.get(SYMBOL_KEY) == APPLE
        assert cache.counts() == (0, 1)

    def test_mappings_are_separate(self, cache):
        cache.put(CacheKey(KeyKind.ISIN, "AAPL"), APPLE)
        assert cache.get(CacheKey(KeyKind.SYMBOL, "AAPL")) is None

    def test_rejects_other_values(self, cache):
        with pytest.raises(TypeError):
            cache.put(ISIN_KEY, {"symbol": "AAPL"})


class TestSave:
    """Tests for persisting the cache."""

    def test_round_trip(self, cache_path):
        cache = SymbolCache(cache_path)
        cache.put(ISIN_KEY, APPLE)
        cache.put(SYMBOL_KEY, APPLE)
        cache.put(DEAD_KEY, NO_MATCH)
        cache.put(CacheKey(KeyKind.SYMBOL, "PRIVATE-FUND|EUR"), MANUAL)
        cache.save()

        restored = SymbolCache(cache_path)
        assert restored.load() == (1, 3)
        assert restored.get(ISIN_KEY) == APPLE
        assert restored.get(SYMBOL_KEY) == APPLE
        assert restored.get(DEAD_KEY) is NO_MATCH
        assert restored.get(CacheKey(KeyKind.SYMBOL, "PRIVATE-FUND|EUR")).data_source is DataSource.MANUAL

    def test_file_format(self, cache_path):
        cache = SymbolCache(cache_path)
        cache.put(ISIN_KEY, APPLE)
        cache.put(DEAD_KEY, NO_MATCH)
        cache.save()

        with open(cache_path, encoding="utf-8") as fh:
            data = json.load(fh)
        assert data["version"] == 1
        assert data["isinSymbolCache"]["US0378331005"] == {
            "symbol": "AAPL",
            "currency": "USD",
            "dataSource": "YAHOO",
            "canonicalName": "Apple Inc.",
        }
        assert data["symbolCache"]["DEAD|GBP"] is None

    def test_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "cache.json"
        SymbolCache(str(path)).save()
        assert path.exists()

    def test_save_is_repeatable_and_leaves_no_temp_files(self, cache_path):
        cache = SymbolCache(cache_path)
        cache.put(ISIN_KEY, APPLE)
        cache.save()
        cache.save()

        assert os.listdir(os.path.dirname(cache_path)) == [os.path.basename(cache_path)]
        assert not cache.dirty

    def test_overwrites_corrupt_file(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_text("garbage", encoding="utf-8")

        cache = SymbolCache(str(path))
        cache.load()
        cache.put(ISIN_KEY, APPLE)
        cache.save()

        assert SymbolCache(str(path)).load() == (1, 0)

    def test_failed_write_keeps_previous_file(self, cache_path, monkeypatch):
        cache = SymbolCache(cache_path)
        cache.put(ISIN_KEY, APPLE)
        cache.save()

        def boom(*args, **kwargs):
            raise OSError("disk full")

        monkeypatch.setattr("converter.cache.store.os.replace", boom)
        cache.put(DEAD_KEY, NO_MATCH)
        with pytest.raises(OSError):
            cache.save()

        assert SymbolCache(cache_path).load() == (1, 0)
        assert os.listdir(os.path.dirname(cache_path)) == [os.path.basename(cache_path)]

    def test_clear(self, cache_path):
        cache = SymbolCache(cache_path)
        cache.put(ISIN_KEY, APPLE)
        cache.save()
        cache.clear()
        cache.save()

        assert SymbolCache(cache_path).load() == (0, 0)
