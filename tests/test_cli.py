"""Tests for the command-line interface."""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from converter.cache import SymbolCache
from converter.cli import cli
from converter.core import CacheKey, KeyKind, LookupFailure, ResolvedSymbol

from conftest import APPLE, FakeLookupClient


CSV = (
    "date,type,isin,ticker,exchange,currency,quantity,unitPrice,fee,comment\n"
    "2024-01-15,buy,US0378331005,AAPL,,USD,10,185.5,1.2,\n"
    "2024-01-16,deposit,,,,USD,,500,,\n"
)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def input_file(tmp_path):
    path = tmp_path / "export.csv"
    path.write_text(CSV, encoding="utf-8")
    return str(path)


@pytest.fixture
def env(cache_path):
    return {"GHOSTFOLIO_ACCOUNT_ID": "acc-1", "CONVERTER_CACHE_PATH": cache_path, "DEBUG_LOGGING": ""}


def invoke_with_client(runner, client, args, env):
    with patch("converter.cli.YahooFinanceClient") as yahoo:
        yahoo.from_settings.return_value = client
        return runner.invoke(cli, args, env=env)


class TestConvert:
    """The convert command."""

    def test_prints_export_and_saves_cache(self, runner, input_file, env, cache_path):
        client = FakeLookupClient({"US0378331005": [APPLE]})

        result = invoke_with_client(runner, client, ["convert", "generic", input_file, "--quiet"], env)

        assert result.exit_code == 0, result.output
        document = json.loads(result.output)
        assert [a["symbol"] for a in document["activities"]] == ["AAPL"]
        assert document["activities"][0]["accountId"] == "acc-1"
        assert client.closed
        assert SymbolCache(cache_path).load() == (1, 1)

    def test_second_run_served_from_cache(self, runner, input_file, env):
        first = FakeLookupClient({"US0378331005": [APPLE]})
        invoke_with_client(runner, first, ["convert", "generic", input_file, "--quiet"], env)

        second = FakeLookupClient()
        result = invoke_with_client(runner, second, ["convert", "generic", input_file, "--quiet"], env)

        assert result.exit_code == 0, result.output
        assert second.calls == []

    def test_cache_option_overrides_env(self, runner, input_file, env, tmp_path):
        override = str(tmp_path / "other.json")
        client = FakeLookupClient({"US0378331005": [APPLE]})

        invoke_with_client(runner, client, ["convert", "generic", input_file, "--quiet", "--cache", override], env)

        assert SymbolCache(override).load() == (1, 1)

    def test_missing_account_id(self, runner, input_file, env):
        env["GHOSTFOLIO_ACCOUNT_ID"] = ""
        result = invoke_with_client(runner, FakeLookupClient(), ["convert", "generic", input_file], env)

        assert result.exit_code == 1
        assert "GHOSTFOLIO_ACCOUNT_ID" in result.output

    def test_unknown_converter(self, runner, input_file, env):
        result = invoke_with_client(runner, FakeLookupClient(), ["convert", "nope", input_file], env)

        assert result.exit_code == 1
        assert "Unknown converter 'nope'" in result.output

    def test_lookup_failure_aborts_with_query_in_message(self, runner, input_file, env, cache_path):
        client = FakeLookupClient(error=LookupFailure("HTTP 401 Unauthorized"))

        result = invoke_with_client(runner, client, ["convert", "generic", input_file, "--quiet"], env)

        assert result.exit_code == 1
        assert "US0378331005" in result.output
        assert "HTTP 401" in result.output
        assert client.closed
        assert SymbolCache(cache_path).load() == (0, 0)


class TestCacheCommands:
    """The cache command group."""

    def test_info(self, runner, env, cache_path):
        cache = SymbolCache(cache_path)
        cache.put(CacheKey(KeyKind.ISIN, "US0378331005"), ResolvedSymbol("AAPL", "USD"))
        cache.save()

        result = runner.invoke(cli, ["cache", "info"], env=env)

        assert result.exit_code == 0
        assert "1 ISIN entries, 0 symbol entries" in result.output

    def test_info_on_undecodable_file(self, runner, env, tmp_path):
        path = tmp_path / "broken.json"
        path.write_bytes(b"\xff\xfe\x00garbage")

        result = runner.invoke(cli, ["cache", "info", "--cache", str(path)], env=env)

        assert result.exit_code == 0
        assert "0 ISIN entries, 0 symbol entries" in result.output

    def test_clear(self, runner, env, cache_path):
        cache = SymbolCache(cache_path)
        cache.put(CacheKey(KeyKind.ISIN, "US0378331005"), ResolvedSymbol("AAPL", "USD"))
        cache.save()

        result = runner.invoke(cli, ["cache", "clear", "--yes"], env=env)

        assert result.exit_code == 0
        assert SymbolCache(cache_path).load() == (0, 0)


def test_converters_listed(runner, env):
    result = runner.invoke(cli, ["converters"], env=env)
    assert result.exit_code == 0
    assert "generic" in result.output.split()
