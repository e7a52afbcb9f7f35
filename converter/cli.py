"""
Command-line interface.

Usage:
    python -m converter convert generic transactions.csv > export.json
    python -m converter cache info
    python -m converter cache clear
    python -m converter converters
"""

from __future__ import annotations

import json
from typing import Optional

import click

from .cache.store import SymbolCache
from .config import Settings, load_environment
from .core.errors import InputFileError, LookupFailure
from .core.resolver import Resolver
from .integrations.yahoo.client import YahooFinanceClient
from .logging import get_logger
from .progress import ProgressReporter
from .registry import ConverterRegistry


logger = get_logger(__name__)

cache_option = click.option(
    "--cache",
    "cache_path",
    default=None,
    type=click.Path(dir_okay=False),
    help="Symbol cache file (defaults to CONVERTER_CACHE_PATH or .cache/symbol-cache.json).",
)


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Convert brokerage exports into a Ghostfolio activity import."""

    load_environment()
    ctx.ensure_object(dict)
    ctx.obj["settings"] = Settings.from_env()


@cli.command()
@click.argument("converter_name", metavar="CONVERTER")
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False))
@cache_option
@click.option("--quiet", is_flag=True, help="No progress bar; diagnostics go to the log only.")
@click.pass_context
def convert(ctx: click.Context, converter_name: str, input_file: str, cache_path: Optional[str], quiet: bool) -> None:
    """Convert INPUT_FILE with CONVERTER and print the export JSON to stdout."""

    settings: Settings = ctx.obj["settings"]
    if not settings.account_id:
        raise click.ClickException("Environment variable GHOSTFOLIO_ACCOUNT_ID not set!")
    if converter_name.lower() not in ConverterRegistry.names():
        raise click.ClickException(
            f"Unknown converter '{converter_name}' provided. Available: {', '.join(ConverterRegistry.names())}"
        )

    reporter = ProgressReporter(quiet=quiet)
    cache = SymbolCache(cache_path or settings.cache_path)
    isin_count, symbol_count = cache.load()
    reporter.log(f"[i] Restored {isin_count} ISIN-symbol pairs and {symbol_count} symbols from cache..")

    client = YahooFinanceClient.from_settings(settings)
    try:
        with Resolver(client, cache, reporter=reporter, autosave=settings.cache_autosave) as resolver:
            converter = ConverterRegistry.create(
                converter_name, resolver, account_id=settings.account_id, reporter=reporter
            )
            reporter.log(f"[i] Processing file using {converter.name} converter")
            export = converter.read_and_process_file(input_file)
    except LookupFailure as e:
        query = e.context.get("query")
        subject = query.describe() if query is not None else "a security"
        raise click.ClickException(f"Aborting conversion, lookup failed for {subject}: {e}") from e
    except InputFileError as e:
        raise click.ClickException(str(e)) from e
    finally:
        client.close()

    for line in reporter.summary():
        reporter.log(line)
    reporter.log(f"[i] Processing complete, {len(export.activities)} activities converted")
    click.echo(json.dumps(export.to_dict(), indent=2 if settings.debug else None))


@cli.group("cache")
def cache_group() -> None:
    """Inspect or reset the symbol cache."""


@cache_group.command("info")
@cache_option
@click.pass_context
def cache_info(ctx: click.Context, cache_path: Optional[str]) -> None:
    """Show how many entries the cache holds."""

    path = cache_path or ctx.obj["settings"].cache_path
    isin_count, symbol_count = SymbolCache(path).load()
    click.echo(f"{path}: {isin_count} ISIN entries, {symbol_count} symbol entries")


@cache_group.command("clear")
@cache_option
@click.confirmation_option(prompt="Remove every cached symbol, including no-match entries?")
@click.pass_context
def cache_clear(ctx: click.Context, cache_path: Optional[str]) -> None:
    """Empty the cache so every security is looked up again."""

    path = cache_path or ctx.obj["settings"].cache_path
    cache = SymbolCache(path)
    cache.load()
    cache.clear()
    cache.save()
    click.echo(f"Cleared {path}")


@cli.command("converters")
def list_converters() -> None:
    """List registered converter names."""

    for name in ConverterRegistry.names():
        click.echo(name)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
