from __future__ import annotations

import re
from typing import Optional

from ..core.enums import KeyKind
from ..core.errors import InvalidQuery
from ..core.schemas import CacheKey, SymbolQuery
from .currency import CurrencyRegistry, currency_registry


# ISO 6166: country prefix, 9 alphanumeric NSIN characters, check digit.
ISIN_PATTERN = re.compile(r"^[A-Z]{2}[A-Z0-9]{9}[0-9]$")

KEY_SEPARATOR = "|"


def is_valid_isin(value: Optional[str]) -> bool:
    if not value:
        return False
    return bool(ISIN_PATTERN.match(value.strip().upper()))


class QueryNormalizer:
    """Builds stable cache keys for symbol queries.

    Both kinds of key are "<ID>|<CURRENCY>", or just "<ID>" when no currency
    is known, with the currency passed through the alias table so "GBp" and
    "GBP" land on the same key. A tombstone under "<ISIN>|<CUR>" covers
    only that currency.
    """

    def __init__(self, currencies: Optional[CurrencyRegistry] = None) -> None:
        self.currencies = currencies or currency_registry

    def cache_key(self, query: SymbolQuery) -> CacheKey:
        if query.isin and is_valid_isin(query.isin):
            return self.isin_key(query.isin, query.currency)
        if query.ticker:
            return self.symbol_key(query.ticker, query.currency)
        if query.isin:
            raise InvalidQuery(
                f"Malformed ISIN '{query.isin}' and no ticker to fall back on",
                context={"query": query},
            )
        raise InvalidQuery("Query needs an ISIN or a ticker", context={"query": query})

    def isin_key(self, isin: str, currency: Optional[str] = None) -> CacheKey:
        return CacheKey(KeyKind.ISIN, self._compose(isin.strip().upper(), currency))

    def symbol_key(self, ticker: str, currency: Optional[str] = None) -> CacheKey:
        ticker_u = ticker.strip().upper()
        if not ticker_u:
            raise InvalidQuery("Empty ticker", context={"ticker": ticker})
        return CacheKey(KeyKind.SYMBOL, self._compose(ticker_u, currency))

    def _compose(self, identifier: str, currency: Optional[str]) -> str:
        currency_u = self.currencies.normalize(currency)
        return f"{identifier}{KEY_SEPARATOR}{currency_u}" if currency_u else identifier


query_normalizer = QueryNormalizer()
