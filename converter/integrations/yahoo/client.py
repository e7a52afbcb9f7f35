from __future__ import annotations

from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from ...config import Settings
from ...core.errors import LookupFailure
from ...core.interface import SymbolLookupClient
from ...core.schemas import Candidate
from ...logging import get_logger
from ...net.http import DEFAULT_TIMEOUT, call_with_retries, get_json
from ...net.ratelimiter import rate_limited_yahoo
from ...symbols.currency import CurrencyRegistry


logger = get_logger(__name__)

SEARCH_URL = "https://query2.finance.yahoo.com/v1/finance/search"
CHART_URL = "https://query1.finance.yahoo.com/v8/finance/chart/{symbol}"

DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0 Safari/537.36",
    "Accept": "application/json",
}

SUPPORTED_QUOTE_TYPES = {"EQUITY", "ETF", "MUTUALFUND", "INDEX", "CRYPTOCURRENCY", "CURRENCY", "FUTURE"}


class YahooFinanceClient(SymbolLookupClient):
    """Yahoo Finance symbol search.

    Search hits carry no currency, so each kept hit is completed with the
    ``meta`` block of the chart endpoint (memoized per symbol for the run).
    """

    def __init__(
        self,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_attempts: int = 3,
        backoff: float = 1.0,
        max_backoff: float = 10.0,
        max_candidates: int = 5,
        currencies: Optional[CurrencyRegistry] = None,
    ) -> None:
        super().__init__(currencies)
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.backoff = backoff
        self.max_backoff = max_backoff
        self.max_candidates = max_candidates
        self._meta: Dict[str, Dict[str, Any]] = {}

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "YahooFinanceClient":
        return cls(
            timeout=settings.yahoo_timeout,
            max_attempts=settings.yahoo_max_attempts,
            backoff=settings.yahoo_backoff_seconds,
            max_backoff=settings.yahoo_max_backoff_seconds,
            max_candidates=settings.yahoo_max_candidates,
            **kwargs,
        )

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    # --- Search ---
    def search(self, term: str) -> List[Candidate]:
        params = {"q": term, "quotesCount": max(10, self.max_candidates * 2), "newsCount": 0, "listsCount": 0}
        data = self._request(SEARCH_URL, params, f"search '{term}'")
        quotes = data.get("quotes") if isinstance(data, dict) else None
        if not isinstance(quotes, list):
            raise LookupFailure(f"Malformed search response for '{term}'", context={"term": term})

        kept: List[Dict[str, Any]] = []
        for q in quotes:
            if not isinstance(q, dict) or not q.get("symbol"):
                continue
            quote_type = str(q.get("quoteType") or "").upper()
            if quote_type and quote_type not in SUPPORTED_QUOTE_TYPES:
                continue
            if q.get("isYahooFinance") is False:
                continue
            kept.append(q)
            if len(kept) >= self.max_candidates:
                break

        candidates = [self._to_candidate(q) for q in kept]
        candidates.sort(key=lambda c: c.score, reverse=True)
        logger.debug("Search '%s' returned %d candidate(s)", term, len(candidates))
        return candidates

    def _to_candidate(self, quote_: Dict[str, Any]) -> Candidate:
        symbol = str(quote_["symbol"])
        meta = self._chart_meta(symbol)
        try:
            score = float(quote_.get("score") or 0.0)
        except (TypeError, ValueError):
            score = 0.0
        return Candidate(
            symbol=symbol,
            name=quote_.get("longname") or quote_.get("shortname") or meta.get("longName") or meta.get("shortName"),
            currency=meta.get("currency"),
            exchange=quote_.get("exchange") or meta.get("exchangeName"),
            score=score,
        )

    def _chart_meta(self, symbol: str) -> Dict[str, Any]:
        if symbol in self._meta:
            return self._meta[symbol]
        url = CHART_URL.format(symbol=quote(symbol, safe=""))
        try:
            data = self._request(url, {"range": "1d", "interval": "1d"}, f"chart '{symbol}'")
        except LookupFailure as e:
            # Search hits without chart data (delisted, 404) simply carry no currency.
            if e.context.get("status_code") != 404:
                raise
            data = {}
        meta: Dict[str, Any] = {}
        try:
            result = (data.get("chart") or {}).get("result") or []
            if result and isinstance(result[0].get("meta"), dict):
                meta = result[0]["meta"]
        except AttributeError as e:
            raise LookupFailure(f"Malformed chart response for '{symbol}'", context={"symbol": symbol}) from e
        if not meta:
            logger.debug("No chart metadata for %s", symbol)
        self._meta[symbol] = meta
        return meta

    # --- Transport ---
    def _request(self, url: str, params: Dict[str, Any], description: str) -> Any:
        return call_with_retries(
            lambda: self._fetch(url, params),
            attempts=self.max_attempts,
            backoff=self.backoff,
            max_backoff=self.max_backoff,
            description=description,
        )

    @rate_limited_yahoo()
    def _fetch(self, url: str, params: Dict[str, Any]) -> Any:
        return get_json(self.session, url, headers=DEFAULT_HEADERS, params=params, timeout=self.timeout)
