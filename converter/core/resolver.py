from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING, Any, List, Optional

from .enums import DataSource, KeyKind, LookupState
from .errors import LookupFailure
from .interface import SymbolLookupClient
from .schemas import NO_MATCH, CacheKey, Candidate, ResolvedSymbol, SymbolQuery
from ..logging import get_logger
from ..progress import ProgressReporter
from ..symbols.normalizer import QueryNormalizer, query_normalizer

if TYPE_CHECKING:  # pragma: no cover
    from ..cache.store import SymbolCache


logger = get_logger(__name__)


class Resolver:
    """Resolves broker queries to provider symbols through the durable cache.

    Per query: CHECK_CACHE, then either CACHE_HIT, or CACHE_MISS followed by
    REMOTE_LOOKUP ending in RESOLVED, NO_MATCH (tombstoned) or FAILED (not
    cached, re-raised). The resolver owns the cache for the whole run and
    saves it on ``close()``.
    """

    def __init__(
        self,
        client: SymbolLookupClient,
        cache: "SymbolCache",
        *,
        reporter: Optional[ProgressReporter] = None,
        normalizer: Optional[QueryNormalizer] = None,
        autosave: bool = False,
    ) -> None:
        self.client = client
        self.cache = cache
        self.reporter = reporter or ProgressReporter(quiet=True)
        self.normalizer = normalizer or query_normalizer
        self.autosave = autosave
        self.stats: Counter = Counter()
        self.last_state: Optional[LookupState] = None

    # --- Lifecycle ---
    def __enter__(self) -> "Resolver":
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        if exc_type is None:
            self.close()
            return
        # Keep the original error; a failed save is only logged.
        try:
            self.close()
        except Exception as e:
            logger.error("Could not save cache to %s while aborting: %s", self.cache.path, e)

    def close(self) -> None:
        """Persist the cache; also called when a run aborts."""

        self.cache.save()
        isin_count, symbol_count = self.cache.counts()
        logger.info("Saved %d ISIN-symbol pairs and %d symbols to cache", isin_count, symbol_count)

    # --- Resolution ---
    def resolve(self, query: SymbolQuery) -> Optional[ResolvedSymbol]:
        """Return the symbol for ``query`` or None when it is known to be unresolvable.

        Raises:
            InvalidQuery: query has neither a usable ISIN nor a ticker
            LookupFailure: provider failed; nothing is cached
        """

        key = self.normalizer.cache_key(query)
        self._enter(LookupState.CHECK_CACHE, key)

        cached = self._cached(key, query)
        if cached is not None:
            self._enter(LookupState.CACHE_HIT, key)
            return None if cached is NO_MATCH else cached  # type: ignore[return-value]

        self._enter(LookupState.CACHE_MISS, key)
        self._enter(LookupState.REMOTE_LOOKUP, key)
        try:
            outcome = self.client.find_match(query)
        except LookupFailure as e:
            self._enter(LookupState.FAILED, key)
            e.context.setdefault("query", query)
            logger.debug("Lookup failed for %s: %s", query.describe(), e)
            raise

        if outcome.candidate is None:
            self._enter(LookupState.NO_MATCH, key)
            logger.debug("No match for %s (searched %s)", query.describe(), ", ".join(outcome.searched) or "nothing")
            self._store(key, NO_MATCH)
            return None

        if outcome.ambiguous:
            self.reporter.ambiguous(query, outcome.candidate, outcome.alternatives)

        resolved = self._to_resolved(outcome.candidate)
        self._enter(LookupState.RESOLVED, key)
        self._store(key, resolved, *self._secondary_keys(key, query, resolved))
        return resolved

    # --- Internals ---
    def _cached(self, key: CacheKey, query: SymbolQuery) -> Any:
        value = self.cache.get(key)
        if isinstance(value, ResolvedSymbol) and not self._currency_ok(value, query):
            logger.debug("Ignoring %s for %s: cached currency %s", key, query.describe(), value.currency)
            value = None
        if value is not None:
            return value
        if key.kind is KeyKind.ISIN and query.ticker:
            # A symbol entry learned earlier can answer an ISIN query; only positive hits count.
            secondary = self.cache.get(self.normalizer.symbol_key(query.ticker, query.currency))
            if isinstance(secondary, ResolvedSymbol) and self._currency_ok(secondary, query):
                logger.debug("Back-filling %s from symbol entry %s", key, secondary.symbol)
                self._store(key, secondary)
                return secondary
        return None

    def _secondary_keys(self, key: CacheKey, query: SymbolQuery, resolved: ResolvedSymbol) -> List[CacheKey]:
        if key.kind is not KeyKind.ISIN:
            return []
        keys = []
        if not query.currency:
            keys.append(self.normalizer.isin_key(query.isin, resolved.currency))  # type: ignore[arg-type]
        if query.ticker:
            keys.append(self.normalizer.symbol_key(query.ticker, query.currency or resolved.currency))
        keys.append(self.normalizer.symbol_key(resolved.symbol, resolved.currency))
        return [k for i, k in enumerate(keys) if k != key and k not in keys[:i]]

    def _currency_ok(self, value: ResolvedSymbol, query: SymbolQuery) -> bool:
        if not query.currency:
            return True
        return self.normalizer.currencies.matches(value.currency, query.currency)

    @staticmethod
    def _to_resolved(candidate: Candidate) -> ResolvedSymbol:
        return ResolvedSymbol(
            symbol=candidate.symbol,
            currency=candidate.currency or "",
            data_source=DataSource.PROVIDER,
            canonical_name=candidate.name,
        )

    def _store(self, key: CacheKey, value: Any, *extra: CacheKey) -> None:
        self.cache.put(key, value)
        for k in extra:
            self.cache.put(k, value)
        if self.autosave:
            self.cache.save()

    def _enter(self, state: LookupState, key: CacheKey) -> None:
        self.last_state = state
        self.stats[state] += 1
        logger.debug("%s -> %s", key, state.value)
