from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import pandas as pd

from .errors import InputFileError, InvalidQuery, LookupFailure
from .schemas import Activity, ActivityExport, Candidate, MatchOutcome, ResolvedSymbol, SymbolQuery
from ..logging import get_logger
from ..progress import ProgressReporter
from ..symbols.currency import CurrencyRegistry, currency_registry
from ..symbols.normalizer import is_valid_isin

if TYPE_CHECKING:  # pragma: no cover
    from .resolver import Resolver


logger = get_logger(__name__)


class SymbolLookupClient(ABC):
    """Remote quote provider search plus the matching heuristic built on it."""

    def __init__(self, currencies: Optional[CurrencyRegistry] = None) -> None:
        self.currencies = currencies or currency_registry

    @abstractmethod
    def search(self, term: str) -> List[Candidate]:  # pragma: no cover - abstract
        """Return candidates for a free-text or ISIN term, best score first."""
        raise NotImplementedError

    def find_match(self, query: SymbolQuery) -> MatchOutcome:
        """Pick the best candidate for ``query``.

        1. A well-formed ISIN is searched first; its top candidate is accepted
           only when the currency matches (or no currency was asked for).
        2. Otherwise the ticker is searched and candidates are filtered on
           currency; the best score wins, preferring the exchange hint.
        3. Nothing left means no match. Provider errors propagate.
        """

        outcome = MatchOutcome()

        if query.isin and is_valid_isin(query.isin):
            term = query.isin.upper()
            outcome.searched.append(term)
            candidates = [c for c in self.search(term) if c.currency]
            if candidates:
                top = candidates[0]
                if self._currency_ok(top, query.currency):
                    outcome.candidate = top
                    return outcome
                logger.debug(
                    "Top ISIN candidate %s for %s quotes in %s, wanted %s",
                    top.symbol,
                    term,
                    top.currency,
                    query.currency,
                )

        if query.ticker:
            outcome.searched.append(query.ticker)
            survivors = [c for c in self.search(query.ticker) if c.currency and self._currency_ok(c, query.currency)]
            survivors.sort(key=lambda c: c.score, reverse=True)
            if query.exchange:
                hint = query.exchange.upper()
                preferred = [c for c in survivors if (c.exchange or "").upper() == hint]
                survivors = preferred + [c for c in survivors if c not in preferred]
            if survivors:
                outcome.candidate = survivors[0]
                outcome.alternatives = survivors[1:]

        return outcome

    def _currency_ok(self, candidate: Candidate, wanted: Optional[str]) -> bool:
        if wanted is None:
            return True
        return self.currencies.matches(candidate.currency, wanted)

    def close(self) -> None:
        return None


class BaseConverter(ABC):
    """Turns one broker export into an ActivityExport, resolving securities on the way.

    Subclasses map a single CSV record to an Activity. The base class owns
    file reading, progress, ignored records and the error policy: records
    with an invalid query are skipped, a LookupFailure aborts the run.
    """

    name = "base"

    def __init__(
        self,
        resolver: "Resolver",
        *,
        account_id: str,
        reporter: Optional[ProgressReporter] = None,
        currencies: Optional[CurrencyRegistry] = None,
    ) -> None:
        self.resolver = resolver
        self.account_id = account_id
        self.reporter = reporter or resolver.reporter
        self.currencies = currencies or currency_registry

    # --- Input ---
    def read_and_process_file(self, path: str) -> ActivityExport:
        return self.process_records(self.read_records(path))

    def read_records(self, path: str) -> List[Dict[str, str]]:
        try:
            df = pd.read_csv(path, dtype=str, keep_default_na=False, skipinitialspace=True)
        except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            raise InputFileError(f"An error occurred while parsing {path}: {e}", context={"path": path}) from e
        df.columns = [str(c).strip() for c in df.columns]
        logger.info("Read %d record(s) from %s", len(df), path)
        return df.to_dict(orient="records")

    def process_records(self, records: List[Dict[str, Any]]) -> ActivityExport:
        export = ActivityExport()
        with self.reporter.track(len(records), label=f"Converting {self.name}") as progress:
            for idx, record in enumerate(records):
                line = idx + 2  # header is line 1
                activity: Optional[Activity] = None
                try:
                    if not self.is_ignored_record(record):
                        activity = self.convert_record(record, line)
                except InvalidQuery as e:
                    self.reporter.log(f"[i] Skipping record on line {line}: {e}")
                finally:
                    progress.advance()
                if activity is not None:
                    export.activities.append(activity)
        logger.info("Converted %d activit(ies) from %d record(s)", len(export.activities), len(records))
        return export

    # --- Resolution helpers ---
    def resolve_security(self, query: SymbolQuery, line: int, *, action: Optional[str] = None) -> Optional[ResolvedSymbol]:
        try:
            security = self.resolver.resolve(query)
        except LookupFailure as e:
            self.log_query_error(query.ticker or query.isin or "?", line, e)
            raise
        if security is None:
            self.reporter.no_match(query, action=action)
        return security

    def log_query_error(self, label: str, line: int, error: Exception) -> None:
        self.reporter.failure(label, line, error)

    # --- Per-record hooks ---
    def is_ignored_record(self, record: Dict[str, Any]) -> bool:
        return False

    @abstractmethod
    def convert_record(self, record: Dict[str, Any], line: int) -> Optional[Activity]:  # pragma: no cover - abstract
        raise NotImplementedError
