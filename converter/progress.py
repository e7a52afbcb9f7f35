from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional, TextIO

import click

from .core.schemas import Candidate, SymbolQuery
from .logging import get_logger


logger = get_logger(__name__)


@dataclass
class AmbiguousMatch:
    query: SymbolQuery
    chosen: Candidate
    alternatives: List[Candidate] = field(default_factory=list)


class _NullBar:
    def update(self, n_steps: int) -> None:
        return None


class ProgressHandle:
    def __init__(self, bar: Any) -> None:
        self._bar = bar
        self.count = 0

    def advance(self, steps: int = 1) -> None:
        self.count += steps
        self._bar.update(steps)


class ProgressReporter:
    """Progress bar plus operator diagnostics for a conversion run.

    Messages go to stderr through click so stdout stays free for the export
    document. In quiet mode the bar is suppressed and messages only reach the
    logger; diagnostics are recorded either way for ``summary()``.
    """

    def __init__(self, *, quiet: bool = False, file: Optional[TextIO] = None) -> None:
        self.quiet = quiet
        self.file = file
        self.unmatched: List[SymbolQuery] = []
        self.ambiguous_matches: List[AmbiguousMatch] = []
        self.failures: List[str] = []

    @contextmanager
    def track(self, total: int, label: str = "Processing") -> Iterator[ProgressHandle]:
        if self.quiet:
            yield ProgressHandle(_NullBar())
            return
        stream = self.file or click.get_text_stream("stderr")
        with click.progressbar(length=total, label=label, file=stream) as bar:
            yield ProgressHandle(bar)

    def log(self, message: str, level: int = logging.INFO) -> None:
        if self.quiet:
            logger.log(level, message)
        else:
            click.echo(message, file=self.file, err=self.file is None)

    # --- Diagnostics ---
    def no_match(self, query: SymbolQuery, *, action: Optional[str] = None) -> None:
        self.unmatched.append(query)
        subject = f"{action} action for " if action else ""
        self.log(f"[i] No result found for {subject}{query.describe()}! Please add this manually..", logging.WARNING)

    def ambiguous(self, query: SymbolQuery, chosen: Candidate, alternatives: List[Candidate]) -> None:
        self.ambiguous_matches.append(AmbiguousMatch(query, chosen, list(alternatives)))
        others = ", ".join(f"{c.symbol} ({c.exchange or '?'})" for c in alternatives)
        self.log(
            f"[i] Ambiguous match for {query.describe()}: picked {chosen.symbol} ({chosen.exchange or '?'}), also saw {others}",
            logging.INFO,
        )

    def failure(self, label: str, line: int, error: Exception) -> None:
        message = f"[e] An error occurred trying to retrieve symbol {label} (line {line})! {error}"
        self.failures.append(message)
        self.log(message, logging.ERROR)

    def summary(self) -> List[str]:
        lines: List[str] = []
        if self.unmatched:
            lines.append(f"[i] {len(self.unmatched)} record(s) could not be matched and were left out:")
            lines.extend(f"    - {q.describe()}" for q in self.unmatched)
        if self.ambiguous_matches:
            lines.append(f"[i] {len(self.ambiguous_matches)} match(es) were ambiguous, please verify them.")
        return lines
