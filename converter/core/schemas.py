from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from .enums import ActivityType, DataSource, KeyKind


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class SymbolQuery:
    """Broker supplied identity of a security, as handed to the resolver.

    Blank strings are treated as missing so converters can pass raw CSV cells.
    """

    isin: Optional[str] = None
    ticker: Optional[str] = None
    exchange: Optional[str] = None
    currency: Optional[str] = None

    def __post_init__(self) -> None:
        for name in ("isin", "ticker", "exchange", "currency"):
            object.__setattr__(self, name, _clean(getattr(self, name)))

    def describe(self) -> str:
        parts = []
        if self.isin:
            parts.append(f"ISIN {self.isin}")
        if self.ticker:
            parts.append(f"ticker {self.ticker}")
        label = " / ".join(parts) or "empty query"
        if self.exchange:
            label += f" on {self.exchange}"
        if self.currency:
            label += f" with currency {self.currency}"
        return label


@dataclass(frozen=True)
class ResolvedSymbol:
    symbol: str
    currency: str
    data_source: DataSource = DataSource.PROVIDER
    canonical_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "currency": self.currency,
            "dataSource": self.data_source.value,
            "canonicalName": self.canonical_name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResolvedSymbol":
        symbol = _clean(data.get("symbol"))
        currency = _clean(data.get("currency"))
        if not symbol or not currency:
            raise ValueError(f"symbol and currency are required, got {data!r}")
        return cls(
            symbol=symbol,
            currency=currency,
            data_source=DataSource(data.get("dataSource") or DataSource.PROVIDER.value),
            canonical_name=_clean(data.get("canonicalName")),
        )


class _Tombstone:
    """Marks a query known to have no match; persisted as JSON null."""

    _instance: Optional["_Tombstone"] = None

    def __new__(cls) -> "_Tombstone":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NO_MATCH"


NO_MATCH = _Tombstone()

CacheValue = Union[ResolvedSymbol, _Tombstone]


@dataclass(frozen=True)
class CacheKey:
    kind: KeyKind
    value: str

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.value}"


@dataclass(frozen=True)
class Candidate:
    symbol: str
    name: Optional[str] = None
    currency: Optional[str] = None
    exchange: Optional[str] = None
    score: float = 0.0


@dataclass
class MatchOutcome:
    """Result of the matching heuristic for one query."""

    candidate: Optional[Candidate] = None
    alternatives: List[Candidate] = field(default_factory=list)
    searched: List[str] = field(default_factory=list)

    @property
    def matched(self) -> bool:
        return self.candidate is not None

    @property
    def ambiguous(self) -> bool:
        return self.candidate is not None and len(self.alternatives) > 0


@dataclass
class Activity:
    account_id: str
    type: ActivityType
    symbol: str
    currency: str
    date: str
    quantity: float
    unit_price: float
    fee: float = 0.0
    data_source: DataSource = DataSource.PROVIDER
    comment: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "accountId": self.account_id,
            "comment": self.comment,
            "fee": self.fee,
            "quantity": self.quantity,
            "type": self.type.value,
            "unitPrice": self.unit_price,
            "currency": self.currency,
            "dataSource": self.data_source.value,
            "date": self.date,
            "symbol": self.symbol,
        }


@dataclass
class ActivityExport:
    activities: List[Activity] = field(default_factory=list)
    date: datetime = field(default_factory=datetime.now)
    version: str = "v0"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "meta": {"date": self.date.isoformat(), "version": self.version},
            "activities": [a.to_dict() for a in self.activities],
        }
