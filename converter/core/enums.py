from __future__ import annotations

from enum import Enum


class DataSource(str, Enum):
    PROVIDER = "YAHOO"  # quote provider backed symbol
    MANUAL = "MANUAL"  # operator supplied, no quotes


class ActivityType(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    DIVIDEND = "DIVIDEND"
    FEE = "FEE"
    INTEREST = "INTEREST"
    ITEM = "ITEM"
    LIABILITY = "LIABILITY"


class KeyKind(str, Enum):
    ISIN = "isin"
    SYMBOL = "symbol"


class LookupState(str, Enum):
    CHECK_CACHE = "CHECK_CACHE"
    CACHE_HIT = "CACHE_HIT"
    CACHE_MISS = "CACHE_MISS"
    REMOTE_LOOKUP = "REMOTE_LOOKUP"
    RESOLVED = "RESOLVED"
    NO_MATCH = "NO_MATCH"
    FAILED = "FAILED"
