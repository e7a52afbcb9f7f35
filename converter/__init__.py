"""
converter: brokerage export to Ghostfolio activity import conversion.

The package is built around a durable symbol-resolution core:
- Core domain models, errors, interfaces and the `Resolver` in `converter.core`
- The on-disk ISIN/symbol cache in `converter.cache`
- Query normalization and currency aliases in `converter.symbols`
- Quote provider clients in `converter.integrations`
- Converters for broker exports in `converter.converters`, looked up via `ConverterRegistry`

Environment variables are loaded from a .env file by the CLI (python-dotenv).
"""

from __future__ import annotations

from .cache import SymbolCache
from .core.enums import ActivityType, DataSource, LookupState
from .core.errors import (
    CacheCorruption,
    ConverterError,
    InvalidQuery,
    LookupFailure,
    TransientProviderError,
)
from .core.resolver import Resolver
from .core.schemas import NO_MATCH, Activity, ActivityExport, Candidate, ResolvedSymbol, SymbolQuery
from .progress import ProgressReporter
from .registry import ConverterRegistry

__version__ = "0.1.0"

__all__ = [
    "Resolver",
    "SymbolCache",
    "ConverterRegistry",
    "ProgressReporter",
    # Enums
    "ActivityType",
    "DataSource",
    "LookupState",
    # Schemas
    "NO_MATCH",
    "Activity",
    "ActivityExport",
    "Candidate",
    "ResolvedSymbol",
    "SymbolQuery",
    # Errors
    "ConverterError",
    "InvalidQuery",
    "LookupFailure",
    "TransientProviderError",
    "CacheCorruption",
]
