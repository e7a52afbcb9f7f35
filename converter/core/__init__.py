"""Core enums, schemas, errors, interfaces, and the resolver."""

from .enums import ActivityType, DataSource, KeyKind, LookupState
from .schemas import (
    NO_MATCH,
    Activity,
    ActivityExport,
    CacheKey,
    Candidate,
    MatchOutcome,
    ResolvedSymbol,
    SymbolQuery,
)
from .errors import (
    ConverterError,
    InvalidQuery,
    TransientProviderError,
    RateLimitError,
    ProviderTimeoutError,
    LookupFailure,
    CacheCorruption,
    InputFileError,
    UnknownConverterError,
)
from .interface import BaseConverter, SymbolLookupClient
from .resolver import Resolver

__all__ = [
    # Enums
    "ActivityType",
    "DataSource",
    "KeyKind",
    "LookupState",
    # Schemas
    "NO_MATCH",
    "Activity",
    "ActivityExport",
    "CacheKey",
    "Candidate",
    "MatchOutcome",
    "ResolvedSymbol",
    "SymbolQuery",
    # Errors
    "ConverterError",
    "InvalidQuery",
    "TransientProviderError",
    "RateLimitError",
    "ProviderTimeoutError",
    "LookupFailure",
    "CacheCorruption",
    "InputFileError",
    "UnknownConverterError",
    # Interface / Resolver
    "BaseConverter",
    "SymbolLookupClient",
    "Resolver",
]
