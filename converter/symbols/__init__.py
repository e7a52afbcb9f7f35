"""Query normalization and the currency alias table."""

from .currency import CurrencyRegistry, currency_registry
from .normalizer import QueryNormalizer, is_valid_isin, query_normalizer

__all__ = [
    "CurrencyRegistry",
    "currency_registry",
    "QueryNormalizer",
    "is_valid_isin",
    "query_normalizer",
]
