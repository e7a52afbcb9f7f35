from __future__ import annotations

from typing import Any, Optional


class ConverterError(Exception):
    """Base error for the converter package."""

    def __init__(self, message: str, *, context: Optional[dict[str, Any]] = None) -> None:  # noqa: D401
        super().__init__(message)
        self.context = context or {}


class InvalidQuery(ConverterError):
    """Query carries neither a usable ISIN nor a ticker."""


class TransientProviderError(ConverterError):
    """Temporary provider condition (timeout, 5xx, rate limit); retried."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, context=context)
        self.status_code = status_code


class RateLimitError(TransientProviderError):
    """Provider signalled that rate limits were exceeded."""


class ProviderTimeoutError(TransientProviderError):
    """Network or provider timeout."""


class LookupFailure(ConverterError):
    """Unrecoverable remote lookup error (auth, malformed response, retries exhausted)."""


class CacheCorruption(ConverterError):
    """Persisted cache file could not be parsed."""


class InputFileError(ConverterError):
    """Broker export file could not be read or parsed."""


class UnknownConverterError(ConverterError):
    """Requested converter is not registered."""
