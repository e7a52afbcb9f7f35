from __future__ import annotations

from typing import Any, Callable, Dict, Optional, TypeVar

import requests
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..core.errors import LookupFailure, ProviderTimeoutError, RateLimitError, TransientProviderError
from ..logging import get_logger


logger = get_logger(__name__)

DEFAULT_TIMEOUT = 15

T = TypeVar("T")


def get_json(
    session: requests.Session,
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    params: Optional[Dict[str, Any]] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> Any:
    """GET a JSON document, classifying failures as transient or permanent.

    Raises:
        TransientProviderError: timeouts, connection errors, HTTP 429 and 5xx
        LookupFailure: other HTTP errors and bodies that are not JSON
    """

    try:
        r = session.get(url, headers=headers, params=params, timeout=timeout)
    except requests.Timeout as e:
        raise ProviderTimeoutError(f"GET {url} timed out", context={"url": url}) from e
    except requests.ConnectionError as e:
        raise TransientProviderError(f"GET {url} connection failed: {e}", context={"url": url}) from e
    except requests.RequestException as e:
        raise LookupFailure(f"GET {url} failed: {e}", context={"url": url}) from e

    status = r.status_code
    if status == 429:
        raise RateLimitError(f"GET {url} rate limited (HTTP 429)", status_code=status, context={"url": url})
    if status >= 500:
        raise TransientProviderError(f"GET {url} failed with HTTP {status}", status_code=status, context={"url": url})
    if status >= 400:
        raise LookupFailure(
            f"GET {url} rejected with HTTP {status}: {r.text[:200]}",
            context={"url": url, "status_code": status},
        )

    try:
        return r.json()
    except ValueError as e:
        raise LookupFailure(f"GET {url} returned a non-JSON body", context={"url": url}) from e


def call_with_retries(
    func: Callable[[], T],
    *,
    attempts: int = 3,
    backoff: float = 1.0,
    max_backoff: float = 10.0,
    description: str = "request",
) -> T:
    """Run ``func`` retrying TransientProviderError with exponential backoff.

    Exhausted retries surface as LookupFailure chained to the last transient error.
    """

    def _log_retry(retry_state: Any) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        logger.debug("Attempt %d for %s failed: %s", retry_state.attempt_number, description, exc)

    retrying = Retrying(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=backoff, min=0, max=max_backoff),
        retry=retry_if_exception_type(TransientProviderError),
        after=_log_retry,
        reraise=True,
    )
    try:
        return retrying(func)
    except TransientProviderError as e:
        raise LookupFailure(
            f"{description} failed after {attempts} attempts: {e}",
            context={**e.context, "attempts": attempts},
        ) from e
