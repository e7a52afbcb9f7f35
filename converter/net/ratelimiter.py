from __future__ import annotations

from typing import Any, Callable, Optional, TypeVar, cast

from ratelimit import limits, sleep_and_retry


F = TypeVar("F", bound=Callable[..., Any])


def rate_limited(
    *,
    calls_per_second: Optional[int] = None,
    calls_per_minute: Optional[int] = None,
    calls_per_hour: Optional[int] = None,
) -> Callable[[F], F]:
    """Generic rate-limiting decorator builder using ratelimit.sleep_and_retry."""

    def decorator(func: F) -> F:
        wrapped: Callable[..., Any] = func
        if calls_per_second is not None:
            wrapped = sleep_and_retry(limits(calls=calls_per_second, period=1))(wrapped)
        if calls_per_minute is not None:
            wrapped = sleep_and_retry(limits(calls=calls_per_minute, period=60))(wrapped)
        if calls_per_hour is not None:
            wrapped = sleep_and_retry(limits(calls=calls_per_hour, period=3600))(wrapped)
        return cast(F, wrapped)

    return decorator


def rate_limited_yahoo() -> Callable[[F], F]:
    """Preconfigured client-side throttle for Yahoo Finance endpoints."""

    return rate_limited(calls_per_second=5, calls_per_minute=240)
