"""Networking helpers: rate limiter, retrying JSON GET."""

from .http import call_with_retries, get_json
from .ratelimiter import rate_limited, rate_limited_yahoo

__all__ = ["call_with_retries", "get_json", "rate_limited", "rate_limited_yahoo"]
