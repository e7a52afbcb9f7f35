from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


DEFAULT_CACHE_PATH = os.path.join(".cache", "symbol-cache.json")


def load_environment() -> None:
    """Load a local .env file into the process environment (existing vars win)."""

    load_dotenv(override=False)


def getenv(key: str, default: Optional[str] = None, *aliases: str) -> Optional[str]:
    """Return first non-empty env var among key and aliases."""

    for k in (key, *aliases):
        v = os.getenv(k)
        if v not in (None, ""):
            return v
    return default


def getenv_bool(key: str, default: bool = False) -> bool:
    v = os.getenv(key)
    if v is None:
        return default
    return str(v).strip().lower() in {"1", "true", "yes", "on"}


def getenv_int(key: str, default: int) -> int:
    v = getenv(key)
    if v is None:
        return default
    try:
        return int(v)
    except ValueError:
        raise ValueError(f"Environment variable {key} must be an integer, got '{v}'") from None


def getenv_float(key: str, default: float) -> float:
    v = getenv(key)
    if v is None:
        return default
    try:
        return float(v)
    except ValueError:
        raise ValueError(f"Environment variable {key} must be a number, got '{v}'") from None


@dataclass(frozen=True)
class Settings:
    account_id: Optional[str] = None
    cache_path: str = DEFAULT_CACHE_PATH
    cache_autosave: bool = False
    debug: bool = False
    yahoo_timeout: float = 15.0
    yahoo_max_attempts: int = 3
    yahoo_backoff_seconds: float = 1.0
    yahoo_max_backoff_seconds: float = 10.0
    yahoo_max_candidates: int = 5

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            account_id=getenv("GHOSTFOLIO_ACCOUNT_ID"),
            cache_path=getenv("CONVERTER_CACHE_PATH", DEFAULT_CACHE_PATH, "CACHE_PATH") or DEFAULT_CACHE_PATH,
            cache_autosave=getenv_bool("CONVERTER_CACHE_AUTOSAVE"),
            debug=getenv_bool("DEBUG_LOGGING"),
            yahoo_timeout=getenv_float("YAHOO_TIMEOUT", 15.0),
            yahoo_max_attempts=max(1, getenv_int("YAHOO_MAX_ATTEMPTS", 3)),
            yahoo_backoff_seconds=getenv_float("YAHOO_BACKOFF_SECONDS", 1.0),
            yahoo_max_backoff_seconds=getenv_float("YAHOO_MAX_BACKOFF_SECONDS", 10.0),
            yahoo_max_candidates=max(1, getenv_int("YAHOO_MAX_CANDIDATES", 5)),
        )
