from __future__ import annotations

import logging
import os
from typing import Optional


def get_logger(name: str, *, level: Optional[int] = None) -> logging.Logger:
    """Create or return a configured logger.

    Policy:
    - INFO: run milestones (cache restored/saved, conversion finished)
    - WARNING: corrupt cache files, skipped records, unmatched securities (quiet runs)
    - ERROR: lookup failures that abort a run (quiet runs)
    - DEBUG: cache hits/misses, resolver state transitions, HTTP attempts
    - Controllable via CONVERTER_LOG_LEVEL env; DEBUG_LOGGING forces DEBUG.
    """

    logger = logging.getLogger(name)
    if logger.handlers:  # already configured
        return logger

    env_level = os.getenv("CONVERTER_LOG_LEVEL", "INFO").upper()
    if os.getenv("DEBUG_LOGGING", "").strip().lower() in {"1", "true", "yes", "on"}:
        env_level = "DEBUG"
    resolved_level = level or getattr(logging, env_level, logging.INFO)
    logger.setLevel(resolved_level)
    handler = logging.StreamHandler()
    handler.setLevel(resolved_level)
    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.propagate = False
    return logger
