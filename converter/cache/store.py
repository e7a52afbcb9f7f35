from __future__ import annotations

import json
import os
import tempfile
from typing import Any, Dict, Optional, Tuple

from ..core.enums import KeyKind
from ..core.errors import CacheCorruption
from ..core.schemas import NO_MATCH, CacheKey, CacheValue, ResolvedSymbol
from ..logging import get_logger


logger = get_logger(__name__)

CACHE_FORMAT_VERSION = 1

_SECTIONS = {
    KeyKind.ISIN: "isinSymbolCache",
    KeyKind.SYMBOL: "symbolCache",
}


class SymbolCache:
    """Durable ISIN->symbol and symbol->symbol cache backed by one JSON file.

    Values are ResolvedSymbol entries or the NO_MATCH tombstone (stored as
    null). The store never evicts; ``clear()`` exists for operator resets only.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        self._entries: Dict[KeyKind, Dict[str, CacheValue]] = {kind: {} for kind in KeyKind}
        self.dirty = False

    # --- Lifecycle ---
    def load(self) -> Tuple[int, int]:
        """Restore entries from disk and return (isin_count, symbol_count).

        A missing or corrupt file yields an empty cache; this never raises.
        """

        for section in self._entries.values():
            section.clear()
        self.dirty = False

        if not os.path.exists(self.path):
            logger.debug("No cache file at %s, starting empty", self.path)
            return self.counts()

        try:
            with open(self.path, "rb") as fh:
                raw = fh.read()
            self._restore(self._parse(raw))
        except (OSError, CacheCorruption) as e:
            logger.warning("Ignoring unreadable cache file %s: %s", self.path, e)
            for section in self._entries.values():
                section.clear()

        return self.counts()

    def save(self) -> None:
        """Atomically write the full cache (temp file in place, then rename)."""

        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        payload = self._serialize()

        fd, tmp_path = tempfile.mkstemp(prefix=".symbol-cache-", suffix=".tmp", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(payload, fh, indent=2, sort_keys=True)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

        self.dirty = False
        isin_count, symbol_count = self.counts()
        logger.debug("Saved %d ISIN and %d symbol entries to %s", isin_count, symbol_count, self.path)

    # --- Access ---
    def get(self, key: CacheKey) -> Optional[CacheValue]:
        """Return the entry, NO_MATCH for a tombstone, or None when absent."""

        return self._entries[key.kind].get(key.value)

    def put(self, key: CacheKey, value: CacheValue) -> None:
        if value is not NO_MATCH and not isinstance(value, ResolvedSymbol):
            raise TypeError(f"Cache values must be ResolvedSymbol or NO_MATCH, got {value!r}")
        self._entries[key.kind][key.value] = value
        self.dirty = True

    def counts(self) -> Tuple[int, int]:
        return len(self._entries[KeyKind.ISIN]), len(self._entries[KeyKind.SYMBOL])

    def clear(self) -> None:
        for section in self._entries.values():
            section.clear()
        self.dirty = True

    def __contains__(self, key: CacheKey) -> bool:
        return key.value in self._entries[key.kind]

    def __len__(self) -> int:
        return sum(self.counts())

    # --- (De)serialization ---
    @staticmethod
    def _parse(raw: bytes) -> Dict[str, Any]:
        try:
            data = json.loads(raw.decode("utf-8"))
        except UnicodeDecodeError as e:
            raise CacheCorruption(f"not UTF-8: {e}") from e
        except ValueError as e:
            raise CacheCorruption(f"invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise CacheCorruption("top level is not an object")
        for section in _SECTIONS.values():
            if not isinstance(data.get(section, {}), dict):
                raise CacheCorruption(f"'{section}' is not an object")
        return data

    def _restore(self, data: Dict[str, Any]) -> None:
        for kind, section in _SECTIONS.items():
            for key, value in data.get(section, {}).items():
                if value is None:
                    self._entries[kind][key] = NO_MATCH
                    continue
                try:
                    self._entries[kind][key] = ResolvedSymbol.from_dict(value)
                except (TypeError, ValueError, AttributeError) as e:
                    logger.warning("Skipping malformed cache entry %s:%s (%s)", kind.value, key, e)

    def _serialize(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"version": CACHE_FORMAT_VERSION}
        for kind, section in _SECTIONS.items():
            payload[section] = {
                key: (None if value is NO_MATCH else value.to_dict())  # type: ignore[union-attr]
                for key, value in self._entries[kind].items()
            }
        return payload
