"""Durable symbol cache."""

from .store import SymbolCache

__all__ = ["SymbolCache"]
