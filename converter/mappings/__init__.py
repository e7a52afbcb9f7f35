"""Per-converter string mapping tables."""

from .registry import MappingRegistry

__all__ = ["MappingRegistry"]
