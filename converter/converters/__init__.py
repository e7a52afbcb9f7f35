"""Broker export converters."""

from .generic import GenericConverter

__all__ = ["GenericConverter"]
