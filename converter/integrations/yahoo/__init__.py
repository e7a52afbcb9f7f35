"""Yahoo Finance symbol search."""

from .client import YahooFinanceClient

__all__ = ["YahooFinanceClient"]
