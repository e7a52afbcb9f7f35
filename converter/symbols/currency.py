from __future__ import annotations

from typing import Dict, Optional, Tuple


class CurrencyRegistry:
    """Currency alias table shared by the resolver and converters.

    Providers quote some listings in a minor unit (London in pence as "GBp",
    Johannesburg in cents as "ZAc", Tel Aviv in agorot as "ILA"). Brokers
    usually report the major currency. Aliases map a minor code onto its
    major ISO code together with the number of minor units per major unit.
    """

    def __init__(self) -> None:
        self._aliases: Dict[str, Tuple[str, int]] = {}

    def register_alias(self, alias: str, major: str, factor: int = 100) -> None:
        self._aliases[alias] = (major.upper(), factor)

    def _lookup(self, code: str) -> Optional[Tuple[str, int]]:
        # Exact match first: "GBp" and "GBP" differ only by case.
        if code in self._aliases:
            return self._aliases[code]
        return None

    def normalize(self, code: Optional[str]) -> Optional[str]:
        if code is None:
            return None
        code = code.strip()
        if not code:
            return None
        alias = self._lookup(code)
        if alias is not None:
            return alias[0]
        return code.upper()

    def minor_unit_factor(self, code: Optional[str]) -> int:
        if not code:
            return 1
        alias = self._lookup(code.strip())
        return alias[1] if alias is not None else 1

    def is_minor_unit(self, code: Optional[str]) -> bool:
        return self.minor_unit_factor(code) != 1

    def matches(self, left: Optional[str], right: Optional[str]) -> bool:
        """Case-insensitive, alias-aware currency equality. Missing never matches."""

        a, b = self.normalize(left), self.normalize(right)
        return a is not None and a == b

    def convert_price(self, price: float, from_currency: Optional[str], to_currency: Optional[str]) -> float:
        """Re-express a price between units of the same currency (e.g. GBP -> GBp)."""

        if not self.matches(from_currency, to_currency):
            return price
        return price * self.minor_unit_factor(to_currency) / self.minor_unit_factor(from_currency)


currency_registry = CurrencyRegistry()

# Register default minor-unit aliases
currency_registry.register_alias("GBp", "GBP", 100)
currency_registry.register_alias("GBX", "GBP", 100)
currency_registry.register_alias("ZAc", "ZAR", 100)
currency_registry.register_alias("ILA", "ILS", 100)
