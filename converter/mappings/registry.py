from __future__ import annotations

from typing import Dict, Optional, Set

from ..core.enums import ActivityType


class MappingRegistry:
    """Holds per-converter tables mapping raw CSV type strings to activity types."""

    activity_type: Dict[str, Dict[str, ActivityType]] = {}
    ignored_types: Dict[str, Set[str]] = {}

    @classmethod
    def activity_for(cls, converter: str, raw: str) -> Optional[ActivityType]:
        return cls.activity_type.get(converter, {}).get(raw.strip().lower())

    @classmethod
    def is_ignored(cls, converter: str, raw: str) -> bool:
        return raw.strip().lower() in cls.ignored_types.get(converter, set())

    @classmethod
    def register_default(cls) -> None:
        # Generic normalized CSV
        cls.activity_type["generic"] = {
            "buy": ActivityType.BUY,
            "purchase": ActivityType.BUY,
            "sell": ActivityType.SELL,
            "sale": ActivityType.SELL,
            "dividend": ActivityType.DIVIDEND,
            "div": ActivityType.DIVIDEND,
            "fee": ActivityType.FEE,
            "interest": ActivityType.INTEREST,
            "interest_from_cash": ActivityType.INTEREST,
        }
        cls.ignored_types["generic"] = {"deposit", "withdrawal", "transfer", "top_up", "monthly_statement"}


# Initialize defaults
MappingRegistry.register_default()
