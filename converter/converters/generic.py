from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import pandas as pd

from ..core.enums import ActivityType, DataSource
from ..core.interface import BaseConverter
from ..core.schemas import Activity, SymbolQuery
from ..mappings import MappingRegistry as M


CASH_ACTIVITIES = {ActivityType.FEE, ActivityType.INTEREST}


class GenericConverter(BaseConverter):
    """Converter for the normalized CSV layout.

    Columns: date,type,isin,ticker,exchange,currency,quantity,unitPrice,fee,comment.
    Fee and interest rows without a security become MANUAL activities named
    after their comment.
    """

    name = "generic"

    def is_ignored_record(self, record: Dict[str, Any]) -> bool:
        return M.is_ignored(self.name, str(record.get("type", "")))

    def convert_record(self, record: Dict[str, Any], line: int) -> Optional[Activity]:
        raw_type = str(record.get("type", "")).strip().lower()
        activity_type = M.activity_for(self.name, raw_type)
        if activity_type is None:
            self.reporter.log(f"[i] Unknown activity type '{raw_type}' on line {line}, skipping", logging.WARNING)
            return None

        try:
            date = self._parse_date(record.get("date"))
            quantity = self._number(record.get("quantity"))
            unit_price = self._number(record.get("unitPrice"))
            fee = self._number(record.get("fee"))
        except ValueError as e:
            self.reporter.log(f"[i] Unreadable value on line {line}: {e}", logging.WARNING)
            return None

        currency = str(record.get("currency") or "").strip()
        comment = str(record.get("comment") or "").strip() or None
        query = SymbolQuery(
            isin=record.get("isin"),
            ticker=record.get("ticker"),
            exchange=record.get("exchange"),
            currency=currency,
        )

        if activity_type in CASH_ACTIVITIES and not (query.isin or query.ticker):
            return Activity(
                account_id=self.account_id,
                type=activity_type,
                symbol=comment or activity_type.value.lower(),
                currency=self.currencies.normalize(currency) or currency,
                date=date,
                quantity=quantity or 1.0,
                unit_price=unit_price,
                fee=fee,
                data_source=DataSource.MANUAL,
                comment=comment,
            )

        security = self.resolve_security(query, line, action=raw_type)
        if security is None:
            return None

        if currency:
            # Broker reports pounds, provider may quote pence (GBP -> GBp).
            unit_price = self.currencies.convert_price(unit_price, currency, security.currency)

        return Activity(
            account_id=self.account_id,
            type=activity_type,
            symbol=security.symbol,
            currency=security.currency,
            date=date,
            quantity=quantity,
            unit_price=unit_price,
            fee=fee,
            data_source=security.data_source,
            comment=comment,
        )

    @staticmethod
    def _parse_date(value: Any) -> str:
        if value is None or not str(value).strip():
            raise ValueError("missing date")
        ts = pd.Timestamp(str(value).strip())
        if ts.tzinfo is None:
            ts = ts.tz_localize("UTC")
        return ts.isoformat()

    @staticmethod
    def _number(value: Any) -> float:
        if value is None:
            return 0.0
        text = str(value).strip().replace(",", "")
        if not text:
            return 0.0
        return float(text)
