"""
Market Calendar - trading day and trading hours resolution for exchanges.
"""

from market_calendar.data import (
    CalendarSnapshotStore,
    ExchangeRegistry,
    load_calendar,
    load_default_snapshot,
)
from market_calendar.hours import CalendarOverrideTable, Exchange, TradingCalendar

__version__ = "1.0.0"

__all__ = [
    "CalendarOverrideTable",
    "CalendarSnapshotStore",
    "Exchange",
    "ExchangeRegistry",
    "TradingCalendar",
    "load_calendar",
    "load_default_snapshot",
]
