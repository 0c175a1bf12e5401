"""
Trading hours resolution for exchanges with weekly schedules, DST
variants, periodic adjustments and date-keyed overrides.
"""

from .dst import DSTOracle
from .engine import TradingCalendar
from .models import (
    AdjustmentDescriptor,
    AdjustmentField,
    AdjustmentRule,
    DSTVariant,
    Exchange,
    ExchangeSchedule,
    MarketStatus,
    RegularAdjustment,
    TradingBreak,
    TradingHours,
    TradingWindow,
    Weekday,
    WeekdayHours,
)
from .overrides import CalendarOverrideTable

__all__ = [
    "AdjustmentDescriptor",
    "AdjustmentField",
    "AdjustmentRule",
    "CalendarOverrideTable",
    "DSTOracle",
    "DSTVariant",
    "Exchange",
    "ExchangeSchedule",
    "MarketStatus",
    "RegularAdjustment",
    "TradingBreak",
    "TradingCalendar",
    "TradingHours",
    "TradingWindow",
    "Weekday",
    "WeekdayHours",
]
