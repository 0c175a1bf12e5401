"""
Exchange schedule data models and resolution result types.
"""

from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple

import pytz
from pydantic import BaseModel, ConfigDict, Field, model_validator

from market_calendar.utils.exceptions import CalendarConfigurationError

# A close at the last second of the day means "open through end of day"
END_OF_DAY = time(23, 59, 59)


class Weekday(str, Enum):
    """Weekday labels, ordered as ``date.weekday()`` (Monday=0)."""
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @classmethod
    def of(cls, d: date) -> "Weekday":
        return _WEEKDAYS[d.weekday()]


_WEEKDAYS: Tuple[Weekday, ...] = tuple(Weekday)


class DSTVariant(str, Enum):
    """Which hours table applies on a given date."""
    STANDARD = "standard"
    DST = "dst"

    @classmethod
    def from_flag(cls, is_dst: bool) -> "DSTVariant":
        return cls.DST if is_dst else cls.STANDARD


class AdjustmentField(str, Enum):
    """Session boundary an adjustment rule replaces."""
    DAILY_OPEN = "daily_open"
    DAILY_CLOSE = "daily_close"


class MarketStatus(str, Enum):
    """Market status enumeration."""
    OPEN = "open"
    CLOSED = "closed"
    BREAK = "break"
    WEEKEND = "weekend"
    HOLIDAY = "holiday"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class TradingHours(_Frozen):
    """Open/close pair for one weekday in one DST variant."""
    open: time = Field(..., description="Session open time-of-day")
    close: time = Field(..., description="Last tradable second of the session")
    open_previous_day: bool = Field(
        default=False,
        description="Session opens on the evening of the previous calendar day"
    )

    @model_validator(mode="after")
    def validate_order(self):
        if not self.open_previous_day and self.open >= self.close:
            raise ValueError(
                f"open {self.open} must be before close {self.close} "
                "unless the session opens on the previous day"
            )
        return self


class WeekdayHours(_Frozen):
    """Standard and (optional) DST hours for a weekday."""
    standard: TradingHours
    dst: Optional[TradingHours] = Field(
        default=None,
        description="DST hours; the standard hours apply year-round when unset"
    )

    def for_variant(self, variant: DSTVariant) -> TradingHours:
        if variant == DSTVariant.DST and self.dst is not None:
            return self.dst
        return self.standard


class TradingBreak(_Frozen):
    """
    Intraday interval during which the exchange is closed.

    An end earlier than the start means the break runs across midnight,
    which only sessions opening on the previous day can contain.
    """
    start: time
    end: time

    @model_validator(mode="after")
    def validate_order(self):
        if self.start == self.end:
            raise ValueError(f"break start {self.start} must differ from end {self.end}")
        return self

    @property
    def crosses_midnight(self) -> bool:
        return self.end < self.start


class AdjustmentRule(_Frozen):
    """Recurring weekday+DST-scoped replacement of a session boundary."""
    weekday: Weekday
    variant: DSTVariant
    field: AdjustmentField
    time: time
    label: str = Field(..., description="Human readable rule name, e.g. 'Fridays (DST)'")


class ExchangeSchedule(_Frozen):
    """Static weekly trading definition of an exchange."""
    trading_days: FrozenSet[Weekday]
    hours: Dict[Weekday, WeekdayHours] = Field(default_factory=dict)
    breaks: Tuple[TradingBreak, ...] = ()
    adjustment_rules: Tuple[AdjustmentRule, ...] = ()

    @model_validator(mode="after")
    def validate_trading_day_hours(self):
        missing = sorted(d.value for d in self.trading_days if d not in self.hours)
        if missing:
            raise ValueError(f"no trading hours for trading days: {', '.join(missing)}")
        return self

    @model_validator(mode="after")
    def validate_breaks(self):
        """Breaks must be ordered and non-overlapping along the session"""
        sessions = [
            hours for weekday_hours in self.hours.values()
            for hours in (weekday_hours.standard, weekday_hours.dst) if hours is not None
        ]
        overnight = [hours.open for hours in sessions if hours.open_previous_day]
        if any(brk.crosses_midnight for brk in self.breaks):
            if not sessions or len(overnight) < len(sessions):
                raise ValueError("a break across midnight needs every session to open on the previous day")

        # The evening part of an overnight session comes before the morning part
        pivot = min(overnight) if overnight else None

        def position(t: time) -> Tuple[int, time]:
            return (0, t) if pivot is not None and t >= pivot else (1, t)

        for previous, current in zip(self.breaks, self.breaks[1:]):
            if position(current.start) < position(previous.end):
                raise ValueError(
                    f"break {current.start}-{current.end} overlaps or precedes "
                    f"{previous.start}-{previous.end}"
                )
        return self

    def trades_on_weekday(self, weekday: Weekday) -> bool:
        return weekday in self.trading_days

    def hours_for(self, weekday: Weekday, variant: DSTVariant) -> TradingHours:
        """Base hours for a weekday.

        Raises:
            CalendarConfigurationError: If the weekday has no hours entry.
        """
        try:
            weekday_hours = self.hours[weekday]
        except KeyError:
            raise CalendarConfigurationError(
                f"No trading hours configured for {weekday.value}",
                config_field="schedule.hours",
                config_value=weekday.value,
            ) from None
        return weekday_hours.for_variant(variant)

    def rules_for(self, weekday: Weekday, variant: DSTVariant,
                  field: AdjustmentField) -> List[AdjustmentRule]:
        return [
            rule for rule in self.adjustment_rules
            if rule.weekday == weekday and rule.variant == variant and rule.field == field
        ]


class Exchange(_Frozen):
    """
    A tradable venue or instrument group.

    Times in the schedule are expressed in ``schedule_timezone``; the DST
    variant is chosen from ``timezone`` (the governing zone).
    """
    symbol: str
    category: Optional[str] = Field(default=None, description="Market category, e.g. 'forex'")
    countries: FrozenSet[str] = Field(
        default_factory=frozenset,
        description="Country or currency codes the exchange belongs to"
    )
    timezone: str = Field(default="UTC", description="Governing timezone for DST")
    schedule_timezone: str = Field(default="UTC", description="Timezone of schedule times")
    schedule: ExchangeSchedule

    @property
    def scope_tags(self) -> FrozenSet[str]:
        """Tags an override entry may be scoped to for this exchange."""
        tags = {self.symbol, *self.countries}
        if self.category:
            tags.add(self.category)
        return frozenset(tags)


class RegularAdjustment(_Frozen):
    """Replacement boundary produced by a periodic adjustment rule."""
    at: datetime
    rule: str

    @property
    def time_of_day(self) -> str:
        return self.at.strftime("%H:%M:%S")


# Keyed by AdjustmentField value ("daily_open" / "daily_close")
AdjustmentDescriptor = Dict[str, RegularAdjustment]


class TradingWindow(_Frozen):
    """Resolved session of one trading date as absolute instants."""
    trading_date: date
    open: datetime
    close: datetime
    breaks: Tuple[Tuple[datetime, datetime], ...] = ()

    @property
    def end(self) -> datetime:
        """Exclusive end instant of the session."""
        if self.close.time() == END_OF_DAY:
            return self.close + timedelta(seconds=1)
        return self.close

    def contains(self, instant: datetime) -> bool:
        """Check if the instant is inside the session and not inside a break."""
        if not (self.open <= instant < self.end):
            return False
        return not any(start <= instant < end for start, end in self.breaks)

    def in_break(self, instant: datetime) -> bool:
        return any(start <= instant < end for start, end in self.breaks)

    def trading_seconds(self, start: Optional[datetime] = None,
                        end: Optional[datetime] = None) -> int:
        """Open seconds inside [start, end), breaks excluded."""
        # compare and subtract in UTC, never on a shared wall-clock tzinfo
        start = start.astimezone(pytz.utc) if start else None
        end = end.astimezone(pytz.utc) if end else None
        lo = max(self.open, start) if start else self.open
        hi = min(self.end, end) if end else self.end
        if lo >= hi:
            return 0
        seconds = (hi - lo).total_seconds()
        for break_start, break_end in self.breaks:
            overlap_lo = max(lo, break_start)
            overlap_hi = min(hi, break_end)
            if overlap_lo < overlap_hi:
                seconds -= (overlap_hi - overlap_lo).total_seconds()
        return int(seconds)
