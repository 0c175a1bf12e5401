"""
Rule sources for session boundary resolution.

A boundary (daily open or daily close) is resolved by folding an ordered
chain of sources left to right. Each source either has no opinion (None)
or returns a Resolution; the last authoritative source wins. The default
chain is base schedule -> periodic adjustment rule -> date-keyed override.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, time
from typing import Optional, Sequence

from .models import AdjustmentField, DSTVariant, Exchange, Weekday
from .overrides import CalendarOverrideTable


@dataclass(frozen=True)
class ResolutionContext:
    """Everything a rule source may consult for one trading date."""
    exchange: Exchange
    trading_date: date
    variant: DSTVariant
    overrides: CalendarOverrideTable

    @property
    def weekday(self) -> Weekday:
        return Weekday.of(self.trading_date)


@dataclass(frozen=True)
class Resolution:
    time: time
    source: str
    label: Optional[str] = None


class RuleSource(ABC):
    """One layer of the precedence chain."""

    name: str = "source"

    @abstractmethod
    def resolve(self, context: ResolutionContext, field: AdjustmentField) -> Optional[Resolution]:
        """Return a boundary time-of-day, or None when this source is silent."""


class BaseScheduleSource(RuleSource):
    """Weekly hours table for the weekday and DST variant."""

    name = "schedule"

    def resolve(self, context: ResolutionContext, field: AdjustmentField) -> Optional[Resolution]:
        hours = context.exchange.schedule.hours_for(context.weekday, context.variant)
        if field == AdjustmentField.DAILY_OPEN:
            return Resolution(hours.open, self.name)
        return Resolution(hours.close, self.name)


class PeriodicAdjustmentSource(RuleSource):
    """Recurring weekday+DST rules, e.g. an early close every Friday."""

    name = "adjustment"

    def resolve(self, context: ResolutionContext, field: AdjustmentField) -> Optional[Resolution]:
        rules = context.exchange.schedule.rules_for(context.weekday, context.variant, field)
        if not rules:
            return None
        # Rules are ordered; a later rule for the same slot supersedes an earlier one
        rule = rules[-1]
        return Resolution(rule.time, self.name, rule.label)


class DateOverrideSource(RuleSource):
    """One-off late opens and early closes from the calendar snapshot."""

    name = "override"

    def resolve(self, context: ResolutionContext, field: AdjustmentField) -> Optional[Resolution]:
        tags = context.exchange.scope_tags
        if field == AdjustmentField.DAILY_OPEN:
            found = context.overrides.late_open_for(tags, context.trading_date)
        else:
            found = context.overrides.early_close_for(tags, context.trading_date)
        if found is None:
            return None
        return Resolution(found, self.name)


DEFAULT_RULE_CHAIN: Sequence[RuleSource] = (
    BaseScheduleSource(),
    PeriodicAdjustmentSource(),
    DateOverrideSource(),
)


def fold(chain: Sequence[RuleSource], context: ResolutionContext,
         field: AdjustmentField) -> Resolution:
    """Fold the chain left to right; the last authoritative source wins."""
    result: Optional[Resolution] = None
    for source in chain:
        resolved = source.resolve(context, field)
        if resolved is not None:
            result = resolved
    if result is None:
        raise ValueError(f"No rule source resolved {field.value} for {context.trading_date}")
    return result
