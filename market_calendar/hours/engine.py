"""
Trading calendar resolution engine.

Combines an exchange's weekly schedule, its periodic adjustment rules and
the date-keyed overrides of one calendar snapshot into concrete answers:
trading days, session boundaries, breaks, open/closed status and elapsed
trading time.
"""

from datetime import date, datetime, time, timedelta
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple, Union

import pytz

from market_calendar.config.settings import CalendarSettings
from market_calendar.logging import bind_exchange_context, get_logger
from market_calendar.utils.exceptions import (
    AmbiguousTradingDateError,
    ExchangeNotFoundError,
    ScanLimitExceededError,
)
from .dst import DSTOracle, resolve_timezone
from .models import (
    AdjustmentDescriptor,
    AdjustmentField,
    Exchange,
    MarketStatus,
    RegularAdjustment,
    TradingHours,
    TradingWindow,
    Weekday,
)
from .overrides import CalendarOverrideTable
from .rules import (
    DEFAULT_RULE_CHAIN,
    BaseScheduleSource,
    PeriodicAdjustmentSource,
    ResolutionContext,
    RuleSource,
    fold,
)

if TYPE_CHECKING:
    from market_calendar.data.registry import ExchangeRegistry

ExchangeRef = Union[Exchange, str]
Instant = Union[datetime, int, float]

_ONE_DAY = timedelta(days=1)


class TradingCalendar:
    """
    Query surface over one exchange registry and one override snapshot.

    All operations are pure reads; an instance can be shared between
    threads without locking.

    Usage:
        cal = TradingCalendar(overrides, registry=registry)
        cal.trades_on("FX", date(2026, 2, 8))          # True (Sunday)
        cal.opening_on("FX", date(2026, 2, 8))         # 2026-02-08 22:35:00+00:00
        cal.is_open_at("FX", datetime(2026, 2, 9, 12, tzinfo=pytz.utc))
    """

    def __init__(self, overrides: CalendarOverrideTable,
                 registry: Optional["ExchangeRegistry"] = None,
                 settings: Optional[CalendarSettings] = None,
                 rule_chain: Sequence[RuleSource] = DEFAULT_RULE_CHAIN):
        self.overrides = overrides
        self.registry = registry
        self.settings = settings or CalendarSettings()
        self.rule_chain = tuple(rule_chain)
        self.dst = DSTOracle(self.settings.dst_reference_time)
        self.logger = get_logger(__name__, component="engine")

        self._base_chain: Tuple[RuleSource, ...] = (BaseScheduleSource(),)
        self._periodic = PeriodicAdjustmentSource()

    # --- DST ---

    def is_dst(self, exchange: ExchangeRef, instant: Instant) -> bool:
        ex = self._exchange(exchange)
        return self.dst.is_dst(ex, self._as_instant(ex, instant))

    # --- Trading days ---

    def trades_on(self, exchange: ExchangeRef, d: date) -> bool:
        """Check if the weekday trades and the date is not a full holiday.

        Early closes and late opens still count as trading days.
        """
        ex = self._exchange(exchange)
        if not ex.schedule.trades_on_weekday(Weekday.of(d)):
            return False
        return self.overrides.holiday_for(ex.scope_tags, d) is None

    def is_holiday_for(self, scope_tag: str, d: date) -> Optional[str]:
        return self.overrides.is_holiday_for(scope_tag, d)

    def trade_date_after(self, exchange: ExchangeRef, d: date) -> date:
        """Return the first trading date strictly after ``d``."""
        return self._scan(exchange, d, step=_ONE_DAY)

    def trade_date_before(self, exchange: ExchangeRef, d: date) -> date:
        """Return the most recent trading date strictly before ``d``."""
        return self._scan(exchange, d, step=-_ONE_DAY)

    def trading_days_between(self, exchange: ExchangeRef, start: date, end: date) -> int:
        """Count trading dates strictly between ``start`` and ``end``.

        Returns 0 when ``end <= start``.
        """
        ex = self._exchange(exchange)
        return sum(1 for d in self._dates_between(start, end) if self.trades_on(ex, d))

    def holiday_days_between(self, exchange: ExchangeRef, start: date, end: date) -> int:
        """Count nominal weekly trading days strictly between the dates that are holidays."""
        ex = self._exchange(exchange)
        nominal = sum(
            1 for d in self._dates_between(start, end)
            if ex.schedule.trades_on_weekday(Weekday.of(d))
        )
        return nominal - self.trading_days_between(ex, start, end)

    # --- Session boundaries ---

    def opening_on(self, exchange: ExchangeRef, d: date) -> Optional[datetime]:
        ex = self._exchange(exchange)
        if not self.trades_on(ex, d):
            return None
        return self._open(ex, d, self.rule_chain)

    def closing_on(self, exchange: ExchangeRef, d: date) -> Optional[datetime]:
        ex = self._exchange(exchange)
        if not self.trades_on(ex, d):
            return None
        return self._close(ex, d, self.rule_chain)

    def closes_early_on(self, exchange: ExchangeRef, d: date) -> Optional[datetime]:
        """Resolved close when it is strictly earlier than the base close, else None."""
        ex = self._exchange(exchange)
        if not self.trades_on(ex, d):
            return None
        resolved = self._close(ex, d, self.rule_chain)
        if resolved < self._close(ex, d, self._base_chain):
            return resolved
        return None

    def opens_late_on(self, exchange: ExchangeRef, d: date) -> bool:
        ex = self._exchange(exchange)
        if not self.trades_on(ex, d):
            return False
        return self._open(ex, d, self.rule_chain) > self._open(ex, d, self._base_chain)

    def regularly_adjusts_trading_hours_on(self, exchange: ExchangeRef,
                                           d: date) -> AdjustmentDescriptor:
        """Periodic-rule replacements for the date's weekday and DST variant.

        One-off date overrides are not reported here. Empty when no rule matches.
        """
        ex = self._exchange(exchange)
        context = self._context(ex, d)
        descriptor: AdjustmentDescriptor = {}
        for field in AdjustmentField:
            resolved = self._periodic.resolve(context, field)
            if resolved is None:
                continue
            if field == AdjustmentField.DAILY_OPEN:
                at = self._compose(ex, self._anchor(ex, context, resolved.time), resolved.time)
            else:
                at = self._compose(ex, d, resolved.time)
            descriptor[field.value] = RegularAdjustment(at=at, rule=resolved.label)
        return descriptor

    def trading_window(self, exchange: ExchangeRef, d: date) -> Optional[TradingWindow]:
        """Resolved session of ``d`` with breaks clipped to it; None when not trading."""
        ex = self._exchange(exchange)
        if not self.trades_on(ex, d):
            return None
        window = self._window(ex, d)
        self._log(ex).debug("Resolved trading window", trading_date=d.isoformat(),
                            open=window.open.isoformat(), close=window.close.isoformat(),
                            breaks=len(window.breaks))
        return window

    def trading_breaks(self, exchange: ExchangeRef, d: date) -> List[Tuple[datetime, datetime]]:
        window = self.trading_window(exchange, d)
        if window is None:
            return []
        return list(window.breaks)

    # --- Instants ---

    def trading_date_for(self, exchange: ExchangeRef, instant: Instant) -> date:
        """
        Nominal trading date an instant belongs to.

        An instant in the evening part of a session that opens on the
        previous calendar day belongs to the following date. Instants
        outside every session belong to their own calendar date.

        Raises:
            AmbiguousTradingDateError: If two sessions claim the instant.
        """
        ex = self._exchange(exchange)
        moment = self._as_instant(ex, instant)
        local_date = self._local_date(ex, moment)

        owners = []
        for candidate in (local_date, local_date + _ONE_DAY):
            window = self._nominal_window(ex, candidate)
            if window is not None and window.open <= moment < window.end:
                owners.append(candidate)

        if len(owners) > 1:
            raise AmbiguousTradingDateError(
                f"Instant {moment.isoformat()} falls in sessions of {', '.join(map(str, owners))}",
                exchange=ex.symbol,
                instant=moment,
                candidates=owners,
            )
        return owners[0] if owners else local_date

    def is_open_at(self, exchange: ExchangeRef, instant: Instant) -> bool:
        return self.status_at(exchange, instant) == MarketStatus.OPEN

    def status_at(self, exchange: ExchangeRef, instant: Instant) -> MarketStatus:
        ex = self._exchange(exchange)
        moment = self._as_instant(ex, instant)
        d = self.trading_date_for(ex, moment)

        if not ex.schedule.trades_on_weekday(Weekday.of(d)):
            return MarketStatus.WEEKEND
        if self.overrides.holiday_for(ex.scope_tags, d) is not None:
            return MarketStatus.HOLIDAY

        window = self._window(ex, d)
        if not (window.open <= moment < window.end):
            return MarketStatus.CLOSED
        if window.in_break(moment):
            return MarketStatus.BREAK
        return MarketStatus.OPEN

    def next_open_at(self, exchange: ExchangeRef, instant: Instant) -> Optional[datetime]:
        """
        Next instant the exchange transitions to open.

        Returns None if already open. Break ends count as transitions.

        Raises:
            ScanLimitExceededError: If no open is found within ``max_scan_days``.
        """
        ex = self._exchange(exchange)
        moment = self._as_instant(ex, instant)
        if self.is_open_at(ex, moment):
            return None

        start = self._local_date(ex, moment)
        limit = self.settings.max_scan_days
        for offset in range(limit + 1):
            window = self.trading_window(ex, start + offset * _ONE_DAY)
            if window is None:
                continue
            transitions = [window.open] + [end for _, end in window.breaks]
            for candidate in transitions:
                if candidate > moment and window.contains(candidate):
                    return candidate

        self._log(ex).warning("Next open scan exhausted", start=start.isoformat(), limit=limit)
        raise ScanLimitExceededError(
            f"No opening for {ex.symbol} within {limit} days of {start}",
            exchange=ex.symbol,
            start=start,
            limit=limit,
        )

    def seconds_of_trading_between_epochs(self, exchange: ExchangeRef,
                                          start: Instant, end: Instant) -> int:
        """
        Trading seconds in [start, end), breaks excluded.

        Returns 0 when ``start >= end`` or nothing trades in the range.
        """
        ex = self._exchange(exchange)
        lo = self._as_instant(ex, start)
        hi = self._as_instant(ex, end)
        if lo >= hi:
            return 0

        first = self._local_date(ex, lo) - _ONE_DAY
        last = self._local_date(ex, hi) + _ONE_DAY
        total = 0
        d = first
        while d <= last:
            window = self.trading_window(ex, d)
            if window is not None:
                total += window.trading_seconds(lo, hi)
            d += _ONE_DAY
        return total

    # --- Internal helpers ---

    def _exchange(self, exchange: ExchangeRef) -> Exchange:
        if isinstance(exchange, Exchange):
            return exchange
        if self.registry is None:
            raise ExchangeNotFoundError(
                f"No registry to resolve exchange symbol: {exchange}", symbol=exchange
            )
        return self.registry.get(exchange)

    def _as_instant(self, ex: Exchange, value: Instant) -> datetime:
        """Normalise epoch seconds and datetimes to an aware UTC datetime.

        Naive values are read in the schedule timezone. Aware values are
        converted so that arithmetic never happens on wall-clock time.
        """
        if isinstance(value, datetime):
            if value.tzinfo is None:
                value = resolve_timezone(ex.schedule_timezone).localize(value)
            return value.astimezone(pytz.utc)
        return datetime.fromtimestamp(value, tz=pytz.utc)

    def _log(self, ex: Exchange):
        return bind_exchange_context(self.logger, ex.symbol, self.overrides.snapshot)

    def _local_date(self, ex: Exchange, moment: datetime) -> date:
        tz = resolve_timezone(ex.schedule_timezone)
        return tz.normalize(moment.astimezone(tz)).date()

    def _compose(self, ex: Exchange, d: date, t: time) -> datetime:
        return resolve_timezone(ex.schedule_timezone).localize(datetime.combine(d, t))

    def _context(self, ex: Exchange, d: date) -> ResolutionContext:
        return ResolutionContext(
            exchange=ex,
            trading_date=d,
            variant=self.dst.variant_on(ex, d),
            overrides=self.overrides,
        )

    def _base_hours(self, ex: Exchange, context: ResolutionContext) -> Optional[TradingHours]:
        weekday_hours = ex.schedule.hours.get(context.weekday)
        if weekday_hours is None:
            return None
        return weekday_hours.for_variant(context.variant)

    def _anchor(self, ex: Exchange, context: ResolutionContext, t: time) -> date:
        """Calendar day a time-of-day of this trading date falls on.

        For sessions opening the previous evening, times at or after the
        base open belong to the previous calendar day.
        """
        hours = self._base_hours(ex, context)
        if hours is not None and hours.open_previous_day and t >= hours.open:
            return context.trading_date - _ONE_DAY
        return context.trading_date

    def _open(self, ex: Exchange, d: date, chain: Sequence[RuleSource]) -> datetime:
        context = self._context(ex, d)
        resolved = fold(chain, context, AdjustmentField.DAILY_OPEN)
        return self._compose(ex, self._anchor(ex, context, resolved.time), resolved.time)

    def _close(self, ex: Exchange, d: date, chain: Sequence[RuleSource]) -> datetime:
        context = self._context(ex, d)
        resolved = fold(chain, context, AdjustmentField.DAILY_CLOSE)
        return self._compose(ex, d, resolved.time)

    def _window(self, ex: Exchange, d: date,
                chain: Optional[Sequence[RuleSource]] = None) -> TradingWindow:
        chain = self.rule_chain if chain is None else chain
        context = self._context(ex, d)
        opening = self._open(ex, d, chain)
        closing = self._close(ex, d, chain)
        window = TradingWindow(trading_date=d, open=opening, close=closing)

        breaks = []
        for brk in ex.schedule.breaks:
            start = self._compose(ex, self._anchor(ex, context, brk.start), brk.start)
            end = self._compose(ex, self._anchor(ex, context, brk.end), brk.end)
            start, end = max(start, window.open), min(end, window.end)
            if start < end:
                breaks.append((start, end))
        return window.model_copy(update={"breaks": tuple(breaks)})

    def _nominal_window(self, ex: Exchange, d: date) -> Optional[TradingWindow]:
        """Session that would run on ``d`` if it traded, holidays ignored."""
        if not ex.schedule.trades_on_weekday(Weekday.of(d)):
            return None
        if self.overrides.holiday_for(ex.scope_tags, d) is not None:
            return self._window(ex, d, self._base_chain)
        return self._window(ex, d)

    def _scan(self, exchange: ExchangeRef, d: date, step: timedelta) -> date:
        ex = self._exchange(exchange)
        limit = self.settings.max_scan_days
        candidate = d
        for _ in range(limit):
            candidate += step
            if self.trades_on(ex, candidate):
                return candidate

        direction = "after" if step > timedelta(0) else "before"
        self._log(ex).warning("Trading day scan exhausted",
                              start=d.isoformat(), direction=direction, limit=limit)
        raise ScanLimitExceededError(
            f"No trading day for {ex.symbol} within {limit} days {direction} {d}",
            exchange=ex.symbol,
            start=d,
            limit=limit,
        )

    @staticmethod
    def _dates_between(start: date, end: date):
        d = start + _ONE_DAY
        while d < end:
            yield d
            d += _ONE_DAY
