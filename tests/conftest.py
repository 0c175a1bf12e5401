"""
Pytest configuration and shared fixtures for market calendar tests.
"""
from datetime import date, time

import pytest

from market_calendar.config.settings import CalendarSettings, LoggingSettings, Settings
from market_calendar.data.loader import load_default_snapshot
from market_calendar.data.registry import ExchangeRegistry
from market_calendar.hours.engine import TradingCalendar
from market_calendar.hours.models import (
    AdjustmentField,
    AdjustmentRule,
    DSTVariant,
    Exchange,
    ExchangeSchedule,
    TradingBreak,
    TradingHours,
    Weekday,
    WeekdayHours,
)
from market_calendar.hours.overrides import CalendarOverrideTable

WEEKDAYS = (Weekday.MONDAY, Weekday.TUESDAY, Weekday.WEDNESDAY, Weekday.THURSDAY, Weekday.FRIDAY)


def _hours(open_, close, open_previous_day=False, dst=None):
    return WeekdayHours(
        standard=TradingHours(open=open_, close=close, open_previous_day=open_previous_day),
        dst=dst,
    )


@pytest.fixture
def test_settings():
    """Test settings configuration."""
    return Settings(
        environment="testing",
        calendar=CalendarSettings(max_scan_days=30),
        logging=LoggingSettings(level="DEBUG", console_enabled=False),
    )


@pytest.fixture
def forex_exchange():
    """Sunday-to-Friday FX session in UTC, governed by New York DST."""
    hours = {day: _hours(time(0, 0), time(23, 59, 59)) for day in WEEKDAYS}
    hours[Weekday.SUNDAY] = _hours(
        time(22, 35), time(23, 59, 59),
        dst=TradingHours(open=time(21, 35), close=time(23, 59, 59)),
    )
    return Exchange(
        symbol="FX",
        category="forex",
        countries=frozenset({"USD", "EUR", "JPY"}),
        timezone="America/New_York",
        schedule_timezone="UTC",
        schedule=ExchangeSchedule(
            trading_days=frozenset(WEEKDAYS + (Weekday.SUNDAY,)),
            hours=hours,
            adjustment_rules=(
                AdjustmentRule(weekday=Weekday.FRIDAY, variant=DSTVariant.STANDARD,
                               field=AdjustmentField.DAILY_CLOSE, time=time(21, 55),
                               label="Fridays"),
                AdjustmentRule(weekday=Weekday.FRIDAY, variant=DSTVariant.DST,
                               field=AdjustmentField.DAILY_CLOSE, time=time(20, 55),
                               label="Fridays (DST)"),
            ),
        ),
    )


@pytest.fixture
def futures_exchange():
    """Chicago futures session opening the previous evening, with a maintenance break."""
    return Exchange(
        symbol="ES",
        category="index_futures",
        countries=frozenset({"US"}),
        timezone="America/Chicago",
        schedule_timezone="America/Chicago",
        schedule=ExchangeSchedule(
            trading_days=frozenset(WEEKDAYS),
            hours={day: _hours(time(17, 0), time(16, 0), open_previous_day=True) for day in WEEKDAYS},
            breaks=(TradingBreak(start=time(8, 15), end=time(8, 30)),),
        ),
    )


@pytest.fixture
def equity_exchange():
    """Tokyo cash session with a lunch break."""
    return Exchange(
        symbol="TSE",
        category="equities",
        countries=frozenset({"JP"}),
        timezone="Asia/Tokyo",
        schedule_timezone="Asia/Tokyo",
        schedule=ExchangeSchedule(
            trading_days=frozenset(WEEKDAYS),
            hours={day: _hours(time(9, 0), time(15, 30)) for day in WEEKDAYS},
            breaks=(TradingBreak(start=time(11, 30), end=time(12, 30)),),
        ),
    )


@pytest.fixture
def override_table():
    """A small snapshot touching every override kind."""
    return CalendarOverrideTable(
        snapshot="test",
        holidays={
            date(2026, 1, 1): {"New Year's Day": frozenset({"forex", "US", "JP"})},
            date(2026, 1, 19): {"Martin Luther King Jr. Day": frozenset({"US"})},
            date(2026, 4, 3): {"Good Friday": frozenset({"forex", "US"})},
            date(2026, 12, 25): {
                "Christmas Day": frozenset({"forex"}),
                "Boxing Day Eve": frozenset({"EUR"}),
            },
        },
        early_closes={
            date(2026, 11, 27): {time(12, 15): frozenset({"ES"})},
            date(2026, 12, 31): {time(22, 0): frozenset({"forex"}), time(20, 0): frozenset({"EUR"})},
            # early close on a holiday is ignored
            date(2026, 4, 3): {time(12, 0): frozenset({"forex"})},
        },
        late_opens={
            date(2026, 1, 2): {time(1, 0): frozenset({"forex"}), time(2, 0): frozenset({"JPY"})},
        },
    )


@pytest.fixture
def registry(forex_exchange, futures_exchange, equity_exchange):
    return ExchangeRegistry([forex_exchange, futures_exchange, equity_exchange])


@pytest.fixture
def calendar(override_table, registry, test_settings):
    return TradingCalendar(override_table, registry=registry, settings=test_settings.calendar)


@pytest.fixture(scope="session")
def bundled_snapshot():
    """Registry and snapshot store from the data shipped with the package."""
    return load_default_snapshot(Settings(_env_file=None))


@pytest.fixture
def bundled_calendar(bundled_snapshot):
    registry, store = bundled_snapshot
    return TradingCalendar(store.get(), registry=registry)
