from datetime import date

import pytest
from structlog.testing import capture_logs

from market_calendar.config.settings import CalendarSettings
from market_calendar.hours.engine import TradingCalendar
from market_calendar.hours.models import Exchange, ExchangeSchedule
from market_calendar.logging import bind_exchange_context, get_logger
from market_calendar.utils.exceptions import ScanLimitExceededError


def test_get_logger_binds_component():
    with capture_logs() as logs:
        get_logger("market_calendar.test", component="engine").info("resolved")
    assert logs[0]["component"] == "engine"
    assert logs[0]["event"] == "resolved"


def test_bind_exchange_context():
    with capture_logs() as logs:
        logger = get_logger("market_calendar.test")
        bind_exchange_context(logger, "FX", snapshot="2026").warning("scan exhausted")
        bind_exchange_context(logger, "ES").info("loaded")
    assert logs[0]["exchange"] == "FX"
    assert logs[0]["snapshot"] == "2026"
    assert "snapshot" not in logs[1]


def test_scan_limit_is_logged(override_table):
    dark = Exchange(symbol="DARK", schedule=ExchangeSchedule(trading_days=frozenset()))
    with capture_logs() as logs:
        cal = TradingCalendar(override_table, settings=CalendarSettings(max_scan_days=7))
        with pytest.raises(ScanLimitExceededError):
            cal.trade_date_after(dark, date(2026, 2, 9))
    assert logs[-1]["exchange"] == "DARK"
    assert logs[-1]["snapshot"] == "test"
    assert logs[-1]["component"] == "engine"
    assert logs[-1]["log_level"] == "warning"
