from datetime import time
from pathlib import Path

import pytest
from pydantic import ValidationError

from market_calendar.config.settings import CalendarSettings, Environment, Settings


def test_defaults():
    settings = Settings(_env_file=None)
    assert settings.environment == Environment.DEVELOPMENT
    assert settings.calendar.max_scan_days == 370
    assert settings.calendar.dst_reference_time == time(12, 0)
    assert settings.logging.level == "INFO"


def test_bundled_data_dir():
    data_dir = Settings(_env_file=None).data_dir
    assert data_dir.name == "data"
    assert (data_dir / "exchanges.json").is_file()
    assert (data_dir / "calendar.json").is_file()


def test_configured_data_dir(tmp_path):
    settings = Settings(_env_file=None, calendar=CalendarSettings(data_dir=str(tmp_path)))
    assert settings.data_dir == Path(tmp_path)


def test_nested_environment_variables(monkeypatch):
    monkeypatch.setenv("MARKET_CALENDAR_CALENDAR__MAX_SCAN_DAYS", "60")
    monkeypatch.setenv("MARKET_CALENDAR_LOGGING__JSON_FORMAT", "true")
    monkeypatch.setenv("MARKET_CALENDAR_ENVIRONMENT", "production")
    settings = Settings(_env_file=None)
    assert settings.calendar.max_scan_days == 60
    assert settings.logging.json_format is True
    assert settings.environment == Environment.PRODUCTION


def test_scan_ceiling_must_cover_a_week():
    with pytest.raises(ValidationError):
        CalendarSettings(max_scan_days=3)
