# Settings for the market calendar, loaded from environment / .env
from datetime import time
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class CalendarSettings(BaseModel):
    """Resolution engine and snapshot data configuration"""
    max_scan_days: int = Field(
        default=370,
        description="Ceiling on calendar days scanned by next/previous trading day and next open"
    )
    dst_reference_time: time = Field(
        default=time(12, 0),
        description="Local time-of-day at which a trading date's DST flag is evaluated"
    )
    data_dir: Optional[str] = Field(
        default=None,
        description="Directory holding exchange and calendar JSON; bundled data when unset"
    )
    exchanges_file: str = "exchanges.json"
    calendar_file: str = "calendar.json"

    @field_validator('max_scan_days')
    @classmethod
    def validate_max_scan_days(cls, v):
        """A ceiling below one week cannot cross a weekend"""
        if v < 7:
            raise ValueError("max_scan_days must be at least 7")
        return v


class LoggingSettings(BaseModel):
    level: str = "INFO"
    json_format: bool = False
    console_enabled: bool = True


class Settings(BaseSettings):
    """Main settings, loaded from environment variables"""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="MARKET_CALENDAR_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore"
    )

    app_name: str = "Market Calendar"
    version: str = "1.0.0"
    environment: Environment = Environment.DEVELOPMENT

    calendar: CalendarSettings = CalendarSettings()
    logging: LoggingSettings = LoggingSettings()

    @property
    def data_dir(self) -> Path:
        """Directory that snapshot files are read from"""
        if self.calendar.data_dir:
            return Path(self.calendar.data_dir)
        # Bundled data ships next to this package: config/ -> market_calendar/ -> data/
        return Path(__file__).resolve().parents[1] / "data"


# No global settings instance - use dependency injection instead
