"""
Daylight-saving detection for an exchange's governing timezone.
"""

from datetime import date, datetime, time, timedelta
from functools import lru_cache

import pytz

from market_calendar.utils.exceptions import CalendarConfigurationError
from .models import DSTVariant, Exchange


@lru_cache(maxsize=None)
def resolve_timezone(name: str) -> pytz.BaseTzInfo:
    """Look up a pytz timezone, raising a configuration error if unknown."""
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        raise CalendarConfigurationError(
            f"Unknown timezone: {name}",
            config_field="timezone",
            config_value=name,
        ) from None


class DSTOracle:
    """
    Answers whether an exchange is observing daylight-saving time.

    A trading date's DST flag is evaluated once, at ``reference_time``
    local time in the exchange's governing timezone, so every query for
    that date sees the same variant.
    """

    def __init__(self, reference_time: time = time(12, 0)):
        self.reference_time = reference_time

    def is_dst(self, exchange: Exchange, instant: datetime) -> bool:
        tz = resolve_timezone(exchange.timezone)
        if instant.tzinfo is None:
            instant = tz.localize(instant)
        local = tz.normalize(instant.astimezone(tz))
        return bool(local.dst() and local.dst() != timedelta(0))

    def is_dst_on(self, exchange: Exchange, trading_date: date) -> bool:
        tz = resolve_timezone(exchange.timezone)
        reference = tz.localize(datetime.combine(trading_date, self.reference_time))
        return self.is_dst(exchange, reference)

    def variant_on(self, exchange: Exchange, trading_date: date) -> DSTVariant:
        return DSTVariant.from_flag(self.is_dst_on(exchange, trading_date))
