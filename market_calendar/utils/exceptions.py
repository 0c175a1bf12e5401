# Structured exception hierarchy for the market calendar

from typing import Dict, Any, Optional
from datetime import date, datetime, timezone


class MarketCalendarException(Exception):
    """Base exception for all market calendar errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc)


class PermanentError(MarketCalendarException):
    """Base class for errors caused by bad static data or bad input - never retried"""
    pass


# Configuration Errors
class CalendarConfigurationError(PermanentError):
    """Exchange definition is unusable (missing weekday hours, unknown timezone, ...)"""

    def __init__(self, message: str, config_field: str, config_value: Any,
                 **kwargs):
        super().__init__(message, **kwargs)
        self.config_field = config_field
        self.config_value = config_value


class CalendarDataError(PermanentError):
    """Override or exchange data file is malformed"""

    def __init__(self, message: str, source: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.source = source


class ExchangeNotFoundError(PermanentError):
    """Exchange lookup failures"""

    def __init__(self, message: str, symbol: str, **kwargs):
        super().__init__(message, **kwargs)
        self.symbol = symbol


# Resolution Errors
class AmbiguousTradingDateError(PermanentError):
    """An instant cannot be attributed to exactly one trading date"""

    def __init__(self, message: str, exchange: str, instant: datetime,
                 candidates: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.exchange = exchange
        self.instant = instant
        self.candidates = candidates or []


class ScanLimitExceededError(PermanentError):
    """A bounded day scan ran past its ceiling without finding an answer"""

    def __init__(self, message: str, exchange: str, start: date, limit: int,
                 **kwargs):
        super().__init__(message, **kwargs)
        self.exchange = exchange
        self.start = start
        self.limit = limit


def create_error_context(error: Exception, operation: str,
                         additional_context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Create structured error context for logging

    Args:
        error: The exception that occurred
        operation: The operation that failed
        additional_context: Additional context information

    Returns:
        Structured error context dictionary
    """
    context = {
        "error_type": type(error).__name__,
        "error_message": str(error),
        "operation": operation,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    if isinstance(error, MarketCalendarException):
        if error.details:
            context["error_details"] = error.details

        if isinstance(error, CalendarConfigurationError):
            context["config_field"] = error.config_field
            context["config_value"] = str(error.config_value)

        if isinstance(error, (AmbiguousTradingDateError, ScanLimitExceededError)):
            context["exchange"] = error.exchange

        if isinstance(error, ScanLimitExceededError):
            context["scan_start"] = error.start.isoformat()
            context["scan_limit"] = error.limit

        if isinstance(error, ExchangeNotFoundError):
            context["symbol"] = error.symbol

    if additional_context:
        context.update(additional_context)

    return context
