# Structured logging for the market calendar
import sys
import logging
import structlog
from typing import Optional

from market_calendar.config.settings import Settings

# Global flag to prevent duplicate logging configuration
_logging_configured = False


def configure_logging(settings: Settings) -> None:
    """Configure stdlib logging and structlog from settings (first call wins)."""
    global _logging_configured

    if _logging_configured:
        return

    level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    if settings.logging.console_enabled:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)

        foreign_chain = [
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
        ]
        console_processor = (
            structlog.processors.JSONRenderer()
            if settings.logging.json_format
            else structlog.dev.ConsoleRenderer()
        )
        console_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=console_processor,
                foreign_pre_chain=foreign_chain,
            )
        )
        root_logger.addHandler(console_handler)
    root_logger.setLevel(level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    _logging_configured = True


def get_logger(name: str, component: Optional[str] = None) -> structlog.BoundLogger:
    """Get a structured logger instance, optionally bound to a component."""
    logger = structlog.get_logger(name)
    if component:
        return logger.bind(component=component)
    return logger


def bind_exchange_context(logger: structlog.BoundLogger, symbol: str,
                          snapshot: Optional[str] = None) -> structlog.BoundLogger:
    """Bind exchange context consistently to a logger.

    Adds `exchange` and, when known, the calendar `snapshot` identifier.
    """
    ctx = {"exchange": symbol}
    if snapshot:
        ctx["snapshot"] = snapshot
    return logger.bind(**ctx)


__all__ = [
    "configure_logging",
    "get_logger",
    "bind_exchange_context",
]
