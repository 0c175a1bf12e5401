"""
Exchange registry, calendar snapshots and their JSON loaders.
"""

from .loader import ExchangeDefinitionLoader, load_calendar, load_default_snapshot
from .registry import CalendarSnapshotStore, ExchangeRegistry

__all__ = [
    "CalendarSnapshotStore",
    "ExchangeDefinitionLoader",
    "ExchangeRegistry",
    "load_calendar",
    "load_default_snapshot",
]
