"""
JSON loading utilities for exchange definitions and calendar snapshots.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import structlog
from pydantic import ValidationError

from market_calendar.config.settings import Settings
from market_calendar.hours.models import Exchange
from market_calendar.hours.overrides import CalendarOverrideTable
from market_calendar.utils.exceptions import CalendarConfigurationError, CalendarDataError
from .registry import CalendarSnapshotStore, ExchangeRegistry

logger = structlog.get_logger(__name__)

PathLike = Union[str, Path]


def _read_json(path: Path) -> Dict[str, Any]:
    """Validate that the file exists and is readable, then parse it."""
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")

    if not path.is_file():
        raise ValueError(f"Path is not a file: {path}")

    if not os.access(path, os.R_OK):
        raise PermissionError(f"Cannot read data file: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise CalendarDataError(f"Invalid JSON in {path}: {e}", source=str(path)) from e

    if not isinstance(raw, dict):
        raise CalendarDataError(f"Top level of {path} must be an object", source=str(path))
    return raw


class ExchangeDefinitionLoader:
    """
    Loader for exchange definition files.

    Expected format::

        {"exchanges": [{"symbol": "FX", "category": "forex", "schedule": {...}}, ...]}
    """

    def __init__(self, file_path: PathLike):
        """
        Initialize loader with file path.

        Args:
            file_path: Path to the exchanges JSON file
        """
        self.file_path = Path(file_path)

    def load_exchanges(self) -> List[Exchange]:
        """
        Load and validate all exchange definitions.

        Returns:
            List of Exchange models

        Raises:
            FileNotFoundError: If the file doesn't exist
            CalendarDataError: If the JSON is malformed
            CalendarConfigurationError: If an exchange definition is invalid
        """
        raw = _read_json(self.file_path)
        entries = raw.get("exchanges")
        if not isinstance(entries, list):
            raise CalendarDataError(
                f"Exchange file missing 'exchanges' list: {self.file_path}",
                source=str(self.file_path),
            )

        exchanges = []
        for index, entry in enumerate(entries):
            symbol = entry.get("symbol", f"#{index}") if isinstance(entry, dict) else f"#{index}"
            try:
                exchanges.append(Exchange.model_validate(entry))
            except ValidationError as e:
                logger.error("Invalid exchange definition", symbol=symbol, error=str(e))
                raise CalendarConfigurationError(
                    f"Invalid exchange definition for {symbol}: {e}",
                    config_field=f"exchanges[{index}]",
                    config_value=symbol,
                ) from e

        logger.info(f"Successfully loaded {len(exchanges)} exchanges from {self.file_path}")
        return exchanges

    def load_registry(self) -> ExchangeRegistry:
        return ExchangeRegistry(self.load_exchanges())


def load_calendar(file_path: PathLike) -> CalendarOverrideTable:
    """
    Load one calendar snapshot of holidays, early closes and late opens.

    Raises:
        FileNotFoundError: If the file doesn't exist
        CalendarDataError: If the content is malformed
    """
    path = Path(file_path)
    raw = _read_json(path)
    try:
        table = CalendarOverrideTable.model_validate(raw)
    except ValidationError as e:
        logger.error("Invalid calendar snapshot", path=str(path), error=str(e))
        raise CalendarDataError(f"Invalid calendar data in {path}: {e}", source=str(path)) from e

    logger.info(
        "Loaded calendar snapshot",
        path=str(path),
        snapshot=table.snapshot,
        holidays=len(table.holidays),
        early_closes=len(table.early_closes),
        late_opens=len(table.late_opens),
    )
    return table


def load_default_snapshot(settings: Optional[Settings] = None) -> Tuple[ExchangeRegistry, CalendarSnapshotStore]:
    """Load the configured (or bundled) exchanges and calendar."""
    settings = settings or Settings()
    data_dir = settings.data_dir
    registry = ExchangeDefinitionLoader(data_dir / settings.calendar.exchanges_file).load_registry()
    calendar = load_calendar(data_dir / settings.calendar.calendar_file)
    return registry, CalendarSnapshotStore(calendar)
