"""
In-memory exchange registry and calendar snapshot store.
"""

from typing import Dict, Iterable, Iterator, List, Optional

import structlog

from market_calendar.hours.models import Exchange
from market_calendar.hours.overrides import CalendarOverrideTable
from market_calendar.utils.exceptions import CalendarDataError, ExchangeNotFoundError

logger = structlog.get_logger(__name__)


class ExchangeRegistry:
    """
    Read-only lookup of exchanges by symbol.

    Built once from static configuration and passed explicitly to whatever
    needs it; several registries may coexist.
    """

    def __init__(self, exchanges: Iterable[Exchange] = ()):
        self._exchanges: Dict[str, Exchange] = {}
        for exchange in exchanges:
            if exchange.symbol in self._exchanges:
                logger.warning("Duplicate exchange symbol, keeping last definition",
                               symbol=exchange.symbol)
            self._exchanges[exchange.symbol] = exchange

    def get(self, symbol: str) -> Exchange:
        try:
            return self._exchanges[symbol]
        except KeyError:
            raise ExchangeNotFoundError(f"Unknown exchange: {symbol}", symbol=symbol) from None

    def symbols(self) -> List[str]:
        return sorted(self._exchanges)

    def by_category(self, category: str) -> List[Exchange]:
        return [ex for ex in self._exchanges.values() if ex.category == category]

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._exchanges

    def __iter__(self) -> Iterator[Exchange]:
        return iter(self._exchanges.values())

    def __len__(self) -> int:
        return len(self._exchanges)


class CalendarSnapshotStore:
    """Override tables keyed by snapshot identifier; ``None`` selects the current one."""

    def __init__(self, current: CalendarOverrideTable,
                 others: Optional[Dict[str, CalendarOverrideTable]] = None):
        self._current = current
        self._snapshots: Dict[str, CalendarOverrideTable] = dict(others or {})
        if current.snapshot:
            self._snapshots.setdefault(current.snapshot, current)

    def get(self, snapshot: Optional[str] = None) -> CalendarOverrideTable:
        if snapshot is None:
            return self._current
        try:
            return self._snapshots[snapshot]
        except KeyError:
            raise CalendarDataError(f"Unknown calendar snapshot: {snapshot}", source=snapshot) from None

    def snapshots(self) -> List[str]:
        return sorted(self._snapshots)
