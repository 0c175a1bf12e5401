"""
Date-keyed calendar overrides: holidays, early closes and late opens.
"""

from datetime import date, time
from typing import AbstractSet, Dict, FrozenSet, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class CalendarOverrideTable(BaseModel):
    """
    One calendar snapshot of override data.

    Every entry is scoped by a set of tags (exchange symbols, market
    categories, country or currency codes); an entry applies to an exchange
    when any of its tags is one of the exchange's scope tags.
    """
    model_config = ConfigDict(frozen=True)

    snapshot: Optional[str] = Field(default=None, description="Snapshot identifier")
    holidays: Dict[date, Dict[str, FrozenSet[str]]] = Field(default_factory=dict)
    early_closes: Dict[date, Dict[time, FrozenSet[str]]] = Field(default_factory=dict)
    late_opens: Dict[date, Dict[time, FrozenSet[str]]] = Field(default_factory=dict)

    def holiday_for(self, tags: AbstractSet[str], d: date) -> Optional[str]:
        """Holiday name applying to any of ``tags`` on ``d``, or None.

        Several matching holidays are reported together, in name order.
        """
        entries = self.holidays.get(d)
        if not entries:
            return None
        names = sorted(name for name, scopes in entries.items() if scopes & tags)
        if not names:
            return None
        return ", ".join(names)

    def is_holiday_for(self, scope_tag: str, d: date) -> Optional[str]:
        return self.holiday_for(frozenset((scope_tag,)), d)

    def early_close_for(self, tags: AbstractSet[str], d: date) -> Optional[time]:
        """Earliest early close applying to ``tags`` on ``d``."""
        matches = self._times_for(self.early_closes, tags, d)
        return min(matches) if matches else None

    def late_open_for(self, tags: AbstractSet[str], d: date) -> Optional[time]:
        """Latest late open applying to ``tags`` on ``d``."""
        matches = self._times_for(self.late_opens, tags, d)
        return max(matches) if matches else None

    def holidays_in_range(self, scope_tag: str, start: date, end: date) -> List[Tuple[date, str]]:
        """Return sorted (date, name) holidays for ``scope_tag`` in [start, end] inclusive."""
        found = []
        for d in sorted(self.holidays):
            if start <= d <= end:
                name = self.is_holiday_for(scope_tag, d)
                if name:
                    found.append((d, name))
        return found

    @staticmethod
    def _times_for(table: Dict[date, Dict[time, FrozenSet[str]]],
                   tags: AbstractSet[str], d: date) -> List[time]:
        entries = table.get(d)
        if not entries:
            return []
        return [t for t, scopes in entries.items() if scopes & tags]
