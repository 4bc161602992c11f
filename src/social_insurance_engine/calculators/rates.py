"""Premium rate resolution by prefecture and effective month."""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable

from social_insurance_engine.calculators.lifecycle import month_key
from social_insurance_engine.calculators.types import RateTable


class RateSchedule:
    """Resolves the rate table in force for a prefecture and month.

    Rate selection:
    1. Only tables for the requested prefecture are considered
    2. The latest table whose effective month is on or before the
       target month wins, so a March revision applies from March on
    """

    def __init__(self, tables: Iterable[RateTable]):
        self._tables: dict[str, list[RateTable]] = defaultdict(list)
        for table in tables:
            self._tables[self._normalize(table.prefecture)].append(table)
        for entries in self._tables.values():
            entries.sort(key=lambda t: t.effective_key)

    @staticmethod
    def _normalize(prefecture: str) -> str:
        return prefecture.strip().lower()

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._tables.values())

    @property
    def prefectures(self) -> list[str]:
        return sorted(self._tables)

    def for_month(self, prefecture: str | None, year: int, month: int) -> RateTable | None:
        """Get the table in force for ``prefecture`` in ``year``/``month``."""
        if not prefecture:
            return None
        entries = self._tables.get(self._normalize(prefecture))
        if not entries:
            return None

        target = month_key(year, month)
        selected: RateTable | None = None
        for table in entries:
            if table.effective_key > target:
                break
            selected = table
        return selected

    def for_year(self, prefecture: str | None, year: int) -> RateTable | None:
        """The latest table in force during ``year``."""
        return self.for_month(prefecture, year, 12)
