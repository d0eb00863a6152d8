"""Holiday exception table applied on top of the weekday template.

Entries are keyed by zero-based month index (0 = January) and hold zero-based
day-of-month indices (0 = the 1st). The same table applies to every year.
"""

import json
from collections.abc import Iterable, Mapping
from datetime import date
from pathlib import Path

from attendance.logging import get_logger

log = get_logger(__name__)

# Academic-year holidays for July-December (zero-based month/day indices)
DEFAULT_HOLIDAYS: dict[int, frozenset[int]] = {
    6: frozenset({18}),  # July
    7: frozenset({14, 16, 23, 26}),  # August
    8: frozenset({4, 20, 28, 29}),  # September
    9: frozenset({0, 1, 2, 3, 18, 19}),  # October
    10: frozenset({4, 14}),  # November
    11: frozenset({24}),  # December
}


class HolidayTable:
    """Year-invariant set of (month index, day index) holidays.

    A holiday forces a date to zero periods regardless of its weekday.
    Day indices past the end of a month (e.g. 29 for February) are kept but
    never match a real date.
    """

    def __init__(self, entries: Mapping[int, Iterable[int]] | None = None) -> None:
        table: dict[int, frozenset[int]] = {}
        for month_index, days in (entries or {}).items():
            month_index = int(month_index)
            if not 0 <= month_index <= 11:
                raise ValueError(f"Holiday month index out of range: {month_index}")
            day_set = frozenset(int(day) for day in days)
            if any(not 0 <= day <= 30 for day in day_set):
                raise ValueError(
                    f"Holiday day index out of range in month {month_index}: "
                    f"{sorted(day_set)}"
                )
            if day_set:
                table[month_index] = day_set
        self._table = table

    @classmethod
    def default(cls) -> "HolidayTable":
        return cls(DEFAULT_HOLIDAYS)

    @classmethod
    def empty(cls) -> "HolidayTable":
        return cls({})

    @classmethod
    def from_dates(cls, dates: Iterable[date]) -> "HolidayTable":
        """Build a table from calendar dates; the year part is discarded."""
        entries: dict[int, set[int]] = {}
        for day in dates:
            entries.setdefault(day.month - 1, set()).add(day.day - 1)
        return cls(entries)

    @classmethod
    def from_json(cls, path: str | Path) -> "HolidayTable":
        """Load a table from JSON shaped like ``{"6": [18], "7": [14, 16]}``.

        Raises:
            ValueError: If the file content is not a month -> day list mapping.
        """
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ValueError(f"Holiday file {path} must contain a JSON object")
        table = cls(raw)
        log.info("holidays_loaded", path=str(path), months=len(table._table))
        return table

    def days_in(self, month_index: int) -> frozenset[int]:
        return self._table.get(month_index, frozenset())

    def items(self) -> Iterable[tuple[int, frozenset[int]]]:
        return self._table.items()

    def is_holiday(self, day: date) -> bool:
        return (day.day - 1) in self.days_in(day.month - 1)

    def __len__(self) -> int:
        return sum(len(days) for days in self._table.values())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HolidayTable):
            return NotImplemented
        return self._table == other._table

    def __repr__(self) -> str:
        body = {month: sorted(days) for month, days in sorted(self._table.items())}
        return f"HolidayTable({body})"
