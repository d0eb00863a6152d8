"""Schedule model: weekday period template, holidays, and per-year schedules.

A ScheduleModel owns the active ScheduleSettings and a HolidayTable. It
derives one YearSchedule per calendar year on first use (twelve tuples of
per-day period counts) and memoizes it until the settings change.
"""

from datetime import date, datetime

from attendance.config import AttendanceConfig
from attendance.holidays import HolidayTable
from attendance.logging import get_logger
from attendance.models import ScheduleSettings

log = get_logger(__name__)

# One tuple of per-day counts for each month, January first
YearSchedule = tuple[tuple[int, ...], ...]


def is_leap_year(year: int) -> bool:
    return (year % 4 == 0 and year % 100 != 0) or year % 400 == 0


def month_lengths(year: int) -> list[int]:
    """Days in each month of ``year``, January first."""
    february = 29 if is_leap_year(year) else 28
    return [31, february, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31]


def weekday_index(day: date) -> int:
    """Sunday-based weekday index (Sunday = 0 ... Saturday = 6)."""
    return (day.weekday() + 1) % 7


def as_calendar_date(value: date) -> date:
    """Drop any time-of-day component.

    Raises:
        TypeError: If ``value`` is not a date or datetime.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise TypeError(f"Expected a date, got {type(value).__name__}: {value!r}")


class ScheduleModel:
    """Holds the active settings and answers "how many periods on date D".

    Callers keep one instance and change it only through update_settings()
    or update_holidays(); both clear every cached year.
    """

    def __init__(
        self,
        settings: ScheduleSettings | None = None,
        holidays: HolidayTable | None = None,
    ) -> None:
        self._settings = settings if settings is not None else ScheduleSettings()
        self._holidays = holidays if holidays is not None else HolidayTable.default()
        self._year_cache: dict[int, YearSchedule] = {}

    @classmethod
    def from_config(cls, config: AttendanceConfig) -> "ScheduleModel":
        """Build a model from configuration defaults and the optional holiday file."""
        settings = ScheduleSettings(
            periods=tuple(config.default_periods),
            percentage=config.default_percentage,
        )
        if config.holidays_file:
            holidays = HolidayTable.from_json(config.holidays_file)
        else:
            holidays = HolidayTable.default()
        return cls(settings, holidays)

    @property
    def settings(self) -> ScheduleSettings:
        return self._settings

    @property
    def holidays(self) -> HolidayTable:
        return self._holidays

    @property
    def required_ratio(self) -> float:
        return self._settings.percentage / 100

    def update_settings(self, settings: ScheduleSettings) -> None:
        """Replace the active settings and clear all cached years."""
        cleared = self.cached_years()
        self._settings = settings
        self._year_cache.clear()
        log.info(
            "settings_updated",
            cleared_years=cleared,
            periods=list(settings.periods),
            percentage=settings.percentage,
        )

    def update_holidays(self, holidays: HolidayTable) -> None:
        """Replace the holiday table and clear all cached years."""
        self._holidays = holidays
        self._year_cache.clear()
        log.info("holidays_updated", holiday_count=len(holidays))

    def year_schedule(self, year: int) -> YearSchedule:
        """Per-month, per-day period counts for ``year``, built once per settings."""
        cached = self._year_cache.get(year)
        if cached is not None:
            return cached

        periods = self._settings.periods
        dow = weekday_index(date(year, 1, 1))
        months: list[list[int]] = []
        for length in month_lengths(year):
            month: list[int] = []
            for _ in range(length):
                month.append(periods[dow])
                dow = (dow + 1) % 7
            months.append(month)

        for month_index, day_indices in self._holidays.items():
            month = months[month_index]
            for day_index in day_indices:
                if day_index < len(month):
                    month[day_index] = 0

        schedule = tuple(tuple(month) for month in months)
        self._year_cache[year] = schedule
        log.debug("year_schedule_built", year=year, periods=sum(map(sum, schedule)))
        return schedule

    def periods_on_date(self, day: date) -> int:
        """Holiday-adjusted number of periods scheduled on ``day``."""
        day = as_calendar_date(day)
        return self.year_schedule(day.year)[day.month - 1][day.day - 1]

    def cached_years(self) -> list[int]:
        return sorted(self._year_cache)
