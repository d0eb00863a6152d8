"""Period accounting: range totals and the required-attendance date search."""

from datetime import date, timedelta

from attendance.logging import get_logger
from attendance.models import Projection, ProjectionStatus
from attendance.schedule import ScheduleModel, as_calendar_date

log = get_logger(__name__)

DEFAULT_SEARCH_HORIZON_DAYS = 365 * 2


def meets_requirement(attended: int, total: int, ratio: float) -> bool:
    # A zero total cannot be evaluated yet, so it never counts as met
    return total > 0 and attended / total >= ratio


class PeriodAccountingEngine:
    """Sums scheduled periods over date ranges and projects attendance forward.

    All answers are computed from the ScheduleModel's current settings; the
    engine keeps no attendance state of its own.
    """

    def __init__(
        self,
        schedule: ScheduleModel,
        search_horizon_days: int = DEFAULT_SEARCH_HORIZON_DAYS,
    ) -> None:
        if search_horizon_days < 0:
            raise ValueError("search_horizon_days cannot be negative")
        self.schedule = schedule
        self.search_horizon_days = search_horizon_days

    def periods_in_range(self, start: date, end: date) -> int:
        """Total periods from ``start`` to ``end`` inclusive.

        Time-of-day is ignored. A range whose start is after its end holds
        zero periods.
        """
        start = as_calendar_date(start)
        end = as_calendar_date(end)
        if start > end:
            return 0

        total = 0
        current = start
        while current <= end:
            total += self.schedule.periods_on_date(current)
            current += timedelta(days=1)
        return total

    def find_required_attendance_date(
        self, attended: int, total: int, from_date: date
    ) -> Projection:
        """Find the first day the required percentage becomes achievable.

        Every period from ``from_date`` (inclusive) onward is assumed to be
        attended, so the returned date is a best case, not a guarantee. The
        ratio is checked after each day because it need not rise monotonically.
        The search stops after ``search_horizon_days`` days past ``from_date``.
        """
        from_date = as_calendar_date(from_date)
        ratio = self.schedule.required_ratio

        if meets_requirement(attended, total, ratio):
            return Projection(status=ProjectionStatus.ALREADY_MET)

        limit = from_date + timedelta(days=self.search_horizon_days)
        current = from_date
        while current <= limit:
            today = self.schedule.periods_on_date(current)
            attended += today
            total += today
            if meets_requirement(attended, total, ratio):
                log.debug(
                    "required_date_found",
                    target_date=current.isoformat(),
                    attended=attended,
                    total=total,
                )
                return Projection(
                    status=ProjectionStatus.REACHABLE, target_date=current
                )
            current += timedelta(days=1)

        log.info(
            "required_date_unreachable",
            from_date=from_date.isoformat(),
            horizon_days=self.search_horizon_days,
        )
        return Projection(status=ProjectionStatus.UNREACHABLE)
