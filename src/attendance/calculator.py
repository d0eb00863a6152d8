"""Attendance calculator and leave simulation built on the accounting engine.

AttendanceCalculator turns "attended so far / total so far" plus a date range
into an AttendanceReport, and replays leave against a report either
retroactively (apply) or prospectively (project).
"""

import math
from datetime import date, timedelta

from attendance.engine import PeriodAccountingEngine, meets_requirement
from attendance.errors import InputError, InvalidSimulationError, NoPeriodsError
from attendance.logging import get_logger
from attendance.models import (
    AttendanceReport,
    AttendanceState,
    AttendanceStatus,
    LeaveMode,
    LeaveUnit,
)
from attendance.schedule import as_calendar_date

log = get_logger(__name__)


class AttendanceCalculator:
    """Computes attendance reports against the engine's active schedule."""

    def __init__(self, engine: PeriodAccountingEngine) -> None:
        self.engine = engine

    @property
    def required_percentage(self) -> float:
        return self.engine.schedule.settings.percentage

    def calculate(
        self,
        attended_so_far: int,
        total_so_far: int,
        start: date,
        end: date,
    ) -> AttendanceReport:
        """Add a fully attended date range to the counts so far and report.

        Raises:
            InputError: If start is after end or attended exceeds total.
            NoPeriodsError: If the resulting total is zero.
        """
        start = as_calendar_date(start)
        end = as_calendar_date(end)
        if start > end:
            raise InputError("Start date cannot be after end date.")
        if attended_so_far < 0 or total_so_far < 0:
            raise InputError("Period counts cannot be negative.")
        if attended_so_far > total_so_far:
            raise InputError("Total periods cannot be less than attended periods.")

        in_range = self.engine.periods_in_range(start, end)
        state = AttendanceState(
            attended=attended_so_far + in_range,
            total=total_so_far + in_range,
        )
        if state.total <= 0:
            raise NoPeriodsError(
                "Total periods are zero for the selected range. "
                "Check your period settings."
            )

        log.info(
            "attendance_calculated",
            start=start.isoformat(),
            end=end.isoformat(),
            periods_in_range=in_range,
            attended=state.attended,
            total=state.total,
        )
        return self._report(state.attended, state.total, end + timedelta(days=1))

    def simulate_leave(
        self,
        report: AttendanceReport,
        end: date,
        amount: int,
        unit: LeaveUnit = LeaveUnit.DAYS,
        mode: LeaveMode = LeaveMode.PROJECT,
    ) -> AttendanceReport:
        """Replay leave against ``report`` whose range ended on ``end``.

        APPLY treats the leave as already taken: days count from ``end``
        itself and the missed periods come off attended. PROJECT treats it as
        upcoming: days count from the day after ``end`` and the missed periods
        are added to total.

        Raises:
            InputError: If ``amount`` is not a positive integer.
            InvalidSimulationError: If the leave leaves attended below zero
                or total at zero.
        """
        end = as_calendar_date(end)
        unit = LeaveUnit(unit)
        mode = LeaveMode(mode)
        if amount <= 0:
            raise InputError("Please enter a positive number for leave.")

        attended, total = report.attended, report.total
        search_from = end + timedelta(days=1)

        if mode is LeaveMode.APPLY:
            if unit is LeaveUnit.DAYS:
                leave_periods = self.engine.periods_in_range(
                    end, end + timedelta(days=amount - 1)
                )
            else:
                leave_periods = amount
            attended -= leave_periods
            if attended < 0:
                raise InvalidSimulationError(
                    "Cannot take more leave than attended periods."
                )
        else:
            if unit is LeaveUnit.DAYS:
                leave_end = end + timedelta(days=amount)
                leave_periods = self.engine.periods_in_range(
                    end + timedelta(days=1), leave_end
                )
                search_from = leave_end + timedelta(days=1)
            else:
                leave_periods = amount
            total += leave_periods

        if total <= 0:
            raise InvalidSimulationError("Total periods are zero.")

        log.info(
            "leave_simulated",
            mode=mode.value,
            unit=unit.value,
            amount=amount,
            leave_periods=leave_periods,
            attended=attended,
            total=total,
        )
        return self._report(attended, total, search_from)

    def _report(self, attended: int, total: int, search_from: date) -> AttendanceReport:
        required = self.required_percentage
        percentage = attended / total * 100
        periods_to_maintain = math.ceil(total * required / 100)
        buffer = attended - periods_to_maintain

        # Same comparison the forward search uses, so status and projection agree
        if not meets_requirement(attended, total, self.engine.schedule.required_ratio):
            status = AttendanceStatus.BELOW_THRESHOLD
        elif buffer > 0:
            status = AttendanceStatus.HAS_BUFFER
        else:
            status = AttendanceStatus.ON_TRACK

        return AttendanceReport(
            attended=attended,
            total=total,
            percentage=percentage,
            required_percentage=required,
            periods_to_maintain=periods_to_maintain,
            buffer=buffer,
            status=status,
            projection=self.engine.find_required_attendance_date(
                attended, total, search_from
            ),
        )
