"""Attendance planner: period accounting against a weekly class schedule.

Counts scheduled periods over date ranges, finds the date by which a required
attendance percentage becomes achievable, and simulates taking leave.
"""

from attendance.advisor import (
    Advisor,
    GeminiAdvisor,
    RuleBasedAdvisor,
    get_attendance_advice,
)
from attendance.calculator import AttendanceCalculator
from attendance.engine import PeriodAccountingEngine
from attendance.holidays import DEFAULT_HOLIDAYS, HolidayTable
from attendance.models import (
    AttendanceReport,
    AttendanceRequest,
    AttendanceState,
    AttendanceStatus,
    LeaveMode,
    LeaveUnit,
    Projection,
    ProjectionStatus,
    ScheduleSettings,
)
from attendance.schedule import ScheduleModel, is_leap_year

__all__ = [
    "Advisor",
    "AttendanceCalculator",
    "AttendanceReport",
    "AttendanceRequest",
    "AttendanceState",
    "AttendanceStatus",
    "DEFAULT_HOLIDAYS",
    "GeminiAdvisor",
    "HolidayTable",
    "LeaveMode",
    "LeaveUnit",
    "PeriodAccountingEngine",
    "Projection",
    "ProjectionStatus",
    "RuleBasedAdvisor",
    "ScheduleModel",
    "ScheduleSettings",
    "get_attendance_advice",
    "is_leap_year",
]
