"""Pydantic models for attendance settings, state, and results.

All data structures use Pydantic v2 for validation, serialization, and type safety.
"""

from datetime import date
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator

DAY_LABELS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


class ScheduleSettings(BaseModel):
    """Weekday period template plus the required attendance percentage.

    Frozen so a settings swap is always a whole-object replacement.
    """

    model_config = {"frozen": True}

    periods: tuple[int, ...] = (0, 6, 7, 8, 7, 6, 7)  # Sun..Sat
    percentage: float = Field(default=75, ge=0, le=100)

    @field_validator("periods")
    @classmethod
    def _check_periods(cls, value: tuple[int, ...]) -> tuple[int, ...]:
        if len(value) != 7:
            raise ValueError(f"expected 7 weekday counts (Sun..Sat), got {len(value)}")
        if any(count < 0 for count in value):
            raise ValueError("period counts cannot be negative")
        return value


class AttendanceState(BaseModel):
    """Attended/total counts owned by the caller."""

    attended: int = Field(default=0, ge=0)
    total: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _check_attended_within_total(self) -> "AttendanceState":
        if self.attended > self.total:
            raise ValueError("total periods cannot be less than attended periods")
        return self


class ProjectionStatus(str, Enum):
    ALREADY_MET = "already_met"
    REACHABLE = "reachable"
    UNREACHABLE = "unreachable"


class Projection(BaseModel):
    """Outcome of the forward search for the required-attendance date.

    ``target_date`` is the first day on which the threshold is achievable
    assuming every period from the search start onward is attended. It is set
    only when ``status`` is REACHABLE.
    """

    status: ProjectionStatus
    target_date: date | None = None

    @property
    def is_reachable(self) -> bool:
        return self.status is ProjectionStatus.REACHABLE


class AttendanceStatus(str, Enum):
    BELOW_THRESHOLD = "below_threshold"
    ON_TRACK = "on_track"
    HAS_BUFFER = "has_buffer"


class LeaveUnit(str, Enum):
    PERIODS = "periods"
    DAYS = "days"


class LeaveMode(str, Enum):
    APPLY = "apply"  # leave already taken, counted against attended
    PROJECT = "project"  # future leave, adds missed periods to total


class AttendanceReport(BaseModel):
    """Attendance figures after a calculation or leave simulation."""

    attended: int
    total: int
    percentage: float  # 0-100
    required_percentage: float
    periods_to_maintain: int  # ceil(total * required / 100)
    buffer: int  # attended - periods_to_maintain, negative is a deficit
    status: AttendanceStatus
    projection: Projection


class AttendanceRequest(BaseModel):
    """Numbers handed to the advice collaborator."""

    attended: int = Field(ge=0, description="The number of periods the user has attended.")
    total: int = Field(ge=0, description="The total number of periods that have occurred.")
    required_percentage: float = Field(
        ge=0, le=100, description="The minimum required attendance percentage."
    )

    @classmethod
    def from_report(cls, report: AttendanceReport) -> "AttendanceRequest":
        return cls(
            attended=report.attended,
            total=report.total,
            required_percentage=report.required_percentage,
        )
