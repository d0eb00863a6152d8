"""Command-line interface for the attendance planner.

Run with: attendance calculate --attended 80 --total 100 --start 2025-07-14 --end 2025-10-30
Table:    attendance calculate ... --table
Leave:    attendance simulate ... --leave 3 --unit days --mode project
Advice:   attendance advise ...
Periods:  attendance periods --start 2025-07-14 --end 2025-10-30

Exit codes:
  0 = success (JSON or table on stdout)
  1 = error (message on stderr)
"""

import argparse
import json
import sys
from datetime import date, timedelta

from dotenv import load_dotenv
from pydantic import ValidationError

from attendance.advisor import build_advisor, get_attendance_advice
from attendance.calculator import AttendanceCalculator
from attendance.config import get_config
from attendance.engine import PeriodAccountingEngine
from attendance.errors import AttendanceError
from attendance.holidays import HolidayTable
from attendance.logging import bind_command, get_logger, setup_logging
from attendance.models import (
    DAY_LABELS,
    AttendanceReport,
    AttendanceRequest,
    LeaveMode,
    LeaveUnit,
    ProjectionStatus,
    ScheduleSettings,
)
from attendance.schedule import ScheduleModel

log = get_logger(__name__)


def _log(msg: str) -> None:
    """Write diagnostic messages to stderr so stdout stays clean for JSON."""
    print(msg, file=sys.stderr)


def _add_schedule_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--periods",
        type=int,
        nargs=7,
        metavar=("SUN", "MON", "TUE", "WED", "THU", "FRI", "SAT"),
        default=None,
        help="Periods per weekday, Sunday first (default from config).",
    )
    parser.add_argument(
        "--percentage",
        type=float,
        default=None,
        help="Required attendance percentage (default from config).",
    )
    parser.add_argument(
        "--holidays",
        type=str,
        default=None,
        help="JSON file of holidays: {\"month_index\": [day_index, ...]}.",
    )
    parser.add_argument(
        "--horizon-days",
        type=int,
        default=None,
        help="How far past the start the required-date search may look.",
    )


def _add_range_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--start",
        type=date.fromisoformat,
        default=date.today(),
        help="First day of the range, YYYY-MM-DD (default: today).",
    )
    parser.add_argument(
        "--end",
        type=date.fromisoformat,
        default=date.today(),
        help="Last day of the range, YYYY-MM-DD (default: today).",
    )


def _add_count_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--attended", type=int, default=0, help="Periods attended so far."
    )
    parser.add_argument("--total", type=int, default=0, help="Total periods so far.")
    parser.add_argument(
        "--table",
        action="store_true",
        help="Output a human-readable summary instead of JSON.",
    )


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments using argparse."""
    parser = argparse.ArgumentParser(
        prog="attendance",
        description="Attendance statistics against a weekly period schedule.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    commands = parser.add_subparsers(dest="command", required=True)

    periods = commands.add_parser("periods", help="Count scheduled periods in a range.")
    _add_range_args(periods)
    _add_schedule_args(periods)

    calculate = commands.add_parser(
        "calculate", help="Attendance after a fully attended date range."
    )
    _add_count_args(calculate)
    _add_range_args(calculate)
    _add_schedule_args(calculate)

    simulate = commands.add_parser(
        "simulate", help="Calculate, then replay leave against the result."
    )
    _add_count_args(simulate)
    _add_range_args(simulate)
    _add_schedule_args(simulate)
    simulate.add_argument(
        "--leave", type=int, required=True, help="Amount of leave to simulate."
    )
    simulate.add_argument(
        "--unit",
        choices=[unit.value for unit in LeaveUnit],
        default=LeaveUnit.DAYS.value,
        help="Leave measured in periods or calendar days (default: days).",
    )
    simulate.add_argument(
        "--mode",
        choices=[mode.value for mode in LeaveMode],
        default=LeaveMode.PROJECT.value,
        help="apply = leave already taken, project = upcoming leave (default).",
    )

    advise = commands.add_parser("advise", help="Calculate, then print advice.")
    _add_count_args(advise)
    _add_range_args(advise)
    _add_schedule_args(advise)

    return parser.parse_args(argv)


def _build_calculator(args: argparse.Namespace) -> AttendanceCalculator:
    config = get_config()
    schedule = ScheduleModel.from_config(config)

    if args.periods is not None or args.percentage is not None:
        current = schedule.settings
        schedule.update_settings(
            ScheduleSettings(
                periods=tuple(args.periods) if args.periods else current.periods,
                percentage=(
                    args.percentage if args.percentage is not None else current.percentage
                ),
            )
        )
    if args.holidays:
        schedule.update_holidays(HolidayTable.from_json(args.holidays))

    horizon = args.horizon_days
    if horizon is None:
        horizon = config.search_horizon_days
    return AttendanceCalculator(PeriodAccountingEngine(schedule, horizon))


def _format_report(report: AttendanceReport, title: str) -> str:
    buffer = f"+{report.buffer}" if report.buffer >= 0 else str(report.buffer)
    required = f"{report.required_percentage:g}%"
    lines = [
        title,
        f"  Attendance:      {report.percentage:.2f}%",
        f"  Periods:         {report.attended}/{report.total}",
        f"  Need for {required}: {report.periods_to_maintain}",
        f"  Buffer periods:  {buffer}",
    ]
    projection = report.projection
    if projection.status is ProjectionStatus.REACHABLE:
        lines.append(
            f"  Reach {required} by: {projection.target_date:%A, %d %B %Y} "
            "(attending every period)"
        )
    elif projection.status is ProjectionStatus.UNREACHABLE:
        lines.append(f"  {required} is not reachable within the search window")
    return "\n".join(lines)


def _emit(report: AttendanceReport, title: str, table: bool) -> None:
    if table:
        print(_format_report(report, title))
    else:
        print(json.dumps(report.model_dump(mode="json"), indent=2))


def run(args: argparse.Namespace) -> None:
    calculator = _build_calculator(args)
    settings = calculator.engine.schedule.settings
    _log(
        "  Schedule: "
        + ", ".join(f"{label} {count}" for label, count in zip(DAY_LABELS, settings.periods))
        + f" | required {settings.percentage:g}%"
    )

    if args.command == "periods":
        count = calculator.engine.periods_in_range(args.start, args.end)
        holidays = calculator.engine.schedule.holidays
        holiday_dates = [
            (args.start + timedelta(days=offset)).isoformat()
            for offset in range((args.end - args.start).days + 1)
            if holidays.is_holiday(args.start + timedelta(days=offset))
        ]
        print(
            json.dumps(
                {
                    "start": args.start.isoformat(),
                    "end": args.end.isoformat(),
                    "periods": count,
                    "holidays": holiday_dates,
                },
                indent=2,
            )
        )
        return

    report = calculator.calculate(args.attended, args.total, args.start, args.end)

    if args.command == "calculate":
        _emit(report, "Attendance", args.table)
    elif args.command == "simulate":
        simulated = calculator.simulate_leave(
            report,
            args.end,
            args.leave,
            unit=LeaveUnit(args.unit),
            mode=LeaveMode(args.mode),
        )
        _emit(simulated, f"After {args.leave} {args.unit} of leave ({args.mode})", args.table)
    elif args.command == "advise":
        advisor = build_advisor(get_config())
        print(get_attendance_advice(AttendanceRequest.from_report(report), advisor))


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    config = get_config()
    setup_logging(json_output=config.log_json, log_level=config.log_level)

    args = _parse_args(argv)
    bind_command(args.command)
    try:
        run(args)
    except (AttendanceError, ValidationError, ValueError, OSError) as e:
        log.debug("command_failed", type=type(e).__name__)
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
