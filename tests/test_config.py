import json
from datetime import date

from attendance.config import AttendanceConfig, get_config
from attendance.schedule import ScheduleModel


def test_defaults():
    config = AttendanceConfig()
    assert config.default_periods == [0, 6, 7, 8, 7, 6, 7]
    assert config.default_percentage == 75
    assert config.search_horizon_days == 730
    assert config.gemini_api_key == ""


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("ATTENDANCE_DEFAULT_PERIODS", "[1, 1, 1, 1, 1, 1, 1]")
    monkeypatch.setenv("ATTENDANCE_DEFAULT_PERCENTAGE", "80")
    config = AttendanceConfig()
    assert config.default_periods == [1] * 7
    assert config.default_percentage == 80


def test_dotenv_file(tmp_path):
    (tmp_path / ".env").write_text("ATTENDANCE_SEARCH_HORIZON_DAYS=30\n", encoding="utf-8")
    assert AttendanceConfig().search_horizon_days == 30


def test_get_config_is_singleton():
    assert get_config() is get_config()


def test_schedule_from_config(tmp_path):
    holidays = tmp_path / "holidays.json"
    holidays.write_text(json.dumps({"0": [0]}), encoding="utf-8")
    config = AttendanceConfig(
        default_periods=[0, 1, 1, 1, 1, 1, 0],
        default_percentage=60,
        holidays_file=str(holidays),
    )
    model = ScheduleModel.from_config(config)
    assert model.settings.percentage == 60
    assert model.periods_on_date(date(2024, 1, 1)) == 0  # New Year holiday
    assert model.periods_on_date(date(2024, 1, 2)) == 1
    assert model.periods_on_date(date(2024, 7, 19)) == 1  # default table replaced
