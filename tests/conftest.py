import logging
import os

import pytest
import structlog

from attendance import config as config_module
from attendance.calculator import AttendanceCalculator
from attendance.engine import PeriodAccountingEngine
from attendance.models import ScheduleSettings
from attendance.schedule import ScheduleModel


@pytest.fixture(autouse=True, scope="session")
def _quiet_logging():
    structlog.configure(
        processors=[structlog.processors.KeyValueRenderer()],
        wrapper_class=structlog.make_filtering_bound_logger(logging.NOTSET),
        logger_factory=structlog.ReturnLoggerFactory(),
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch, tmp_path):
    """Keep a developer's .env and ATTENDANCE_* variables out of the tests."""
    monkeypatch.chdir(tmp_path)
    for name in list(os.environ):
        if name.startswith("ATTENDANCE_"):
            monkeypatch.delenv(name)
    monkeypatch.setattr(config_module, "_config", None)


@pytest.fixture
def schedule():
    return ScheduleModel(ScheduleSettings())


@pytest.fixture
def engine(schedule):
    return PeriodAccountingEngine(schedule)


@pytest.fixture
def calculator(engine):
    return AttendanceCalculator(engine)
