import json
from datetime import date

import pytest

from attendance.holidays import DEFAULT_HOLIDAYS, HolidayTable


def test_default_table():
    table = HolidayTable.default()
    assert table.days_in(6) == frozenset({18})
    assert table.days_in(0) == frozenset()
    assert len(table) == sum(len(days) for days in DEFAULT_HOLIDAYS.values())
    assert table.is_holiday(date(2030, 10, 1))
    assert not table.is_holiday(date(2030, 10, 5))


def test_from_dates_ignores_year():
    table = HolidayTable.from_dates([date(2024, 3, 1), date(2019, 3, 15)])
    assert table.days_in(2) == frozenset({0, 14})


def test_from_json(tmp_path):
    path = tmp_path / "holidays.json"
    path.write_text(json.dumps({"0": [0], "11": [24, 30]}), encoding="utf-8")
    table = HolidayTable.from_json(path)
    assert table == HolidayTable({0: [0], 11: [24, 30]})


def test_from_json_rejects_non_object(tmp_path):
    path = tmp_path / "holidays.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        HolidayTable.from_json(path)


@pytest.mark.parametrize("entries", [{12: [0]}, {-1: [0]}, {3: [31]}, {3: [-1]}])
def test_out_of_range_entries_rejected(entries):
    with pytest.raises(ValueError):
        HolidayTable(entries)


def test_empty_months_dropped():
    assert HolidayTable({4: []}) == HolidayTable.empty()
