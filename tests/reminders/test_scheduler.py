from datetime import datetime, time

import pytest

from hr_records.core.exceptions import ValidationError
from hr_records.reminders.scheduler import next_run_after, parse_run_time


def test_parse_run_time():
    assert parse_run_time("10:30") == time(10, 30)
    with pytest.raises(ValidationError):
        parse_run_time("half past ten")


def test_next_run_same_day_or_tomorrow():
    at = time(10, 30)
    assert next_run_after(datetime(2024, 3, 1, 9, 0), at) == datetime(2024, 3, 1, 10, 30)
    assert next_run_after(datetime(2024, 3, 1, 10, 30), at) == datetime(2024, 3, 2, 10, 30)
    assert next_run_after(datetime(2024, 3, 31, 23, 0), at) == datetime(2024, 4, 1, 10, 30)
