from datetime import date, time

import pytest

from agenda.core.exceptions import ConfigurationError
from agenda.services.intervals import DateRange, TimeWindow, Weekday
from agenda.services.schedule_pattern import SchedulePattern, ScheduleStatus
from agenda.services.workload import LoadStatus, compute_utilization, load_status_for


def make_pattern(pattern_id, teacher_id, weekdays, start, end, status=ScheduleStatus.active):
    return SchedulePattern(
        id=pattern_id,
        teacher_id=teacher_id,
        weekdays=weekdays,
        window=TimeWindow(start, end),
        date_range=DateRange(date(2024, 1, 1)),
        status=status,
    )


def test_two_ninety_minute_classes_twice_a_week_make_six_hours():
    patterns = [
        make_pattern("a", "T1", Weekday.MON | Weekday.WED, time(19, 0), time(20, 30)),
        make_pattern("b", "T1", Weekday.TUE | Weekday.THU, time(19, 0), time(20, 30)),
    ]
    [record] = compute_utilization(patterns, weekly_capacity_hours=40)

    assert record.teacher_id == "T1"
    assert record.total_weekly_hours == pytest.approx(6.0)
    assert record.active_schedule_count == 2
    assert record.utilization_percent == pytest.approx(15.0)
    assert record.load_status == LoadStatus.available


def test_utilization_is_not_capped():
    patterns = [make_pattern("a", "T1", Weekday.MON | Weekday.TUE | Weekday.WED, time(8, 0), time(18, 0))]
    [record] = compute_utilization(patterns, weekly_capacity_hours=20)
    assert record.utilization_percent == pytest.approx(150.0)
    assert record.load_status == LoadStatus.overloaded


def test_inactive_schedules_do_not_count():
    patterns = [
        make_pattern("a", "T1", Weekday.MON, time(9, 0), time(10, 0)),
        make_pattern("b", "T1", Weekday.MON, time(14, 0), time(16, 0), status=ScheduleStatus.cancelled),
        make_pattern("c", "T2", Weekday.FRI, time(9, 0), time(10, 0), status=ScheduleStatus.concluded),
    ]
    records = compute_utilization(patterns, weekly_capacity_hours=40)
    assert [(item.teacher_id, item.total_weekly_hours, item.active_schedule_count) for item in records] == [
        ("T1", 1.0, 1)
    ]


def test_records_follow_first_appearance_order():
    patterns = [
        make_pattern("a", "T2", Weekday.MON, time(9, 0), time(10, 0)),
        make_pattern("b", "T1", Weekday.MON, time(9, 0), time(10, 0)),
        make_pattern("c", "T2", Weekday.TUE, time(9, 0), time(10, 0)),
    ]
    assert [item.teacher_id for item in compute_utilization(patterns, 40)] == ["T2", "T1"]


def test_capacity_must_be_positive():
    with pytest.raises(ConfigurationError):
        compute_utilization([], weekly_capacity_hours=0)


@pytest.mark.parametrize(
    ("percent", "expected"),
    [
        (10.0, LoadStatus.available),
        (75.0, LoadStatus.available),
        (80.0, LoadStatus.busy),
        (100.0, LoadStatus.busy),
        (100.5, LoadStatus.overloaded),
    ],
)
def test_load_status_thresholds(percent, expected):
    assert load_status_for(percent, busy_threshold_percent=75.0) == expected
