from datetime import date, time

import pytest

from agenda.core.exceptions import ScheduleValidationError
from agenda.services.intervals import (
    DateRange,
    TimeWindow,
    Weekday,
    date_range_overlap,
    time_overlap,
    weekday_count,
    weekday_names,
    weekday_set_intersects,
)


def test_time_overlap_is_strict_at_the_boundary():
    assert not time_overlap(time(10, 0), time(11, 0), time(11, 0), time(12, 0))
    assert not time_overlap(time(11, 0), time(12, 0), time(10, 0), time(11, 0))


def test_time_overlap_detects_partial_and_nested_windows():
    assert time_overlap(time(10, 0), time(11, 0), time(10, 30), time(11, 30))
    assert time_overlap(time(9, 0), time(12, 0), time(10, 0), time(10, 15))
    assert time_overlap(time(10, 0), time(11, 0), time(10, 0), time(11, 0))


def test_date_range_overlap_with_open_ended_ranges():
    open_ended = DateRange(date(2024, 1, 1))
    far_future = DateRange(date(2030, 6, 1), date(2030, 6, 30))
    assert date_range_overlap(open_ended, far_future)
    assert date_range_overlap(far_future, open_ended)
    assert date_range_overlap(DateRange(date(2024, 1, 1)), DateRange(date(2025, 1, 1)))


def test_date_range_overlap_counts_shared_single_day():
    march = DateRange(date(2024, 3, 1), date(2024, 3, 31))
    april = DateRange(date(2024, 3, 31), date(2024, 4, 30))
    assert date_range_overlap(march, april)
    assert not date_range_overlap(march, DateRange(date(2024, 4, 1), date(2024, 4, 30)))


def test_open_ended_range_after_bounded_range_does_not_overlap():
    bounded = DateRange(date(2024, 1, 1), date(2024, 6, 30))
    later = DateRange(date(2024, 7, 1))
    assert not date_range_overlap(bounded, later)
    assert not date_range_overlap(later, bounded)


def test_weekday_sets():
    assert weekday_set_intersects(Weekday.MON | Weekday.WED, Weekday.WED | Weekday.FRI)
    assert not weekday_set_intersects(Weekday.MON | Weekday.WED, Weekday.TUE | Weekday.THU)
    assert weekday_count(Weekday.MON | Weekday.WED | Weekday.FRI) == 3
    assert weekday_names(Weekday.FRI | Weekday.MON) == ["Monday", "Friday"]


def test_weekday_of_date():
    assert Weekday.of(date(2024, 3, 4)) == Weekday.MON
    assert Weekday.of(date(2024, 3, 10)) == Weekday.SUN


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("Monday", Weekday.MON),
        ("wed", Weekday.WED),
        (" Sexta ", Weekday.FRI),
        ("terça-feira", Weekday.TUE),
        ("sabado", Weekday.SAT),
    ],
)
def test_weekday_parse_accepts_english_and_portuguese_names(name, expected):
    assert Weekday.parse(name) == expected


def test_weekday_parse_rejects_unknown_names():
    with pytest.raises(ScheduleValidationError) as exc_info:
        Weekday.parse("funday")
    assert exc_info.value.status_code == 422


def test_time_window_duration_and_label():
    window = TimeWindow(time(19, 30), time(21, 0))
    assert window.duration_minutes == 90
    assert window.duration_hours == 1.5
    assert str(window) == "19:30-21:00"


def test_date_range_contains():
    semester = DateRange(date(2024, 2, 1), date(2024, 6, 30))
    assert semester.contains(date(2024, 2, 1))
    assert semester.contains(date(2024, 6, 30))
    assert not semester.contains(date(2024, 7, 1))
    assert DateRange(date(2024, 2, 1)).contains(date(2099, 1, 1))
