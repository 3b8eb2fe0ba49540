from datetime import date, time

import pytest

from agenda.core.exceptions import ScheduleValidationError
from agenda.services.blackout import BlackoutPeriod, BlackoutScope, BlackoutScopeKind, validate_blackout_period
from agenda.services.intervals import DateRange, NO_WEEKDAYS, TimeWindow, Weekday
from agenda.services.schedule_pattern import SchedulePattern, ScheduleStatus, validate_schedule_pattern


def draft(**overrides):
    values = {
        "id": "",
        "teacher_id": "T1",
        "weekdays": Weekday.TUE,
        "window": TimeWindow(time(19, 0), time(21, 0)),
        "date_range": DateRange(date(2024, 2, 6), date(2024, 6, 25)),
    }
    values.update(overrides)
    return SchedulePattern(**values)


def test_valid_draft_is_returned_unchanged():
    pattern = draft()
    assert validate_schedule_pattern(pattern) is pattern


def test_empty_weekday_set_is_rejected():
    with pytest.raises(ScheduleValidationError) as exc_info:
        validate_schedule_pattern(draft(weekdays=NO_WEEKDAYS))
    assert exc_info.value.errors == ["At least one weekday must be selected"]


@pytest.mark.parametrize("end", [time(19, 0), time(18, 0)])
def test_window_must_end_after_it_starts(end):
    with pytest.raises(ScheduleValidationError):
        validate_schedule_pattern(draft(window=TimeWindow(time(19, 0), end)))


def test_date_range_cannot_be_inverted():
    with pytest.raises(ScheduleValidationError):
        validate_schedule_pattern(draft(date_range=DateRange(date(2024, 6, 1), date(2024, 5, 1))))


def test_all_violations_are_reported_together():
    with pytest.raises(ScheduleValidationError) as exc_info:
        validate_schedule_pattern(
            draft(
                teacher_id="",
                weekdays=NO_WEEKDAYS,
                window=TimeWindow(time(21, 0), time(19, 0)),
            )
        )
    assert len(exc_info.value.errors) == 3
    assert exc_info.value.details["errors"] == exc_info.value.errors


def test_open_ended_and_single_day_ranges_are_valid():
    validate_schedule_pattern(draft(date_range=DateRange(date(2024, 2, 6))))
    validate_schedule_pattern(draft(date_range=DateRange(date(2024, 2, 6), date(2024, 2, 6))))


def test_only_planned_enrolling_and_running_classes_are_active():
    assert draft(status=ScheduleStatus.planned).is_active
    assert draft(status=ScheduleStatus.open_enrollment).is_active
    assert draft(status=ScheduleStatus.active).is_active
    assert not draft(status=ScheduleStatus.concluded).is_active
    assert not draft(status=ScheduleStatus.cancelled).is_active


def test_scoped_blackout_needs_a_reference():
    blackout = BlackoutPeriod("b1", "Reforma", DateRange(date(2024, 1, 1)), scope=BlackoutScope(BlackoutScopeKind.room))
    with pytest.raises(ScheduleValidationError) as exc_info:
        validate_blackout_period(blackout)
    assert "room id" in exc_info.value.message


def test_global_blackout_cannot_reference_a_resource():
    blackout = BlackoutPeriod(
        "b1", "Recesso", DateRange(date(2024, 1, 1)), scope=BlackoutScope(BlackoutScopeKind.global_, "R1")
    )
    with pytest.raises(ScheduleValidationError):
        validate_blackout_period(blackout)
