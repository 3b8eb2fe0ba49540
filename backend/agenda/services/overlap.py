from __future__ import annotations

from agenda.services.blackout import BlackoutPeriod
from agenda.services.intervals import (
    Weekday,
    date_range_overlap,
    weekday_set_intersects,
    windows_overlap,
)
from agenda.services.schedule_pattern import SchedulePattern


def patterns_can_collide(a: SchedulePattern, b: SchedulePattern) -> bool:
    """True when two recurring classes would meet on the same day at the same time.

    Resource-agnostic: callers only compare patterns that already share a
    teacher or a room.
    """
    return (
        date_range_overlap(a.date_range, b.date_range)
        and weekday_set_intersects(a.weekdays, b.weekdays)
        and windows_overlap(a.window, b.window)
    )


def shared_weekdays(a: SchedulePattern, b: SchedulePattern) -> Weekday:
    return a.weekdays & b.weekdays


def blackout_affects_pattern(pattern: SchedulePattern, blackout: BlackoutPeriod) -> bool:
    # A blackout covers whole days, so weekday and time window are irrelevant.
    return date_range_overlap(pattern.date_range, blackout.date_range) and blackout.scope.applies_to(
        teacher_id=pattern.teacher_id, room_id=pattern.room_id
    )
