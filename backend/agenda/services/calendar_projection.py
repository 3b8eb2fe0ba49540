from __future__ import annotations

import calendar
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, time, timedelta
from enum import Enum

from agenda.core.exceptions import ScheduleValidationError
from agenda.services.blackout import BlackoutKind, BlackoutPeriod
from agenda.services.intervals import DateRange, Weekday, date_range_overlap
from agenda.services.schedule_pattern import SchedulePattern

DEFAULT_SCHEDULE_COLOR = "#3b82f6"


class EventSource(str, Enum):
    schedule = "schedule"
    blackout = "blackout"


@dataclass(frozen=True)
class CalendarEvent:
    source: EventSource
    ref_id: str
    title: str
    color: str
    kind: BlackoutKind | None = None
    start_time: time | None = None
    end_time: time | None = None


def month_range(year: int, month: int) -> DateRange:
    if not 1 <= month <= 12:
        raise ScheduleValidationError(f"month must be between 1 and 12, got {month}")
    if not 1 <= year <= 9999:
        raise ScheduleValidationError(f"year out of range: {year}")
    last_day = calendar.monthrange(year, month)[1]
    return DateRange(date(year, month, 1), date(year, month, last_day))


def project_month(
    year: int,
    month: int,
    patterns: Iterable[SchedulePattern],
    blackouts: Iterable[BlackoutPeriod],
    *,
    teacher_id: str | None = None,
    room_id: str | None = None,
    schedule_color: str = DEFAULT_SCHEDULE_COLOR,
) -> dict[date, list[CalendarEvent]]:
    """Expand weekly schedules and blackouts into per-day events for one month.

    Every day of the month is a key, in order. Within a day schedule events
    come before blackout events. Passing ``teacher_id`` or ``room_id`` narrows
    the view to that resource: only its schedules are projected, and only
    global blackouts or blackouts scoped to it are shown.
    """
    bounds = month_range(year, month)
    filtered = teacher_id is not None or room_id is not None

    month_patterns = [
        pattern
        for pattern in patterns
        if pattern.is_active
        and date_range_overlap(pattern.date_range, bounds)
        and (teacher_id is None or pattern.teacher_id == teacher_id)
        and (room_id is None or pattern.room_id == room_id)
    ]
    month_blackouts = [
        blackout
        for blackout in blackouts
        if blackout.active
        and date_range_overlap(blackout.date_range, bounds)
        and (
            not filtered
            or blackout.scope.is_global
            or blackout.scope.applies_to(teacher_id=teacher_id, room_id=room_id)
        )
    ]

    projection: dict[date, list[CalendarEvent]] = {}
    day = bounds.start
    while day <= bounds.end:
        weekday = Weekday.of(day)
        events: list[CalendarEvent] = []
        for pattern in month_patterns:
            if pattern.date_range.contains(day) and weekday & pattern.weekdays:
                events.append(
                    CalendarEvent(
                        source=EventSource.schedule,
                        ref_id=pattern.id,
                        title=pattern.label,
                        color=schedule_color,
                        start_time=pattern.window.start,
                        end_time=pattern.window.end,
                    )
                )
        for blackout in month_blackouts:
            if blackout.date_range.contains(day):
                events.append(
                    CalendarEvent(
                        source=EventSource.blackout,
                        ref_id=blackout.id,
                        title=blackout.title,
                        color=blackout.display_color,
                        kind=blackout.kind,
                    )
                )
        projection[day] = events
        day += timedelta(days=1)
    return projection
