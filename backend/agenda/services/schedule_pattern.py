from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from agenda.core.exceptions import ScheduleValidationError
from agenda.services.intervals import DateRange, TimeWindow, Weekday, weekday_count


class ScheduleStatus(str, Enum):
    planned = "planned"
    open_enrollment = "open_enrollment"
    active = "active"
    concluded = "concluded"
    cancelled = "cancelled"


ACTIVE_STATUSES = frozenset({ScheduleStatus.planned, ScheduleStatus.open_enrollment, ScheduleStatus.active})


@dataclass(frozen=True)
class SchedulePattern:
    """A class that meets every week on ``weekdays`` during ``window``.

    ``room_id`` is ``None`` for online classes. Only patterns in
    ``ACTIVE_STATUSES`` take part in conflict checks, workload and calendars.
    """

    id: str
    teacher_id: str
    weekdays: Weekday
    window: TimeWindow
    date_range: DateRange
    room_id: str | None = None
    status: ScheduleStatus = ScheduleStatus.planned
    title: str = ""

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    @property
    def label(self) -> str:
        return self.title or self.id

    @property
    def weekly_hours(self) -> float:
        return weekday_count(self.weekdays) * self.window.duration_hours


def validate_schedule_pattern(pattern: SchedulePattern) -> SchedulePattern:
    errors: list[str] = []
    if not pattern.teacher_id:
        errors.append("teacher_id is required")
    if not pattern.weekdays:
        errors.append("At least one weekday must be selected")
    if pattern.window.start >= pattern.window.end:
        errors.append("window end must be after window start (sessions cannot cross midnight)")
    if pattern.date_range.end is not None and pattern.date_range.start > pattern.date_range.end:
        errors.append("date range end must not be before its start")
    if errors:
        raise ScheduleValidationError(errors)
    return pattern
