from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from agenda.core.exceptions import ConfigurationError
from agenda.services.schedule_pattern import SchedulePattern


class LoadStatus(str, Enum):
    available = "available"
    busy = "busy"
    overloaded = "overloaded"


@dataclass(frozen=True)
class UtilizationRecord:
    teacher_id: str
    total_weekly_hours: float
    active_schedule_count: int
    utilization_percent: float
    load_status: LoadStatus


def load_status_for(utilization_percent: float, busy_threshold_percent: float) -> LoadStatus:
    if utilization_percent > 100:
        return LoadStatus.overloaded
    if utilization_percent > busy_threshold_percent:
        return LoadStatus.busy
    return LoadStatus.available


def compute_utilization(
    patterns: Iterable[SchedulePattern],
    weekly_capacity_hours: float,
    busy_threshold_percent: float = 75.0,
) -> list[UtilizationRecord]:
    """Roll active schedules up into one weekly-load record per teacher.

    Percentages are not capped; anything above 100 signals overcommitment.
    Records follow the order in which each teacher first appears.
    """
    if weekly_capacity_hours <= 0:
        raise ConfigurationError("weekly_capacity_hours must be positive")

    hours: dict[str, float] = {}
    counts: dict[str, int] = {}
    for pattern in patterns:
        if not pattern.is_active:
            continue
        hours[pattern.teacher_id] = hours.get(pattern.teacher_id, 0.0) + pattern.weekly_hours
        counts[pattern.teacher_id] = counts.get(pattern.teacher_id, 0) + 1

    records: list[UtilizationRecord] = []
    for teacher_id, total in hours.items():
        percent = total / weekly_capacity_hours * 100
        records.append(
            UtilizationRecord(
                teacher_id=teacher_id,
                total_weekly_hours=total,
                active_schedule_count=counts[teacher_id],
                utilization_percent=percent,
                load_status=load_status_for(percent, busy_threshold_percent),
            )
        )
    return records
