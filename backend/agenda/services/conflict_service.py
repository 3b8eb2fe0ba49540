from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum

from agenda.services.blackout import BlackoutPeriod
from agenda.services.intervals import weekday_names
from agenda.services.overlap import blackout_affects_pattern, patterns_can_collide, shared_weekdays
from agenda.services.repository import BlackoutRepository, ScheduleRepository
from agenda.services.schedule_pattern import SchedulePattern

logger = logging.getLogger(__name__)

BLOCKING_SEVERITY = 3


class ConflictKind(str, Enum):
    TEACHER_DOUBLE_BOOKED = "TEACHER_DOUBLE_BOOKED"
    ROOM_DOUBLE_BOOKED = "ROOM_DOUBLE_BOOKED"
    BLACKOUT_OVERLAP = "BLACKOUT_OVERLAP"


@dataclass(frozen=True)
class Conflict:
    kind: ConflictKind
    severity: int
    description: str
    related_id: str

    @property
    def is_blocking(self) -> bool:
        return self.severity >= BLOCKING_SEVERITY


def blocks_commit(conflicts: Iterable[Conflict]) -> bool:
    """Commit policy: any severity-3 conflict blocks; 1 and 2 are warnings."""
    return any(conflict.is_blocking for conflict in conflicts)


def rank_conflicts(conflicts: Iterable[Conflict]) -> list[Conflict]:
    # sorted() is stable, so discovery order survives within a severity.
    return sorted(conflicts, key=lambda conflict: -conflict.severity)


class ConflictDetector:
    """Checks a candidate class schedule against teachers, rooms and blackouts.

    The candidate must already have passed ``validate_schedule_pattern``.
    Repository failures propagate unchanged so callers can fail closed.
    """

    def __init__(
        self,
        schedules: ScheduleRepository,
        blackouts: BlackoutRepository,
        teacher_names: Mapping[str, str] | None = None,
    ):
        self.schedules = schedules
        self.blackouts = blackouts
        self.teacher_names = dict(teacher_names or {})

    def _teacher_label(self, teacher_id: str) -> str:
        return self.teacher_names.get(teacher_id, teacher_id)

    def _collisions(
        self, candidate: SchedulePattern, others: list[SchedulePattern]
    ) -> list[SchedulePattern]:
        return [
            other
            for other in others
            if other.id != candidate.id and patterns_can_collide(candidate, other)
        ]

    def detect_conflicts(self, candidate: SchedulePattern, exclude_id: str | None = None) -> list[Conflict]:
        conflicts: list[Conflict] = []

        teacher_schedules = self.schedules.list_active_schedules_by_teacher(candidate.teacher_id, exclude_id)
        teacher = self._teacher_label(candidate.teacher_id)
        for other in self._collisions(candidate, teacher_schedules):
            days = ", ".join(weekday_names(shared_weekdays(candidate, other)))
            conflicts.append(
                Conflict(
                    kind=ConflictKind.TEACHER_DOUBLE_BOOKED,
                    severity=3,
                    description=(
                        f"{teacher} already has {other.label} at an overlapping time "
                        f"({days} {other.window})"
                    ),
                    related_id=other.id,
                )
            )

        if candidate.room_id:
            room_schedules = self.schedules.list_active_schedules_by_room(candidate.room_id, exclude_id)
            for other in self._collisions(candidate, room_schedules):
                days = ", ".join(weekday_names(shared_weekdays(candidate, other)))
                conflicts.append(
                    Conflict(
                        kind=ConflictKind.ROOM_DOUBLE_BOOKED,
                        severity=2,
                        description=(
                            f"Room {candidate.room_id} is already used by {other.label} "
                            f"({days} {other.window})"
                        ),
                        related_id=other.id,
                    )
                )

        for blackout in self.blackouts.list_active_blackouts(candidate.date_range):
            if blackout.active and blackout_affects_pattern(candidate, blackout):
                conflicts.append(self._blackout_conflict(blackout))

        ranked = rank_conflicts(conflicts)
        if ranked:
            logger.info(
                "Schedule %s for teacher %s has %d conflict(s), blocking=%s",
                candidate.id or "<new>",
                candidate.teacher_id,
                len(ranked),
                blocks_commit(ranked),
            )
        else:
            logger.debug("Schedule %s for teacher %s is conflict-free", candidate.id or "<new>", candidate.teacher_id)
        return ranked

    def _blackout_conflict(self, blackout: BlackoutPeriod) -> Conflict:
        return Conflict(
            kind=ConflictKind.BLACKOUT_OVERLAP,
            severity=blackout.severity,
            description=(
                f"{blackout.kind.value.capitalize()} '{blackout.title}' ({blackout.date_range}, "
                f"{blackout.scope}) falls within the class period"
            ),
            related_id=blackout.id,
        )
