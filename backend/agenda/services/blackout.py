from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from agenda.core.exceptions import ScheduleValidationError
from agenda.services.intervals import DateRange


class BlackoutKind(str, Enum):
    holiday = "holiday"
    blackout = "blackout"
    event = "event"


class BlackoutScopeKind(str, Enum):
    global_ = "global"
    room = "room"
    teacher = "teacher"


DEFAULT_BLACKOUT_COLORS = {
    BlackoutKind.blackout: "#ef4444",
    BlackoutKind.holiday: "#f97316",
    BlackoutKind.event: "#8b5cf6",
}

HARD_BLACKOUT_KINDS = frozenset({BlackoutKind.holiday, BlackoutKind.blackout})


def blackout_severity(kind: BlackoutKind) -> int:
    # Events are informational; holidays and blackouts block scheduling.
    return 3 if kind in HARD_BLACKOUT_KINDS else 1


@dataclass(frozen=True)
class BlackoutScope:
    kind: BlackoutScopeKind = BlackoutScopeKind.global_
    ref_id: str | None = None

    @classmethod
    def global_scope(cls) -> "BlackoutScope":
        return cls()

    @classmethod
    def for_room(cls, room_id: str) -> "BlackoutScope":
        return cls(BlackoutScopeKind.room, room_id)

    @classmethod
    def for_teacher(cls, teacher_id: str) -> "BlackoutScope":
        return cls(BlackoutScopeKind.teacher, teacher_id)

    @property
    def is_global(self) -> bool:
        return self.kind is BlackoutScopeKind.global_

    def applies_to(self, *, teacher_id: str | None = None, room_id: str | None = None) -> bool:
        if self.kind is BlackoutScopeKind.global_:
            return True
        if self.kind is BlackoutScopeKind.room:
            return room_id is not None and self.ref_id == room_id
        return teacher_id is not None and self.ref_id == teacher_id

    def __str__(self) -> str:
        if self.is_global:
            return "global"
        return f"{self.kind.value}:{self.ref_id}"


@dataclass(frozen=True)
class BlackoutPeriod:
    id: str
    title: str
    date_range: DateRange
    kind: BlackoutKind = BlackoutKind.blackout
    scope: BlackoutScope = BlackoutScope()
    active: bool = True
    description: str | None = None
    color: str | None = None

    @property
    def severity(self) -> int:
        return blackout_severity(self.kind)

    @property
    def display_color(self) -> str:
        return self.color or DEFAULT_BLACKOUT_COLORS[self.kind]


def validate_blackout_period(blackout: BlackoutPeriod) -> BlackoutPeriod:
    errors: list[str] = []
    if not blackout.title.strip():
        errors.append("title is required")
    if blackout.date_range.end is not None and blackout.date_range.start > blackout.date_range.end:
        errors.append("date range end must not be before its start")
    if not blackout.scope.is_global and not blackout.scope.ref_id:
        errors.append(f"a {blackout.scope.kind.value} blackout needs the {blackout.scope.kind.value} id")
    if blackout.scope.is_global and blackout.scope.ref_id:
        errors.append("a global blackout cannot reference a room or teacher")
    if errors:
        raise ScheduleValidationError(errors)
    return blackout
