"""Overlap primitives shared by the conflict detector and the calendar projector.

Weekday sets are ``Weekday`` flag combinations so that intersecting two sets is
a single bitwise AND. Dates and times are naive wall-clock values.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from enum import IntFlag

from agenda.core.exceptions import ScheduleValidationError


class Weekday(IntFlag):
    MON = 1
    TUE = 2
    WED = 4
    THU = 8
    FRI = 16
    SAT = 32
    SUN = 64

    @classmethod
    def of(cls, day: date) -> "Weekday":
        return cls(1 << day.weekday())

    @classmethod
    def parse(cls, name: str) -> "Weekday":
        key = name.strip().lower()
        try:
            return _WEEKDAY_ALIASES[key]
        except KeyError:
            raise ScheduleValidationError(f"Unknown weekday: {name!r}") from None

    @classmethod
    def from_names(cls, names) -> "Weekday":
        mask = cls(0)
        for name in names:
            mask |= cls.parse(name)
        return mask

    @property
    def label(self) -> str:
        return _WEEKDAY_LABELS.get(self, self.name or "")


WEEK_ORDER: tuple[Weekday, ...] = (
    Weekday.MON,
    Weekday.TUE,
    Weekday.WED,
    Weekday.THU,
    Weekday.FRI,
    Weekday.SAT,
    Weekday.SUN,
)
NO_WEEKDAYS = Weekday(0)

_WEEKDAY_LABELS = {
    Weekday.MON: "Monday",
    Weekday.TUE: "Tuesday",
    Weekday.WED: "Wednesday",
    Weekday.THU: "Thursday",
    Weekday.FRI: "Friday",
    Weekday.SAT: "Saturday",
    Weekday.SUN: "Sunday",
}

# Legacy records store Portuguese day names ("segunda", "terca", ...).
_PORTUGUESE_NAMES = {
    Weekday.MON: ("segunda", "segunda-feira"),
    Weekday.TUE: ("terca", "terça", "terca-feira", "terça-feira"),
    Weekday.WED: ("quarta", "quarta-feira"),
    Weekday.THU: ("quinta", "quinta-feira"),
    Weekday.FRI: ("sexta", "sexta-feira"),
    Weekday.SAT: ("sabado", "sábado"),
    Weekday.SUN: ("domingo",),
}

_WEEKDAY_ALIASES: dict[str, Weekday] = {}
for _day, _label in _WEEKDAY_LABELS.items():
    _WEEKDAY_ALIASES[_label.lower()] = _day
    _WEEKDAY_ALIASES[_label[:3].lower()] = _day
    for _alias in _PORTUGUESE_NAMES[_day]:
        _WEEKDAY_ALIASES[_alias] = _day


def weekday_members(mask: Weekday) -> list[Weekday]:
    return [day for day in WEEK_ORDER if day & mask]


def weekday_count(mask: Weekday) -> int:
    return bin(int(mask)).count("1")


def weekday_names(mask: Weekday) -> list[str]:
    return [day.label for day in weekday_members(mask)]


@dataclass(frozen=True)
class TimeWindow:
    start: time
    end: time

    @property
    def duration_minutes(self) -> int:
        return _minutes(self.end) - _minutes(self.start)

    @property
    def duration_hours(self) -> float:
        return self.duration_minutes / 60

    def __str__(self) -> str:
        return f"{self.start:%H:%M}-{self.end:%H:%M}"


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date | None = None

    @property
    def is_open_ended(self) -> bool:
        return self.end is None

    def contains(self, day: date) -> bool:
        return self.start <= day and (self.end is None or day <= self.end)

    def __str__(self) -> str:
        return f"{self.start.isoformat()}..{self.end.isoformat() if self.end else 'open'}"


def _minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def time_overlap(a_start: time, a_end: time, b_start: time, b_end: time) -> bool:
    # Strict: 10:00-11:00 and 11:00-12:00 do not overlap.
    return a_start < b_end and b_start < a_end


def windows_overlap(a: TimeWindow, b: TimeWindow) -> bool:
    return time_overlap(a.start, a.end, b.start, b.end)


def date_range_overlap(a: DateRange, b: DateRange) -> bool:
    a_before_b_ends = b.end is None or a.start <= b.end
    b_before_a_ends = a.end is None or b.start <= a.end
    return a_before_b_ends and b_before_a_ends


def weekday_set_intersects(a: Weekday, b: Weekday) -> bool:
    return bool(a & b)
