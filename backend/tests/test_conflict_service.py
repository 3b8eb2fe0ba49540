from datetime import date, time

import pytest

from agenda.core.exceptions import DataAccessError
from agenda.services.blackout import BlackoutKind, BlackoutPeriod, BlackoutScope
from agenda.services.conflict_service import (
    Conflict,
    ConflictDetector,
    ConflictKind,
    blocks_commit,
    rank_conflicts,
)
from agenda.services.intervals import DateRange, TimeWindow, Weekday
from agenda.services.repository import SnapshotRepository
from agenda.services.schedule_pattern import SchedulePattern, ScheduleStatus


def make_pattern(pattern_id, *, teacher_id="T1", room_id=None, weekdays=Weekday.MON,
                 start=time(10, 0), end=time(11, 0), start_date=date(2024, 1, 1), end_date=date(2024, 6, 30),
                 status=ScheduleStatus.active, title=""):
    return SchedulePattern(
        id=pattern_id,
        teacher_id=teacher_id,
        room_id=room_id,
        weekdays=weekdays,
        window=TimeWindow(start, end),
        date_range=DateRange(start_date, end_date),
        status=status,
        title=title,
    )


def detector_for(schedules=(), blackouts=(), teacher_names=None):
    repository = SnapshotRepository(schedules, blackouts)
    return ConflictDetector(repository, repository, teacher_names=teacher_names)


@pytest.fixture
def pattern_a():
    return make_pattern("A", weekdays=Weekday.MON | Weekday.WED, title="Teologia Sistematica")


def test_overlapping_wednesday_class_is_a_teacher_double_booking(pattern_a):
    candidate = make_pattern(
        "B",
        weekdays=Weekday.WED | Weekday.FRI,
        start=time(10, 30),
        end=time(11, 30),
        start_date=date(2024, 3, 1),
        end_date=date(2024, 3, 31),
    )
    conflicts = detector_for([pattern_a], teacher_names={"T1": "Pr. Joao"}).detect_conflicts(candidate)

    assert len(conflicts) == 1
    conflict = conflicts[0]
    assert conflict.kind == ConflictKind.TEACHER_DOUBLE_BOOKED
    assert conflict.severity == 3
    assert conflict.related_id == "A"
    assert conflict.is_blocking
    assert "Pr. Joao already has Teologia Sistematica" in conflict.description
    assert "Wednesday" in conflict.description


def test_detection_is_symmetric(pattern_a):
    other = make_pattern("B", weekdays=Weekday.WED, start=time(10, 30), end=time(11, 30))
    detector = detector_for([pattern_a, other])

    assert [item.related_id for item in detector.detect_conflicts(pattern_a)] == ["B"]
    assert [item.related_id for item in detector.detect_conflicts(other)] == ["A"]


def test_back_to_back_sessions_do_not_conflict(pattern_a):
    candidate = make_pattern("B", weekdays=Weekday.MON, start=time(11, 0), end=time(12, 0))
    assert detector_for([pattern_a]).detect_conflicts(candidate) == []


def test_disjoint_weekdays_never_double_book(pattern_a):
    candidate = make_pattern("B", room_id="R1", weekdays=Weekday.TUE | Weekday.THU)
    shared_room = make_pattern("C", teacher_id="T2", room_id="R1", weekdays=Weekday.MON | Weekday.WED)
    assert detector_for([pattern_a, shared_room]).detect_conflicts(candidate) == []


def test_open_ended_schedule_conflicts_with_far_future_schedule():
    open_ended = make_pattern("A", end_date=None)
    candidate = make_pattern("B", start_date=date(2031, 2, 3), end_date=date(2031, 6, 30))
    conflicts = detector_for([open_ended]).detect_conflicts(candidate)
    assert [item.related_id for item in conflicts] == ["A"]


def test_room_double_booking_is_a_warning():
    occupying = make_pattern("A", teacher_id="T2", room_id="R1", title="Homiletica")
    candidate = make_pattern("B", teacher_id="T1", room_id="R1")
    conflicts = detector_for([occupying]).detect_conflicts(candidate)

    assert len(conflicts) == 1
    assert conflicts[0].kind == ConflictKind.ROOM_DOUBLE_BOOKED
    assert conflicts[0].severity == 2
    assert not blocks_commit(conflicts)
    assert "Room R1 is already used by Homiletica" in conflicts[0].description


def test_online_class_skips_room_checks():
    occupying = make_pattern("A", teacher_id="T2", room_id="R1")
    candidate = make_pattern("B", teacher_id="T1", room_id=None)
    assert detector_for([occupying]).detect_conflicts(candidate) == []


@pytest.mark.parametrize(
    ("kind", "severity"),
    [
        (BlackoutKind.holiday, 3),
        (BlackoutKind.blackout, 3),
        (BlackoutKind.event, 1),
    ],
)
def test_blackout_severity_follows_its_kind(kind, severity):
    blackout = BlackoutPeriod(
        id="X",
        title="Semana Santa",
        date_range=DateRange(date(2024, 3, 25), date(2024, 3, 31)),
        kind=kind,
    )
    conflicts = detector_for(blackouts=[blackout]).detect_conflicts(make_pattern("B"))
    assert [(item.kind, item.severity, item.related_id) for item in conflicts] == [
        (ConflictKind.BLACKOUT_OVERLAP, severity, "X")
    ]


def test_scoped_blackouts_only_hit_matching_resources():
    blackouts = [
        BlackoutPeriod("room-r1", "Reforma", DateRange(date(2024, 2, 1)), scope=BlackoutScope.for_room("R1")),
        BlackoutPeriod("room-r2", "Reforma", DateRange(date(2024, 2, 1)), scope=BlackoutScope.for_room("R2")),
        BlackoutPeriod("teacher-t1", "Licenca", DateRange(date(2024, 2, 1)), scope=BlackoutScope.for_teacher("T1")),
        BlackoutPeriod("teacher-t2", "Licenca", DateRange(date(2024, 2, 1)), scope=BlackoutScope.for_teacher("T2")),
    ]
    conflicts = detector_for(blackouts=blackouts).detect_conflicts(make_pattern("B", room_id="R1"))
    assert sorted(item.related_id for item in conflicts) == ["room-r1", "teacher-t1"]


def test_inactive_blackouts_are_ignored():
    blackout = BlackoutPeriod("X", "Antigo", DateRange(date(2024, 1, 1), date(2024, 12, 31)), active=False)
    assert detector_for(blackouts=[blackout]).detect_conflicts(make_pattern("B")) == []


def test_conflicts_are_ranked_by_severity_then_discovery_order():
    schedules = [
        make_pattern("room-clash", teacher_id="T2", room_id="R1"),
        make_pattern("teacher-clash", room_id="R9"),
    ]
    blackouts = [
        BlackoutPeriod("event", "Congresso", DateRange(date(2024, 5, 1), date(2024, 5, 3)), kind=BlackoutKind.event),
        BlackoutPeriod("holiday", "Feriado", DateRange(date(2024, 5, 30), date(2024, 5, 30)), kind=BlackoutKind.holiday),
    ]
    conflicts = detector_for(schedules, blackouts).detect_conflicts(make_pattern("B", room_id="R1"))

    assert [(item.related_id, item.severity) for item in conflicts] == [
        ("teacher-clash", 3),
        ("holiday", 3),
        ("room-clash", 2),
        ("event", 1),
    ]


def test_rank_conflicts_is_stable():
    first = Conflict(ConflictKind.ROOM_DOUBLE_BOOKED, 2, "first", "1")
    second = Conflict(ConflictKind.ROOM_DOUBLE_BOOKED, 2, "second", "2")
    blocking = Conflict(ConflictKind.TEACHER_DOUBLE_BOOKED, 3, "blocking", "3")
    assert rank_conflicts([first, second, blocking]) == [blocking, first, second]


def test_exclude_id_skips_the_schedule_being_edited(pattern_a):
    edited = make_pattern("A", weekdays=Weekday.MON, start=time(10, 15), end=time(11, 15))
    assert detector_for([pattern_a]).detect_conflicts(edited, exclude_id="A") == []


def test_candidate_never_conflicts_with_itself(pattern_a):
    assert detector_for([pattern_a]).detect_conflicts(pattern_a) == []


def test_cancelled_and_concluded_schedules_are_not_compared():
    schedules = [
        make_pattern("cancelled", status=ScheduleStatus.cancelled),
        make_pattern("concluded", status=ScheduleStatus.concluded),
    ]
    assert detector_for(schedules).detect_conflicts(make_pattern("B")) == []


class UnavailableRepository:
    def list_active_schedules_by_teacher(self, teacher_id, exclude_id=None):
        raise DataAccessError("Schedule data is unavailable; conflicts could not be checked")

    def list_active_schedules_by_room(self, room_id, exclude_id=None):
        return []

    def list_active_blackouts(self, overlapping):
        return []


def test_repository_failures_propagate():
    repository = UnavailableRepository()
    detector = ConflictDetector(repository, repository)
    with pytest.raises(DataAccessError) as exc_info:
        detector.detect_conflicts(make_pattern("B"))
    assert exc_info.value.status_code == 503
