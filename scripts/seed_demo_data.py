"""Seed demo accounts, teachers, rooms, class schedules and blackouts.

Run:
  PYTHONPATH=backend python scripts/seed_demo_data.py
"""

from __future__ import annotations

import os
from datetime import date, time
from typing import Iterable

from sqlalchemy import select

from agenda.core.security import get_password_hash
from agenda.db.session import SessionLocal
from agenda.models.blackout_period import BlackoutPeriodRecord
from agenda.models.class_schedule import ClassSchedule
from agenda.models.room import Room
from agenda.models.teacher import Teacher
from agenda.models.user import User, UserRole
from agenda.services.blackout import DEFAULT_BLACKOUT_COLORS, BlackoutKind, BlackoutScopeKind
from agenda.services.intervals import Weekday
from agenda.services.schedule_pattern import ScheduleStatus

DEFAULT_PASSWORD = os.getenv("DEMO_PASSWORD", "DemoPass123!")


def _env_email(key: str, default: str) -> str:
    value = os.getenv(key, "").strip()
    return value or default


DEMO_ACCOUNTS = {
    "admin": {
        "name": "Secretaria",
        "email": _env_email("DEMO_ADMIN_EMAIL", "secretaria@agenda.example"),
        "role": UserRole.admin,
    },
    "coordinator": {
        "name": "Coordenacao de Ensino",
        "email": _env_email("DEMO_COORDINATOR_EMAIL", "coordenacao@agenda.example"),
        "role": UserRole.coordinator,
    },
    "teacher": {
        "name": "Pr. Joao Batista",
        "email": _env_email("DEMO_TEACHER_EMAIL", "joao@agenda.example"),
        "role": UserRole.teacher,
    },
}

TEACHERS = [
    ("Pr. Joao Batista", "joao@agenda.example"),
    ("Pra. Maria Clara", "maria@agenda.example"),
    ("Dc. Paulo Silva", "paulo@agenda.example"),
]

ROOMS = [
    ("Sala 1", "Anexo", 40, True),
    ("Sala 2", "Anexo", 25, False),
    ("Templo", "Principal", 300, True),
]

SEMESTER_START = date(2026, 2, 2)
SEMESTER_END = date(2026, 6, 30)


def _upsert_user(*, name: str, email: str, role: UserRole) -> User:
    with SessionLocal() as session:
        existing = session.execute(select(User).where(User.email == email)).scalar_one_or_none()
        if existing is None:
            existing = User(
                name=name,
                email=email,
                hashed_password=get_password_hash(DEFAULT_PASSWORD),
                role=role,
                is_active=True,
            )
            session.add(existing)
        else:
            existing.name = name
            existing.role = role
            existing.is_active = True
        session.commit()
        session.refresh(existing)
        return existing


def _upsert_teacher(session, name: str, email: str, user_id: str | None) -> Teacher:
    teacher = session.execute(select(Teacher).where(Teacher.email == email)).scalar_one_or_none()
    if teacher is None:
        teacher = Teacher(name=name, email=email)
        session.add(teacher)
    teacher.name = name
    teacher.user_id = user_id or teacher.user_id
    teacher.is_active = True
    return teacher


def _upsert_room(session, name: str, building: str, capacity: int, has_projector: bool) -> Room:
    room = session.execute(select(Room).where(Room.name == name)).scalar_one_or_none()
    if room is None:
        room = Room(name=name)
        session.add(room)
    room.building = building
    room.capacity = capacity
    room.has_projector = has_projector
    return room


def _ensure_schedule(session, *, name: str, teacher: Teacher, room: Room | None, weekdays: Weekday,
                     start: time, end: time, created_by_id: str) -> None:
    existing = session.execute(
        select(ClassSchedule).where(ClassSchedule.name == name, ClassSchedule.start_date == SEMESTER_START)
    ).scalar_one_or_none()
    if existing is not None:
        return
    session.add(
        ClassSchedule(
            name=name,
            course_name="Escola Biblica",
            teacher_id=teacher.id,
            room_id=room.id if room is not None else None,
            weekday_mask=int(weekdays),
            start_time=start,
            end_time=end,
            start_date=SEMESTER_START,
            end_date=SEMESTER_END,
            status=ScheduleStatus.open_enrollment,
            capacity=room.capacity if room is not None else None,
            online_link=None if room is not None else "https://meet.example/turma-online",
            created_by_id=created_by_id,
        )
    )


def _ensure_blackout(session, *, title: str, start: date, end: date, kind: BlackoutKind,
                     created_by_id: str) -> None:
    existing = session.execute(
        select(BlackoutPeriodRecord).where(BlackoutPeriodRecord.title == title, BlackoutPeriodRecord.start_date == start)
    ).scalar_one_or_none()
    if existing is not None:
        return
    session.add(
        BlackoutPeriodRecord(
            title=title,
            start_date=start,
            end_date=end,
            kind=kind,
            scope=BlackoutScopeKind.global_,
            color=DEFAULT_BLACKOUT_COLORS[kind],
            active=True,
            created_by_id=created_by_id,
        )
    )


def _seed_catalog(admin: User, teacher_user: User) -> None:
    with SessionLocal() as session:
        teachers = [
            _upsert_teacher(session, name, email, teacher_user.id if email == teacher_user.email else None)
            for name, email in TEACHERS
        ]
        rooms = [_upsert_room(session, *item) for item in ROOMS]
        session.flush()

        joao, maria, paulo = teachers
        sala_1, sala_2, _ = rooms
        _ensure_schedule(session, name="Teologia Sistematica", teacher=joao, room=sala_1,
                         weekdays=Weekday.MON | Weekday.WED, start=time(19, 30), end=time(21, 0),
                         created_by_id=admin.id)
        _ensure_schedule(session, name="Homiletica", teacher=maria, room=sala_2,
                         weekdays=Weekday.TUE | Weekday.THU, start=time(19, 30), end=time(21, 0),
                         created_by_id=admin.id)
        _ensure_schedule(session, name="Missoes Online", teacher=paulo, room=None,
                         weekdays=Weekday.SAT, start=time(9, 0), end=time(11, 0),
                         created_by_id=admin.id)

        # Blackouts fall outside the seeded semester so the schedules stay commit-clean.
        _ensure_blackout(session, title="Recesso de julho", start=date(2026, 7, 1), end=date(2026, 7, 31),
                         kind=BlackoutKind.blackout, created_by_id=admin.id)
        _ensure_blackout(session, title="Congresso de Missoes", start=date(2026, 8, 14), end=date(2026, 8, 16),
                         kind=BlackoutKind.event, created_by_id=admin.id)
        session.commit()


def _print_accounts(items: Iterable[tuple[str, User]]) -> None:
    print("\nDemo accounts ready:")
    for label, user in items:
        print(f"  - {label}: {user.email} | role={user.role.value}")
    print(f"\nPassword for all demo accounts: {DEFAULT_PASSWORD}")


def main() -> None:
    created_users: dict[str, User] = {}
    for key, item in DEMO_ACCOUNTS.items():
        created_users[key] = _upsert_user(name=item["name"], email=item["email"], role=item["role"])

    _seed_catalog(created_users["admin"], created_users["teacher"])
    _print_accounts(created_users.items())


if __name__ == "__main__":
    main()
