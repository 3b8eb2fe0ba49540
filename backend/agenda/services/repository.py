"""Data sources for the conflict detector.

The detector only ever sees the three read operations declared by
``ScheduleRepository`` and ``BlackoutRepository``. Its answer is advisory: two
coordinators can both validate against the same snapshot and then both
commit. The write path (``agenda.api.routes.schedules``) therefore locks the
teacher and room with ``lock_resources`` and runs detection again inside the
committing transaction, and the ``class_schedules.version`` counter rejects
stale updates. When a commit is rejected the caller re-validates against the
post-commit state.

Storage failures surface as ``DataAccessError``. An empty list always means
"nothing found", never "could not look".
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol

from sqlalchemy import or_, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from agenda.core.exceptions import DataAccessError
from agenda.models.blackout_period import BlackoutPeriodRecord
from agenda.models.class_schedule import ClassSchedule
from agenda.models.teacher import Teacher
from agenda.services.blackout import BlackoutPeriod, BlackoutScope
from agenda.services.intervals import DateRange, TimeWindow, Weekday, date_range_overlap
from agenda.services.schedule_pattern import ACTIVE_STATUSES, SchedulePattern

logger = logging.getLogger(__name__)


class ScheduleRepository(Protocol):
    def list_active_schedules_by_teacher(
        self, teacher_id: str, exclude_id: str | None = None
    ) -> list[SchedulePattern]: ...

    def list_active_schedules_by_room(
        self, room_id: str, exclude_id: str | None = None
    ) -> list[SchedulePattern]: ...


class BlackoutRepository(Protocol):
    def list_active_blackouts(self, overlapping: DateRange) -> list[BlackoutPeriod]: ...


def schedule_to_pattern(row: ClassSchedule) -> SchedulePattern:
    return SchedulePattern(
        id=row.id,
        teacher_id=row.teacher_id,
        room_id=row.room_id,
        weekdays=Weekday(row.weekday_mask),
        window=TimeWindow(row.start_time, row.end_time),
        date_range=DateRange(row.start_date, row.end_date),
        status=row.status,
        title=row.name,
    )


def blackout_to_period(row: BlackoutPeriodRecord) -> BlackoutPeriod:
    return BlackoutPeriod(
        id=row.id,
        title=row.title,
        date_range=DateRange(row.start_date, row.end_date),
        kind=row.kind,
        scope=BlackoutScope(row.scope, row.scope_ref_id),
        active=row.active,
        description=row.description,
        color=row.color,
    )


class SqlScheduleRepository:
    """Reads active schedules and blackouts through a SQLAlchemy session."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def _fetch_schedules(self, *criteria) -> list[SchedulePattern]:
        query = (
            select(ClassSchedule)
            .where(ClassSchedule.status.in_(list(ACTIVE_STATUSES)), *criteria)
            .order_by(ClassSchedule.start_date, ClassSchedule.start_time, ClassSchedule.id)
        )
        try:
            rows = list(self.db.execute(query).scalars())
        except SQLAlchemyError as exc:
            logger.exception("Failed to load active schedules for conflict detection")
            raise DataAccessError("Schedule data is unavailable; conflicts could not be checked") from exc
        return [schedule_to_pattern(row) for row in rows]

    def list_active_schedules_by_teacher(
        self, teacher_id: str, exclude_id: str | None = None
    ) -> list[SchedulePattern]:
        criteria = [ClassSchedule.teacher_id == teacher_id]
        if exclude_id:
            criteria.append(ClassSchedule.id != exclude_id)
        return self._fetch_schedules(*criteria)

    def list_active_schedules_by_room(
        self, room_id: str, exclude_id: str | None = None
    ) -> list[SchedulePattern]:
        criteria = [ClassSchedule.room_id == room_id]
        if exclude_id:
            criteria.append(ClassSchedule.id != exclude_id)
        return self._fetch_schedules(*criteria)

    def list_active_blackouts(self, overlapping: DateRange) -> list[BlackoutPeriod]:
        query = select(BlackoutPeriodRecord).where(
            BlackoutPeriodRecord.active.is_(True),
            or_(BlackoutPeriodRecord.end_date.is_(None), BlackoutPeriodRecord.end_date >= overlapping.start),
        )
        if overlapping.end is not None:
            query = query.where(BlackoutPeriodRecord.start_date <= overlapping.end)
        query = query.order_by(BlackoutPeriodRecord.start_date, BlackoutPeriodRecord.id)
        try:
            rows = list(self.db.execute(query).scalars())
        except SQLAlchemyError as exc:
            logger.exception("Failed to load blackout periods for conflict detection")
            raise DataAccessError("Blackout data is unavailable; conflicts could not be checked") from exc
        return [blackout_to_period(row) for row in rows]

    def lock_resources(self, teacher_id: str, room_id: str | None = None) -> None:
        """Serialize schedule writers per teacher and room until the transaction ends.

        Only PostgreSQL offers transaction-scoped advisory locks; other dialects
        rely on the version counter alone.
        """
        if self.db.get_bind().dialect.name != "postgresql":
            return
        keys = [f"teacher:{teacher_id}"]
        if room_id:
            keys.append(f"room:{room_id}")
        try:
            # Sorted so two writers never wait on each other's second lock.
            for key in sorted(keys):
                self.db.execute(text("SELECT pg_advisory_xact_lock(hashtext(:key))"), {"key": key})
        except SQLAlchemyError as exc:
            logger.exception("Failed to lock schedule resources %s", keys)
            raise DataAccessError("Could not lock schedule resources for commit") from exc

    def teacher_names(self, teacher_ids: Iterable[str]) -> dict[str, str]:
        ids = sorted(set(teacher_ids))
        if not ids:
            return {}
        try:
            rows = self.db.execute(select(Teacher.id, Teacher.name).where(Teacher.id.in_(ids))).all()
        except SQLAlchemyError as exc:
            logger.exception("Failed to load teacher names")
            raise DataAccessError("Teacher data is unavailable") from exc
        return {row.id: row.name for row in rows}


class SnapshotRepository:
    """Serves fixed lists, e.g. a dashboard snapshot or test fixtures."""

    def __init__(
        self,
        schedules: Iterable[SchedulePattern] = (),
        blackouts: Iterable[BlackoutPeriod] = (),
    ) -> None:
        self.schedules = list(schedules)
        self.blackouts = list(blackouts)

    def _active(self, exclude_id: str | None) -> list[SchedulePattern]:
        return [item for item in self.schedules if item.is_active and item.id != exclude_id]

    def list_active_schedules_by_teacher(
        self, teacher_id: str, exclude_id: str | None = None
    ) -> list[SchedulePattern]:
        return [item for item in self._active(exclude_id) if item.teacher_id == teacher_id]

    def list_active_schedules_by_room(
        self, room_id: str, exclude_id: str | None = None
    ) -> list[SchedulePattern]:
        return [item for item in self._active(exclude_id) if item.room_id == room_id]

    def list_active_blackouts(self, overlapping: DateRange) -> list[BlackoutPeriod]:
        return [
            item
            for item in self.blackouts
            if item.active and date_range_overlap(item.date_range, overlapping)
        ]
