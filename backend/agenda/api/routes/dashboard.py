from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from agenda.api.deps import get_app_settings, get_current_user, get_db, get_own_teacher_id, get_schedule_repository
from agenda.core.config import Settings
from agenda.models.class_schedule import ClassSchedule
from agenda.models.user import User
from agenda.schemas.dashboard import (
    CalendarDayOut,
    CalendarEventOut,
    CalendarMonthOut,
    UtilizationOut,
    UtilizationReport,
)
from agenda.services.calendar_projection import month_range, project_month
from agenda.services.intervals import Weekday
from agenda.services.repository import SqlScheduleRepository, schedule_to_pattern
from agenda.services.schedule_pattern import ACTIVE_STATUSES
from agenda.services.workload import compute_utilization

router = APIRouter()


@router.get("/dashboard/utilization", response_model=UtilizationReport)
def teacher_utilization(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
    repository: SqlScheduleRepository = Depends(get_schedule_repository),
) -> UtilizationReport:
    rows = db.execute(
        select(ClassSchedule)
        .where(ClassSchedule.status.in_(list(ACTIVE_STATUSES)))
        .order_by(ClassSchedule.teacher_id, ClassSchedule.start_date)
    ).scalars()
    records = compute_utilization(
        [schedule_to_pattern(row) for row in rows],
        settings.weekly_capacity_hours,
        settings.busy_threshold_percent,
    )
    names = repository.teacher_names(record.teacher_id for record in records)
    teachers = [
        UtilizationOut(
            teacher_id=record.teacher_id,
            teacher_name=names.get(record.teacher_id),
            total_weekly_hours=round(record.total_weekly_hours, 2),
            active_schedule_count=record.active_schedule_count,
            utilization_percent=round(record.utilization_percent, 1),
            load_status=record.load_status,
        )
        for record in records
    ]
    teachers.sort(key=lambda item: (-item.total_weekly_hours, item.teacher_name or item.teacher_id))
    return UtilizationReport(weekly_capacity_hours=settings.weekly_capacity_hours, teachers=teachers)


@router.get("/calendar/{year}/{month}", response_model=CalendarMonthOut)
def calendar_month(
    year: int,
    month: int,
    teacher_id: str | None = Query(default=None),
    room_id: str | None = Query(default=None),
    current_user: User = Depends(get_current_user),
    own_teacher_id: str | None = Depends(get_own_teacher_id),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
    repository: SqlScheduleRepository = Depends(get_schedule_repository),
) -> CalendarMonthOut:
    if teacher_id is None and room_id is None:
        # Teacher accounts open on their own agenda.
        teacher_id = own_teacher_id
        if teacher_id is None and not current_user.can_schedule:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="No teacher profile is linked to this account",
            )
    bounds = month_range(year, month)
    query = select(ClassSchedule).where(
        ClassSchedule.status.in_(list(ACTIVE_STATUSES)),
        ClassSchedule.start_date <= bounds.end,
        or_(ClassSchedule.end_date.is_(None), ClassSchedule.end_date >= bounds.start),
    )
    if teacher_id:
        query = query.where(ClassSchedule.teacher_id == teacher_id)
    if room_id:
        query = query.where(ClassSchedule.room_id == room_id)
    query = query.order_by(ClassSchedule.start_time, ClassSchedule.name)
    patterns = [schedule_to_pattern(row) for row in db.execute(query).scalars()]

    projection = project_month(
        year,
        month,
        patterns,
        repository.list_active_blackouts(bounds),
        teacher_id=teacher_id,
        room_id=room_id,
        schedule_color=settings.calendar_schedule_color,
    )
    days = [
        CalendarDayOut(
            day=day,
            weekday=Weekday.of(day).label,
            events=[CalendarEventOut.model_validate(event) for event in events],
        )
        for day, events in projection.items()
    ]
    return CalendarMonthOut(year=year, month=month, teacher_id=teacher_id, room_id=room_id, days=days)
