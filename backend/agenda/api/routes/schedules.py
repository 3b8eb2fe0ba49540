import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from agenda.api.deps import get_current_user, get_db, get_schedule_repository, require_scheduler
from agenda.core.exceptions import ResourceNotFoundError, ScheduleConflictError, ScheduleValidationError
from agenda.models.class_schedule import ClassSchedule
from agenda.models.room import Room
from agenda.models.teacher import Teacher
from agenda.models.user import User
from agenda.schemas.conflict import ConflictOut, ConflictReport
from agenda.schemas.schedule import (
    ScheduleCommitOut,
    ScheduleCreate,
    ScheduleOut,
    ScheduleUpdate,
    ScheduleValidateRequest,
)
from agenda.services.audit import log_activity
from agenda.services.conflict_service import Conflict, ConflictDetector, blocks_commit
from agenda.services.intervals import DateRange, TimeWindow, Weekday
from agenda.services.repository import SqlScheduleRepository
from agenda.services.schedule_pattern import (
    ACTIVE_STATUSES,
    SchedulePattern,
    ScheduleStatus,
    validate_schedule_pattern,
)

router = APIRouter()
logger = logging.getLogger(__name__)

# Changing any of these on an active schedule means it must be checked again.
SCHEDULING_FIELDS = {"teacher_id", "room_id", "weekdays", "start_time", "end_time", "start_date", "end_date"}
REQUIRED_FIELDS = {"name", "teacher_id", "weekdays", "start_time", "end_time", "start_date", "status"}


def _draft_pattern(data: dict, schedule_id: str = "") -> SchedulePattern:
    return SchedulePattern(
        id=schedule_id,
        teacher_id=data["teacher_id"],
        room_id=data.get("room_id"),
        weekdays=Weekday.from_names(data["weekdays"]),
        window=TimeWindow(data["start_time"], data["end_time"]),
        date_range=DateRange(data["start_date"], data.get("end_date")),
        status=data.get("status") or ScheduleStatus.planned,
        title=data.get("name") or "",
    )


def _schedule_fields(schedule: ClassSchedule) -> dict:
    return {
        "name": schedule.name,
        "teacher_id": schedule.teacher_id,
        "room_id": schedule.room_id,
        "weekdays": schedule.weekdays,
        "start_time": schedule.start_time,
        "end_time": schedule.end_time,
        "start_date": schedule.start_date,
        "end_date": schedule.end_date,
        "status": schedule.status,
    }


def _ensure_resources(db: Session, pattern: SchedulePattern) -> None:
    teacher = db.get(Teacher, pattern.teacher_id)
    if teacher is None:
        raise ResourceNotFoundError("Teacher", pattern.teacher_id)
    room = db.get(Room, pattern.room_id) if pattern.room_id is not None else None
    if pattern.room_id is not None and room is None:
        raise ResourceNotFoundError("Room", pattern.room_id)
    if not pattern.is_active:
        return
    # Deactivated resources keep their history but take no new classes.
    errors = []
    if not teacher.is_active:
        errors.append(f"Teacher {teacher.name} is inactive")
    if room is not None and not room.is_active:
        errors.append(f"Room {room.name} is inactive")
    if errors:
        raise ScheduleValidationError(errors)


def _detect(repository: SqlScheduleRepository, pattern: SchedulePattern, exclude_id: str | None) -> list[Conflict]:
    detector = ConflictDetector(
        repository,
        repository,
        teacher_names=repository.teacher_names([pattern.teacher_id]),
    )
    return detector.detect_conflicts(pattern, exclude_id=exclude_id)


def _reject_blocking(
    db: Session,
    *,
    current_user: User,
    action: str,
    conflicts: list[Conflict],
    entity_id: str | None = None,
) -> None:
    if not blocks_commit(conflicts):
        return
    db.rollback()
    log_activity(
        db,
        user=current_user,
        action=action,
        entity_type="class_schedule",
        entity_id=entity_id,
        conflicts=conflicts,
    )
    db.commit()
    raise ScheduleConflictError(
        "Schedule has blocking conflicts",
        [ConflictOut.from_conflict(item).model_dump(mode="json") for item in conflicts],
    )


@router.get("/", response_model=list[ScheduleOut])
def list_schedules(
    teacher_id: str | None = Query(default=None),
    room_id: str | None = Query(default=None),
    status_filter: ScheduleStatus | None = Query(default=None, alias="status"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[ScheduleOut]:
    query = select(ClassSchedule)
    if teacher_id:
        query = query.where(ClassSchedule.teacher_id == teacher_id)
    if room_id:
        query = query.where(ClassSchedule.room_id == room_id)
    if status_filter is not None:
        query = query.where(ClassSchedule.status == status_filter)
    query = query.order_by(ClassSchedule.start_date, ClassSchedule.start_time, ClassSchedule.name)
    return list(db.execute(query).scalars())


@router.post("/validate", response_model=ConflictReport)
def validate_schedule(
    payload: ScheduleValidateRequest,
    current_user: User = Depends(require_scheduler),
    db: Session = Depends(get_db),
    repository: SqlScheduleRepository = Depends(get_schedule_repository),
) -> ConflictReport:
    pattern = validate_schedule_pattern(_draft_pattern(payload.model_dump(), payload.exclude_id or ""))
    conflicts = _detect(repository, pattern, payload.exclude_id)
    log_activity(
        db,
        user=current_user,
        action="schedule.validated",
        entity_type="class_schedule",
        entity_id=payload.exclude_id,
        conflicts=conflicts,
    )
    db.commit()
    return ConflictReport.from_conflicts(conflicts)


@router.get("/{schedule_id}", response_model=ScheduleOut)
def get_schedule(
    schedule_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ScheduleOut:
    schedule = db.get(ClassSchedule, schedule_id)
    if schedule is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Schedule not found")
    return schedule


@router.post("/", response_model=ScheduleCommitOut, status_code=status.HTTP_201_CREATED)
def create_schedule(
    payload: ScheduleCreate,
    current_user: User = Depends(require_scheduler),
    db: Session = Depends(get_db),
    repository: SqlScheduleRepository = Depends(get_schedule_repository),
) -> ScheduleCommitOut:
    data = payload.model_dump()
    pattern = validate_schedule_pattern(_draft_pattern(data))
    _ensure_resources(db, pattern)

    conflicts: list[Conflict] = []
    if pattern.is_active:
        repository.lock_resources(pattern.teacher_id, pattern.room_id)
        conflicts = _detect(repository, pattern, None)
        _reject_blocking(db, current_user=current_user, action="schedule.rejected", conflicts=conflicts)

    weekdays = data.pop("weekdays")
    schedule = ClassSchedule(
        **data,
        weekday_mask=int(Weekday.from_names(weekdays)),
        created_by_id=current_user.id,
    )
    db.add(schedule)
    db.flush()
    log_activity(
        db,
        user=current_user,
        action="schedule.created",
        entity_type="class_schedule",
        entity_id=schedule.id,
        conflicts=conflicts,
    )
    db.commit()
    db.refresh(schedule)
    logger.info("Created schedule %s for teacher %s", schedule.id, schedule.teacher_id)
    return ScheduleCommitOut(
        schedule=ScheduleOut.model_validate(schedule),
        warnings=[ConflictOut.from_conflict(item) for item in conflicts],
    )


@router.put("/{schedule_id}", response_model=ScheduleCommitOut)
def update_schedule(
    schedule_id: str,
    payload: ScheduleUpdate,
    current_user: User = Depends(require_scheduler),
    db: Session = Depends(get_db),
    repository: SqlScheduleRepository = Depends(get_schedule_repository),
) -> ScheduleCommitOut:
    schedule = db.get(ClassSchedule, schedule_id)
    if schedule is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Schedule not found")

    data = payload.model_dump(exclude_unset=True)
    expected_version = data.pop("expected_version", None)
    nulled = sorted(key for key in REQUIRED_FIELDS & data.keys() if data[key] is None)
    if nulled:
        raise ScheduleValidationError([f"{key} cannot be null" for key in nulled])
    if expected_version is not None and expected_version != schedule.version:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Schedule was modified by someone else (current version {schedule.version})",
        )

    merged = {**_schedule_fields(schedule), **data}
    pattern = validate_schedule_pattern(_draft_pattern(merged, schedule.id))
    reactivated = schedule.status not in ACTIVE_STATUSES and pattern.is_active
    if reactivated or {"teacher_id", "room_id"} & data.keys():
        _ensure_resources(db, pattern)

    conflicts: list[Conflict] = []
    if pattern.is_active and (reactivated or SCHEDULING_FIELDS & data.keys()):
        repository.lock_resources(pattern.teacher_id, pattern.room_id)
        conflicts = _detect(repository, pattern, schedule.id)
        _reject_blocking(
            db,
            current_user=current_user,
            action="schedule.update_rejected",
            conflicts=conflicts,
            entity_id=schedule.id,
        )

    if "weekdays" in data:
        schedule.weekday_mask = int(Weekday.from_names(data.pop("weekdays")))
    for key, value in data.items():
        setattr(schedule, key, value)
    log_activity(
        db,
        user=current_user,
        action="schedule.updated",
        entity_type="class_schedule",
        entity_id=schedule.id,
        details={"fields": sorted(payload.model_fields_set - {"expected_version"})},
        conflicts=conflicts,
    )
    try:
        db.commit()
    except StaleDataError as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Schedule was modified concurrently; reload and validate again",
        ) from exc
    db.refresh(schedule)
    return ScheduleCommitOut(
        schedule=ScheduleOut.model_validate(schedule),
        warnings=[ConflictOut.from_conflict(item) for item in conflicts],
    )


@router.post("/{schedule_id}/cancel", response_model=ScheduleOut)
def cancel_schedule(
    schedule_id: str,
    current_user: User = Depends(require_scheduler),
    db: Session = Depends(get_db),
) -> ScheduleOut:
    schedule = db.get(ClassSchedule, schedule_id)
    if schedule is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Schedule not found")
    if schedule.status == ScheduleStatus.cancelled:
        return schedule
    schedule.status = ScheduleStatus.cancelled
    log_activity(
        db,
        user=current_user,
        action="schedule.cancelled",
        entity_type="class_schedule",
        entity_id=schedule.id,
    )
    try:
        db.commit()
    except StaleDataError as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Schedule was modified concurrently; reload and try again",
        ) from exc
    db.refresh(schedule)
    return schedule
