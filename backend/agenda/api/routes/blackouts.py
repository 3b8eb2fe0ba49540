from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from agenda.api.deps import get_current_user, get_db, require_scheduler
from agenda.models.blackout_period import BlackoutPeriodRecord
from agenda.models.class_schedule import ClassSchedule
from agenda.models.user import User
from agenda.schemas.blackout import BlackoutCreate, BlackoutOut, BlackoutUpdate
from agenda.schemas.schedule import ScheduleOut
from agenda.services.audit import log_activity
from agenda.services.blackout import (
    DEFAULT_BLACKOUT_COLORS,
    BlackoutPeriod,
    BlackoutScope,
    validate_blackout_period,
)
from agenda.services.intervals import DateRange
from agenda.services.overlap import blackout_affects_pattern
from agenda.services.repository import blackout_to_period, schedule_to_pattern
from agenda.services.schedule_pattern import ACTIVE_STATUSES

router = APIRouter()


def _draft_blackout(data: dict, blackout_id: str = "") -> BlackoutPeriod:
    return BlackoutPeriod(
        id=blackout_id,
        title=data["title"],
        date_range=DateRange(data["start_date"], data.get("end_date")),
        kind=data["kind"],
        scope=BlackoutScope(data["scope"], data.get("scope_ref_id")),
        description=data.get("description"),
        color=data.get("color"),
    )


def _get_blackout_or_404(db: Session, blackout_id: str) -> BlackoutPeriodRecord:
    blackout = db.get(BlackoutPeriodRecord, blackout_id)
    if blackout is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Blackout period not found")
    return blackout


@router.get("/blackouts", response_model=list[BlackoutOut])
def list_blackouts(
    include_inactive: bool = Query(default=False),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[BlackoutOut]:
    query = select(BlackoutPeriodRecord)
    if not include_inactive:
        query = query.where(BlackoutPeriodRecord.active.is_(True))
    query = query.order_by(BlackoutPeriodRecord.start_date, BlackoutPeriodRecord.title)
    return list(db.execute(query).scalars())


@router.post("/blackouts", response_model=BlackoutOut, status_code=status.HTTP_201_CREATED)
def create_blackout(
    payload: BlackoutCreate,
    current_user: User = Depends(require_scheduler),
    db: Session = Depends(get_db),
) -> BlackoutOut:
    data = payload.model_dump()
    validate_blackout_period(_draft_blackout(data))
    data["color"] = data["color"] or DEFAULT_BLACKOUT_COLORS[payload.kind]
    blackout = BlackoutPeriodRecord(**data, active=True, created_by_id=current_user.id)
    db.add(blackout)
    db.flush()
    log_activity(
        db,
        user=current_user,
        action="blackout.created",
        entity_type="blackout_period",
        entity_id=blackout.id,
        details={"kind": payload.kind.value, "scope": str(BlackoutScope(payload.scope, payload.scope_ref_id))},
    )
    db.commit()
    db.refresh(blackout)
    return blackout


@router.put("/blackouts/{blackout_id}", response_model=BlackoutOut)
def update_blackout(
    blackout_id: str,
    payload: BlackoutUpdate,
    current_user: User = Depends(require_scheduler),
    db: Session = Depends(get_db),
) -> BlackoutOut:
    blackout = _get_blackout_or_404(db, blackout_id)
    data = payload.model_dump(exclude_unset=True)
    for key in ("title", "start_date", "kind", "scope", "color", "active"):
        if key in data and data[key] is None:
            data.pop(key)
    if "kind" in data and "color" not in data and blackout.color == DEFAULT_BLACKOUT_COLORS[blackout.kind]:
        # A default colour follows the kind; a custom one is kept.
        data["color"] = DEFAULT_BLACKOUT_COLORS[data["kind"]]

    current = {
        "title": blackout.title,
        "start_date": blackout.start_date,
        "end_date": blackout.end_date,
        "kind": blackout.kind,
        "scope": blackout.scope,
        "scope_ref_id": blackout.scope_ref_id,
        "description": blackout.description,
        "color": blackout.color,
    }
    validate_blackout_period(_draft_blackout({**current, **data}, blackout.id))

    for key, value in data.items():
        setattr(blackout, key, value)
    if data:
        log_activity(
            db,
            user=current_user,
            action="blackout.updated",
            entity_type="blackout_period",
            entity_id=blackout.id,
            details={"fields": sorted(data)},
        )
    db.commit()
    db.refresh(blackout)
    return blackout


@router.delete("/blackouts/{blackout_id}")
def delete_blackout(
    blackout_id: str,
    current_user: User = Depends(require_scheduler),
    db: Session = Depends(get_db),
) -> dict:
    blackout = _get_blackout_or_404(db, blackout_id)
    # Deactivated rather than deleted so past calendars keep their history.
    blackout.active = False
    log_activity(
        db,
        user=current_user,
        action="blackout.deactivated",
        entity_type="blackout_period",
        entity_id=blackout.id,
    )
    db.commit()
    return {"success": True}


@router.get("/blackouts/{blackout_id}/affected-schedules", response_model=list[ScheduleOut])
def list_affected_schedules(
    blackout_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[ScheduleOut]:
    period = blackout_to_period(_get_blackout_or_404(db, blackout_id))
    query = (
        select(ClassSchedule)
        .where(ClassSchedule.status.in_(list(ACTIVE_STATUSES)))
        .order_by(ClassSchedule.start_date, ClassSchedule.start_time, ClassSchedule.name)
    )
    return [
        schedule
        for schedule in db.execute(query).scalars()
        if blackout_affects_pattern(schedule_to_pattern(schedule), period)
    ]
