from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from agenda.api.deps import get_current_user, get_db, require_scheduler
from agenda.models.class_schedule import ClassSchedule
from agenda.models.room import Room
from agenda.models.user import User
from agenda.schemas.room import RoomCreate, RoomOut, RoomUpdate
from agenda.schemas.schedule import ScheduleOut
from agenda.services.audit import log_activity
from agenda.services.schedule_pattern import ACTIVE_STATUSES

router = APIRouter()


def _room_or_404(db: Session, room_id: str) -> Room:
    room = db.get(Room, room_id)
    if room is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
    return room


def _claim_name(db: Session, name: str, owner_id: str | None = None) -> None:
    query = select(Room.id).where(Room.name == name)
    if owner_id is not None:
        query = query.where(Room.id != owner_id)
    if db.execute(query.limit(1)).first() is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Room name already exists")


def _active_bookings(db: Session, room_id: str) -> list[ClassSchedule]:
    query = (
        select(ClassSchedule)
        .where(ClassSchedule.room_id == room_id, ClassSchedule.status.in_(list(ACTIVE_STATUSES)))
        .order_by(ClassSchedule.start_date, ClassSchedule.start_time, ClassSchedule.name)
    )
    return list(db.execute(query).scalars())


@router.get("/", response_model=list[RoomOut])
def list_rooms(
    include_inactive: bool = Query(default=False),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[RoomOut]:
    query = select(Room)
    if not include_inactive:
        query = query.where(Room.is_active.is_(True))
    return list(db.execute(query.order_by(Room.name)).scalars())


@router.get("/{room_id}/schedules", response_model=list[ScheduleOut])
def list_room_schedules(
    room_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[ScheduleOut]:
    _room_or_404(db, room_id)
    return _active_bookings(db, room_id)


@router.post("/", response_model=RoomOut, status_code=status.HTTP_201_CREATED)
def create_room(
    payload: RoomCreate,
    current_user: User = Depends(require_scheduler),
    db: Session = Depends(get_db),
) -> RoomOut:
    _claim_name(db, payload.name)
    room = Room(**payload.model_dump(), is_active=True)
    db.add(room)
    db.flush()
    log_activity(db, user=current_user, action="room.created", entity_type="room", entity_id=room.id)
    db.commit()
    db.refresh(room)
    return room


@router.put("/{room_id}", response_model=RoomOut)
def update_room(
    room_id: str,
    payload: RoomUpdate,
    current_user: User = Depends(require_scheduler),
    db: Session = Depends(get_db),
) -> RoomOut:
    room = _room_or_404(db, room_id)
    changes = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or key == "notes"
    }
    if "name" in changes:
        _claim_name(db, changes["name"], owner_id=room.id)
    if changes.get("is_active") is False and _active_bookings(db, room.id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Room still hosts active classes; move them before deactivating it",
        )

    for key, value in changes.items():
        setattr(room, key, value)
    if changes:
        log_activity(
            db,
            user=current_user,
            action="room.updated",
            entity_type="room",
            entity_id=room.id,
            details={"fields": sorted(changes)},
        )
    db.commit()
    db.refresh(room)
    return room


@router.delete("/{room_id}")
def delete_room(
    room_id: str,
    current_user: User = Depends(require_scheduler),
    db: Session = Depends(get_db),
) -> dict:
    room = _room_or_404(db, room_id)
    # Any schedule row, even a cancelled one, still points at the room.
    referenced = db.execute(select(ClassSchedule.id).where(ClassSchedule.room_id == room.id).limit(1)).first()
    if referenced is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Room is referenced by class schedules; deactivate it instead",
        )
    log_activity(db, user=current_user, action="room.deleted", entity_type="room", entity_id=room.id)
    db.delete(room)
    db.commit()
    return {"success": True}
