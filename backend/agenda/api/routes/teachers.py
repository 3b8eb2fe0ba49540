from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from agenda.api.deps import get_current_user, get_db, require_scheduler
from agenda.models.teacher import Teacher
from agenda.models.user import User
from agenda.schemas.teacher import TeacherCreate, TeacherOut
from agenda.services.audit import log_activity

router = APIRouter()


@router.get("/", response_model=list[TeacherOut])
def list_teachers(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> list[TeacherOut]:
    return list(db.execute(select(Teacher).order_by(Teacher.name)).scalars())


@router.post("/", response_model=TeacherOut, status_code=status.HTTP_201_CREATED)
def create_teacher(
    payload: TeacherCreate,
    current_user: User = Depends(require_scheduler),
    db: Session = Depends(get_db),
) -> TeacherOut:
    if payload.email:
        existing = db.execute(select(Teacher).where(Teacher.email == payload.email)).scalar_one_or_none()
        if existing:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Teacher email already exists")
    teacher = Teacher(**payload.model_dump())
    db.add(teacher)
    db.flush()
    log_activity(db, user=current_user, action="teacher.created", entity_type="teacher", entity_id=teacher.id)
    db.commit()
    db.refresh(teacher)
    return teacher
