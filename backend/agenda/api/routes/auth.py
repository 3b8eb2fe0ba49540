import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from agenda.api.deps import get_app_settings, get_current_user, get_db
from agenda.core.config import Settings
from agenda.core.security import create_access_token, get_password_hash, verify_password
from agenda.models.teacher import Teacher
from agenda.models.user import User, UserRole
from agenda.schemas.user import Token, UserCreate, UserLogin, UserOut

router = APIRouter()
logger = logging.getLogger(__name__)


def ensure_teacher_profile(db: Session, user: User) -> Teacher:
    """Link a teacher account to its roster entry, creating one when missing."""
    teacher = db.execute(select(Teacher).where(Teacher.email == user.email)).scalar_one_or_none()
    if teacher is None:
        teacher = Teacher(name=user.name, email=user.email, phone=user.phone)
        db.add(teacher)
    teacher.user_id = user.id
    teacher.is_active = True
    return teacher


def user_out(db: Session, user: User) -> UserOut:
    teacher_id = db.execute(select(Teacher.id).where(Teacher.user_id == user.id)).scalar_one_or_none()
    return UserOut.model_validate(user).model_copy(update={"teacher_id": teacher_id})


@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register(payload: UserCreate, db: Session = Depends(get_db)) -> UserOut:
    existing = db.execute(select(User).where(User.email == payload.email)).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    user = User(
        name=payload.name,
        email=payload.email,
        phone=payload.phone,
        hashed_password=get_password_hash(payload.password),
        role=payload.role,
    )
    db.add(user)
    try:
        db.flush()
        if user.role == UserRole.teacher:
            ensure_teacher_profile(db, user)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered") from exc

    db.refresh(user)
    logger.info("Registered %s account %s", user.role.value, user.email)
    return user_out(db, user)


@router.post("/login", response_model=Token)
def login(
    payload: UserLogin,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> Token:
    user = db.execute(select(User).where(User.email == payload.email)).scalar_one_or_none()
    if user is None or not verify_password(payload.password, user.hashed_password):
        logger.warning("Failed login for %s", payload.email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User account is inactive")

    lifetime = timedelta(minutes=settings.access_token_expire_minutes)
    user.last_login_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)
    return Token(
        access_token=create_access_token(user.id, expires_delta=lifetime),
        expires_in=int(lifetime.total_seconds()),
        user=user_out(db, user),
    )


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> UserOut:
    return user_out(db, current_user)
