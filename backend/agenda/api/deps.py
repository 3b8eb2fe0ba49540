from collections.abc import Callable, Generator

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.orm import Session

from agenda.core.config import Settings, get_settings
from agenda.core.security import decode_token
from agenda.db.session import SessionLocal
from agenda.models.teacher import Teacher
from agenda.models.user import SCHEDULER_ROLES, User, UserRole
from agenda.services.repository import SqlScheduleRepository

security = HTTPBearer()


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_app_settings(request: Request) -> Settings:
    """Settings the running app was built with, falling back to the environment."""
    return getattr(request.app.state, "settings", None) or get_settings()


def get_schedule_repository(db: Session = Depends(get_db)) -> SqlScheduleRepository:
    return SqlScheduleRepository(db)


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    try:
        user_id = decode_token(credentials.credentials).get("sub")
    except JWTError as exc:
        raise _unauthorized() from exc
    user = db.get(User, user_id) if user_id else None
    if user is None:
        raise _unauthorized()
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User account is inactive")
    return user


def require_roles(*roles: UserRole) -> Callable[[User], User]:
    allowed = frozenset(roles)

    def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return current_user

    return role_checker


require_scheduler = require_roles(*SCHEDULER_ROLES)


def get_own_teacher_id(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> str | None:
    """The roster id behind a teacher account; ``None`` for admins and coordinators."""
    if current_user.can_schedule:
        return None
    return db.execute(select(Teacher.id).where(Teacher.user_id == current_user.id)).scalar_one_or_none()
