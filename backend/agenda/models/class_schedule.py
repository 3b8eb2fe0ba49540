import uuid
from datetime import date, datetime, time

from sqlalchemy import Date, DateTime, Enum as SAEnum, ForeignKey, Integer, String, Text, Time
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from agenda.db.base import Base
from agenda.services.intervals import Weekday, weekday_names
from agenda.services.schedule_pattern import ScheduleStatus


class ClassSchedule(Base):
    __tablename__ = "class_schedules"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    course_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    teacher_id: Mapped[str] = mapped_column(ForeignKey("teachers.id"), index=True, nullable=False)
    room_id: Mapped[str | None] = mapped_column(ForeignKey("rooms.id"), index=True, nullable=True)
    weekday_mask: Mapped[int] = mapped_column(Integer, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[ScheduleStatus] = mapped_column(
        SAEnum(ScheduleStatus, name="schedule_status"),
        index=True,
        nullable=False,
        default=ScheduleStatus.planned,
    )
    capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    online_link: Mapped[str | None] = mapped_column(String(500), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    # Optimistic concurrency counter; a stale UPDATE raises StaleDataError.
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    __mapper_args__ = {"version_id_col": version}

    @property
    def weekdays(self) -> list[str]:
        return weekday_names(Weekday(self.weekday_mask))
