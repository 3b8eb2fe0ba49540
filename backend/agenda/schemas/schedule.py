from datetime import date, datetime, time

from pydantic import BaseModel, Field, field_validator

from agenda.core.exceptions import ScheduleValidationError
from agenda.schemas.conflict import ConflictOut
from agenda.services.intervals import Weekday, weekday_names
from agenda.services.schedule_pattern import ScheduleStatus


def blank_to_online(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


def normalize_weekdays(value: list[str]) -> list[str]:
    try:
        mask = Weekday.from_names(value)
    except ScheduleValidationError as exc:
        raise ValueError(exc.message) from exc
    return weekday_names(mask)


class ScheduleBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    course_name: str | None = Field(default=None, max_length=200)
    teacher_id: str = Field(min_length=1, max_length=36)
    room_id: str | None = Field(default=None, max_length=36)
    weekdays: list[str] = Field(default_factory=list, max_length=7)
    start_time: time
    end_time: time
    start_date: date
    end_date: date | None = None
    status: ScheduleStatus = ScheduleStatus.planned
    capacity: int | None = Field(default=None, ge=1, le=5000)
    online_link: str | None = Field(default=None, max_length=500)
    notes: str | None = None

    @field_validator("weekdays")
    @classmethod
    def validate_weekdays(cls, value: list[str]) -> list[str]:
        return normalize_weekdays(value)

    @field_validator("room_id")
    @classmethod
    def blank_room_is_online(cls, value: str | None) -> str | None:
        return blank_to_online(value)


class ScheduleCreate(ScheduleBase):
    pass


class ScheduleValidateRequest(ScheduleBase):
    name: str = Field(default="", max_length=200)
    exclude_id: str | None = None


class ScheduleUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    course_name: str | None = Field(default=None, max_length=200)
    teacher_id: str | None = Field(default=None, min_length=1, max_length=36)
    room_id: str | None = Field(default=None, max_length=36)
    weekdays: list[str] | None = Field(default=None, max_length=7)
    start_time: time | None = None
    end_time: time | None = None
    start_date: date | None = None
    end_date: date | None = None
    status: ScheduleStatus | None = None
    capacity: int | None = Field(default=None, ge=1, le=5000)
    online_link: str | None = Field(default=None, max_length=500)
    notes: str | None = None
    expected_version: int | None = Field(default=None, ge=1)

    @field_validator("room_id")
    @classmethod
    def blank_room_is_online(cls, value: str | None) -> str | None:
        return blank_to_online(value)

    @field_validator("weekdays")
    @classmethod
    def validate_weekdays(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        return normalize_weekdays(value)


class ScheduleOut(BaseModel):
    id: str
    name: str
    course_name: str | None
    teacher_id: str
    room_id: str | None
    weekdays: list[str]
    start_time: time
    end_time: time
    start_date: date
    end_date: date | None
    status: ScheduleStatus
    capacity: int | None
    online_link: str | None
    notes: str | None
    version: int
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class ScheduleCommitOut(BaseModel):
    schedule: ScheduleOut
    warnings: list[ConflictOut] = Field(default_factory=list)
