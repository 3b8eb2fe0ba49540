from datetime import date, time

from pydantic import BaseModel

from agenda.services.blackout import BlackoutKind
from agenda.services.calendar_projection import EventSource
from agenda.services.workload import LoadStatus


class UtilizationOut(BaseModel):
    teacher_id: str
    teacher_name: str | None = None
    total_weekly_hours: float
    active_schedule_count: int
    utilization_percent: float
    load_status: LoadStatus


class UtilizationReport(BaseModel):
    weekly_capacity_hours: float
    teachers: list[UtilizationOut]


class CalendarEventOut(BaseModel):
    source: EventSource
    ref_id: str
    title: str
    color: str
    kind: BlackoutKind | None = None
    start_time: time | None = None
    end_time: time | None = None

    model_config = {"from_attributes": True}


class CalendarDayOut(BaseModel):
    day: date
    weekday: str
    events: list[CalendarEventOut]


class CalendarMonthOut(BaseModel):
    year: int
    month: int
    teacher_id: str | None = None
    room_id: str | None = None
    days: list[CalendarDayOut]
