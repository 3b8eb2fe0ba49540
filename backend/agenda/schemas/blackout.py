import re
from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator

from agenda.services.blackout import BlackoutKind, BlackoutScopeKind

COLOR_PATTERN = re.compile(r"^#[0-9a-fA-F]{6}$")


def _validate_color(value: str | None) -> str | None:
    if value is None:
        return None
    if not COLOR_PATTERN.match(value):
        raise ValueError("color must be a hex value like #ef4444")
    return value.lower()


class BlackoutBase(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = None
    start_date: date
    end_date: date | None = None
    kind: BlackoutKind = BlackoutKind.blackout
    scope: BlackoutScopeKind = BlackoutScopeKind.global_
    scope_ref_id: str | None = Field(default=None, max_length=36)
    color: str | None = None

    @field_validator("color")
    @classmethod
    def validate_color(cls, value: str | None) -> str | None:
        return _validate_color(value)


class BlackoutCreate(BlackoutBase):
    pass


class BlackoutUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    kind: BlackoutKind | None = None
    scope: BlackoutScopeKind | None = None
    scope_ref_id: str | None = Field(default=None, max_length=36)
    color: str | None = None
    active: bool | None = None

    @field_validator("color")
    @classmethod
    def validate_color(cls, value: str | None) -> str | None:
        return _validate_color(value)


class BlackoutOut(BlackoutBase):
    id: str
    color: str
    active: bool
    created_at: datetime | None = None

    model_config = {"from_attributes": True}
