from pydantic import BaseModel, Field, field_validator


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    return " ".join(value.split()) or None


class RoomCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    building: str | None = Field(default=None, max_length=200)
    capacity: int = Field(default=30, ge=1, le=5000)
    has_projector: bool = False
    notes: str | None = None

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        cleaned = _clean(value)
        if cleaned is None:
            raise ValueError("Room name cannot be empty")
        return cleaned

    @field_validator("building")
    @classmethod
    def normalize_building(cls, value: str | None) -> str | None:
        return _clean(value)


class RoomUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    building: str | None = Field(default=None, max_length=200)
    capacity: int | None = Field(default=None, ge=1, le=5000)
    has_projector: bool | None = None
    notes: str | None = None
    is_active: bool | None = None

    @field_validator("name", "building")
    @classmethod
    def normalize_text(cls, value: str | None) -> str | None:
        return _clean(value)


class RoomOut(BaseModel):
    id: str
    name: str
    building: str | None
    capacity: int
    has_projector: bool
    notes: str | None = None
    is_active: bool

    model_config = {"from_attributes": True}
