from pydantic import BaseModel, EmailStr, Field, field_validator


class TeacherBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=40)
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("Name cannot be empty")
        return trimmed


class TeacherCreate(TeacherBase):
    pass


class TeacherOut(TeacherBase):
    id: str

    model_config = {"from_attributes": True}
