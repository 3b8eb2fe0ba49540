from datetime import datetime

from pydantic import BaseModel, Field


class ActivityLogOut(BaseModel):
    id: str
    user_id: str | None
    action: str
    entity_type: str | None
    entity_id: str | None
    conflict_count: int = 0
    blocking: bool = False
    details: dict = Field(default_factory=dict)
    created_at: datetime | None = None

    model_config = {"from_attributes": True}
