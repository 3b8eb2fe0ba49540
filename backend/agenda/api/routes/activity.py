from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from agenda.api.deps import get_db, require_scheduler
from agenda.models.activity_log import ActivityLog
from agenda.models.user import User
from agenda.schemas.activity import ActivityLogOut

router = APIRouter()


@router.get("/activity/logs", response_model=list[ActivityLogOut])
def list_activity_logs(
    action: str | None = Query(default=None, max_length=100),
    entity_type: str | None = Query(default=None, max_length=50),
    entity_id: str | None = Query(default=None, max_length=36),
    blocking: bool | None = Query(default=None),
    limit: int = Query(default=200, ge=1, le=500),
    current_user: User = Depends(require_scheduler),
    db: Session = Depends(get_db),
) -> list[ActivityLogOut]:
    query = select(ActivityLog)
    if action:
        query = query.where(ActivityLog.action == action)
    if entity_type:
        query = query.where(ActivityLog.entity_type == entity_type)
    if entity_id:
        query = query.where(ActivityLog.entity_id == entity_id)
    if blocking is not None:
        query = query.where(ActivityLog.blocking.is_(blocking))
    query = query.order_by(ActivityLog.created_at.desc(), ActivityLog.id).limit(limit)
    return list(db.execute(query).scalars())
