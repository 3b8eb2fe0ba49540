from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy.orm import Session

from agenda.models.activity_log import ActivityLog
from agenda.models.user import User
from agenda.services.conflict_service import Conflict, blocks_commit


def conflicts_as_details(conflicts: Iterable[Conflict]) -> list[dict]:
    return [
        {
            "kind": conflict.kind.value,
            "severity": conflict.severity,
            "related_id": conflict.related_id,
        }
        for conflict in conflicts
    ]


def log_activity(
    db: Session,
    *,
    user: User | None,
    action: str,
    entity_type: str | None = None,
    entity_id: str | None = None,
    details: dict | None = None,
    conflicts: Iterable[Conflict] | None = None,
) -> ActivityLog:
    """Stage an audit row; the caller's commit persists it.

    When ``conflicts`` is given the row also records how many were found and
    whether any of them blocked the write, so rejected attempts can be listed.
    """
    payload = dict(details or {})
    found = list(conflicts or [])
    if conflicts is not None:
        payload["conflicts"] = conflicts_as_details(found)
    record = ActivityLog(
        user_id=user.id if user is not None else None,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        conflict_count=len(found),
        blocking=blocks_commit(found),
        details=payload,
    )
    db.add(record)
    return record
