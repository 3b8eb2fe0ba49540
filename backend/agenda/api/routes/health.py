from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from agenda.api.deps import get_app_settings
from agenda.core.config import Settings
from agenda.db.bootstrap import missing_schema_items

router = APIRouter()
logger = logging.getLogger(__name__)


def _stamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def probe_database() -> dict:
    """Schema check used by readiness; never raises on driver errors."""
    try:
        tables, columns = missing_schema_items()
    except SQLAlchemyError as exc:  # pragma: no cover - environment dependent
        logger.warning("Readiness probe could not reach the database: %s", exc)
        return {"ok": False, "schema_ok": False, "missing_tables": [], "missing_columns": {}, "error": str(exc)}
    return {
        "ok": True,
        "schema_ok": not tables and not columns,
        "missing_tables": tables,
        "missing_columns": columns,
        "error": None,
    }


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


@router.get("/health/live")
def health_live() -> dict:
    return {"status": "ok", "timestamp": _stamp()}


@router.get("/health/ready")
def health_ready(settings: Settings = Depends(get_app_settings)) -> JSONResponse:
    database = probe_database()
    # Conflict checks fail closed, so an unreadable schema means not ready.
    ready = database["schema_ok"]
    body = {
        "status": "ok" if ready else "degraded",
        "timestamp": _stamp(),
        "database": database,
        "scheduling": {
            "weekly_capacity_hours": settings.weekly_capacity_hours,
            "busy_threshold_percent": settings.busy_threshold_percent,
        },
    }
    return JSONResponse(status_code=200 if ready else 503, content=body)
