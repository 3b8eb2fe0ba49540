from __future__ import annotations

import logging

from sqlalchemy import inspect, text

import agenda.models  # noqa: F401
from agenda.db.base import Base
from agenda.db.session import engine

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "users": {"id", "email", "role"},
    "teachers": {"id", "name", "email"},
    "rooms": {"id", "name", "capacity"},
    "class_schedules": {
        "id",
        "teacher_id",
        "room_id",
        "weekday_mask",
        "start_time",
        "end_time",
        "start_date",
        "end_date",
        "status",
        "version",
    },
    "blackout_periods": {"id", "title", "start_date", "end_date", "kind", "scope", "scope_ref_id", "active"},
    "activity_logs": {"id", "action", "conflict_count", "blocking", "details"},
}



def missing_schema_items() -> tuple[list[str], dict[str, list[str]]]:
    with engine.connect() as connection:
        connection.execute(text("SELECT 1"))
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        missing_tables = sorted(name for name in REQUIRED_COLUMNS if name not in table_names)
        missing_columns: dict[str, list[str]] = {}
        for table_name, required in REQUIRED_COLUMNS.items():
            if table_name not in table_names:
                continue
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            missing = sorted(required - existing)
            if missing:
                missing_columns[table_name] = missing
    return missing_tables, missing_columns


def ensure_runtime_schema_compatibility() -> None:
    try:
        # Fresh databases get every table; existing ones are only checked.
        Base.metadata.create_all(bind=engine)
        missing_tables, missing_columns = missing_schema_items()
        if missing_tables:
            raise RuntimeError(f"Missing required tables: {', '.join(missing_tables)}")
        if missing_columns:
            flat = [f"{table}.{column}" for table, columns in missing_columns.items() for column in columns]
            raise RuntimeError(f"Missing required columns: {', '.join(flat)}")
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema compatibility bootstrap failed")
        raise RuntimeError("Runtime schema compatibility bootstrap failed") from exc
