from __future__ import annotations

import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Connection, Engine

from roombook.db.base import Base
import roombook.models  # noqa: F401

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "rooms": {"id", "name", "building_id", "modulation_string"},
    "bookings": {
        "id",
        "course_id",
        "room_id",
        "day_of_week",
        "start_minute",
        "end_minute",
        "duration_minutes",
    },
    "room_day_locks": {"id", "room_id", "day_of_week"},
    "time_slots": {"id", "name", "start_minute", "end_minute"},
}


def missing_schema(bind: Engine | Connection) -> tuple[list[str], dict[str, list[str]]]:
    inspector = inspect(bind)
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


def _assert_required_columns(bind: Engine) -> None:
    missing_tables, missing_columns = missing_schema(bind)
    if missing_tables:
        raise RuntimeError(f"Missing required tables: {', '.join(missing_tables)}")
    if missing_columns:
        flat = [f"{table}.{column}" for table, columns in missing_columns.items() for column in columns]
        raise RuntimeError(f"Missing required columns: {', '.join(flat)}")


def ensure_runtime_schema(bind: Engine) -> None:
    try:
        Base.metadata.create_all(bind=bind)
        _assert_required_columns(bind)
    except Exception as exc:
        logger.exception("Runtime schema bootstrap failed")
        raise RuntimeError("Runtime schema bootstrap failed") from exc
    logger.info("Runtime schema verified")
