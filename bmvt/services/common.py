"""
Small helpers shared by the resource services.
"""

from collections.abc import Iterable
from datetime import date, datetime
from typing import Any

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def to_db_value(value: Any) -> Any:
    """Bind dates and datetimes in a format every backend accepts."""
    if isinstance(value, datetime):
        return value.strftime(DATETIME_FORMAT)
    if isinstance(value, date):
        return value.isoformat()
    return value


def clamp_limit(value: Any, default: int, maximum: int) -> int:
    """Parse a ``limit`` query value: unusable or non-positive gives ``default``."""
    try:
        limit = int(value)
    except (TypeError, ValueError):
        return default
    if limit <= 0:
        return default
    return min(limit, maximum)


def parse_offset(value: Any) -> int:
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return 0


def parse_optional_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def like_pattern(term: str) -> str:
    return f"%{term}%"


def build_update(table: str, changes: dict[str, Any], key: Any) -> tuple[str, list[Any]]:
    """
    ``UPDATE <table> SET col = ?, ..., updated_at = CURRENT_TIMESTAMP WHERE id = ?``
    for the given column changes.
    """
    assignments = [f"{column} = ?" for column in changes]
    assignments.append("updated_at = CURRENT_TIMESTAMP")
    args = [to_db_value(value) for value in changes.values()]
    args.append(key)
    return f"UPDATE {table} SET {', '.join(assignments)} WHERE id = ?", args


def build_insert(table: str, values: dict[str, Any]) -> tuple[str, list[Any]]:
    """``INSERT`` of the given columns plus both timestamps."""
    columns = list(values) + ["created_at", "updated_at"]
    placeholders = ["?"] * len(values) + ["CURRENT_TIMESTAMP", "CURRENT_TIMESTAMP"]
    args = [to_db_value(value) for value in values.values()]
    return (
        f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({', '.join(placeholders)})",
        args,
    )


def placeholders(values: Iterable[Any]) -> str:
    return ", ".join("?" for _ in values)
