from __future__ import annotations

from contextlib import contextmanager
from datetime import time, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Tuple

import mysql.connector

from ..core.exceptions import ConflictError
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def integrity_as_conflict(message: str):
    """Turn a foreign key or unique violation into a ConflictError."""

    try:
        yield
    except mysql.connector.IntegrityError as exc:
        raise ConflictError(message) from exc


def count_references(cur, references: Sequence[Tuple[str, str]], row_id: int) -> int:
    """Rows in the given (table, column) pairs that point at row_id."""

    parts = [f"(SELECT COUNT(*) FROM {table} WHERE {column}=%s)" for table, column in references]
    cur.execute(f"SELECT {' + '.join(parts)} AS n", tuple(row_id for _ in references))
    row = cur.fetchone() or {}
    return int(row.get("n") or 0)


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def where_clause(filters: Sequence[Tuple[str, Any]]) -> Tuple[str, tuple]:
    """Build a WHERE clause from (sql_fragment, value) pairs, skipping None values.

    Each fragment carries exactly one %s placeholder.
    """

    clauses: list[str] = []
    params: list[Any] = []
    for fragment, value in filters:
        if value is None:
            continue
        clauses.append(fragment)
        params.append(value.value if hasattr(value, "value") else value)
    if not clauses:
        return "", ()
    return "WHERE " + " AND ".join(clauses), tuple(params)


def update_assignments(changes: Dict[str, Any]) -> Tuple[str, tuple]:
    """`SET a=%s, b=%s` fragment for a partial update dict."""

    columns = []
    params: list[Any] = []
    for column, value in changes.items():
        columns.append(f"{column}=%s")
        params.append(value.value if hasattr(value, "value") else value)
    return ", ".join(columns), tuple(params)


def as_decimal(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def normalize_mysql_time(value: Any) -> Optional[time]:
    """Normalize MySQL TIME values across connector implementations.

    mysql-connector can return TIME as:
    - datetime.time
    - datetime.timedelta
    - string (e.g. '08:30:00')
    """

    if value is None:
        return None

    if isinstance(value, time):
        return value

    if isinstance(value, timedelta):
        total_seconds = int(value.total_seconds()) % 86400
        hours = total_seconds // 3600
        minutes = (total_seconds % 3600) // 60
        seconds = total_seconds % 60
        return time(hour=hours, minute=minutes, second=seconds)

    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        hours = int(parts[0])
        minutes = int(parts[1])
        seconds = int(parts[2]) if len(parts) >= 3 and parts[2] else 0
        return time(hour=hours, minute=minutes, second=seconds)

    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")
