from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Optional, Sequence

from ..core.enums import WorkingHoursStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    as_decimal,
    db_cursor,
    fetchall,
    fetchone,
    integrity_as_conflict,
    normalize_mysql_time,
    update_assignments,
    where_clause,
)
from .model import WorkingHour, WorkingHoursFilter
from .repository import WorkingHoursRepository

_SELECT = """
    SELECT
        wh.entry_id, wh.profile_id, wh.client_id, wh.project_id, wh.roster_id,
        wh.work_date, wh.start_time, wh.end_time, wh.sign_in_time, wh.sign_out_time,
        wh.total_hours, wh.actual_hours, wh.overtime_hours, wh.hourly_rate,
        wh.payable_amount, wh.status, wh.notes,
        p.full_name AS profile_name,
        c.name AS client_name,
        pr.name AS project_name
    FROM working_hours wh
    LEFT JOIN profiles p ON p.profile_id = wh.profile_id
    LEFT JOIN clients c ON c.client_id = wh.client_id
    LEFT JOIN projects pr ON pr.project_id = wh.project_id
"""


def _row_to_entry(r: dict) -> WorkingHour:
    return WorkingHour(
        entry_id=int(r["entry_id"]),
        profile_id=int(r["profile_id"]),
        client_id=int(r["client_id"]),
        project_id=int(r["project_id"]),
        roster_id=int(r["roster_id"]) if r.get("roster_id") else None,
        work_date=r["work_date"],
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        sign_in_time=normalize_mysql_time(r.get("sign_in_time")),
        sign_out_time=normalize_mysql_time(r.get("sign_out_time")),
        total_hours=as_decimal(r.get("total_hours")) or Decimal("0"),
        actual_hours=as_decimal(r.get("actual_hours")),
        overtime_hours=as_decimal(r.get("overtime_hours")) or Decimal("0"),
        hourly_rate=as_decimal(r.get("hourly_rate")) or Decimal("0"),
        payable_amount=as_decimal(r.get("payable_amount")) or Decimal("0"),
        status=WorkingHoursStatus(r["status"]),
        notes=r.get("notes"),
        profile_name=r.get("profile_name"),
        client_name=r.get("client_name"),
        project_name=r.get("project_name"),
    )


class MySQLWorkingHoursRepository(WorkingHoursRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, entry_id: int) -> Optional[WorkingHour]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE wh.entry_id=%s", (entry_id,))
            r = fetchone(cur)
            return _row_to_entry(r) if r else None

    def create(self, **fields: Any) -> int:
        assignments, params = update_assignments(fields)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"INSERT INTO working_hours SET {assignments}", params)
            return int(cur.lastrowid)

    def update(self, entry_id: int, changes: dict[str, Any]) -> bool:
        if not changes:
            return False
        assignments, params = update_assignments(changes)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE working_hours SET {assignments} WHERE entry_id=%s", params + (entry_id,))
            return cur.rowcount > 0

    def delete(self, entry_id: int) -> bool:
        with integrity_as_conflict("Working hours included in a payroll cannot be deleted"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute("DELETE FROM working_hours WHERE entry_id=%s", (entry_id,))
                return cur.rowcount > 0

    def list(self, filters: WorkingHoursFilter) -> Sequence[WorkingHour]:
        where, params = where_clause(
            [
                ("wh.profile_id=%s", filters.profile_id),
                ("wh.client_id=%s", filters.client_id),
                ("wh.project_id=%s", filters.project_id),
                ("wh.roster_id=%s", filters.roster_id),
                ("wh.status=%s", filters.status),
                ("wh.work_date >= %s", filters.start_date),
                ("wh.work_date <= %s", filters.end_date),
            ]
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} {where} ORDER BY wh.work_date DESC, wh.start_time ASC", params)
            return [_row_to_entry(r) for r in fetchall(cur)]

    def exists_for_roster(self, *, roster_id: int, profile_id: int, work_date: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS found FROM working_hours WHERE roster_id=%s AND profile_id=%s AND work_date=%s LIMIT 1",
                (roster_id, profile_id, work_date),
            )
            return fetchone(cur) is not None

    def set_status_many(self, entry_ids: Iterable[int], status: WorkingHoursStatus) -> int:
        ids = [int(i) for i in entry_ids]
        if not ids:
            return 0
        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE working_hours SET status=%s WHERE entry_id IN ({placeholders})",
                (status.value, *ids),
            )
            return int(cur.rowcount)
