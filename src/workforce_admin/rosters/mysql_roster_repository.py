from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Optional, Sequence

from ..core.enums import RosterStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    as_decimal,
    db_cursor,
    fetchall,
    fetchone,
    normalize_mysql_time,
    update_assignments,
)
from .model import Roster
from .repository import RosterRepository

_SELECT = """
    SELECT
        r.roster_id, r.name, r.profile_id, r.client_id, r.project_id, r.work_date,
        r.end_date, r.start_time, r.end_time, r.total_hours, r.status, r.notes,
        r.expected_profiles, r.per_hour_rate, r.is_locked,
        pr.name AS project_name,
        c.name AS client_name
    FROM rosters r
    LEFT JOIN projects pr ON pr.project_id = r.project_id
    LEFT JOIN clients c ON c.client_id = r.client_id
"""


def _row_to_roster(r: dict, profile_ids: Sequence[int]) -> Roster:
    return Roster(
        roster_id=int(r["roster_id"]),
        name=r.get("name"),
        profile_id=int(r["profile_id"]),
        client_id=int(r["client_id"]),
        project_id=int(r["project_id"]),
        work_date=r["work_date"],
        end_date=r.get("end_date"),
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        total_hours=as_decimal(r.get("total_hours")) or Decimal("0"),
        status=RosterStatus(r.get("status") or RosterStatus.PENDING.value),
        notes=r.get("notes"),
        expected_profiles=int(r.get("expected_profiles") or 1),
        per_hour_rate=as_decimal(r.get("per_hour_rate")),
        is_locked=bool(r.get("is_locked")),
        profile_ids=tuple(profile_ids),
        project_name=r.get("project_name"),
        client_name=r.get("client_name"),
    )


class MySQLRosterRepository(RosterRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _profile_ids(self, cur, roster_ids: Sequence[int]) -> dict[int, list[int]]:
        if not roster_ids:
            return {}
        placeholders = ",".join(["%s"] * len(roster_ids))
        cur.execute(
            f"SELECT roster_id, profile_id FROM roster_profiles WHERE roster_id IN ({placeholders}) ORDER BY profile_id",
            tuple(roster_ids),
        )
        out: dict[int, list[int]] = {}
        for r in fetchall(cur):
            out.setdefault(int(r["roster_id"]), []).append(int(r["profile_id"]))
        return out

    def get_by_id(self, roster_id: int) -> Optional[Roster]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE r.roster_id=%s", (roster_id,))
            row = fetchone(cur)
            if not row:
                return None
            assigned = self._profile_ids(cur, [int(roster_id)])
            return _row_to_roster(row, assigned.get(int(roster_id), []))

    def create(self, **fields: Any) -> int:
        assignments, params = update_assignments(fields)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"INSERT INTO rosters SET {assignments}", params)
            return int(cur.lastrowid)

    def update(self, roster_id: int, changes: dict[str, Any]) -> bool:
        if not changes:
            return False
        assignments, params = update_assignments(changes)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE rosters SET {assignments} WHERE roster_id=%s", params + (roster_id,))
            return cur.rowcount > 0

    def delete(self, roster_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM roster_profiles WHERE roster_id=%s", (roster_id,))
            cur.execute("DELETE FROM rosters WHERE roster_id=%s", (roster_id,))
            return cur.rowcount > 0

    def list_range(
        self,
        *,
        start: date,
        end: date,
        status: Optional[RosterStatus] = None,
        project_id: Optional[int] = None,
        profile_id: Optional[int] = None,
    ) -> Sequence[Roster]:
        clauses = ["r.work_date <= %s", "COALESCE(r.end_date, r.work_date) >= %s"]
        params: list[object] = [end, start]
        if status is not None:
            clauses.append("r.status=%s")
            params.append(status.value)
        if project_id is not None:
            clauses.append("r.project_id=%s")
            params.append(int(project_id))
        if profile_id is not None:
            clauses.append(
                "(r.profile_id=%s OR EXISTS (SELECT 1 FROM roster_profiles rp "
                "WHERE rp.roster_id = r.roster_id AND rp.profile_id=%s))"
            )
            params.extend([int(profile_id), int(profile_id)])

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE {where} ORDER BY r.work_date ASC, r.start_time ASC", tuple(params))
            rows = fetchall(cur)
            assigned = self._profile_ids(cur, [int(r["roster_id"]) for r in rows])
            return [_row_to_roster(r, assigned.get(int(r["roster_id"]), [])) for r in rows]

    def add_profiles(self, roster_id: int, profile_ids: Iterable[int]) -> int:
        rows = [(int(roster_id), int(pid)) for pid in profile_ids]
        if not rows:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                "INSERT IGNORE INTO roster_profiles(roster_id, profile_id) VALUES(%s,%s)",
                rows,
            )
            return int(cur.rowcount)

    def remove_profile(self, roster_id: int, profile_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM roster_profiles WHERE roster_id=%s AND profile_id=%s",
                (int(roster_id), int(profile_id)),
            )
            return cur.rowcount > 0
