from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional, Sequence

from ..core.enums import ProjectStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    as_decimal,
    count_references,
    db_cursor,
    fetchall,
    fetchone,
    integrity_as_conflict,
    update_assignments,
    where_clause,
)
from .model import Project
from .repository import ProjectRepository

_REFERENCES = (
    ("working_hours", "project_id"),
    ("rosters", "project_id"),
    ("bank_transactions", "project_id"),
)

_SELECT = """
    SELECT p.project_id, p.name, p.description, p.client_id, p.status,
           p.start_date, p.end_date, p.budget, c.name AS client_name
    FROM projects p
    LEFT JOIN clients c ON c.client_id = p.client_id
"""


def _row_to_project(r: dict) -> Project:
    return Project(
        project_id=int(r["project_id"]),
        name=r["name"],
        description=r.get("description"),
        client_id=int(r["client_id"]),
        status=ProjectStatus(r.get("status") or ProjectStatus.ACTIVE.value),
        start_date=r["start_date"],
        end_date=r.get("end_date"),
        budget=as_decimal(r.get("budget")) or Decimal("0"),
        client_name=r.get("client_name"),
    )


class MySQLProjectRepository(ProjectRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, project_id: int) -> Optional[Project]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE p.project_id=%s", (project_id,))
            r = fetchone(cur)
            return _row_to_project(r) if r else None

    def create(self, **fields: Any) -> int:
        assignments, params = update_assignments(fields)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"INSERT INTO projects SET {assignments}", params)
            return int(cur.lastrowid)

    def update(self, project_id: int, changes: dict[str, Any]) -> bool:
        if not changes:
            return False
        assignments, params = update_assignments(changes)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE projects SET {assignments} WHERE project_id=%s", params + (project_id,))
            return cur.rowcount > 0

    def delete(self, project_id: int) -> bool:
        with integrity_as_conflict("Project is still referenced; mark it completed instead"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute("DELETE FROM projects WHERE project_id=%s", (project_id,))
                return cur.rowcount > 0

    def list(
        self,
        *,
        client_id: Optional[int] = None,
        status: Optional[ProjectStatus] = None,
    ) -> Sequence[Project]:
        where, params = where_clause([("p.client_id=%s", client_id), ("p.status=%s", status)])
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} {where} ORDER BY p.start_date DESC, p.name", params)
            return [_row_to_project(r) for r in fetchall(cur)]

    def count_references(self, project_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            return count_references(cur, _REFERENCES, project_id)
