from __future__ import annotations

from typing import Any, Optional, Sequence

from ..core.enums import ClientStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    count_references,
    db_cursor,
    fetchall,
    fetchone,
    integrity_as_conflict,
    update_assignments,
    where_clause,
)
from .model import Client
from .repository import ClientRepository

_REFERENCES = (
    ("projects", "client_id"),
    ("rosters", "client_id"),
    ("working_hours", "client_id"),
    ("bank_transactions", "client_id"),
)


def _row_to_client(r: dict) -> Client:
    return Client(
        client_id=int(r["client_id"]),
        name=r["name"],
        email=r["email"],
        company=r["company"],
        phone=r.get("phone"),
        status=ClientStatus(r.get("status") or ClientStatus.ACTIVE.value),
    )


class MySQLClientRepository(ClientRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, client_id: int) -> Optional[Client]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT client_id, name, email, company, phone, status FROM clients WHERE client_id=%s",
                (client_id,),
            )
            r = fetchone(cur)
            return _row_to_client(r) if r else None

    def create(self, **fields: Any) -> int:
        assignments, params = update_assignments(fields)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"INSERT INTO clients SET {assignments}", params)
            return int(cur.lastrowid)

    def update(self, client_id: int, changes: dict[str, Any]) -> bool:
        if not changes:
            return False
        assignments, params = update_assignments(changes)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE clients SET {assignments} WHERE client_id=%s", params + (client_id,))
            return cur.rowcount > 0

    def delete(self, client_id: int) -> bool:
        with integrity_as_conflict("Client is still referenced; mark it inactive instead"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute("DELETE FROM clients WHERE client_id=%s", (client_id,))
                return cur.rowcount > 0

    def list(self, *, status: Optional[ClientStatus] = None, search: Optional[str] = None) -> Sequence[Client]:
        where, params = where_clause(
            [
                ("status=%s", status),
                ("(name LIKE CONCAT('%%', %s, '%%') OR company LIKE CONCAT('%%', %s, '%%'))", search),
            ]
        )
        # the search fragment uses its value twice
        if search is not None:
            params = params + (search,)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT client_id, name, email, company, phone, status FROM clients {where} ORDER BY name",
                params,
            )
            return [_row_to_client(r) for r in fetchall(cur)]

    def count_references(self, client_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            return count_references(cur, _REFERENCES, client_id)
