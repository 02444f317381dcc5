from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional, Sequence

from ..core.enums import EmploymentType, Role
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
from .model import Profile
from .repository import ProfileRepository

_REFERENCES = (
    ("payroll", "profile_id"),
    ("working_hours", "profile_id"),
    ("rosters", "profile_id"),
    ("roster_profiles", "profile_id"),
    ("bank_accounts", "profile_id"),
    ("bank_transactions", "profile_id"),
    ("salary_templates", "profile_id"),
    ("bulk_payroll_items", "profile_id"),
)

_COLUMNS = """
    profile_id, email, full_name, role, password_hash, phone, employment_type,
    hourly_rate, salary, tax_file_number, start_date, full_address, is_active
"""


def _row_to_profile(row: dict) -> Profile:
    return Profile(
        profile_id=int(row["profile_id"]),
        email=row["email"],
        full_name=row["full_name"],
        role=Role(row["role"]),
        password_hash=row["password_hash"],
        phone=row.get("phone"),
        employment_type=EmploymentType(row["employment_type"]) if row.get("employment_type") else None,
        hourly_rate=as_decimal(row.get("hourly_rate")) or Decimal("0"),
        salary=as_decimal(row.get("salary")),
        tax_file_number=row.get("tax_file_number"),
        start_date=row.get("start_date"),
        full_address=row.get("full_address"),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLProfileRepository(ProfileRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, profile_id: int) -> Optional[Profile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM profiles WHERE profile_id=%s", (profile_id,))
            row = fetchone(cur)
            return _row_to_profile(row) if row else None

    def get_by_email(self, email: str) -> Optional[Profile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM profiles WHERE email=%s", (email,))
            row = fetchone(cur)
            return _row_to_profile(row) if row else None

    def create(self, **fields: Any) -> int:
        assignments, params = update_assignments(fields)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"INSERT INTO profiles SET {assignments}", params)
            return int(cur.lastrowid)

    def update(self, profile_id: int, changes: dict[str, Any]) -> bool:
        if not changes:
            return False
        assignments, params = update_assignments(changes)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE profiles SET {assignments} WHERE profile_id=%s", params + (profile_id,))
            return cur.rowcount > 0

    def delete_by_id(self, profile_id: int) -> bool:
        with integrity_as_conflict("Profile is still referenced; deactivate it instead"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute("DELETE FROM profiles WHERE profile_id=%s", (profile_id,))
                return cur.rowcount > 0

    def list(
        self,
        *,
        role: Optional[Role] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> Sequence[Profile]:
        where, params = where_clause(
            [
                ("role=%s", role),
                ("is_active=%s", None if is_active is None else int(is_active)),
                ("(full_name LIKE CONCAT('%%', %s, '%%'))", search),
            ]
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM profiles {where} ORDER BY full_name", params)
            return [_row_to_profile(r) for r in fetchall(cur)]

    def has_dependents(self, profile_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            return count_references(cur, _REFERENCES, profile_id) > 0
