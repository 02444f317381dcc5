from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone, update_assignments, where_clause
from .model import SalaryTemplate
from .repository import SalaryTemplateRepository

_COLUMNS = (
    "template_id, name, description, base_hourly_rate, overtime_multiplier, deduction_percentage, "
    "profile_id, client_id, project_id, bank_account_id, is_active"
)


def _row_to_template(r: dict) -> SalaryTemplate:
    return SalaryTemplate(
        template_id=int(r["template_id"]),
        name=r["name"],
        description=r.get("description"),
        base_hourly_rate=as_decimal(r.get("base_hourly_rate")) or Decimal("0"),
        overtime_multiplier=as_decimal(r.get("overtime_multiplier")) or Decimal("1.5"),
        deduction_percentage=as_decimal(r.get("deduction_percentage")) or Decimal("0"),
        profile_id=r.get("profile_id"),
        client_id=r.get("client_id"),
        project_id=r.get("project_id"),
        bank_account_id=r.get("bank_account_id"),
        is_active=bool(r.get("is_active")),
    )


class MySQLSalaryTemplateRepository(SalaryTemplateRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, template_id: int) -> Optional[SalaryTemplate]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM salary_templates WHERE template_id=%s", (template_id,))
            row = fetchone(cur)
            return _row_to_template(row) if row else None

    def create(self, **fields: Any) -> int:
        assignments, params = update_assignments(fields)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"INSERT INTO salary_templates SET {assignments}", params)
            return int(cur.lastrowid)

    def update(self, template_id: int, changes: dict[str, Any]) -> bool:
        if not changes:
            return False
        assignments, params = update_assignments(changes)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE salary_templates SET {assignments} WHERE template_id=%s", params + (template_id,))
            return cur.rowcount > 0

    def delete(self, template_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM salary_templates WHERE template_id=%s", (template_id,))
            return cur.rowcount > 0

    def list(self, *, is_active: Optional[bool] = None) -> Sequence[SalaryTemplate]:
        where, params = where_clause([("is_active=%s", None if is_active is None else int(is_active))])
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM salary_templates {where} ORDER BY name", params)
            return [_row_to_template(r) for r in fetchall(cur)]
