from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Optional, Sequence

from ..core.enums import PayrollStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone, update_assignments, where_clause
from .model import Payroll
from .repository import PayrollRepository

_SELECT = """
    SELECT
        pay.payroll_id, pay.profile_id, pay.pay_period_start, pay.pay_period_end,
        pay.total_hours, pay.hourly_rate, pay.gross_pay, pay.deductions, pay.net_pay,
        pay.status, pay.bank_account_id,
        p.full_name AS profile_name,
        p.role AS profile_role
    FROM payroll pay
    LEFT JOIN profiles p ON p.profile_id = pay.profile_id
"""


def _money(value: Any) -> Decimal:
    return as_decimal(value) or Decimal("0")


def _row_to_payroll(r: dict) -> Payroll:
    return Payroll(
        payroll_id=int(r["payroll_id"]),
        profile_id=int(r["profile_id"]),
        pay_period_start=r["pay_period_start"],
        pay_period_end=r["pay_period_end"],
        total_hours=_money(r.get("total_hours")),
        hourly_rate=_money(r.get("hourly_rate")),
        gross_pay=_money(r.get("gross_pay")),
        deductions=_money(r.get("deductions")),
        net_pay=_money(r.get("net_pay")),
        status=PayrollStatus(r.get("status") or PayrollStatus.PENDING.value),
        bank_account_id=r.get("bank_account_id"),
        profile_name=r.get("profile_name"),
        profile_role=r.get("profile_role"),
    )


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, payroll_id: int) -> Optional[Payroll]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE pay.payroll_id=%s", (payroll_id,))
            row = fetchone(cur)
            return _row_to_payroll(row) if row else None

    def create(self, **fields: Any) -> int:
        assignments, params = update_assignments(fields)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"INSERT INTO payroll SET {assignments}", params)
            return int(cur.lastrowid)

    def update(self, payroll_id: int, changes: dict[str, Any]) -> bool:
        if not changes:
            return False
        assignments, params = update_assignments(changes)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE payroll SET {assignments} WHERE payroll_id=%s", params + (payroll_id,))
            return cur.rowcount > 0

    def delete(self, payroll_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM payroll_working_hours WHERE payroll_id=%s", (payroll_id,))
            cur.execute("DELETE FROM payroll WHERE payroll_id=%s", (payroll_id,))
            return cur.rowcount > 0

    def list(
        self,
        *,
        profile_id: Optional[int] = None,
        status: Optional[PayrollStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[Payroll]:
        where, params = where_clause(
            [
                ("pay.profile_id=%s", profile_id),
                ("pay.status=%s", status),
                ("pay.pay_period_end >= %s", start_date),
                ("pay.pay_period_start <= %s", end_date),
            ]
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} {where} ORDER BY pay.pay_period_start DESC, pay.payroll_id DESC", params)
            return [_row_to_payroll(r) for r in fetchall(cur)]

    def create_with_entries(self, entry_ids: Iterable[int], **fields: Any) -> int:
        ids = [int(eid) for eid in entry_ids]
        assignments, params = update_assignments(fields)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"INSERT INTO payroll SET {assignments}", params)
            payroll_id = int(cur.lastrowid)
            if ids:
                cur.executemany(
                    "INSERT INTO payroll_working_hours(payroll_id, working_hours_id) VALUES(%s,%s)",
                    [(payroll_id, eid) for eid in ids],
                )
            return payroll_id

    def linked_entry_ids(self, payroll_id: int) -> list[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT working_hours_id FROM payroll_working_hours WHERE payroll_id=%s ORDER BY working_hours_id",
                (payroll_id,),
            )
            return [int(r["working_hours_id"]) for r in fetchall(cur)]

    def already_linked(self, entry_ids: Iterable[int]) -> set[int]:
        ids = [int(eid) for eid in entry_ids]
        if not ids:
            return set()
        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT working_hours_id FROM payroll_working_hours WHERE working_hours_id IN ({placeholders})",
                tuple(ids),
            )
            return {int(r["working_hours_id"]) for r in fetchall(cur)}
