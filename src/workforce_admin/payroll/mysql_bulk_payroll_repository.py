from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional, Sequence

from ..core.enums import BulkPayrollItemStatus, BulkPayrollStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone, update_assignments
from .model import BulkPayroll, BulkPayrollItem
from .repository import BulkPayrollRepository

_BATCH_COLUMNS = (
    "bulk_id, name, pay_period_start, pay_period_end, status, total_records, "
    "processed_records, total_amount, created_by"
)


def _row_to_item(r: dict) -> BulkPayrollItem:
    return BulkPayrollItem(
        item_id=int(r["item_id"]),
        bulk_id=int(r["bulk_id"]),
        profile_id=int(r["profile_id"]),
        payroll_id=r.get("payroll_id"),
        amount=as_decimal(r.get("amount")) or Decimal("0"),
        status=BulkPayrollItemStatus(r.get("status") or BulkPayrollItemStatus.PENDING.value),
        error_message=r.get("error_message"),
    )


def _row_to_batch(r: dict, items: Sequence[BulkPayrollItem] = ()) -> BulkPayroll:
    return BulkPayroll(
        bulk_id=int(r["bulk_id"]),
        name=r["name"],
        pay_period_start=r["pay_period_start"],
        pay_period_end=r["pay_period_end"],
        status=BulkPayrollStatus(r.get("status") or BulkPayrollStatus.DRAFT.value),
        total_records=int(r.get("total_records") or 0),
        processed_records=int(r.get("processed_records") or 0),
        total_amount=as_decimal(r.get("total_amount")) or Decimal("0"),
        created_by=r.get("created_by"),
        items=tuple(items),
    )


class MySQLBulkPayrollRepository(BulkPayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, bulk_id: int) -> Optional[BulkPayroll]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_BATCH_COLUMNS} FROM bulk_payrolls WHERE bulk_id=%s", (bulk_id,))
            row = fetchone(cur)
            if not row:
                return None
            cur.execute(
                "SELECT item_id, bulk_id, profile_id, payroll_id, amount, status, error_message "
                "FROM bulk_payroll_items WHERE bulk_id=%s ORDER BY item_id",
                (bulk_id,),
            )
            return _row_to_batch(row, [_row_to_item(r) for r in fetchall(cur)])

    def create(self, **fields: Any) -> int:
        assignments, params = update_assignments(fields)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"INSERT INTO bulk_payrolls SET {assignments}", params)
            return int(cur.lastrowid)

    def update(self, bulk_id: int, changes: dict[str, Any]) -> bool:
        if not changes:
            return False
        assignments, params = update_assignments(changes)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE bulk_payrolls SET {assignments} WHERE bulk_id=%s", params + (bulk_id,))
            return cur.rowcount > 0

    def list(self) -> Sequence[BulkPayroll]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_BATCH_COLUMNS} FROM bulk_payrolls ORDER BY bulk_id DESC")
            return [_row_to_batch(r) for r in fetchall(cur)]

    def add_item(self, **fields: Any) -> int:
        assignments, params = update_assignments(fields)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"INSERT INTO bulk_payroll_items SET {assignments}", params)
            return int(cur.lastrowid)

    def update_item(self, item_id: int, changes: dict[str, Any]) -> bool:
        if not changes:
            return False
        assignments, params = update_assignments(changes)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE bulk_payroll_items SET {assignments} WHERE item_id=%s", params + (item_id,))
            return cur.rowcount > 0
