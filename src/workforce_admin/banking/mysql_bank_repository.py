from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional, Sequence

from ..core.enums import TransactionCategory, TransactionType
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
from .model import BankAccount, BankTransaction, TransactionFilter
from .repository import BankAccountRepository, BankTransactionRepository

_ACCOUNT_REFERENCES = (
    ("bank_transactions", "bank_account_id"),
    ("payroll", "bank_account_id"),
    ("salary_templates", "bank_account_id"),
)

_ACCOUNT_COLUMNS = (
    "account_id, profile_id, bank_name, account_number, account_holder_name, "
    "bsb_code, swift_code, is_primary, opening_balance"
)
_TRANSACTION_COLUMNS = (
    "transaction_id, description, amount, type, category, transaction_date, "
    "bank_account_id, client_id, project_id, profile_id, created_by"
)


def _row_to_account(r: dict) -> BankAccount:
    return BankAccount(
        account_id=int(r["account_id"]),
        profile_id=r.get("profile_id"),
        bank_name=r["bank_name"],
        account_number=r["account_number"],
        account_holder_name=r["account_holder_name"],
        bsb_code=r.get("bsb_code"),
        swift_code=r.get("swift_code"),
        is_primary=bool(r.get("is_primary")),
        opening_balance=as_decimal(r.get("opening_balance")) or Decimal("0"),
    )


def _row_to_transaction(r: dict) -> BankTransaction:
    return BankTransaction(
        transaction_id=int(r["transaction_id"]),
        description=r["description"],
        amount=as_decimal(r["amount"]),
        type=TransactionType(r["type"]),
        category=TransactionCategory(r["category"]),
        transaction_date=r["transaction_date"],
        bank_account_id=r.get("bank_account_id"),
        client_id=r.get("client_id"),
        project_id=r.get("project_id"),
        profile_id=r.get("profile_id"),
        created_by=r.get("created_by"),
    )


class MySQLBankAccountRepository(BankAccountRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, account_id: int) -> Optional[BankAccount]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_ACCOUNT_COLUMNS} FROM bank_accounts WHERE account_id=%s", (account_id,))
            row = fetchone(cur)
            return _row_to_account(row) if row else None

    def create(self, **fields: Any) -> int:
        assignments, params = update_assignments(fields)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"INSERT INTO bank_accounts SET {assignments}", params)
            return int(cur.lastrowid)

    def update(self, account_id: int, changes: dict[str, Any]) -> bool:
        if not changes:
            return False
        assignments, params = update_assignments(changes)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE bank_accounts SET {assignments} WHERE account_id=%s", params + (account_id,))
            return cur.rowcount > 0

    def delete(self, account_id: int) -> bool:
        with integrity_as_conflict("Bank account is still referenced and cannot be deleted"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute("DELETE FROM bank_accounts WHERE account_id=%s", (account_id,))
                return cur.rowcount > 0

    def list(self, *, profile_id: Optional[int] = None) -> Sequence[BankAccount]:
        where, params = where_clause([("profile_id=%s", profile_id)])
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_ACCOUNT_COLUMNS} FROM bank_accounts {where} ORDER BY is_primary DESC, bank_name",
                params,
            )
            return [_row_to_account(r) for r in fetchall(cur)]

    def clear_primary(self, *, profile_id: Optional[int], keep_account_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            if profile_id is None:
                cur.execute(
                    "UPDATE bank_accounts SET is_primary=0 WHERE profile_id IS NULL AND account_id<>%s",
                    (keep_account_id,),
                )
            else:
                cur.execute(
                    "UPDATE bank_accounts SET is_primary=0 WHERE profile_id=%s AND account_id<>%s",
                    (profile_id, keep_account_id),
                )

    def count_references(self, account_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            return count_references(cur, _ACCOUNT_REFERENCES, account_id)


class MySQLBankTransactionRepository(BankTransactionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, transaction_id: int) -> Optional[BankTransaction]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_TRANSACTION_COLUMNS} FROM bank_transactions WHERE transaction_id=%s",
                (transaction_id,),
            )
            row = fetchone(cur)
            return _row_to_transaction(row) if row else None

    def create(self, **fields: Any) -> int:
        assignments, params = update_assignments(fields)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"INSERT INTO bank_transactions SET {assignments}", params)
            return int(cur.lastrowid)

    def update(self, transaction_id: int, changes: dict[str, Any]) -> bool:
        if not changes:
            return False
        assignments, params = update_assignments(changes)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE bank_transactions SET {assignments} WHERE transaction_id=%s",
                params + (transaction_id,),
            )
            return cur.rowcount > 0

    def delete(self, transaction_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM bank_transactions WHERE transaction_id=%s", (transaction_id,))
            return cur.rowcount > 0

    def list(self, filters: TransactionFilter) -> Sequence[BankTransaction]:
        where, params = where_clause(
            [
                ("type=%s", filters.type),
                ("category=%s", filters.category),
                ("bank_account_id=%s", filters.bank_account_id),
                ("profile_id=%s", filters.profile_id),
                ("transaction_date >= %s", filters.start_date),
                ("transaction_date <= %s", filters.end_date),
                ("description LIKE CONCAT('%%', %s, '%%')", filters.search),
            ]
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_TRANSACTION_COLUMNS} FROM bank_transactions {where} "
                "ORDER BY transaction_date DESC, transaction_id DESC",
                params,
            )
            return [_row_to_transaction(r) for r in fetchall(cur)]
