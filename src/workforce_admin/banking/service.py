from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from ..common.time_math import ZERO, to_money, total
from ..common.validators import optional_text, require_decimal, require_non_empty, require_positive_id
from ..core.enums import TransactionCategory, TransactionType
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..profiles.repository import ProfileRepository
from .model import BankAccount, BankTransaction, TransactionFilter
from .repository import BankAccountRepository, BankTransactionRepository

logger = logging.getLogger(__name__)


def parse_transaction_type(value: Any) -> TransactionType:
    try:
        return TransactionType(value)
    except ValueError:
        raise ValidationError(f"Unknown transaction type: {value}")


def parse_transaction_category(value: Any) -> TransactionCategory:
    try:
        return TransactionCategory(value)
    except ValueError:
        raise ValidationError(f"Unknown transaction category: {value}")


class BankingService:
    _ACCOUNT_FIELDS = ("bank_name", "account_number", "account_holder_name", "bsb_code", "swift_code", "opening_balance")
    _TRANSACTION_FIELDS = (
        "description",
        "amount",
        "type",
        "category",
        "transaction_date",
        "bank_account_id",
        "client_id",
        "project_id",
        "profile_id",
    )

    def __init__(
        self,
        accounts: BankAccountRepository,
        transactions: BankTransactionRepository,
        profiles: ProfileRepository,
    ):
        self._accounts = accounts
        self._transactions = transactions
        self._profiles = profiles

    # Accounts

    def get_account(self, account_id: int) -> BankAccount:
        account = self._accounts.get_by_id(account_id)
        if not account:
            raise NotFoundError("Bank account not found")
        return account

    def list_accounts(self, *, profile_id: Optional[int] = None):
        return self._accounts.list(profile_id=profile_id)

    def create_account(
        self,
        *,
        bank_name: str,
        account_number: str,
        account_holder_name: str,
        profile_id: Optional[int] = None,
        bsb_code: Optional[str] = None,
        swift_code: Optional[str] = None,
        is_primary: bool = False,
        opening_balance: Any = 0,
    ) -> int:
        if profile_id is not None and not self._profiles.get_by_id(int(profile_id)):
            raise NotFoundError("Profile not found")

        account_id = self._accounts.create(
            profile_id=int(profile_id) if profile_id is not None else None,
            bank_name=require_non_empty(bank_name, "Bank name"),
            account_number=require_non_empty(account_number, "Account number"),
            account_holder_name=require_non_empty(account_holder_name, "Account holder name"),
            bsb_code=optional_text(bsb_code),
            swift_code=optional_text(swift_code),
            is_primary=bool(is_primary),
            opening_balance=to_money(require_decimal(opening_balance, "Opening balance", minimum=None)),
        )
        if is_primary:
            self._accounts.clear_primary(profile_id=profile_id, keep_account_id=account_id)
        return account_id

    def update_account(self, *, account_id: int, **fields: Any) -> BankAccount:
        account = self.get_account(account_id)
        changes: dict[str, Any] = {}
        for key, value in fields.items():
            if key == "is_primary":
                continue
            if key not in self._ACCOUNT_FIELDS:
                raise ValidationError(f"Field cannot be changed: {key}")
            if key in ("bank_name", "account_number", "account_holder_name"):
                changes[key] = require_non_empty(value, key.replace("_", " ").capitalize())
            elif key == "opening_balance":
                changes[key] = to_money(require_decimal(value, "Opening balance", minimum=None))
            else:
                changes[key] = optional_text(value)
        if changes:
            self._accounts.update(account_id, changes)
        if fields.get("is_primary") is not None and bool(fields["is_primary"]) != account.is_primary:
            if fields["is_primary"]:
                return self.set_primary(account_id=account_id)
            self._accounts.update(account_id, {"is_primary": False})
        return self.get_account(account_id)

    def set_primary(self, *, account_id: int) -> BankAccount:
        account = self.get_account(account_id)
        self._accounts.update(account_id, {"is_primary": True})
        self._accounts.clear_primary(profile_id=account.profile_id, keep_account_id=account_id)
        return self.get_account(account_id)

    def delete_account(self, *, account_id: int) -> None:
        self.get_account(account_id)
        if self._accounts.count_references(account_id) > 0:
            raise ConflictError("Bank account is still referenced by other records and cannot be deleted")
        if not self._accounts.delete(account_id):
            raise ValidationError("Failed to delete bank account")

    # Transactions

    def get_transaction(self, transaction_id: int) -> BankTransaction:
        tx = self._transactions.get_by_id(transaction_id)
        if not tx:
            raise NotFoundError("Transaction not found")
        return tx

    def list_transactions(self, filters: TransactionFilter):
        return self._transactions.list(filters)

    def record_transaction(
        self,
        *,
        description: str,
        amount: Any,
        transaction_type: Any,
        category: Any,
        transaction_date: date,
        bank_account_id: Optional[int] = None,
        client_id: Optional[int] = None,
        project_id: Optional[int] = None,
        profile_id: Optional[int] = None,
        created_by: Optional[int] = None,
    ) -> int:
        value = require_decimal(amount, "Amount")
        if value <= ZERO:
            raise ValidationError("Amount must be greater than 0")
        if bank_account_id is not None:
            self.get_account(int(bank_account_id))

        kind = parse_transaction_type(transaction_type)
        tx_id = self._transactions.create(
            description=require_non_empty(description, "Description"),
            amount=to_money(value),
            type=kind,
            category=parse_transaction_category(category),
            transaction_date=transaction_date,
            bank_account_id=bank_account_id,
            client_id=client_id,
            project_id=project_id,
            profile_id=profile_id,
            created_by=created_by,
        )
        logger.info("Recorded %s of %s (transaction %s)", kind.value, value, tx_id)
        return tx_id

    def update_transaction(self, *, transaction_id: int, **fields: Any) -> BankTransaction:
        self.get_transaction(transaction_id)
        changes: dict[str, Any] = {}
        for key, value in fields.items():
            if key not in self._TRANSACTION_FIELDS:
                raise ValidationError(f"Field cannot be changed: {key}")
            if key == "amount":
                amount = require_decimal(value, "Amount")
                if amount <= ZERO:
                    raise ValidationError("Amount must be greater than 0")
                changes[key] = to_money(amount)
            elif key == "description":
                changes[key] = require_non_empty(value, "Description")
            elif key == "type":
                changes[key] = parse_transaction_type(value)
            elif key == "category":
                changes[key] = parse_transaction_category(value)
            elif key == "transaction_date":
                changes[key] = value
            elif value in (None, ""):
                changes[key] = None
            elif key == "bank_account_id":
                changes[key] = self.get_account(require_positive_id(value, key)).account_id
            else:
                changes[key] = require_positive_id(value, key)
        if changes:
            self._transactions.update(transaction_id, changes)
        return self.get_transaction(transaction_id)

    def delete_transaction(self, *, transaction_id: int) -> None:
        self.get_transaction(transaction_id)
        if not self._transactions.delete(transaction_id):
            raise ValidationError("Failed to delete transaction")

    # Aggregates

    def balance_summary(self, *, start_date: Optional[date] = None, end_date: Optional[date] = None) -> dict:
        """Opening balances plus deposits minus withdrawals, overall and per account."""

        accounts = list(self._accounts.list())
        txs = list(self._transactions.list(TransactionFilter(start_date=start_date, end_date=end_date)))

        deposits = total(t.amount for t in txs if t.type == TransactionType.DEPOSIT)
        withdrawals = total(t.amount for t in txs if t.type == TransactionType.WITHDRAWAL)
        opening = total(a.opening_balance for a in accounts)

        per_account: dict[int, Decimal] = defaultdict(lambda: ZERO)
        for t in txs:
            if t.bank_account_id is not None:
                per_account[int(t.bank_account_id)] += t.signed_amount

        return {
            "opening_balance": str(opening),
            "total_deposits": str(deposits),
            "total_withdrawals": str(withdrawals),
            "balance": str(to_money(opening + deposits - withdrawals)),
            "transactions": len(txs),
            "accounts": [
                {
                    "account_id": a.account_id,
                    "bank_name": a.bank_name,
                    "account_number": a.masked_number,
                    "is_primary": a.is_primary,
                    "balance": str(to_money(a.opening_balance + per_account[a.account_id])),
                }
                for a in accounts
            ],
        }

    def totals_by_category(self, filters: Optional[TransactionFilter] = None) -> list[dict]:
        buckets: dict[TransactionCategory, dict[str, Decimal]] = {}
        for t in self._transactions.list(filters or TransactionFilter()):
            bucket = buckets.setdefault(t.category, {"deposits": ZERO, "withdrawals": ZERO})
            key = "deposits" if t.type == TransactionType.DEPOSIT else "withdrawals"
            bucket[key] += t.amount

        out = []
        for category, sums in buckets.items():
            out.append(
                {
                    "category": category.value,
                    "deposits": str(to_money(sums["deposits"])),
                    "withdrawals": str(to_money(sums["withdrawals"])),
                    "net": str(to_money(sums["deposits"] - sums["withdrawals"])),
                }
            )
        out.sort(key=lambda x: x["category"])
        return out
