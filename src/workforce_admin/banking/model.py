from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from ..core.enums import TransactionCategory, TransactionType


@dataclass(frozen=True)
class BankAccount:
    """A payout account; `profile_id` is None for company accounts."""

    account_id: int
    bank_name: str
    account_number: str
    account_holder_name: str
    profile_id: Optional[int] = None
    bsb_code: Optional[str] = None
    swift_code: Optional[str] = None
    is_primary: bool = False
    opening_balance: Decimal = Decimal("0")

    @property
    def masked_number(self) -> str:
        return "****" + self.account_number[-4:]

    def to_dict(self) -> dict:
        return {
            "account_id": self.account_id,
            "profile_id": self.profile_id,
            "bank_name": self.bank_name,
            "account_number": self.masked_number,
            "account_holder_name": self.account_holder_name,
            "bsb_code": self.bsb_code,
            "swift_code": self.swift_code,
            "is_primary": self.is_primary,
            "opening_balance": str(self.opening_balance),
        }


@dataclass(frozen=True)
class BankTransaction:
    transaction_id: int
    description: str
    amount: Decimal
    type: TransactionType
    category: TransactionCategory
    transaction_date: date
    bank_account_id: Optional[int] = None
    client_id: Optional[int] = None
    project_id: Optional[int] = None
    profile_id: Optional[int] = None
    created_by: Optional[int] = None

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.type == TransactionType.DEPOSIT else -self.amount

    def to_dict(self) -> dict:
        return {
            "transaction_id": self.transaction_id,
            "description": self.description,
            "amount": str(self.amount),
            "type": self.type.value,
            "category": self.category.value,
            "date": self.transaction_date.isoformat(),
            "bank_account_id": self.bank_account_id,
            "client_id": self.client_id,
            "project_id": self.project_id,
            "profile_id": self.profile_id,
        }


@dataclass(frozen=True)
class TransactionFilter:
    type: Optional[TransactionType] = None
    category: Optional[TransactionCategory] = None
    bank_account_id: Optional[int] = None
    profile_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    search: Optional[str] = None
