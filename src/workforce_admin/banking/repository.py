from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from .model import BankAccount, BankTransaction, TransactionFilter


class BankAccountRepository(Protocol):
    def get_by_id(self, account_id: int) -> Optional[BankAccount]:
        raise NotImplementedError

    def create(self, **fields: Any) -> int:
        raise NotImplementedError

    def update(self, account_id: int, changes: dict[str, Any]) -> bool:
        raise NotImplementedError

    def delete(self, account_id: int) -> bool:
        raise NotImplementedError

    def list(self, *, profile_id: Optional[int] = None) -> Sequence[BankAccount]:
        raise NotImplementedError

    def clear_primary(self, *, profile_id: Optional[int], keep_account_id: int) -> None:
        """Unset is_primary on the owner's other accounts (company accounts when profile_id is None)."""

        raise NotImplementedError

    def count_references(self, account_id: int) -> int:
        """Transactions, payrolls and salary templates that point at the account."""

        raise NotImplementedError


class BankTransactionRepository(Protocol):
    def get_by_id(self, transaction_id: int) -> Optional[BankTransaction]:
        raise NotImplementedError

    def create(self, **fields: Any) -> int:
        raise NotImplementedError

    def update(self, transaction_id: int, changes: dict[str, Any]) -> bool:
        raise NotImplementedError

    def delete(self, transaction_id: int) -> bool:
        raise NotImplementedError

    def list(self, filters: TransactionFilter) -> Sequence[BankTransaction]:
        """Newest first."""

        raise NotImplementedError
