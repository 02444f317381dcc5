from __future__ import annotations

from datetime import date
from typing import Any, Iterable, Optional, Protocol, Sequence

from ..core.enums import PayrollStatus
from .model import BulkPayroll, BulkPayrollItem, Payroll, SalaryTemplate


class PayrollRepository(Protocol):
    def get_by_id(self, payroll_id: int) -> Optional[Payroll]:
        raise NotImplementedError

    def create(self, **fields: Any) -> int:
        raise NotImplementedError

    def update(self, payroll_id: int, changes: dict[str, Any]) -> bool:
        raise NotImplementedError

    def delete(self, payroll_id: int) -> bool:
        """Delete the payroll and its working-hour links."""

        raise NotImplementedError

    def list(
        self,
        *,
        profile_id: Optional[int] = None,
        status: Optional[PayrollStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[Payroll]:
        """Payrolls whose period overlaps [start_date, end_date], newest first."""

        raise NotImplementedError

    def create_with_entries(self, entry_ids: Iterable[int], **fields: Any) -> int:
        """Insert the payroll and link its entries in one transaction."""

        raise NotImplementedError

    def linked_entry_ids(self, payroll_id: int) -> list[int]:
        raise NotImplementedError

    def already_linked(self, entry_ids: Iterable[int]) -> set[int]:
        """Subset of entry_ids that already belong to some payroll."""

        raise NotImplementedError


class SalaryTemplateRepository(Protocol):
    def get_by_id(self, template_id: int) -> Optional[SalaryTemplate]:
        raise NotImplementedError

    def create(self, **fields: Any) -> int:
        raise NotImplementedError

    def update(self, template_id: int, changes: dict[str, Any]) -> bool:
        raise NotImplementedError

    def delete(self, template_id: int) -> bool:
        raise NotImplementedError

    def list(self, *, is_active: Optional[bool] = None) -> Sequence[SalaryTemplate]:
        raise NotImplementedError


class BulkPayrollRepository(Protocol):
    def get_by_id(self, bulk_id: int) -> Optional[BulkPayroll]:
        """Batch with its items."""

        raise NotImplementedError

    def create(self, **fields: Any) -> int:
        raise NotImplementedError

    def update(self, bulk_id: int, changes: dict[str, Any]) -> bool:
        raise NotImplementedError

    def list(self) -> Sequence[BulkPayroll]:
        """Batches without items, newest first."""

        raise NotImplementedError

    def add_item(self, **fields: Any) -> int:
        raise NotImplementedError

    def update_item(self, item_id: int, changes: dict[str, Any]) -> bool:
        raise NotImplementedError
