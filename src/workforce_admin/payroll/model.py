from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from ..core.enums import BulkPayrollItemStatus, BulkPayrollStatus, PayrollStatus


@dataclass(frozen=True)
class Payroll:
    payroll_id: int
    profile_id: int
    pay_period_start: date
    pay_period_end: date
    total_hours: Decimal
    hourly_rate: Decimal
    gross_pay: Decimal
    deductions: Decimal
    net_pay: Decimal
    status: PayrollStatus = PayrollStatus.PENDING
    bank_account_id: Optional[int] = None
    profile_name: Optional[str] = None
    profile_role: Optional[str] = None

    def overlaps(self, start: date, end: date) -> bool:
        return self.pay_period_start <= end and start <= self.pay_period_end

    def covers(self, day: date) -> bool:
        return self.pay_period_start <= day <= self.pay_period_end

    def to_dict(self) -> dict:
        return {
            "payroll_id": self.payroll_id,
            "profile_id": self.profile_id,
            "profile_name": self.profile_name,
            "pay_period_start": self.pay_period_start.isoformat(),
            "pay_period_end": self.pay_period_end.isoformat(),
            "total_hours": str(self.total_hours),
            "hourly_rate": str(self.hourly_rate),
            "gross_pay": str(self.gross_pay),
            "deductions": str(self.deductions),
            "net_pay": str(self.net_pay),
            "status": self.status.value,
            "bank_account_id": self.bank_account_id,
        }


@dataclass(frozen=True)
class PayrollPreview:
    """Figures a payroll would get for one profile, before anything is stored."""

    profile_id: int
    profile_name: str
    entry_ids: tuple[int, ...]
    total_hours: Decimal
    overtime_hours: Decimal
    hourly_rate: Decimal
    gross_pay: Decimal
    deductions: Decimal
    net_pay: Decimal

    def to_dict(self) -> dict:
        return {
            "profile_id": self.profile_id,
            "profile_name": self.profile_name,
            "entries": len(self.entry_ids),
            "entry_ids": list(self.entry_ids),
            "total_hours": str(self.total_hours),
            "overtime_hours": str(self.overtime_hours),
            "hourly_rate": str(self.hourly_rate),
            "gross_pay": str(self.gross_pay),
            "deductions": str(self.deductions),
            "net_pay": str(self.net_pay),
        }


@dataclass(frozen=True)
class SalaryTemplate:
    template_id: int
    name: str
    base_hourly_rate: Decimal
    overtime_multiplier: Decimal = Decimal("1.5")
    deduction_percentage: Decimal = Decimal("0.10")
    description: Optional[str] = None
    profile_id: Optional[int] = None
    client_id: Optional[int] = None
    project_id: Optional[int] = None
    bank_account_id: Optional[int] = None
    is_active: bool = True

    @property
    def is_global(self) -> bool:
        return self.profile_id is None and self.client_id is None and self.project_id is None

    def to_dict(self) -> dict:
        return {
            "template_id": self.template_id,
            "name": self.name,
            "description": self.description,
            "base_hourly_rate": str(self.base_hourly_rate),
            "overtime_multiplier": str(self.overtime_multiplier),
            "deduction_percentage": str(self.deduction_percentage),
            "profile_id": self.profile_id,
            "client_id": self.client_id,
            "project_id": self.project_id,
            "bank_account_id": self.bank_account_id,
            "is_active": self.is_active,
        }


@dataclass(frozen=True)
class BulkPayrollItem:
    item_id: int
    bulk_id: int
    profile_id: int
    status: BulkPayrollItemStatus = BulkPayrollItemStatus.PENDING
    payroll_id: Optional[int] = None
    amount: Decimal = Decimal("0")
    error_message: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "item_id": self.item_id,
            "bulk_id": self.bulk_id,
            "profile_id": self.profile_id,
            "payroll_id": self.payroll_id,
            "amount": str(self.amount),
            "status": self.status.value,
            "error_message": self.error_message,
        }


@dataclass(frozen=True)
class BulkPayroll:
    """A named batch run of payroll generation over one period."""

    bulk_id: int
    name: str
    pay_period_start: date
    pay_period_end: date
    status: BulkPayrollStatus = BulkPayrollStatus.DRAFT
    total_records: int = 0
    processed_records: int = 0
    total_amount: Decimal = Decimal("0")
    created_by: Optional[int] = None
    items: tuple[BulkPayrollItem, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "bulk_id": self.bulk_id,
            "name": self.name,
            "pay_period_start": self.pay_period_start.isoformat(),
            "pay_period_end": self.pay_period_end.isoformat(),
            "status": self.status.value,
            "total_records": self.total_records,
            "processed_records": self.processed_records,
            "total_amount": str(self.total_amount),
            "created_by": self.created_by,
            "items": [i.to_dict() for i in self.items],
        }
