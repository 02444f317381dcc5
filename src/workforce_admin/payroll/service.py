from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Optional

from ..banking.service import BankingService
from ..common.datetime_utils import now_local
from ..common.time_math import ZERO, average, net_pay, payable_amount, to_hours, to_money, total
from ..common.validators import optional_text, require_decimal, require_non_empty, require_positive_id
from ..core.constants import DEFAULT_DEDUCTION_RATE, DEFAULT_OVERTIME_MULTIPLIER
from ..core.enums import PayrollStatus, TransactionCategory, TransactionType, WorkingHoursStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..notifications.service import NotificationService
from ..profiles.repository import ProfileRepository
from ..working_hours.model import WorkingHour, WorkingHoursFilter
from ..working_hours.repository import WorkingHoursRepository
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import Payroll, PayrollPreview, SalaryTemplate
from .repository import PayrollRepository, SalaryTemplateRepository

logger = logging.getLogger(__name__)


def _parse_status(value: Any) -> PayrollStatus:
    try:
        return PayrollStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown payroll status: {value}")


def _check_period(start: date, end: date) -> None:
    if end < start:
        raise ValidationError("Pay period end must be on or after its start")


class PayrollService:
    _EDITABLE = ("pay_period_start", "pay_period_end", "total_hours", "hourly_rate", "deductions", "bank_account_id")
    _TEMPLATE_FIELDS = (
        "name",
        "description",
        "base_hourly_rate",
        "overtime_multiplier",
        "deduction_percentage",
        "profile_id",
        "client_id",
        "project_id",
        "bank_account_id",
        "is_active",
    )

    def __init__(
        self,
        payrolls: PayrollRepository,
        templates: SalaryTemplateRepository,
        working_hours: WorkingHoursRepository,
        profiles: ProfileRepository,
        notifications: NotificationService,
        banking: BankingService,
        *,
        deduction_rate: Any = DEFAULT_DEDUCTION_RATE,
        overtime_multiplier: Any = DEFAULT_OVERTIME_MULTIPLIER,
    ):
        self._payrolls = payrolls
        self._templates = templates
        self._working_hours = working_hours
        self._profiles = profiles
        self._notifications = notifications
        self._banking = banking
        self._default_calculator = StandardPayrollCalculator(
            overtime_multiplier=overtime_multiplier,
            deduction_rate=deduction_rate,
        )

    def get(self, payroll_id: int) -> Payroll:
        payroll = self._payrolls.get_by_id(payroll_id)
        if not payroll:
            raise NotFoundError("Payroll not found")
        return payroll

    def list(
        self,
        *,
        profile_id: Optional[int] = None,
        status: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ):
        return self._payrolls.list(
            profile_id=profile_id,
            status=_parse_status(status) if status else None,
            start_date=start_date,
            end_date=end_date,
        )

    @staticmethod
    def totals(payrolls: Iterable[Payroll]) -> dict:
        items = list(payrolls)
        return {
            "count": len(items),
            "total_hours": str(to_hours(total(p.total_hours for p in items))),
            "gross_pay": str(total(p.gross_pay for p in items)),
            "deductions": str(total(p.deductions for p in items)),
            "net_pay": str(total(p.net_pay for p in items)),
        }

    # Templates

    def _template_for(self, profile_id: int) -> Optional[SalaryTemplate]:
        """Active template for the profile, otherwise the first active global template."""

        fallback = None
        for template in self._templates.list(is_active=True):
            if template.profile_id == int(profile_id):
                return template
            if fallback is None and template.is_global:
                fallback = template
        return fallback

    def calculator_for(self, profile_id: int) -> PayrollCalculator:
        template = self._template_for(profile_id)
        if template is None:
            return self._default_calculator
        return StandardPayrollCalculator(
            overtime_multiplier=template.overtime_multiplier,
            deduction_rate=template.deduction_percentage,
        )

    def get_template(self, template_id: int) -> SalaryTemplate:
        template = self._templates.get_by_id(template_id)
        if not template:
            raise NotFoundError("Salary template not found")
        return template

    def list_templates(self, *, is_active: Optional[bool] = None):
        return self._templates.list(is_active=is_active)

    def _template_changes(self, fields: dict[str, Any]) -> dict[str, Any]:
        changes: dict[str, Any] = {}
        for key, value in fields.items():
            if key not in self._TEMPLATE_FIELDS:
                raise ValidationError(f"Field cannot be changed: {key}")
            if key == "name":
                changes[key] = require_non_empty(value, "Name")
            elif key == "description":
                changes[key] = optional_text(value)
            elif key == "base_hourly_rate":
                changes[key] = to_money(require_decimal(value, "Base hourly rate"))
            elif key == "overtime_multiplier":
                changes[key] = require_decimal(value, "Overtime multiplier", minimum=Decimal("1"))
            elif key == "deduction_percentage":
                rate = require_decimal(value, "Deduction percentage")
                if rate > 1:
                    raise ValidationError("Deduction percentage must be a fraction between 0 and 1")
                changes[key] = rate
            elif key == "is_active":
                changes[key] = bool(value)
            else:
                changes[key] = require_positive_id(value, key) if value not in (None, "") else None
        return changes

    def create_template(self, *, name: str, base_hourly_rate: Any, **fields: Any) -> int:
        fields.setdefault("overtime_multiplier", DEFAULT_OVERTIME_MULTIPLIER)
        fields.setdefault("deduction_percentage", DEFAULT_DEDUCTION_RATE)
        fields.setdefault("is_active", True)
        changes = self._template_changes(dict(fields, name=name, base_hourly_rate=base_hourly_rate))
        return self._templates.create(**changes)

    def update_template(self, *, template_id: int, **fields: Any) -> SalaryTemplate:
        self.get_template(template_id)
        changes = self._template_changes(fields)
        if changes:
            self._templates.update(template_id, changes)
        return self.get_template(template_id)

    def delete_template(self, *, template_id: int) -> None:
        self.get_template(template_id)
        if not self._templates.delete(template_id):
            raise ValidationError("Failed to delete salary template")

    # Generation

    def _payable_entries(self, profile_id: int, entries: list[WorkingHour], start: date, end: date) -> list[WorkingHour]:
        linked = self._payrolls.already_linked(e.entry_id for e in entries)
        paid = self._payrolls.list(profile_id=profile_id, status=PayrollStatus.PAID, start_date=start, end_date=end)
        return [
            e
            for e in entries
            if e.entry_id not in linked and not any(p.covers(e.work_date) for p in paid)
        ]

    def preview(self, *, start: date, end: date, profile_ids: Optional[Iterable[int]] = None) -> list[PayrollPreview]:
        """Approved, not yet paid hours in the period grouped per profile."""

        _check_period(start, end)
        wanted = {int(pid) for pid in profile_ids} if profile_ids else None

        grouped: dict[int, list[WorkingHour]] = {}
        entries = self._working_hours.list(
            WorkingHoursFilter(status=WorkingHoursStatus.APPROVED, start_date=start, end_date=end)
        )
        for entry in entries:
            if wanted is not None and entry.profile_id not in wanted:
                continue
            grouped.setdefault(entry.profile_id, []).append(entry)

        lines: list[PayrollPreview] = []
        for profile_id, group in grouped.items():
            usable = self._payable_entries(profile_id, group, start, end)
            if not usable:
                continue
            profile = self._profiles.get_by_id(profile_id)
            if not profile:
                raise NotFoundError(f"Profile not found: {profile_id}")

            rate = next((e.hourly_rate for e in usable if e.hourly_rate > ZERO), profile.hourly_rate)
            hours = to_hours(total(e.worked_hours for e in usable))
            overtime = to_hours(total(e.overtime_hours for e in usable))
            pay = self.calculator_for(profile_id).calculate(total_hours=hours, overtime_hours=overtime, hourly_rate=rate)

            lines.append(
                PayrollPreview(
                    profile_id=profile_id,
                    profile_name=profile.full_name,
                    entry_ids=tuple(e.entry_id for e in usable),
                    total_hours=hours,
                    overtime_hours=pay.overtime_hours,
                    hourly_rate=to_money(rate),
                    gross_pay=pay.gross_pay,
                    deductions=pay.deductions,
                    net_pay=pay.net_pay,
                )
            )
        lines.sort(key=lambda line: line.profile_name)
        return lines

    def _has_overlap(self, profile_id: int, start: date, end: date) -> bool:
        return bool(self._payrolls.list(profile_id=profile_id, start_date=start, end_date=end))

    def _store(self, line: PayrollPreview, start: date, end: date, created_by: Optional[int]) -> Payroll:
        template = self._template_for(line.profile_id)
        payroll_id = self._payrolls.create_with_entries(
            line.entry_ids,
            profile_id=line.profile_id,
            pay_period_start=start,
            pay_period_end=end,
            total_hours=line.total_hours,
            hourly_rate=line.hourly_rate,
            gross_pay=line.gross_pay,
            deductions=line.deductions,
            net_pay=line.net_pay,
            status=PayrollStatus.PENDING,
            bank_account_id=template.bank_account_id if template else None,
            created_by=created_by,
        )
        try:
            self._notifications.send(
                recipient_profile_id=line.profile_id,
                sender_profile_id=created_by,
                title="New Payroll Created",
                message=(
                    f"Your payroll for period {start.isoformat()} to {end.isoformat()} has been created. "
                    f"Net amount: ${line.net_pay}"
                ),
                type="payroll_created",
                related_id=payroll_id,
            )
        except Exception:
            # Undo so the overlap guard does not block a retry.
            logger.warning("Payroll %s rolled back: notification failed", payroll_id)
            self._payrolls.delete(payroll_id)
            raise
        logger.info("Payroll %s created for profile %s (net %s)", payroll_id, line.profile_id, line.net_pay)
        return self.get(payroll_id)

    def generate(
        self,
        *,
        start: date,
        end: date,
        profile_ids: Optional[Iterable[int]] = None,
        created_by: Optional[int] = None,
    ) -> list[Payroll]:
        lines = self.preview(start=start, end=end, profile_ids=profile_ids)
        if not lines:
            raise ValidationError("No approved working hours to pay in this period")
        for line in lines:
            if self._has_overlap(line.profile_id, start, end):
                raise ConflictError(f"{line.profile_name} already has a payroll overlapping this period")
        return [self._store(line, start, end, created_by) for line in lines]

    def generate_for_profile(
        self,
        *,
        profile_id: int,
        start: date,
        end: date,
        created_by: Optional[int] = None,
    ) -> Payroll:
        lines = self.preview(start=start, end=end, profile_ids=[profile_id])
        if not lines:
            raise ValidationError("No approved working hours to pay in this period")
        if self._has_overlap(int(profile_id), start, end):
            raise ConflictError("A payroll already overlaps this period")
        return self._store(lines[0], start, end, created_by)

    def create_manual(
        self,
        *,
        profile_id: int,
        pay_period_start: date,
        pay_period_end: date,
        total_hours: Any,
        hourly_rate: Any = None,
        deductions: Any = 0,
        bank_account_id: Optional[int] = None,
        created_by: Optional[int] = None,
    ) -> int:
        profile = self._profiles.get_by_id(int(profile_id))
        if not profile:
            raise NotFoundError("Profile not found")
        _check_period(pay_period_start, pay_period_end)
        if self._has_overlap(profile.profile_id, pay_period_start, pay_period_end):
            raise ConflictError("A payroll already overlaps this period")
        if bank_account_id is not None:
            self._banking.get_account(int(bank_account_id))

        hours = to_hours(require_decimal(total_hours, "Total hours"))
        rate = profile.hourly_rate if hourly_rate in (None, "") else require_decimal(hourly_rate, "Hourly rate")
        gross = payable_amount(hours, rate)
        deducted = to_money(require_decimal(deductions or 0, "Deductions"))
        if deducted > gross:
            raise ValidationError("Deductions cannot exceed gross pay")

        return self._payrolls.create(
            profile_id=profile.profile_id,
            pay_period_start=pay_period_start,
            pay_period_end=pay_period_end,
            total_hours=hours,
            hourly_rate=to_money(rate),
            gross_pay=gross,
            deductions=deducted,
            net_pay=net_pay(gross, deducted),
            status=PayrollStatus.PENDING,
            bank_account_id=bank_account_id,
            created_by=created_by,
        )

    # Changes

    def _unpaid(self, payroll_id: int) -> Payroll:
        payroll = self.get(payroll_id)
        if payroll.status == PayrollStatus.PAID:
            raise ConflictError("Paid payrolls cannot be changed")
        return payroll

    def update(self, *, payroll_id: int, **fields: Any) -> Payroll:
        payroll = self._unpaid(payroll_id)
        for key in fields:
            if key not in self._EDITABLE:
                raise ValidationError(f"Field cannot be changed: {key}")

        start = fields.get("pay_period_start", payroll.pay_period_start)
        end = fields.get("pay_period_end", payroll.pay_period_end)
        _check_period(start, end)
        hours = to_hours(require_decimal(fields.get("total_hours", payroll.total_hours), "Total hours"))
        rate = to_money(require_decimal(fields.get("hourly_rate", payroll.hourly_rate), "Hourly rate"))
        deducted = to_money(require_decimal(fields.get("deductions", payroll.deductions), "Deductions"))
        gross = payable_amount(hours, rate)
        if deducted > gross:
            raise ValidationError("Deductions cannot exceed gross pay")

        changes: dict[str, Any] = {
            "pay_period_start": start,
            "pay_period_end": end,
            "total_hours": hours,
            "hourly_rate": rate,
            "gross_pay": gross,
            "deductions": deducted,
            "net_pay": net_pay(gross, deducted),
        }
        if "bank_account_id" in fields:
            account_id = fields["bank_account_id"]
            if account_id in (None, ""):
                changes["bank_account_id"] = None
            else:
                account = self._banking.get_account(require_positive_id(account_id, "bank_account_id"))
                changes["bank_account_id"] = account.account_id
        self._payrolls.update(payroll_id, changes)
        return self.get(payroll_id)

    def recalculate_from_linked_hours(self, *, payroll_id: int) -> Payroll:
        """Hours = sum of linked entries, rate = average entry rate; deductions are kept."""

        payroll = self._unpaid(payroll_id)
        entries = []
        for entry_id in self._payrolls.linked_entry_ids(payroll_id):
            entry = self._working_hours.get_by_id(entry_id)
            if entry:
                entries.append(entry)
        if not entries:
            raise ValidationError("Payroll has no linked working hours")

        hours = to_hours(total(e.worked_hours for e in entries))
        rate = average(e.hourly_rate for e in entries)
        gross = payable_amount(hours, rate)
        if payroll.deductions > gross:
            raise ValidationError("Deductions cannot exceed gross pay")
        self._payrolls.update(
            payroll_id,
            {
                "total_hours": hours,
                "hourly_rate": rate,
                "gross_pay": gross,
                "net_pay": net_pay(gross, payroll.deductions),
            },
        )
        return self.get(payroll_id)

    def approve(self, *, payroll_id: int) -> Payroll:
        payroll = self.get(payroll_id)
        if payroll.status != PayrollStatus.PENDING:
            raise ConflictError("Only pending payrolls can be approved")
        self._payrolls.update(payroll_id, {"status": PayrollStatus.APPROVED})
        return self.get(payroll_id)

    def mark_paid(
        self,
        *,
        payroll_id: int,
        bank_account_id: Optional[int] = None,
        paid_by: Optional[int] = None,
        paid_on: Optional[date] = None,
    ) -> Payroll:
        """Book the salary withdrawal and mark the payroll and its hours paid."""

        payroll = self.get(payroll_id)
        if payroll.status != PayrollStatus.APPROVED:
            raise ConflictError("Only approved payrolls can be marked as paid")
        account_id = bank_account_id or payroll.bank_account_id
        if not account_id:
            raise ValidationError("Select a bank account to pay from")
        account = self._banking.get_account(int(account_id))

        if payroll.net_pay > ZERO:
            self._banking.record_transaction(
                description=(
                    f"Salary payment: {payroll.profile_name or payroll.profile_id} "
                    f"({payroll.pay_period_start.isoformat()} to {payroll.pay_period_end.isoformat()})"
                ),
                amount=payroll.net_pay,
                transaction_type=TransactionType.WITHDRAWAL,
                category=TransactionCategory.SALARY,
                transaction_date=paid_on or now_local().date(),
                bank_account_id=account.account_id,
                profile_id=payroll.profile_id,
                created_by=paid_by,
            )

        self._payrolls.update(payroll_id, {"status": PayrollStatus.PAID, "bank_account_id": account.account_id})
        entry_ids = [
            entry.entry_id
            for entry in (self._working_hours.get_by_id(eid) for eid in self._payrolls.linked_entry_ids(payroll_id))
            if entry and entry.status == WorkingHoursStatus.APPROVED
        ]
        if entry_ids:
            self._working_hours.set_status_many(entry_ids, WorkingHoursStatus.PAID)

        self._notifications.send(
            recipient_profile_id=payroll.profile_id,
            sender_profile_id=paid_by,
            title="Payroll Paid",
            message=f"Your payroll of ${payroll.net_pay} has been paid to {account.bank_name}.",
            type="payroll_paid",
            related_id=payroll_id,
        )
        logger.info("Payroll %s paid from account %s", payroll_id, account.account_id)
        return self.get(payroll_id)

    def delete(self, *, payroll_id: int) -> None:
        self._unpaid(payroll_id)
        if not self._payrolls.delete(payroll_id):
            raise ValidationError("Failed to delete payroll")
