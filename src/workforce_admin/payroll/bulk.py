from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional

from ..common.time_math import ZERO, to_money
from ..common.validators import require_non_empty
from ..core.enums import BulkPayrollItemStatus, BulkPayrollStatus
from ..core.exceptions import ConflictError, DomainError, NotFoundError, ValidationError
from .model import BulkPayroll
from .repository import BulkPayrollRepository
from .service import PayrollService

logger = logging.getLogger(__name__)


class BulkPayrollService:
    """Runs payroll generation for many profiles; one profile failing does not stop the batch."""

    def __init__(self, batches: BulkPayrollRepository, payroll: PayrollService):
        self._batches = batches
        self._payroll = payroll

    def get(self, bulk_id: int) -> BulkPayroll:
        batch = self._batches.get_by_id(bulk_id)
        if not batch:
            raise NotFoundError("Bulk payroll not found")
        return batch

    def list(self):
        return self._batches.list()

    def create_batch(
        self,
        *,
        name: str,
        pay_period_start: date,
        pay_period_end: date,
        profile_ids: Iterable[int],
        created_by: Optional[int] = None,
    ) -> int:
        if pay_period_end < pay_period_start:
            raise ValidationError("Pay period end must be on or after its start")
        ids: list[int] = []
        for pid in profile_ids:
            if int(pid) not in ids:
                ids.append(int(pid))
        if not ids:
            raise ValidationError("Select at least one profile")

        bulk_id = self._batches.create(
            name=require_non_empty(name, "Name"),
            pay_period_start=pay_period_start,
            pay_period_end=pay_period_end,
            status=BulkPayrollStatus.DRAFT,
            total_records=len(ids),
            processed_records=0,
            total_amount=ZERO,
            created_by=created_by,
        )
        for pid in ids:
            self._batches.add_item(bulk_id=bulk_id, profile_id=pid, status=BulkPayrollItemStatus.PENDING)
        return bulk_id

    def process(self, *, bulk_id: int, processed_by: Optional[int] = None) -> BulkPayroll:
        batch = self.get(bulk_id)
        if batch.status != BulkPayrollStatus.DRAFT:
            raise ConflictError("Only draft batches can be processed")
        self._batches.update(bulk_id, {"status": BulkPayrollStatus.PROCESSING})

        processed = 0
        amount = ZERO
        status = BulkPayrollStatus.FAILED
        try:
            for item in batch.items:
                try:
                    payroll = self._payroll.generate_for_profile(
                        profile_id=item.profile_id,
                        start=batch.pay_period_start,
                        end=batch.pay_period_end,
                        created_by=processed_by,
                    )
                except DomainError as exc:
                    logger.warning("Bulk %s: profile %s failed: %s", bulk_id, item.profile_id, exc)
                    self._batches.update_item(
                        item.item_id,
                        {"status": BulkPayrollItemStatus.FAILED, "error_message": str(exc)},
                    )
                    continue
                processed += 1
                amount += payroll.net_pay
                self._batches.update_item(
                    item.item_id,
                    {
                        "status": BulkPayrollItemStatus.PROCESSED,
                        "payroll_id": payroll.payroll_id,
                        "amount": payroll.net_pay,
                        "error_message": None,
                    },
                )
            if processed:
                status = BulkPayrollStatus.COMPLETED
        finally:
            # An unexpected error still closes the batch as failed.
            self._batches.update(
                bulk_id,
                {"status": status, "processed_records": processed, "total_amount": to_money(amount)},
            )
        logger.info("Bulk payroll %s %s: %s/%s processed", bulk_id, status.value, processed, len(batch.items))
        return self.get(bulk_id)
