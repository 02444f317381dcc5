from datetime import date, time
from decimal import Decimal

import pytest

from workforce_admin.core.enums import BulkPayrollItemStatus, BulkPayrollStatus
from workforce_admin.core.exceptions import ConflictError, ValidationError


def _approved_day(container, world, profile_id, day):
    entry_id = container.working_hours_service.log_hours(
        profile_id=profile_id,
        client_id=world.client_id,
        project_id=world.project_id,
        work_date=day,
        start_time=time(9, 0),
        end_time=time(17, 0),
    )
    container.working_hours_service.approve(entry_id=entry_id)


def test_one_failing_profile_does_not_stop_the_batch(container, world):
    _approved_day(container, world, world.alice_id, date(2025, 3, 3))
    service = container.bulk_payroll_service
    bulk_id = service.create_batch(
        name="March",
        pay_period_start=date(2025, 3, 1),
        pay_period_end=date(2025, 3, 31),
        profile_ids=[world.alice_id, world.bob_id, world.alice_id],
        created_by=world.admin_id,
    )
    assert service.get(bulk_id).total_records == 2

    batch = service.process(bulk_id=bulk_id, processed_by=world.accountant_id)
    assert batch.status == BulkPayrollStatus.COMPLETED
    assert batch.processed_records == 1
    assert batch.total_amount == Decimal("216.00")

    items = {i.profile_id: i for i in batch.items}
    assert items[world.alice_id].status == BulkPayrollItemStatus.PROCESSED
    assert items[world.alice_id].payroll_id is not None
    assert items[world.bob_id].status == BulkPayrollItemStatus.FAILED
    assert "No approved working hours" in items[world.bob_id].error_message

    with pytest.raises(ConflictError):
        service.process(bulk_id=bulk_id)


def test_batch_with_nothing_to_pay_fails(container, world):
    service = container.bulk_payroll_service
    bulk_id = service.create_batch(
        name="Empty", pay_period_start=date(2025, 3, 1), pay_period_end=date(2025, 3, 31), profile_ids=[world.bob_id]
    )
    assert service.process(bulk_id=bulk_id).status == BulkPayrollStatus.FAILED


def test_create_batch_validation(container, world):
    service = container.bulk_payroll_service
    with pytest.raises(ValidationError):
        service.create_batch(name="X", pay_period_start=date(2025, 3, 1), pay_period_end=date(2025, 3, 31), profile_ids=[])
    with pytest.raises(ValidationError):
        service.create_batch(
            name="X", pay_period_start=date(2025, 3, 31), pay_period_end=date(2025, 3, 1), profile_ids=[world.bob_id]
        )


def test_unexpected_error_still_closes_the_batch(container, world, monkeypatch):
    service = container.bulk_payroll_service
    bulk_id = service.create_batch(
        name="March",
        pay_period_start=date(2025, 3, 1),
        pay_period_end=date(2025, 3, 31),
        profile_ids=[world.alice_id],
    )

    def explode(**kwargs):
        raise RuntimeError("database went away")

    monkeypatch.setattr(container.payroll_service, "generate_for_profile", explode)
    with pytest.raises(RuntimeError):
        service.process(bulk_id=bulk_id)

    batch = service.get(bulk_id)
    assert batch.status == BulkPayrollStatus.FAILED
    assert batch.processed_records == 0
