from datetime import date, time
from decimal import Decimal

import pytest

from workforce_admin.core.enums import Role, WorkingHoursStatus
from workforce_admin.core.exceptions import AuthorizationError, ConflictError, ValidationError
from workforce_admin.working_hours.model import WorkingHoursFilter


def _log(container, world, **overrides):
    fields = dict(
        profile_id=world.alice_id,
        client_id=world.client_id,
        project_id=world.project_id,
        work_date=date(2025, 3, 3),
        start_time=time(9, 0),
        end_time=time(17, 0),
    )
    fields.update(overrides)
    return container.working_hours_service.log_hours(**fields)


def test_log_hours_uses_profile_rate_by_default(container, world):
    entry = container.working_hours_service.get(_log(container, world))
    assert entry.status == WorkingHoursStatus.PENDING
    assert entry.hourly_rate == Decimal("30.00")
    assert entry.payable_amount == Decimal("240.00")
    assert entry.profile_name == "Alice Worker"


def test_log_hours_rejects_project_of_another_client(container, world, repos):
    other_client = repos.clients.create(name="Other", email="o@other.test", company="Other Co")
    with pytest.raises(ValidationError):
        _log(container, world, client_id=other_client)


def test_log_hours_rejects_inverted_times(container, world):
    with pytest.raises(ValidationError):
        _log(container, world, start_time=time(17, 0), end_time=time(9, 0))


def test_update_recomputes_figures(container, world):
    entry_id = _log(container, world)
    entry = container.working_hours_service.update_entry(
        entry_id=entry_id, sign_in_time=time(9, 0), sign_out_time=time(18, 30)
    )
    assert entry.actual_hours == Decimal("9.50")
    assert entry.overtime_hours == Decimal("1.50")
    assert entry.payable_amount == Decimal("285.00")


def test_only_pending_entries_can_be_decided(container, world):
    service = container.working_hours_service
    entry_id = _log(container, world)
    service.approve(entry_id=entry_id)
    with pytest.raises(ConflictError):
        service.reject(entry_id=entry_id)


def test_approve_many_skips_decided_entries(container, world):
    service = container.working_hours_service
    first = _log(container, world)
    second = _log(container, world, work_date=date(2025, 3, 4))
    service.reject(entry_id=second)

    assert service.approve_many(entry_ids=[first, second]) == 1
    assert service.get(second).status == WorkingHoursStatus.REJECTED


def test_reopen_is_admin_only(container, world):
    service = container.working_hours_service
    entry_id = _log(container, world)
    service.approve(entry_id=entry_id)
    with pytest.raises(AuthorizationError):
        service.revert_to_pending(current_role=Role.ACCOUNTANT, entry_id=entry_id)
    assert service.revert_to_pending(current_role=Role.ADMIN, entry_id=entry_id).status == WorkingHoursStatus.PENDING


def test_paid_entries_are_frozen(container, world, repos):
    service = container.working_hours_service
    entry_id = _log(container, world)
    repos.working_hours.update(entry_id, {"status": WorkingHoursStatus.PAID})
    with pytest.raises(ConflictError):
        service.update_entry(entry_id=entry_id, notes="late")
    with pytest.raises(ConflictError):
        service.delete_entry(entry_id=entry_id)


def test_summary_counts_by_status(container, world):
    service = container.working_hours_service
    _log(container, world)
    approved = _log(container, world, work_date=date(2025, 3, 4), profile_id=world.bob_id)
    service.approve(entry_id=approved)

    summary = service.summary(WorkingHoursFilter())
    assert summary["entries"] == 2
    assert summary["total_hours"] == "16.00"
    assert summary["payable_amount"] == "440.00"
    assert summary["by_status"]["approved"] == 1
    assert summary["by_status"]["pending"] == 1


def test_hours_in_a_payroll_are_frozen_until_the_payroll_is_deleted(container, world):
    service = container.working_hours_service
    entry_id = _log(container, world)
    service.approve(entry_id=entry_id)
    (payroll,) = container.payroll_service.generate(start=date(2025, 3, 1), end=date(2025, 3, 31))

    with pytest.raises(ConflictError):
        service.revert_to_pending(current_role=Role.ADMIN, entry_id=entry_id)
    with pytest.raises(ConflictError):
        service.update_entry(entry_id=entry_id, end_time=time(12, 0))
    with pytest.raises(ConflictError):
        service.delete_entry(entry_id=entry_id)
    assert service.get(entry_id).total_hours == Decimal("8.00")

    container.payroll_service.delete(payroll_id=payroll.payroll_id)
    reopened = service.revert_to_pending(current_role=Role.ADMIN, entry_id=entry_id)
    assert reopened.status == WorkingHoursStatus.PENDING
