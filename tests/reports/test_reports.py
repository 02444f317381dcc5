from datetime import date, time

import pytest

from workforce_admin.core.exceptions import ValidationError


def _entry(container, world, profile_id, day, approve=True):
    entry_id = container.working_hours_service.log_hours(
        profile_id=profile_id,
        client_id=world.client_id,
        project_id=world.project_id,
        work_date=day,
        start_time=time(9, 0),
        end_time=time(17, 0),
    )
    if approve:
        container.working_hours_service.approve(entry_id=entry_id)
    return entry_id


@pytest.fixture
def march(container, world):
    _entry(container, world, world.alice_id, date(2025, 3, 3))
    _entry(container, world, world.alice_id, date(2025, 3, 4))
    _entry(container, world, world.bob_id, date(2025, 3, 5), approve=False)
    container.payroll_service.generate(start=date(2025, 3, 1), end=date(2025, 3, 31))


def test_dashboard(container, world, march):
    data = container.report_service.dashboard()
    assert data["active_profiles"] == 4
    assert data["active_clients"] == 1
    assert data["active_projects"] == 1
    assert data["pending_working_hours"] == 1
    assert data["pending_payrolls"] == 1
    assert data["bank_balance"] == "0.00"


def test_hours_report_groups(container, world, march):
    report = container.report_service.hours_report(start=date(2025, 3, 1), end=date(2025, 3, 31))
    assert report["totals"]["entries"] == 3
    assert report["totals"]["worked_hours"] == "24.00"
    assert report["totals"]["payable"] == "680.00"
    assert report["by_employee"][0]["name"] == "Alice Worker"
    assert report["by_employee"][0]["hours"] == "16.00"
    assert report["by_client"] == [
        {"id": world.client_id, "name": "Acme", "entries": 3, "hours": "24.00", "overtime_hours": "0.00", "payable": "680.00"}
    ]
    by_status = {row["status"]: row for row in report["by_status"]}
    assert by_status["approved"]["entries"] == 2
    assert by_status["pending"]["hours"] == "8.00"


def test_hours_report_rejects_inverted_period(container):
    with pytest.raises(ValidationError):
        container.report_service.hours_report(start=date(2025, 3, 31), end=date(2025, 3, 1))


def test_payroll_report(container, world, march):
    report = container.report_service.payroll_report(start=date(2025, 3, 1), end=date(2025, 3, 31))
    assert report["summary"]["payrolls"] == 1
    assert report["summary"]["total_net"] == "432.00"
    assert report["monthly"] == [{"month": "2025-03", "count": 1, "hours": "16.00", "gross": "480.00", "net": "432.00"}]
    assert report["by_role"][0]["role"] == "employee"
    assert report["top_earners"][0]["profile_id"] == world.alice_id


def test_working_hours_rows_oldest_first(container, world, march):
    rows = container.report_service.working_hours_rows(start=date(2025, 3, 1), end=date(2025, 3, 31))
    assert [r["date"] for r in rows] == ["2025-03-03", "2025-03-04", "2025-03-05"]
    assert rows[0]["profile_name"] == "Alice Worker"
