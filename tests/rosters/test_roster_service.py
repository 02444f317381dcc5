from datetime import date, time
from decimal import Decimal

import pytest

from workforce_admin.core.enums import RosterStatus, WorkingHoursStatus
from workforce_admin.core.exceptions import ConflictError, ValidationError
from workforce_admin.working_hours.model import WorkingHoursFilter


def _roster(container, world, **overrides):
    fields = dict(
        created_by=world.admin_id,
        client_id=world.client_id,
        project_id=world.project_id,
        work_date=date(2025, 3, 3),
        end_date=date(2025, 3, 5),
        start_time=time(8, 0),
        end_time=time(16, 0),
        profile_ids=[world.alice_id, world.bob_id, world.alice_id],
        name="Stocktake",
        expected_profiles=3,
    )
    fields.update(overrides)
    return container.roster_service.create_roster(**fields)


def test_create_dedupes_profiles_and_sets_hours(container, world):
    roster = container.roster_service.get(_roster(container, world))
    assert roster.profile_ids == (world.alice_id, world.bob_id)
    assert roster.total_hours == Decimal("8.00")
    assert roster.status == RosterStatus.PENDING


def test_create_validates_window(container, world):
    with pytest.raises(ValidationError):
        _roster(container, world, end_date=date(2025, 3, 1))
    with pytest.raises(ValidationError):
        _roster(container, world, start_time=time(16, 0), end_time=time(8, 0))


def test_generate_working_hours_is_idempotent(container, world):
    service = container.roster_service
    roster_id = _roster(container, world, per_hour_rate="35")

    assert service.generate_working_hours(roster_id=roster_id) == 6
    assert service.generate_working_hours(roster_id=roster_id) == 0

    entries = container.working_hours_service.list(WorkingHoursFilter(roster_id=roster_id))
    assert len(entries) == 6
    assert {e.hourly_rate for e in entries} == {Decimal("35.00")}
    assert all(e.status == WorkingHoursStatus.PENDING for e in entries)
    assert all(e.notes == "Stocktake" for e in entries)


def test_cancelled_roster_does_not_generate(container, world):
    service = container.roster_service
    roster_id = _roster(container, world)
    service.cancel(roster_id=roster_id)
    with pytest.raises(ConflictError):
        service.generate_working_hours(roster_id=roster_id)


def test_locked_roster_refuses_changes(container, world):
    service = container.roster_service
    roster_id = _roster(container, world)
    service.set_locked(roster_id=roster_id, locked=True)

    with pytest.raises(ConflictError):
        service.update_roster(roster_id=roster_id, name="Renamed")
    with pytest.raises(ConflictError):
        service.unassign_profile(roster_id=roster_id, profile_id=world.bob_id)
    with pytest.raises(ConflictError):
        service.delete_roster(roster_id=roster_id)

    service.set_locked(roster_id=roster_id, locked=False)
    assert service.update_roster(roster_id=roster_id, end_time=time(18, 0)).total_hours == Decimal("10.00")


def test_confirm_requires_profiles(container, world):
    service = container.roster_service
    roster_id = _roster(container, world, profile_ids=[])
    with pytest.raises(ValidationError):
        service.confirm(roster_id=roster_id)
    service.assign_profiles(roster_id=roster_id, profile_ids=[world.bob_id])
    assert service.confirm(roster_id=roster_id).status == RosterStatus.CONFIRMED
    with pytest.raises(ConflictError):
        service.confirm(roster_id=roster_id)


def test_weekly_and_profile_filter(container, world):
    service = container.roster_service
    _roster(container, world)
    _roster(container, world, work_date=date(2025, 3, 12), end_date=None, profile_ids=[world.bob_id])

    assert len(service.weekly(day=date(2025, 3, 6))) == 1
    assert len(service.list_range(start=date(2025, 3, 1), end=date(2025, 3, 31), profile_id=world.bob_id)) == 2
    assert len(service.list_range(start=date(2025, 3, 1), end=date(2025, 3, 31), profile_id=world.alice_id)) == 1


def test_day_report(container, world):
    service = container.roster_service
    roster_id = _roster(container, world)
    service.generate_working_hours(roster_id=roster_id)

    (line,) = service.day_report(day=date(2025, 3, 4))
    assert line["assigned_profiles"] == 2
    assert line["expected_profiles"] == 3
    assert line["pending_entries"] == 2
    assert line["total_hours"] == "16.00"
    assert line["total_payable"] == "440.00"


def test_generate_refuses_inactive_profiles_before_creating_anything(container, world):
    service = container.roster_service
    roster_id = _roster(container, world)
    container.profile_service.set_active(profile_id=world.bob_id, is_active=False)

    with pytest.raises(ValidationError, match="Bob Worker"):
        service.generate_working_hours(roster_id=roster_id)
    assert container.working_hours_service.list(WorkingHoursFilter(roster_id=roster_id)) == []

    service.unassign_profile(roster_id=roster_id, profile_id=world.bob_id)
    assert service.generate_working_hours(roster_id=roster_id) == 3
