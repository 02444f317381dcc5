from datetime import date, time

import pytest

from workforce_admin.core.enums import ClientStatus, ProjectStatus
from workforce_admin.core.exceptions import ConflictError, NotFoundError, ValidationError


def test_client_create_and_status(container):
    service = container.client_service
    client_id = service.create(name=" Globex ", email="HELLO@globex.test", company="Globex")
    client = service.get(client_id)
    assert client.name == "Globex"
    assert client.email == "hello@globex.test"

    assert service.set_status(client_id=client_id, status="inactive").status == ClientStatus.INACTIVE
    with pytest.raises(ValidationError):
        service.set_status(client_id=client_id, status="archived")


def test_client_with_projects_cannot_be_deleted(container, world):
    with pytest.raises(ConflictError):
        container.client_service.delete(client_id=world.client_id)


def test_project_dates_and_client_checked(container, world):
    service = container.project_service
    with pytest.raises(NotFoundError):
        service.create(name="Ghost", client_id=999, start_date=date(2025, 1, 1))
    with pytest.raises(ValidationError):
        service.create(
            name="Backwards", client_id=world.client_id, start_date=date(2025, 2, 1), end_date=date(2025, 1, 1)
        )
    with pytest.raises(ValidationError):
        service.update(project_id=world.project_id, end_date=date(2024, 12, 31))


def test_project_status_and_listing(container, world):
    service = container.project_service
    service.set_status(project_id=world.project_id, status="on-hold")
    assert [p.project_id for p in service.list(status="on-hold")] == [world.project_id]
    assert service.get(world.project_id).status == ProjectStatus.ON_HOLD
    assert service.get(world.project_id).client_name == "Acme"


def test_project_with_hours_cannot_be_deleted(container, world):
    container.working_hours_service.log_hours(
        profile_id=world.alice_id,
        client_id=world.client_id,
        project_id=world.project_id,
        work_date=date(2025, 3, 3),
        start_time=time(9, 0),
        end_time=time(12, 0),
    )
    with pytest.raises(ConflictError):
        container.project_service.delete(project_id=world.project_id)


def test_project_on_a_roster_cannot_be_deleted(container, world):
    container.roster_service.create_roster(
        created_by=world.admin_id,
        client_id=world.client_id,
        project_id=world.project_id,
        work_date=date(2025, 3, 3),
        start_time=time(8, 0),
        end_time=time(16, 0),
    )
    with pytest.raises(ConflictError):
        container.project_service.delete(project_id=world.project_id)


def test_client_with_transactions_cannot_be_deleted(container):
    client_id = container.client_service.create(name="Globex", email="ap@globex.test", company="Globex")
    container.banking_service.record_transaction(
        description="Invoice 17",
        amount="120",
        transaction_type="deposit",
        category="income",
        transaction_date=date(2025, 3, 3),
        client_id=client_id,
    )
    with pytest.raises(ConflictError):
        container.client_service.delete(client_id=client_id)


def test_unreferenced_project_and_client_can_be_deleted(container):
    client_id = container.client_service.create(name="Initech", email="it@initech.test", company="Initech")
    project_id = container.project_service.create(name="Migration", client_id=client_id, start_date=date(2025, 1, 1))
    container.project_service.delete(project_id=project_id)
    container.client_service.delete(client_id=client_id)
    with pytest.raises(NotFoundError):
        container.client_service.get(client_id)
