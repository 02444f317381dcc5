from datetime import date, time

import pytest

from workforce_admin.main import create_app
from workforce_admin.working_hours.model import WorkingHoursFilter


@pytest.fixture
def app(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container=container)


def _login(app, email, password):
    client = app.test_client()
    resp = client.post("/api/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return client


def _hours(world, **extra):
    body = {
        "client_id": world.client_id,
        "project_id": world.project_id,
        "date": "2025-03-03",
        "start_time": "09:00",
        "end_time": "17:00",
    }
    body.update(extra)
    return body


def test_health_and_anonymous_access(app):
    client = app.test_client()
    assert client.get("/api/health").get_json() == {"success": True, "status": "ok"}

    resp = client.get("/api/auth/me")
    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_login_failure_is_401(app, world):
    resp = app.test_client().post("/api/auth/login", json={"email": "alice@example.com", "password": "nope"})
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Invalid email or password"


def _logged(container, world):
    return container.working_hours_service.log_hours(
        profile_id=world.alice_id,
        client_id=world.client_id,
        project_id=world.project_id,
        work_date=date(2025, 3, 3),
        start_time=time(9, 0),
        end_time=time(17, 0),
    )


def test_employee_cannot_write_working_hours(app, world, container):
    alice = _login(app, "alice@example.com", world.password)
    me = alice.get("/api/auth/me").get_json()["data"]
    assert me["role"] == "employee"
    assert "working_hours_view" in me["permissions"]
    assert "working_hours_manage" not in me["permissions"]

    assert alice.post("/api/working-hours", json=_hours(world)).status_code == 403
    assert list(container.working_hours_service.list(WorkingHoursFilter())) == []

    entry_id = _logged(container, world)
    assert alice.get(f"/api/working-hours/{entry_id}").status_code == 200
    assert alice.patch(f"/api/working-hours/{entry_id}", json={"end_time": "23:00"}).status_code == 403
    assert alice.delete(f"/api/working-hours/{entry_id}").status_code == 403
    assert container.working_hours_service.get(entry_id).end_time == time(17, 0)
    assert alice.get("/api/profiles").status_code == 403


def test_manager_logs_hours_for_an_employee(app, world):
    admin = _login(app, "admin@example.com", world.password)
    created = admin.post("/api/working-hours", json=_hours(world, profile_id=world.alice_id))
    assert created.status_code == 201
    assert created.get_json()["data"]["profile_id"] == world.alice_id
    assert created.get_json()["data"]["payable_amount"] == "240.00"


def test_bad_input_is_400(app, world):
    admin = _login(app, "admin@example.com", world.password)
    resp = admin.post("/api/working-hours", json=_hours(world, profile_id=world.alice_id, date="03/03/2025"))
    assert resp.status_code == 400
    assert "Invalid date" in resp.get_json()["message"]


def test_patch_refuses_null_for_required_fields(app, world, container):
    entry_id = _logged(container, world)
    admin = _login(app, "admin@example.com", world.password)

    resp = admin.patch(f"/api/working-hours/{entry_id}", json={"start_time": None})
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Missing field: start_time"
    assert admin.patch(f"/api/working-hours/{entry_id}", json={"date": ""}).status_code == 400

    cleared = admin.patch(f"/api/working-hours/{entry_id}", json={"sign_in_time": None})
    assert cleared.status_code == 200


def test_patch_refuses_keys_that_name_the_row(app, world, container):
    entry_id = _logged(container, world)
    admin = _login(app, "admin@example.com", world.password)

    resp = admin.patch(f"/api/working-hours/{entry_id}", json={"entry_id": 99})
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Field cannot be changed: entry_id"
    assert admin.patch(f"/api/clients/{world.client_id}", json={"client_id": 5}).status_code == 400
    assert admin.patch(f"/api/profiles/{world.bob_id}", json={"current_role": "admin"}).status_code == 400
    assert admin.patch(f"/api/working-hours/{entry_id}", json={"client_id": "abc"}).status_code == 400


def test_payroll_patch_validates_its_body(app, world):
    accountant = _login(app, "acc@example.com", world.password)
    created = accountant.post(
        "/api/payroll",
        json={
            "profile_id": world.alice_id,
            "pay_period_start": "2025-03-01",
            "pay_period_end": "2025-03-31",
            "total_hours": "8",
        },
    )
    assert created.status_code == 201
    payroll_id = created.get_json()["data"]["payroll_id"]

    nulled = accountant.patch(f"/api/payroll/{payroll_id}", json={"pay_period_start": None})
    assert nulled.status_code == 400
    assert nulled.get_json()["message"] == "Missing field: pay_period_start"

    clashing = accountant.patch(f"/api/payroll/{payroll_id}", json={"payroll_id": 7})
    assert clashing.status_code == 400
    assert clashing.get_json()["message"] == "Field cannot be changed: payroll_id"

    bad_id = accountant.patch(f"/api/payroll/{payroll_id}", json={"bank_account_id": "abc"})
    assert bad_id.status_code == 400
    assert bad_id.get_json()["message"] == "bank_account_id is invalid"

    kept = accountant.get(f"/api/payroll/{payroll_id}").get_json()["data"]
    assert kept["pay_period_start"] == "2025-03-01"


def test_template_and_transaction_ids_are_validated(app, world):
    accountant = _login(app, "acc@example.com", world.password)

    bad_template = accountant.post(
        "/api/salary-templates", json={"name": "Standard", "base_hourly_rate": "30", "bank_account_id": "abc"}
    )
    assert bad_template.status_code == 400
    created = accountant.post("/api/salary-templates", json={"name": "Standard", "base_hourly_rate": "30"})
    template_id = created.get_json()["data"]["template_id"]
    assert accountant.patch(f"/api/salary-templates/{template_id}", json={"template_id": 1}).status_code == 400
    assert accountant.patch(f"/api/salary-templates/{template_id}", json={"client_id": "x"}).status_code == 400

    tx = accountant.post(
        "/api/bank-transactions",
        json={"description": "Float", "amount": "100", "type": "deposit", "date": "2025-03-03"},
    ).get_json()["data"]
    resp = accountant.patch(f"/api/bank-transactions/{tx['transaction_id']}", json={"bank_account_id": "abc"})
    assert resp.status_code == 400
    assert accountant.patch(f"/api/bank-transactions/{tx['transaction_id']}", json={"date": None}).status_code == 400


def test_admin_approves_and_exports(app, world, container):
    entry_id = _logged(container, world)

    admin = _login(app, "admin@example.com", world.password)
    approved = admin.post(f"/api/working-hours/{entry_id}/approve")
    assert approved.get_json()["data"]["status"] == "approved"
    assert admin.post(f"/api/working-hours/{entry_id}/approve").status_code == 409

    export = admin.get("/api/reports/working-hours.csv?start=2025-03-01&end=2025-03-31")
    assert export.status_code == 200
    assert export.mimetype == "text/csv"
    assert "Alice Worker" in export.data.decode("utf-8-sig")

def test_unknown_route_is_json_404(app):
    resp = app.test_client().get("/api/nothing-here")
    assert resp.status_code == 404
    assert resp.get_json()["success"] is False


def test_payroll_flow_through_the_api(app, world, container):
    entry_id = container.working_hours_service.log_hours(
        profile_id=world.alice_id,
        client_id=world.client_id,
        project_id=world.project_id,
        work_date=date(2025, 3, 3),
        start_time=time(9, 0),
        end_time=time(17, 0),
    )
    container.working_hours_service.approve(entry_id=entry_id)

    accountant = _login(app, "acc@example.com", world.password)
    generated = accountant.post("/api/payroll/generate", json={"start": "2025-03-01", "end": "2025-03-31"})
    assert generated.status_code == 201
    payroll_id = generated.get_json()["data"][0]["payroll_id"]

    account = accountant.post(
        "/api/bank-accounts",
        json={"bank_name": "First Bank", "account_number": "000123456789", "account_holder_name": "Acme"},
    ).get_json()["data"]
    assert accountant.post(f"/api/payroll/{payroll_id}/approve").status_code == 200
    paid = accountant.post(f"/api/payroll/{payroll_id}/pay", json={"bank_account_id": account["account_id"]})
    assert paid.get_json()["data"]["status"] == "paid"

    alice = _login(app, "alice@example.com", world.password)
    own = alice.get("/api/payroll").get_json()
    assert [p["payroll_id"] for p in own["data"]] == [payroll_id]
    assert own["totals"]["net_pay"] == "216.00"

    bob = _login(app, "bob@example.com", world.password)
    assert bob.get("/api/payroll").get_json()["data"] == []
    assert bob.get(f"/api/payroll/{payroll_id}").status_code == 403
