from __future__ import annotations

import pytest

from hrm_system.main import create_app


@pytest.fixture
def app(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container=container)


@pytest.fixture
def client(app):
    return app.test_client()


def _login(client, email, password="secret123"):
    resp = client.post("/api/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()["data"]


def test_requires_login(client):
    resp = client.get("/api/me")

    assert resp.status_code == 401
    assert resp.get_json() == {"ok": False, "error": {"kind": "authentication", "message": "Please log in to continue"}}


def test_register_starts_session(client):
    resp = client.post(
        "/api/auth/register",
        json={"email": "new@example.com", "password": "secret123", "full_name": "New Hire"},
    )

    assert resp.status_code == 201
    assert resp.get_json()["reload"] == ["employees"]
    me = client.get("/api/me").get_json()
    assert me["data"]["email"] == "new@example.com"
    assert "password_hash" not in me["data"]


def test_bad_login(client, employee):
    resp = client.post("/api/auth/login", json={"email": employee.email, "password": "nope"})

    assert resp.status_code == 401
    assert resp.get_json()["error"]["kind"] == "authentication"


def test_employee_cannot_reach_admin_routes(client, employee):
    _login(client, employee.email)

    assert client.get("/api/employees").status_code == 403
    assert client.post("/api/payroll/generate", json={"month": "2025-11"}).status_code == 403


def test_check_in_twice_returns_conflict(client, employee):
    _login(client, employee.email)

    first = client.post("/api/attendance/check-in")
    second = client.post("/api/attendance/check-in")

    assert first.status_code == 201
    assert first.get_json()["reload"] == ["attendance"]
    assert second.status_code == 409
    assert second.get_json()["error"]["kind"] == "already_checked_in"


def test_check_out_without_check_in_is_not_found(client, employee):
    _login(client, employee.email)

    resp = client.post("/api/attendance/check-out")

    assert resp.status_code == 404
    assert resp.get_json()["error"]["kind"] == "no_active_check_in"


def test_duplicate_leave_returns_conflict_with_details(client, employee):
    _login(client, employee.email)
    body = {"type": "sick", "start_date": "2099-01-10", "reason": "Flu"}

    assert client.post("/api/leaves", json=body).status_code == 201
    resp = client.post("/api/leaves", json=dict(body, type="casual"))

    assert resp.status_code == 409
    error = resp.get_json()["error"]
    assert error["kind"] == "duplicate_leave"
    assert error["message"] == "You already have a sick leave application for this date (Status: pending)"


def test_payroll_generate_approve_and_export(client, employee, admin):
    _login(client, admin.email)

    created = client.post("/api/payroll/generate", json={"employee_id": employee.employee_id, "month": "2025-11"})
    assert created.status_code == 201
    payroll_id = created.get_json()["data"]["payroll_id"]

    again = client.post("/api/payroll/generate", json={"employee_id": employee.employee_id, "month": "2025-11"})
    assert again.status_code == 409
    assert again.get_json()["error"]["kind"] == "payroll_already_exists"

    assert client.post(f"/api/payroll/{payroll_id}/approve").get_json()["data"]["status"] == "approved"
    twice = client.post(f"/api/payroll/{payroll_id}/approve")
    assert twice.status_code == 409
    assert twice.get_json()["error"]["kind"] == "invalid_transition"

    pdf = client.get(f"/api/payroll/{payroll_id}/payslip.pdf")
    assert pdf.status_code == 200
    assert pdf.mimetype == "application/pdf"
    assert pdf.data.startswith(b"%PDF")


def test_generate_for_all(client, employee, admin):
    _login(client, admin.email)

    resp = client.post("/api/payroll/generate", json={"month": "2025-11"})

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert len(data["generated"]) == 2
    assert data["skipped_employee_ids"] == []


def test_roster_csv_export(client, employee, admin):
    _login(client, admin.email)

    resp = client.get("/api/attendance/roster?date=2025-11-03&format=csv")

    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    text = resp.data.decode("utf-8-sig")
    assert text.splitlines()[0] == "employee_id,full_name,position,status,check_in,check_out,hours_worked,is_late"
    assert "Ayesha Khan" in text and "Absent" in text


def test_unknown_route_is_json(client):
    resp = client.get("/api/nope")

    assert resp.status_code == 404
    assert resp.get_json()["ok"] is False


@pytest.mark.parametrize(
    "method, url, body, as_admin",
    [
        ("post", "/api/leaves", {"type": "sick", "start_date": "2099-01-10", "reason": 123}, False),
        ("post", "/api/leaves", {"type": "sick", "start_date": 20990110, "reason": "Flu"}, False),
        ("patch", "/api/me", {"phone": 3001234567}, False),
        ("patch", "/api/me", ["full_name"], False),
        ("post", "/api/payroll/generate", {"employee_id": "abc", "month": "2025-11"}, True),
        ("post", "/api/payroll/generate", {"month": 202511}, True),
    ],
)
def test_wrongly_typed_input_is_a_validation_error(client, employee, admin, method, url, body, as_admin):
    _login(client, admin.email if as_admin else employee.email)

    resp = getattr(client, method)(url, json=body)

    assert resp.status_code == 400
    assert resp.get_json()["error"]["kind"] == "validation"


def test_login_with_non_text_password_is_a_validation_error(client, employee):
    resp = client.post("/api/auth/login", json={"email": employee.email, "password": 123456})

    assert resp.status_code == 400


def test_admin_deletes_employee(client, employees_repo, employee, admin):
    _login(client, admin.email)

    resp = client.delete(f"/api/employees/{employee.employee_id}")

    assert resp.status_code == 200
    assert resp.get_json()["reload"] == ["employees"]
    assert employees_repo.get_by_id(employee.employee_id) is None


def test_delete_employee_with_attendance_is_conflict(client, employee, admin):
    _login(client, employee.email)
    client.post("/api/attendance/check-in")
    client.post("/api/auth/logout")
    _login(client, admin.email)

    resp = client.delete(f"/api/employees/{employee.employee_id}")

    assert resp.status_code == 409
    assert resp.get_json()["error"]["kind"] == "employee_has_records"
