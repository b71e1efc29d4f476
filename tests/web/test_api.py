import io

import pytest

from hr_records.main import create_app


@pytest.fixture
def client(container):
    app = create_app("config.testing", container=container)
    return app.test_client()


@pytest.fixture
def auth(container):
    def _headers(employee, **extra):
        token = container.tokens.issue_access_token(employee_pk=employee.id, role=employee.role)
        return {"Authorization": f"Bearer {token}", **extra}

    return _headers


def test_register_and_login(client):
    resp = client.post(
        "/api/auth/register",
        json={"employeeId": "E-50", "email": "e50@example.com", "password": "secret123", "name": "Fifty"},
    )
    assert resp.status_code == 201
    assert resp.get_json()["user"]["role"] == "employee"

    assert client.post("/api/auth/login", json={"email": "e50@example.com", "password": "secret123"}).status_code == 200
    bad = client.post("/api/auth/login", json={"email": "e50@example.com", "password": "nope"})
    assert bad.status_code == 401
    assert bad.get_json() == {"message": "Invalid credentials"}


def test_missing_or_bad_token(client):
    assert client.get("/api/employee/me").status_code == 401
    assert client.get("/api/employee/me", headers={"Authorization": "Bearer forged"}).status_code == 401


def test_token_of_deleted_account_is_rejected(client, auth, staff, repos):
    headers = auth(staff.employee)
    repos.employees.delete_by_id(staff.employee.id)
    assert client.get("/api/employee/me", headers=headers).status_code == 401


def test_role_guard(client, auth, staff):
    assert client.get("/api/hr/employees", headers=auth(staff.employee)).status_code == 403
    resp = client.get("/api/hr/employees", headers=auth(staff.hr))
    assert resp.status_code == 200
    assert {r["employee_id"] for r in resp.get_json()} == {"E-1", "HR-1", "AD-1", "SA-1"}


def test_otp_upload_and_review_flow(client, auth, staff, repos):
    resp = client.post("/api/hr/send-otp", json={"employeeEmail": "e-1@example.com"}, headers=auth(staff.hr))
    assert resp.status_code == 200
    code = repos.employees.get_by_id(staff.employee.id).otp_code

    resp = client.post("/api/hr/verify-otp", json={"otp": code}, headers=auth(staff.employee))
    assert resp.status_code == 200
    grant = resp.get_json()["uploadGrant"]

    no_grant = client.post(
        "/api/employee/upload",
        data={"name": "PAN Card", "document": (io.BytesIO(b"%PDF-1.4"), "pan.pdf", "application/pdf")},
        content_type="multipart/form-data",
        headers=auth(staff.employee),
    )
    assert no_grant.status_code == 403

    resp = client.post(
        "/api/employee/upload",
        data={"name": "PAN Card", "document": (io.BytesIO(b"%PDF-1.4"), "pan.pdf", "application/pdf")},
        content_type="multipart/form-data",
        headers=auth(staff.employee, **{"X-Upload-Grant": grant}),
    )
    assert resp.status_code == 201
    doc_id = resp.get_json()["document"]["id"]

    resp = client.patch(f"/api/hr/documents/E-1/{doc_id}", json={"status": "Approved"}, headers=auth(staff.hr))
    assert resp.status_code == 200

    again = client.patch(f"/api/hr/documents/E-1/{doc_id}", json={"status": "Approved"}, headers=auth(staff.hr))
    assert again.status_code == 409

    resp = client.patch(
        f"/api/superAdmin/documents/E-1/{doc_id}/verify",
        json={"finalStatus": "Verified"},
        headers=auth(staff.super_admin),
    )
    assert resp.status_code == 200

    rows = client.get("/api/superAdmin/employees", headers=auth(staff.super_admin)).get_json()
    assert {r["employee_id"]: r["document_status"] for r in rows}["E-1"] == "Verified"

    inbox = client.get("/api/employee/notifications", headers=auth(staff.employee)).get_json()
    assert inbox["unread"] == 2


def test_wrong_otp_is_bad_request(client, auth, staff):
    client.post("/api/hr/send-otp", json={"employeeEmail": "e-1@example.com"}, headers=auth(staff.hr))
    resp = client.post("/api/hr/verify-otp", json={"otp": "abcdef"}, headers=auth(staff.employee))
    assert resp.status_code == 400


def test_profile_update_request_flow(client, auth, staff):
    resp = client.put("/api/employee/me", json={"emergencyContact": "Sam +15550000"}, headers=auth(staff.employee))
    assert resp.status_code == 202

    pending = client.get("/api/hr/update-requests", headers=auth(staff.hr)).get_json()
    assert [p["employee_id"] for p in pending] == ["E-1"]

    resp = client.patch("/api/hr/update-requests/E-1", json={"decision": "Approved"}, headers=auth(staff.hr))
    assert resp.get_json()["employee"]["emergency_contact"] == "Sam +15550000"

    resp = client.patch("/api/hr/update-requests/E-1", json={"decision": "Approved"}, headers=auth(staff.hr))
    assert resp.status_code == 404


def test_attendance_mark_history_and_export(client, auth, staff):
    h = auth(staff.employee)
    client.post("/api/attendance/mark", json={"date": "2024-03-01", "checkIn": "09:00"}, headers=h)
    resp = client.post("/api/attendance/mark", json={"date": "2024-03-01", "checkOut": "17:00"}, headers=h)
    record = resp.get_json()["attendance"]
    assert record["check_in"] == "2024-03-01T09:00:00"
    assert record["work_hours"] == 8.0

    history = client.get("/api/attendance/history", headers=h).get_json()
    assert history["total"] == 1
    assert client.get(f"/api/attendance/history?userId={staff.hr.id}", headers=h).status_code == 403

    resp = client.get("/api/attendance/export/payroll?from=2024-03-01&to=2024-03-31", headers=auth(staff.hr))
    assert resp.status_code == 200
    assert "payroll_attendance_2024-03-01_to_2024-03-31.xlsx" in resp.headers["Content-Disposition"]

    assert client.get("/api/attendance/export/payroll", headers=auth(staff.hr)).status_code == 400


def test_run_reminders_endpoint(client, auth, staff, repos):
    resp = client.post("/api/superAdmin/reminders/run?date=2024-03-01", headers=auth(staff.super_admin))
    assert resp.get_json() == {"day": "2024-03-01", "sent": 1, "skipped": 0, "failed": 0}
    assert client.post("/api/superAdmin/reminders/run", headers=auth(staff.hr)).status_code == 403


def test_audit_endpoint(client, auth, staff):
    client.post("/api/hr/send-otp", json={"employeeEmail": "e-1@example.com"}, headers=auth(staff.hr))
    entries = client.get("/api/superAdmin/audit?action=OTP_ISSUED", headers=auth(staff.admin)).get_json()
    assert [e["action"] for e in entries] == ["OTP_ISSUED"]
    assert entries[0]["actor_email"] == "hr-1@example.com"


def test_unknown_route_is_json_404(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert "message" in resp.get_json()


def test_hr_get_employee(client, auth, staff):
    resp = client.get("/api/hr/employees/E-1", headers=auth(staff.hr))
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["employee_id"] == "E-1"
    assert body["documents"] == []

    assert client.get("/api/hr/employees/E-1", headers=auth(staff.employee)).status_code == 403
    assert client.get("/api/hr/employees/E-404", headers=auth(staff.hr)).status_code == 404
