from __future__ import annotations

import pytest

from conftest import FAR_AWAY, NEAR_OFFICE
from presence_tracking.attendance import service as service_module
from presence_tracking.container import build_services
from presence_tracking.main import create_app


@pytest.fixture
def clock(monkeypatch, at):
    """Pin the service clock; tests move it with clock['now'] = ..."""
    state = {"now": at(9, 30)}
    monkeypatch.setattr(service_module, "now_local", lambda tz: state["now"])
    return state


@pytest.fixture
def app(monkeypatch, settings, attendance_repo, employees, clock):
    monkeypatch.setenv("APP_ENV", "testing")
    container = build_services(settings=settings, attendance_repo=attendance_repo, employees_repo=employees)
    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, user_id: int, role: str) -> None:
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["role"] = role


def test_requires_login(client):
    assert client.post("/api/attendance/checkin").status_code == 401


def test_geo_check_in_then_already_marked(client):
    login(client, 1, "employee")

    first = client.post("/api/attendance/geo/checkin", json={"lat": NEAR_OFFICE[0], "lng": NEAR_OFFICE[1]})
    assert first.status_code == 201
    assert first.get_json()["record"]["status"] == "present"
    assert first.get_json()["already_marked"] is False

    again = client.post("/api/attendance/geo/checkin", json={"lat": NEAR_OFFICE[0], "lng": NEAR_OFFICE[1]})
    assert again.status_code == 200
    assert again.get_json()["already_marked"] is True
    assert again.get_json()["record"]["attendance_id"] == first.get_json()["record"]["attendance_id"]


def test_geo_check_in_outside_area(client, attendance_repo):
    login(client, 1, "employee")

    resp = client.post("/api/attendance/geo/checkin", json={"lat": FAR_AWAY[0], "lng": FAR_AWAY[1]})

    assert resp.status_code == 403
    assert resp.get_json()["message"] == "outside allowed area"
    assert attendance_repo.list_all() == []


def test_geo_check_in_after_cutoff_returns_absent_record(client, clock, at):
    clock["now"] = at(13, 30)
    login(client, 1, "employee")

    resp = client.post("/api/attendance/geo/checkin", json={"lat": NEAR_OFFICE[0], "lng": NEAR_OFFICE[1]})

    assert resp.status_code == 403
    body = resp.get_json()
    assert body["record"]["status"] == "absent"
    assert body["record"]["check_in_time"] is None


def test_geo_check_in_bad_coordinates(client):
    login(client, 1, "employee")

    resp = client.post("/api/attendance/geo/checkin", json={"lat": "x"})

    assert resp.status_code == 400


def test_geo_check_in_by_admin_is_forbidden(client):
    login(client, 3, "admin")

    resp = client.post("/api/attendance/geo/checkin", json={"lat": NEAR_OFFICE[0], "lng": NEAR_OFFICE[1]})

    assert resp.status_code == 403


def test_manual_check_in_and_out(client, clock, at):
    login(client, 1, "employee")

    assert client.post("/api/attendance/checkout").status_code == 404
    assert client.post("/api/attendance/checkin").get_json()["status"] == "present"
    assert client.post("/api/attendance/checkin").status_code == 409

    clock["now"] = at(18, 0)
    out = client.post("/api/attendance/checkout")
    assert out.status_code == 200
    assert out.get_json()["check_out_time"].startswith("2026-02-02T18:00:00")


def test_employee_cannot_check_in_someone_else(client, attendance_repo):
    login(client, 1, "employee")

    client.post("/api/attendance/checkin", json={"employee_id": 2})

    assert [r.employee_id for r in attendance_repo.list_all()] == [1]


def test_hr_checks_in_named_employee(client, attendance_repo):
    login(client, 3, "hr")

    resp = client.post("/api/attendance/checkin", json={"employee_id": 2})

    assert resp.status_code == 200
    assert resp.get_json()["employee_id"] == 2


def test_listing_requires_admin_or_hr(client):
    login(client, 1, "employee")
    assert client.get("/api/attendance").status_code == 403


def test_admin_create_list_update_delete(client):
    login(client, 3, "admin")

    created = client.post(
        "/api/attendance",
        json={"employee_id": 1, "work_date": "2026-02-01", "check_in_time": "2026-02-01T09:10:00+05:30"},
    )
    assert created.status_code == 201
    record = created.get_json()
    assert record["employee"]["name"] == "Asha Patil"
    assert record["employee"]["department"] == "Engineering"

    listing = client.get("/api/attendance").get_json()
    assert [r["attendance_id"] for r in listing] == [record["attendance_id"]]

    updated = client.put(
        f"/api/attendance/{record['attendance_id']}",
        json={"check_out_time": "2026-02-01T17:00:00+05:30"},
    )
    assert updated.status_code == 200
    assert updated.get_json()["check_out_time"].startswith("2026-02-01T17:00:00")

    bad = client.put(f"/api/attendance/{record['attendance_id']}", json={"status": "absent"})
    assert bad.status_code == 400

    assert client.delete(f"/api/attendance/{record['attendance_id']}").status_code == 200
    assert client.get(f"/api/attendance/{record['attendance_id']}").status_code == 404


def test_duplicate_create_conflicts(client):
    login(client, 3, "hr")
    payload = {"employee_id": 1, "work_date": "2026-02-01"}

    assert client.post("/api/attendance", json=payload).status_code == 201
    assert client.post("/api/attendance", json=payload).status_code == 409


def test_hr_cannot_delete(client, present_record):
    login(client, 3, "hr")

    assert client.delete(f"/api/attendance/{present_record.attendance_id}").status_code == 403


def test_employee_sees_only_own_history(client, present_record):
    login(client, 1, "employee")

    own = client.get("/api/attendance/employee/1")
    assert own.status_code == 200
    assert [r["attendance_id"] for r in own.get_json()] == [present_record.attendance_id]

    assert client.get("/api/attendance/employee/2").status_code == 403


def test_manager_sees_employee_history(client, present_record):
    login(client, 3, "manager")

    assert client.get("/api/attendance/employee/1").status_code == 200


def test_unknown_role_is_forbidden(client):
    login(client, 1, "intern")

    assert client.post("/api/attendance/checkin").status_code == 403


def test_non_numeric_session_identity_is_forbidden(client, attendance_repo):
    login(client, "asha@example.com", "employee")

    resp = client.post("/api/attendance/checkin")

    assert resp.status_code == 403
    assert resp.get_json()["message"] == "Invalid session identity"
    assert attendance_repo.list_all() == []


def test_mark_absentees_command(app, attendance_repo, present_record):
    result = app.test_cli_runner().invoke(args=["mark-absentees", "--date", "2026-02-02"])

    assert result.exit_code == 0
    assert "Marked 2 employee(s) absent" in result.output
    assert len(attendance_repo.list_all()) == 3


def test_mark_absentees_rejects_bad_date(app):
    result = app.test_cli_runner().invoke(args=["mark-absentees", "--date", "tomorrow"])

    assert result.exit_code != 0
