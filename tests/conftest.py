from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

import pytest

from presence_tracking.attendance.model import AttendanceRecord
from presence_tracking.attendance.service import AttendanceService
from presence_tracking.attendance.settings import AttendanceSettings
from presence_tracking.common.geo import GeoPoint
from presence_tracking.core.enums import AttendanceStatus, Role
from presence_tracking.core.exceptions import DuplicateError, NotFoundError, StaleRecordError
from presence_tracking.employees.department_model import Department
from presence_tracking.employees.model import Employee

IST = ZoneInfo("Asia/Kolkata")
OFFICE = GeoPoint(lat=18.432941, lng=73.886954)
NEAR_OFFICE = (18.433000, 73.887000)
FAR_AWAY = (19.0, 74.0)
WORK_DAY = date(2026, 2, 2)


class InMemoryEmployees:
    def __init__(self, employees: list[Employee], departments: list[Department]):
        self._by_id = {e.employee_id: e for e in employees}
        self._departments = {d.dept_id: d for d in departments}

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self._by_id.get(employee_id)

    def find_by_id_or_email(self, identifier) -> Optional[Employee]:
        if isinstance(identifier, int):
            return self._by_id.get(identifier)
        return next((e for e in self._by_id.values() if e.email == identifier), None)

    def list_active(self):
        return [e for e in self._by_id.values() if e.is_active]

    def get_department(self, dept_id: int) -> Optional[Department]:
        return self._departments.get(dept_id)


class InMemoryAttendance:
    """Attendance store enforcing the (employee_id, work_date) key under a lock, like a UNIQUE index."""

    def __init__(self):
        self._lock = threading.Lock()
        self._by_id: dict[int, AttendanceRecord] = {}
        self._id = 0

    def _taken(self, employee_id: int, work_date: date, *, exclude: Optional[int] = None) -> bool:
        return any(
            r.employee_id == employee_id and r.work_date == work_date and r.attendance_id != exclude
            for r in self._by_id.values()
        )

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self._by_id.get(attendance_id)

    def get_for_user_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with self._lock:
            return next(
                (r for r in self._by_id.values() if r.employee_id == employee_id and r.work_date == work_date),
                None,
            )

    def insert(self, *, employee_id, work_date, check_in_time, check_out_time=None, status, created_at, note=None):
        with self._lock:
            if self._taken(employee_id, work_date):
                raise DuplicateError(f"{employee_id}/{work_date}")
            self._id += 1
            record = AttendanceRecord(
                attendance_id=self._id,
                employee_id=employee_id,
                work_date=work_date,
                check_in_time=check_in_time,
                check_out_time=check_out_time,
                status=status,
                created_at=created_at,
                note=note,
            )
            self._by_id[self._id] = record
            return record

    def update(self, attendance_id: int, changes, *, expect=None) -> AttendanceRecord:
        with self._lock:
            current = self._by_id.get(attendance_id)
            if current is None:
                raise NotFoundError("Attendance record not found")
            if any(getattr(current, k) != v for k, v in (expect or {}).items()):
                raise StaleRecordError(f"record {attendance_id} changed")
            updated = replace(current, **changes)
            if self._taken(updated.employee_id, updated.work_date, exclude=attendance_id):
                raise DuplicateError(f"{updated.employee_id}/{updated.work_date}")
            self._by_id[attendance_id] = updated
            return updated

    def delete(self, attendance_id: int) -> None:
        with self._lock:
            if self._by_id.pop(attendance_id, None) is None:
                raise NotFoundError("Attendance record not found")

    def list_all(self):
        return sorted(self._by_id.values(), key=lambda r: r.work_date, reverse=True)

    def list_for_user(self, employee_id: int):
        return [r for r in self.list_all() if r.employee_id == employee_id]

    def records_for(self, employee_id: int, work_date: date) -> list[AttendanceRecord]:
        return [r for r in self._by_id.values() if r.employee_id == employee_id and r.work_date == work_date]


# ---- fake mysql-connector connection -----------------------------------------------


class FakeCursor:
    def __init__(self, conn):
        self._conn = conn
        self.lastrowid = None
        self.rowcount = 0

    def execute(self, sql, params=None):
        self._conn.statements.append((" ".join(sql.split()), params))
        if self._conn.fail_with is not None:
            raise self._conn.fail_with
        self.lastrowid = self._conn.lastrowid
        self.rowcount = self._conn.rowcount

    def fetchone(self):
        return self._conn.rows.pop(0) if self._conn.rows else None

    def fetchall(self):
        rows, self._conn.rows = self._conn.rows, []
        return rows

    def close(self):
        pass


class FakeConnection:
    def __init__(self, *, rows=None, fail_with=None, lastrowid=None, rowcount=0):
        self.rows = list(rows or [])
        self.fail_with = fail_with
        self.lastrowid = lastrowid
        self.rowcount = rowcount
        self.statements = []
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def cursor(self, dictionary=False):
        return FakeCursor(self)

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class FakeConnFactory:
    def __init__(self, conn: FakeConnection):
        self.conn = conn

    def connect(self):
        return self.conn


@pytest.fixture
def settings() -> AttendanceSettings:
    return AttendanceSettings(office_center=OFFICE, geofence_radius_m=6000, timezone=IST)


@pytest.fixture
def at():
    """Build a timestamp on WORK_DAY in the office time zone."""

    def _at(hour: int, minute: int = 0, second: int = 0) -> datetime:
        return datetime(WORK_DAY.year, WORK_DAY.month, WORK_DAY.day, hour, minute, second, tzinfo=IST)

    return _at


@pytest.fixture
def fixed_now(at) -> datetime:
    return at(9, 30)


@pytest.fixture
def employees() -> InMemoryEmployees:
    return InMemoryEmployees(
        [
            Employee(employee_id=1, full_name="Asha Patil", email="asha@example.com", role=Role.EMPLOYEE, dept_id=10),
            Employee(employee_id=2, full_name="Ravi Kulkarni", email="ravi@example.com", role=Role.EMPLOYEE, dept_id=None),
            Employee(employee_id=3, full_name="Admin Demo", email="admin@example.com", role=Role.ADMIN, dept_id=20),
            Employee(
                employee_id=4,
                full_name="Former Staff",
                email="former@example.com",
                role=Role.EMPLOYEE,
                dept_id=10,
                is_active=False,
            ),
        ],
        [Department(dept_id=10, dept_name="Engineering"), Department(dept_id=20, dept_name="HR")],
    )


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def service(attendance_repo, employees, settings) -> AttendanceService:
    return AttendanceService(attendance_repo, employees, settings)


@pytest.fixture
def present_record(attendance_repo, at) -> AttendanceRecord:
    return attendance_repo.insert(
        employee_id=1,
        work_date=WORK_DAY,
        check_in_time=at(9, 0),
        status=AttendanceStatus.PRESENT,
        created_at=at(9, 0),
    )
