from __future__ import annotations

from typing import Iterable, Optional

from ..core.exceptions import NotFoundError
from ..employees.department_model import Department
from ..employees.model import Employee
from ..employees.repository import EmployeeDirectory
from .model import AttendanceRecord, AttendanceView
from .repository import AttendanceRepository


class AttendanceQuery:
    """Read side: listings joined with employee/department display data."""

    def __init__(self, attendance: AttendanceRepository, employees: EmployeeDirectory):
        self._attendance = attendance
        self._employees = employees

    def list_all(self) -> list[AttendanceView]:
        return self._views(self._attendance.list_all())

    def get_by_id(self, attendance_id: int) -> AttendanceView:
        record = self._attendance.get_by_id(int(attendance_id))
        if not record:
            raise NotFoundError("Attendance record not found")
        return self._views([record])[0]

    def list_for_employee(self, employee_id: int) -> list[AttendanceView]:
        return self._views(self._attendance.list_for_user(int(employee_id)))

    def _views(self, records: Iterable[AttendanceRecord]) -> list[AttendanceView]:
        ordered = sorted(records, key=lambda r: (r.work_date, r.attendance_id), reverse=True)

        # One lookup per employee/department per call.
        employees: dict[int, Optional[Employee]] = {}
        departments: dict[int, Optional[Department]] = {}

        views: list[AttendanceView] = []
        for r in ordered:
            if r.employee_id not in employees:
                employees[r.employee_id] = self._employees.get_by_id(r.employee_id)
            emp = employees[r.employee_id]

            dept = None
            if emp and emp.dept_id is not None:
                if emp.dept_id not in departments:
                    departments[emp.dept_id] = self._employees.get_department(emp.dept_id)
                dept = departments[emp.dept_id]

            views.append(
                AttendanceView(
                    record=r,
                    employee_name=emp.full_name if emp else None,
                    employee_email=emp.email if emp else None,
                    department_name=dept.dept_name if dept else None,
                )
            )
        return views
