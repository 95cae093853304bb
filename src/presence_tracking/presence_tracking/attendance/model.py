from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one employee's presence for one calendar day."""

    attendance_id: int
    employee_id: int
    work_date: date
    check_in_time: Optional[datetime]
    check_out_time: Optional[datetime]
    status: AttendanceStatus
    created_at: Optional[datetime] = None
    note: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "attendance_id": self.attendance_id,
            "employee_id": self.employee_id,
            "work_date": self.work_date.isoformat(),
            "check_in_time": self.check_in_time.isoformat() if self.check_in_time else None,
            "check_out_time": self.check_out_time.isoformat() if self.check_out_time else None,
            "status": self.status.value,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "note": self.note,
        }


@dataclass(frozen=True)
class CheckInResult:
    record: AttendanceRecord
    already_marked: bool = False

    def to_dict(self) -> dict:
        return {"record": self.record.to_dict(), "already_marked": self.already_marked}


@dataclass(frozen=True)
class AttendanceView:
    """Read-model for listings: record plus employee/department display data."""

    record: AttendanceRecord
    employee_name: Optional[str]
    employee_email: Optional[str]
    department_name: Optional[str]

    def to_dict(self) -> dict:
        data = self.record.to_dict()
        data["employee"] = {
            "employee_id": self.record.employee_id,
            "name": self.employee_name,
            "email": self.employee_email,
            "department": self.department_name,
        }
        return data
