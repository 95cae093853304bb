from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Caller roles supplied by the authentication layer."""

    ADMIN = "admin"
    HR = "hr"
    MANAGER = "manager"
    EMPLOYEE = "employee"


class AttendanceStatus(str, Enum):
    """Closed status vocabulary stored with each attendance record."""

    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"


class CheckInClass(str, Enum):
    """Outcome of classifying a check-in time against the cutoffs."""

    PRESENT = "present"
    LATE = "late"
    BLOCKED = "blocked"
