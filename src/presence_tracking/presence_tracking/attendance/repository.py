from __future__ import annotations

from datetime import date, datetime
from typing import Any, Mapping, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord

# Columns an administrative update may touch.
UPDATABLE_FIELDS = frozenset({"employee_id", "work_date", "check_in_time", "check_out_time", "status", "note"})


class AttendanceRepository(Protocol):
    """Storage for attendance records.

    Implementations own the (employee_id, work_date) uniqueness: ``insert``
    and ``update`` raise DuplicateError instead of writing a second record
    for the same day. The check must be atomic (a storage constraint), not
    a lookup followed by a write.
    """

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_user_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def insert(
        self,
        *,
        employee_id: int,
        work_date: date,
        check_in_time: Optional[datetime],
        check_out_time: Optional[datetime] = None,
        status: AttendanceStatus,
        created_at: datetime,
        note: Optional[str] = None,
    ) -> AttendanceRecord:
        raise NotImplementedError

    def update(
        self,
        attendance_id: int,
        changes: Mapping[str, Any],
        *,
        expect: Optional[Mapping[str, Any]] = None,
    ) -> AttendanceRecord:
        """Apply ``changes`` (keys from UPDATABLE_FIELDS). NotFoundError if missing.

        ``expect`` maps fields to the values they must still hold when the
        write happens; a mismatch raises StaleRecordError and nothing is
        written. The comparison and the write are one atomic step.
        """

        raise NotImplementedError

    def delete(self, attendance_id: int) -> None:
        raise NotImplementedError

    def list_all(self) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_user(self, employee_id: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
