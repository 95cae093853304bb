from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Mapping, Optional, Sequence
from zoneinfo import ZoneInfo

import mysql.connector

from ..core.constants import MYSQL_DUPLICATE_ENTRY
from ..core.enums import AttendanceStatus
from ..core.exceptions import DuplicateError, NotFoundError, StaleRecordError, ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord
from .repository import UPDATABLE_FIELDS, AttendanceRepository

logger = logging.getLogger(__name__)

_COLUMNS = "attendance_id, employee_id, work_date, check_in_time, check_out_time, status, note, created_at"


class MySQLAttendanceRepository(AttendanceRepository):
    """attendance_records table; UNIQUE (employee_id, work_date) backs the one-per-day rule.

    DATETIME columns hold wall-clock time in ``tz``; values are converted on
    write and re-attached to ``tz`` on read.
    """

    def __init__(self, conn_factory: DatabaseConnection, *, tz: Optional[ZoneInfo] = None):
        self._conn_factory = conn_factory
        self._tz = tz

    def _to_db(self, value: Optional[datetime]) -> Optional[datetime]:
        if value is None or value.tzinfo is None:
            return value
        if self._tz is not None:
            value = value.astimezone(self._tz)
        return value.replace(tzinfo=None)

    def _from_db(self, value: Optional[datetime]) -> Optional[datetime]:
        if value is None or self._tz is None or value.tzinfo is not None:
            return value
        return value.replace(tzinfo=self._tz)

    def _to_record(self, r: dict) -> AttendanceRecord:
        return AttendanceRecord(
            attendance_id=int(r["attendance_id"]),
            employee_id=int(r["employee_id"]),
            work_date=r["work_date"],
            check_in_time=self._from_db(r.get("check_in_time")),
            check_out_time=self._from_db(r.get("check_out_time")),
            status=AttendanceStatus(r["status"]),
            created_at=self._from_db(r.get("created_at")),
            note=r.get("note"),
        )

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return self._to_record(r) if r else None

    def get_for_user_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s AND work_date=%s
                """,
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return self._to_record(r) if r else None

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
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(employee_id, work_date, check_in_time, check_out_time, status, note, created_at)
                    VALUES(%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(employee_id),
                        work_date,
                        self._to_db(check_in_time),
                        self._to_db(check_out_time),
                        status.value,
                        note,
                        self._to_db(created_at),
                    ),
                )
                attendance_id = int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            if e.errno == MYSQL_DUPLICATE_ENTRY:
                raise DuplicateError(f"attendance already recorded for employee {employee_id} on {work_date}") from e
            raise

        return AttendanceRecord(
            attendance_id=attendance_id,
            employee_id=int(employee_id),
            work_date=work_date,
            check_in_time=check_in_time,
            check_out_time=check_out_time,
            status=status,
            created_at=created_at,
            note=note,
        )

    def update(
        self,
        attendance_id: int,
        changes: Mapping[str, Any],
        *,
        expect: Optional[Mapping[str, Any]] = None,
    ) -> AttendanceRecord:
        unknown = (set(changes) | set(expect or {})) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown attendance fields: {', '.join(sorted(unknown))}")

        assignments: list[str] = []
        params: list[object] = []
        for column in sorted(changes):
            value = changes[column]
            if isinstance(value, AttendanceStatus):
                value = value.value
            elif isinstance(value, datetime):
                value = self._to_db(value)
            assignments.append(f"{column}=%s")
            params.append(value)

        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s FOR UPDATE",
                    (int(attendance_id),),
                )
                locked = fetchone(cur)
                if not locked:
                    raise NotFoundError("Attendance record not found")
                if expect:
                    current = self._to_record(locked)
                    stale = sorted(k for k, v in expect.items() if getattr(current, k) != v)
                    if stale:
                        raise StaleRecordError(f"attendance record {attendance_id} changed: {', '.join(stale)}")

                if assignments:
                    cur.execute(
                        f"UPDATE attendance_records SET {', '.join(assignments)} WHERE attendance_id=%s",
                        (*params, int(attendance_id)),
                    )

                cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
                return self._to_record(fetchone(cur))
        except mysql.connector.IntegrityError as e:
            if e.errno == MYSQL_DUPLICATE_ENTRY:
                raise DuplicateError("another record already exists for that employee and day") from e
            raise

    def delete(self, attendance_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            if cur.rowcount == 0:
                raise NotFoundError("Attendance record not found")
        logger.info("Deleted attendance record %s", attendance_id)

    def list_all(self) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                ORDER BY work_date DESC, attendance_id DESC
                """
            )
            return [self._to_record(r) for r in fetchall(cur)]

    def list_for_user(self, employee_id: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s
                ORDER BY work_date DESC, attendance_id DESC
                """,
                (int(employee_id),),
            )
            return [self._to_record(r) for r in fetchall(cur)]
