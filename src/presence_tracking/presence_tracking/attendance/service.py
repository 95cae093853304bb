from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Mapping, Optional

from ..common.datetime_utils import now_local, parse_iso_date, parse_iso_datetime, to_zone
from ..common.geo import GeoPoint, distance_meters, is_within_radius
from ..core.enums import AttendanceStatus
from ..core.exceptions import (
    AbsenceRecordedError,
    ConflictError,
    DuplicateError,
    ForbiddenError,
    NotFoundError,
    StaleRecordError,
    ValidationError,
)
from ..core.identity import Caller
from ..core.permissions import require_role
from ..employees.model import Employee
from ..employees.repository import EmployeeDirectory
from .classifier import StatusClassifier
from .model import AttendanceRecord, CheckInResult
from .repository import UPDATABLE_FIELDS, AttendanceRepository
from .settings import AttendanceSettings

logger = logging.getLogger(__name__)


class AttendanceService:
    """Write side of attendance: the per-employee, per-day state machine.

    NoRecord -> CheckedIn -> CheckedOut, or NoRecord -> Absent when a geo
    check-in arrives after the hard cutoff. CheckedOut and Absent are
    terminal for the day. Uniqueness per (employee, day) is left to the
    repository; a DuplicateError on a check-in insert means another request
    won the race and is answered with the existing record.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeDirectory,
        settings: AttendanceSettings,
        *,
        classifier: StatusClassifier | None = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._settings = settings
        self._classifier = classifier or StatusClassifier(
            late_cutoff=settings.late_cutoff,
            hard_cutoff=settings.hard_cutoff,
        )

    def _now(self, now: datetime | None) -> datetime:
        tz = self._settings.timezone
        return to_zone(now, tz) if now is not None else now_local(tz)

    def _require_employee(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def _resolve_caller(self, caller: Caller) -> Employee:
        employee = self._employees.find_by_id_or_email(caller.identifier)
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def _require_inside_geofence(self, employee: Employee, point: GeoPoint) -> None:
        center, radius = self._settings.office_center, self._settings.geofence_radius_m
        if not is_within_radius(point, center, radius):
            logger.warning(
                "Geo check rejected for employee %s: %.0fm from office (limit %.0fm)",
                employee.employee_id,
                distance_meters(point, center),
                radius,
            )
            raise ForbiddenError("outside allowed area")

    def _existing_after_race(self, employee_id: int, work_date: date) -> AttendanceRecord:
        record = self._attendance.get_for_user_and_date(employee_id, work_date)
        if record is None:
            # The conflicting row vanished (deleted in between); nothing sane to return.
            raise ConflictError("attendance changed concurrently, retry")
        logger.info("Concurrent insert for employee %s on %s collapsed to existing record", employee_id, work_date)
        return record

    # ---- manual check-in / check-out -------------------------------------------------

    def manual_check_in(self, employee_id: int, *, now: datetime | None = None) -> AttendanceRecord:
        now = self._now(now)
        today = now.date()
        self._require_employee(employee_id)

        existing = self._attendance.get_for_user_and_date(employee_id, today)
        if existing:
            if existing.check_in_time is not None:
                raise ConflictError("already checked in")
            if existing.status == AttendanceStatus.ABSENT:
                raise ConflictError("marked absent today")
            try:
                record = self._attendance.update(
                    existing.attendance_id,
                    {"check_in_time": now, "status": AttendanceStatus.PRESENT},
                    expect={"check_in_time": None, "status": existing.status},
                )
            except StaleRecordError:
                current = self._attendance.get_by_id(existing.attendance_id)
                if current is not None and current.status == AttendanceStatus.ABSENT:
                    raise ConflictError("marked absent today")
                raise ConflictError("already checked in")
            logger.info("Employee %s checked in on existing record %s", employee_id, record.attendance_id)
            return record

        try:
            record = self._attendance.insert(
                employee_id=employee_id,
                work_date=today,
                check_in_time=now,
                status=AttendanceStatus.PRESENT,
                created_at=now,
            )
        except DuplicateError:
            record = self._existing_after_race(employee_id, today)
            if record.status == AttendanceStatus.ABSENT:
                raise ConflictError("marked absent today")
            return record

        logger.info("Employee %s checked in at %s", employee_id, now.isoformat())
        return record

    def manual_check_out(self, employee_id: int, *, now: datetime | None = None) -> AttendanceRecord:
        now = self._now(now)
        today = now.date()

        record = self._attendance.get_for_user_and_date(employee_id, today)
        if not record or record.check_in_time is None:
            raise NotFoundError("no check-in today")
        if record.check_out_time is not None:
            raise ConflictError("already checked out")

        try:
            record = self._attendance.update(
                record.attendance_id,
                {"check_out_time": now},
                expect={"check_out_time": None},
            )
        except StaleRecordError:
            raise ConflictError("already checked out")
        logger.info("Employee %s checked out at %s", employee_id, now.isoformat())
        return record

    # ---- geofenced check-in / check-out ----------------------------------------------

    def auto_geo_check_in(self, caller: Caller, lat: Any, lng: Any, *, now: datetime | None = None) -> CheckInResult:
        """Location-verified check-in for the calling employee.

        Returns ``already_marked=True`` when the day already has a record.
        After the hard cutoff an absent record is written and
        AbsenceRecordedError is raised.
        """
        require_role("auto_geo_check_in", caller.role)
        point = GeoPoint.parse(lat, lng)
        employee = self._resolve_caller(caller)
        self._require_inside_geofence(employee, point)

        now = self._now(now)
        today = now.date()
        employee_id = employee.employee_id

        existing = self._attendance.get_for_user_and_date(employee_id, today)
        if existing:
            logger.info("Employee %s already marked on %s (%s)", employee_id, today, existing.status.value)
            return CheckInResult(record=existing, already_marked=True)

        decision = self._classifier.for_checkin(now).decide_checkin(now=now)
        try:
            record = self._attendance.insert(
                employee_id=employee_id,
                work_date=today,
                check_in_time=None if decision.blocked else now,
                status=decision.status,
                created_at=now,
                note=decision.note,
            )
        except DuplicateError:
            return CheckInResult(record=self._existing_after_race(employee_id, today), already_marked=True)

        if decision.blocked:
            logger.warning("Employee %s checked in after cutoff at %s; marked absent", employee_id, now.time())
            raise AbsenceRecordedError("time exceeded, marked absent", record)

        logger.info("Employee %s geo check-in at %s: %s", employee_id, now.isoformat(), record.status.value)
        return CheckInResult(record=record)

    def auto_geo_check_out(self, caller: Caller, lat: Any, lng: Any, *, now: datetime | None = None) -> AttendanceRecord:
        require_role("auto_geo_check_out", caller.role)
        point = GeoPoint.parse(lat, lng)
        employee = self._resolve_caller(caller)
        self._require_inside_geofence(employee, point)
        return self.manual_check_out(employee.employee_id, now=now)

    # ---- administrative overrides ----------------------------------------------------

    @staticmethod
    def _check_record_rules(
        check_in_time: Optional[datetime],
        check_out_time: Optional[datetime],
        status: AttendanceStatus,
    ) -> None:
        if check_out_time is not None and check_in_time is None:
            raise ValidationError("check-out requires a check-in")
        if check_out_time is not None and check_out_time < check_in_time:
            raise ValidationError("check-out is earlier than check-in")
        if status == AttendanceStatus.ABSENT and check_in_time is not None:
            raise ValidationError("an absent record cannot have a check-in")

    def _normalize_fields(self, fields: Mapping[str, Any]) -> dict:
        """Coerce raw values (e.g. from JSON) to domain types."""
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown attendance fields: {', '.join(sorted(unknown))}")

        out: dict = {}
        try:
            for key, value in fields.items():
                if key == "employee_id":
                    if value is None:
                        raise ValidationError("employee_id is required")
                    out[key] = int(value)
                elif key == "work_date":
                    if value is None:
                        raise ValidationError("work_date is required")
                    out[key] = parse_iso_date(value) if isinstance(value, str) else value
                elif key in ("check_in_time", "check_out_time"):
                    parsed = parse_iso_datetime(value) if isinstance(value, str) else value
                    out[key] = to_zone(parsed, self._settings.timezone) if parsed is not None else None
                elif key == "status":
                    out[key] = AttendanceStatus(value)
                else:
                    out[key] = (str(value).strip() or None) if value is not None else None
        except (AttributeError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid attendance data: {e}")
        return out

    def create_attendance(
        self,
        *,
        employee_id: Any,
        work_date: Any = None,
        check_in_time: Any = None,
        check_out_time: Any = None,
        status: Any = None,
        note: Optional[str] = None,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        now = self._now(now)
        fields = self._normalize_fields(
            {
                "employee_id": employee_id,
                "work_date": work_date if work_date is not None else now.date(),
                "check_in_time": check_in_time,
                "check_out_time": check_out_time,
                "note": note,
            }
        )
        if status is None:
            fields["status"] = AttendanceStatus.PRESENT if fields["check_in_time"] else AttendanceStatus.ABSENT
        else:
            fields.update(self._normalize_fields({"status": status}))

        self._check_record_rules(fields["check_in_time"], fields["check_out_time"], fields["status"])
        self._require_employee(fields["employee_id"])

        try:
            record = self._attendance.insert(created_at=now, **fields)
        except DuplicateError:
            raise ConflictError("attendance already recorded for that employee and day")

        logger.info("Created attendance record %s for employee %s", record.attendance_id, record.employee_id)
        return record

    def update_attendance(self, attendance_id: int, patch: Mapping[str, Any]) -> AttendanceRecord:
        """Administrative override: no state-machine checks, record rules still apply."""
        changes = self._normalize_fields(patch)

        current = self._attendance.get_by_id(int(attendance_id))
        if not current:
            raise NotFoundError("Attendance record not found")

        merged = replace(current, **changes)
        self._check_record_rules(merged.check_in_time, merged.check_out_time, merged.status)
        if merged.employee_id != current.employee_id:
            self._require_employee(merged.employee_id)

        try:
            record = self._attendance.update(int(attendance_id), changes)
        except DuplicateError:
            raise ConflictError("attendance already recorded for that employee and day")

        logger.info("Attendance record %s updated (%s)", attendance_id, ", ".join(sorted(changes)) or "no changes")
        return record

    def delete_attendance(self, attendance_id: int) -> None:
        self._attendance.delete(int(attendance_id))
        logger.info("Attendance record %s deleted", attendance_id)

    # ---- end-of-day sweep ------------------------------------------------------------

    def mark_absentees(self, work_date: date | None = None, *, now: datetime | None = None) -> list[AttendanceRecord]:
        """Record ``absent`` for every active employee with no record for the day."""
        now = self._now(now)
        day = work_date or now.date()

        created: list[AttendanceRecord] = []
        for employee in self._employees.list_active():
            if self._attendance.get_for_user_and_date(employee.employee_id, day):
                continue
            try:
                record = self._attendance.insert(
                    employee_id=employee.employee_id,
                    work_date=day,
                    check_in_time=None,
                    status=AttendanceStatus.ABSENT,
                    created_at=now,
                    note="no attendance recorded",
                )
            except DuplicateError:
                continue
            logger.info("Marked employee %s (%s) absent on %s", employee.employee_id, employee.full_name, day)
            created.append(record)

        logger.info("Absentee sweep for %s: %d marked absent", day, len(created))
        return created
