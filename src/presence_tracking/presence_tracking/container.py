from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.query import AttendanceQuery
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .attendance.settings import AttendanceSettings
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeDirectory
from .employees.repository import EmployeeDirectory


@dataclass(frozen=True)
class Container:
    settings: AttendanceSettings

    attendance_repo: AttendanceRepository
    employees_repo: EmployeeDirectory

    attendance_service: AttendanceService
    attendance_query: AttendanceQuery


def build_services(
    *,
    settings: AttendanceSettings,
    attendance_repo: AttendanceRepository,
    employees_repo: EmployeeDirectory,
) -> Container:
    return Container(
        settings=settings,
        attendance_repo=attendance_repo,
        employees_repo=employees_repo,
        attendance_service=AttendanceService(attendance_repo, employees_repo, settings),
        attendance_query=AttendanceQuery(attendance_repo, employees_repo),
    )


def build_container(*, db_config: Mapping[str, Any], attendance_config: Mapping[str, Any]) -> Container:
    settings = AttendanceSettings.from_mapping(attendance_config)
    conn = DatabaseConnection(DBConfig.from_mapping(db_config))

    return build_services(
        settings=settings,
        attendance_repo=MySQLAttendanceRepository(conn, tz=settings.timezone),
        employees_repo=MySQLEmployeeDirectory(conn),
    )
