from __future__ import annotations

from typing import Mapping

from .enums import Role
from .exceptions import ForbiddenError

# Explicit allow-list per operation. Anything not listed here is refused.
OPERATION_ROLES: Mapping[str, frozenset] = {
    "auto_geo_check_in": frozenset({Role.EMPLOYEE}),
    "auto_geo_check_out": frozenset({Role.EMPLOYEE}),
    "create_attendance": frozenset({Role.ADMIN, Role.HR}),
    "update_attendance": frozenset({Role.ADMIN, Role.HR}),
    "delete_attendance": frozenset({Role.ADMIN}),
    "list_attendance": frozenset({Role.ADMIN, Role.HR}),
    "get_attendance": frozenset({Role.ADMIN, Role.HR}),
    "list_employee_attendance": frozenset({Role.ADMIN, Role.HR, Role.MANAGER}),
}


def is_allowed(operation: str, role: Role) -> bool:
    return role in OPERATION_ROLES.get(operation, frozenset())


def require_role(operation: str, role: Role) -> None:
    if not is_allowed(operation, role):
        raise ForbiddenError(f"Role '{role.value}' may not perform {operation}")
