from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Employee:
    """Domain entity: Employee as seen by attendance.

    Note: Employees are owned by the HR module; attendance only reads them.
    """

    employee_id: int
    full_name: str
    email: str
    role: Role
    dept_id: Optional[int]
    is_active: bool = True
