from __future__ import annotations

from typing import Optional, Protocol, Sequence, Union

from .department_model import Department
from .model import Employee


class EmployeeDirectory(Protocol):
    """Read-only lookup of employees and departments.

    Note (DIP): attendance depends on this interface, not on the HR tables.
    """

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def find_by_id_or_email(self, identifier: Union[int, str]) -> Optional[Employee]:
        raise NotImplementedError

    def list_active(self) -> Sequence[Employee]:
        raise NotImplementedError

    def get_department(self, dept_id: int) -> Optional[Department]:
        raise NotImplementedError
