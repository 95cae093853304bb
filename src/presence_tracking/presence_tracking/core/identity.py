from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .enums import Role


@dataclass(frozen=True)
class Caller:
    """Identity and role handed over by the authentication layer.

    ``identifier`` is either the employee id or the employee's email.
    """

    identifier: Union[int, str]
    role: Role
