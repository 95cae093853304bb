from __future__ import annotations

import math
from numbers import Real
from typing import Any

from ..core.exceptions import ValidationError


def require_coordinate(value: Any, field_name: str, *, limit: float) -> float:
    """Return ``value`` as a finite float within [-limit, limit].

    Numeric strings are accepted, booleans are not.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field_name} is required")
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            raise ValidationError(f"{field_name} must be numeric")
    elif not isinstance(value, Real):
        raise ValidationError(f"{field_name} must be numeric")

    number = float(value)
    if not math.isfinite(number):
        raise ValidationError(f"{field_name} must be finite")
    if abs(number) > limit:
        raise ValidationError(f"{field_name} out of range")
    return number
