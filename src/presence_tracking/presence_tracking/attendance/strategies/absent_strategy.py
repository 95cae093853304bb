from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class AbsentStrategy(AttendanceStrategy):
    """Past the hard cutoff: no check-in, the day is recorded as absent."""

    def decide_checkin(self, *, now: datetime) -> StatusDecision:
        return StatusDecision(
            status=AttendanceStatus.ABSENT,
            blocked=True,
            note=f"check-in attempted at {now:%H:%M} after cutoff",
        )
