from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time

from ..core.constants import DEFAULT_HARD_CUTOFF, DEFAULT_LATE_CUTOFF
from ..core.enums import CheckInClass
from .strategies.absent_strategy import AbsentStrategy
from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass(frozen=True)
class StatusClassifier:
    """Factory Pattern: choose the check-in strategy from the time of day.

    [.., late_cutoff) is on time, [late_cutoff, hard_cutoff) is late and
    anything from hard_cutoff on is blocked.
    """

    late_cutoff: time = DEFAULT_LATE_CUTOFF
    hard_cutoff: time = DEFAULT_HARD_CUTOFF

    def __post_init__(self):
        if self.late_cutoff >= self.hard_cutoff:
            raise ValueError("late_cutoff must be earlier than hard_cutoff")

    def classify(self, now: time) -> CheckInClass:
        if now < self.late_cutoff:
            return CheckInClass.PRESENT
        if now < self.hard_cutoff:
            return CheckInClass.LATE
        return CheckInClass.BLOCKED

    def for_checkin(self, now: datetime) -> AttendanceStrategy:
        klass = self.classify(now.time())
        if klass is CheckInClass.PRESENT:
            return NormalStrategy()
        if klass is CheckInClass.LATE:
            return LateStrategy()
        return AbsentStrategy()
