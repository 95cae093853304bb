from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time
from typing import Any, Mapping
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..common.datetime_utils import parse_hhmm
from ..common.geo import GeoPoint
from ..core.constants import DEFAULT_GEOFENCE_RADIUS_M, DEFAULT_HARD_CUTOFF, DEFAULT_LATE_CUTOFF, DEFAULT_TIMEZONE


@dataclass(frozen=True)
class AttendanceSettings:
    """Per-deployment attendance rules injected into AttendanceService."""

    office_center: GeoPoint
    geofence_radius_m: float = DEFAULT_GEOFENCE_RADIUS_M
    late_cutoff: time = DEFAULT_LATE_CUTOFF
    hard_cutoff: time = DEFAULT_HARD_CUTOFF
    timezone: ZoneInfo = field(default_factory=lambda: ZoneInfo(DEFAULT_TIMEZONE))

    def __post_init__(self):
        if self.geofence_radius_m <= 0:
            raise ValueError("geofence_radius_m must be positive")
        if self.late_cutoff >= self.hard_cutoff:
            raise ValueError("late_cutoff must be earlier than hard_cutoff")

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "AttendanceSettings":
        """Build settings from a config dict (see config/*.py ATTENDANCE_CONFIG)."""
        try:
            center = GeoPoint(lat=float(raw["office_lat"]), lng=float(raw["office_lng"]))
        except KeyError as e:
            raise ValueError(f"Missing attendance setting: {e.args[0]}")

        tz_name = str(raw.get("timezone", DEFAULT_TIMEZONE))
        try:
            tz = ZoneInfo(tz_name)
        except ZoneInfoNotFoundError:
            raise ValueError(f"Unknown timezone: {tz_name!r}")

        late = raw.get("late_cutoff", DEFAULT_LATE_CUTOFF)
        hard = raw.get("hard_cutoff", DEFAULT_HARD_CUTOFF)
        return cls(
            office_center=center,
            geofence_radius_m=float(raw.get("geofence_radius_m", DEFAULT_GEOFENCE_RADIUS_M)),
            late_cutoff=parse_hhmm(late) if isinstance(late, str) else late,
            hard_cutoff=parse_hhmm(hard) if isinstance(hard, str) else hard,
            timezone=tz,
        )
