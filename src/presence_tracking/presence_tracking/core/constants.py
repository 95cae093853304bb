"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

EARTH_RADIUS_M = 6_371_000

DEFAULT_GEOFENCE_RADIUS_M = 6000
DEFAULT_LATE_CUTOFF = time(10, 0)
DEFAULT_HARD_CUTOFF = time(13, 0)
DEFAULT_TIMEZONE = "Asia/Kolkata"

# MySQL ER_DUP_ENTRY
MYSQL_DUPLICATE_ENTRY = 1062
