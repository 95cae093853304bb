"""Settings shared by every environment module."""

import os


def env_flag(name: str, default: str = "0") -> bool:
    return bool(int(os.getenv(name, default)))


def db_config(default_password: str = "") -> dict:
    return {
        "host": os.getenv("DB_HOST", "localhost"),
        "port": int(os.getenv("DB_PORT", "3306")),
        "user": os.getenv("DB_USER", "root"),
        "password": os.getenv("DB_PASSWORD", default_password),
        "database": os.getenv("DB_NAME", "presence_db"),
    }


def attendance_config() -> dict:
    # Office geofence and time-of-day cutoffs; times are HH:MM in TIMEZONE.
    return {
        "office_lat": float(os.getenv("OFFICE_LAT", "18.432941")),
        "office_lng": float(os.getenv("OFFICE_LNG", "73.886954")),
        "geofence_radius_m": float(os.getenv("GEOFENCE_RADIUS_M", "6000")),
        "late_cutoff": os.getenv("LATE_CUTOFF", "10:00"),
        "hard_cutoff": os.getenv("HARD_CUTOFF", "13:00"),
        "timezone": os.getenv("TIMEZONE", "Asia/Kolkata"),
    }
