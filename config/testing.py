from .config import db_config

SECRET_KEY = "test-secret"

DB_CONFIG = db_config(default_password="presence")

# Fixed values so tests do not depend on the environment.
ATTENDANCE_CONFIG = {
    "office_lat": 18.432941,
    "office_lng": 73.886954,
    "geofence_radius_m": 6000,
    "late_cutoff": "10:00",
    "hard_cutoff": "13:00",
    "timezone": "Asia/Kolkata",
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False
