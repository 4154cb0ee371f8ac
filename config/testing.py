import os

SECRET_KEY = "test-secret"

STORAGE_BACKEND = "memory"
STORAGE_PATH = os.getenv("STORAGE_PATH", "data/test_snapshot.json")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "classroom_attendance_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False

SEED_DEMO_DATA = True
SEED_DEMO_ATTENDANCE = False
DEMO_SEED = 42
