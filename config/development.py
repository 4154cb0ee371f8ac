import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

# memory | json | mysql
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "json")
STORAGE_PATH = os.getenv("STORAGE_PATH", "data/classroom_attendance.json")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "classroom_attendance"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled with the mysql backend, the app_state table is created on startup (idempotent)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

# Demo users/course when storage is empty; optionally ten days of random history
SEED_DEMO_DATA = bool(int(os.getenv("SEED_DEMO_DATA", "1")))
SEED_DEMO_ATTENDANCE = bool(int(os.getenv("SEED_DEMO_ATTENDANCE", "1")))
DEMO_SEED = int(os.getenv("DEMO_SEED", "42"))
