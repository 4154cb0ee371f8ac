import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "mysql")
STORAGE_PATH = os.getenv("STORAGE_PATH", "data/classroom_attendance.json")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "classroom_attendance"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

SEED_DEMO_DATA = bool(int(os.getenv("SEED_DEMO_DATA", "0")))
SEED_DEMO_ATTENDANCE = bool(int(os.getenv("SEED_DEMO_ATTENDANCE", "0")))
DEMO_SEED = int(os.getenv("DEMO_SEED", "42"))
