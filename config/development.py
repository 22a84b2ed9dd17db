import os

from config import parse_seconds

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "time_tracker"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

# Device-side storage for the running-session mirror and offline sessions
LOCAL_STORE_PATH = os.getenv("LOCAL_STORE_PATH", "instance/local_store.json")

RETRY_BACKOFF_SECONDS = parse_seconds(os.getenv("RETRY_BACKOFF_SECONDS", "15,30,45"))
MAX_RETRY_ATTEMPTS = int(os.getenv("MAX_RETRY_ATTEMPTS", "3"))
COMPLETED_DISPLAY_SECONDS = float(os.getenv("COMPLETED_DISPLAY_SECONDS", "5"))
