import os

from config import parse_seconds

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "time_tracker"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

LOCAL_STORE_PATH = os.getenv("LOCAL_STORE_PATH", "/var/lib/time_tracker/local_store.json")

RETRY_BACKOFF_SECONDS = parse_seconds(os.getenv("RETRY_BACKOFF_SECONDS", "15,30,45"))
MAX_RETRY_ATTEMPTS = int(os.getenv("MAX_RETRY_ATTEMPTS", "3"))
COMPLETED_DISPLAY_SECONDS = float(os.getenv("COMPLETED_DISPLAY_SECONDS", "5"))
