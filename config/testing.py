import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "time_tracker_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

LOCAL_STORE_PATH = os.getenv("LOCAL_STORE_PATH", "instance/test_local_store.json")

RETRY_BACKOFF_SECONDS = (15.0, 30.0, 45.0)
MAX_RETRY_ATTEMPTS = 3
COMPLETED_DISPLAY_SECONDS = 5.0
