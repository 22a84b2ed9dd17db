"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_HOURLY_RATE = 25.0
DEFAULT_OVERTIME_RATE = 37.5
DEFAULT_OVERTIME_THRESHOLD_HOURS = 8.0
OVERTIME_MULTIPLIER = 1.5

RETRY_BACKOFF_SECONDS = (15, 30, 45)
MAX_RETRY_ATTEMPTS = 3
COMPLETED_DISPLAY_SECONDS = 5

ACTIVE_SESSION_KEY = "activeSession:{user_id}"
OFFLINE_SESSIONS_KEY = "offlineSessions"
LOCAL_ID_PREFIX = "local-"
OFFLINE_LOCATION_LABEL = "Offline location"
UNKNOWN_LOCATION_LABEL = "Unknown location"

RECENT_DAYS = 7
