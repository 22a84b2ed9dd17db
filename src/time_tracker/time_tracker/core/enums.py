from __future__ import annotations

from enum import Enum


class SessionState(str, Enum):
    """Top-level states of the work-session state machine."""

    IDLE = "IDLE"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"


class SyncStatus(str, Enum):
    """Where the running session currently lives."""

    SYNCED = "SYNCED"
    PENDING_RETRY = "PENDING_RETRY"
    LOCAL_ONLY = "LOCAL_ONLY"


class DataSource(str, Enum):
    REMOTE = "remote"
    REMOTE_SIMPLE = "remote_simple"
    LOCAL = "local"
