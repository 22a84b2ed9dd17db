from __future__ import annotations

from dataclasses import dataclass

from ..core.exceptions import RemoteStoreError
from ..core.logging import get_logger
from .local_store import LocalFallbackStore
from .repository import SessionRepository

logger = get_logger(__name__)


@dataclass(frozen=True)
class SyncResult:
    synced: int
    remaining: int
    message: str

    @property
    def success(self) -> bool:
        return self.remaining == 0


class OfflineSyncService:
    """Push sessions kept on this device to the remote store."""

    def __init__(self, sessions: SessionRepository, local: LocalFallbackStore):
        self._sessions = sessions
        self._local = local

    def sync(self, user_id: str) -> SyncResult:
        pending = self._local.list_for_user(user_id)
        if not pending:
            return SyncResult(synced=0, remaining=0, message="No offline sessions to sync")

        try:
            inserted = self._sessions.insert_completed_sessions(pending)
        except RemoteStoreError as exc:
            logger.warning("offline_sync_failed", user_id=user_id, pending=len(pending), error=str(exc))
            return SyncResult(
                synced=0,
                remaining=len(pending),
                message="Could not reach the server. Offline sessions are kept on this device.",
            )

        removed = self._local.remove(s.id for s in pending)
        logger.info("offline_sync_completed", user_id=user_id, inserted=inserted, removed=removed)
        return SyncResult(
            synced=removed,
            remaining=len(pending) - removed,
            message=f"Synced {removed} offline session(s)",
        )
