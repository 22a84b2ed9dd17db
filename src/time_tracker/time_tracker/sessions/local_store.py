from __future__ import annotations

import json
import os
import threading
from pathlib import Path
from typing import Iterable, List, Optional, Protocol

from ..core.constants import ACTIVE_SESSION_KEY, OFFLINE_SESSIONS_KEY
from ..core.logging import get_logger
from .model import ActiveSessionSnapshot, WorkSession

logger = get_logger(__name__)


class KeyValueStore(Protocol):
    """String-keyed device storage (the browser's localStorage equivalent)."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError


class JsonFileKeyValueStore(KeyValueStore):
    """Key-value store kept as one JSON object in a file."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self._write(data)

    def remove(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if key in data:
                del data[key]
                self._write(data)

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            content = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("local_store_unreadable", path=str(self.path), error=str(exc))
            return {}
        return content if isinstance(content, dict) else {}

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
        os.replace(tmp, self.path)


class LocalFallbackStore:
    """On-device persistence for running-session mirrors and offline sessions.

    Reads never raise: corrupt or missing data is treated as empty.
    """

    def __init__(self, store: KeyValueStore):
        self._store = store

    def save(self, session: WorkSession) -> None:
        """Append a completed session; saving the same id twice keeps one copy."""

        items = [s for s in self._load_raw() if s.get("id") != session.id]
        items.append(session.to_dict())
        self._store.set(OFFLINE_SESSIONS_KEY, json.dumps(items))
        logger.info("session_saved_locally", session_id=session.id, user_id=session.user_id)

    def list_all(self) -> List[WorkSession]:
        sessions: List[WorkSession] = []
        for raw in self._load_raw():
            try:
                sessions.append(WorkSession.from_dict(raw))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("local_session_skipped", error=str(exc))
        return sessions

    def list_for_user(self, user_id: str) -> List[WorkSession]:
        return [s for s in self.list_all() if s.user_id == str(user_id)]

    def remove(self, session_ids: Iterable[str]) -> int:
        ids = set(session_ids)
        items = self._load_raw()
        kept = [s for s in items if s.get("id") not in ids]
        if len(kept) != len(items):
            self._store.set(OFFLINE_SESSIONS_KEY, json.dumps(kept))
        return len(items) - len(kept)

    def save_active(self, snapshot: ActiveSessionSnapshot) -> None:
        key = ACTIVE_SESSION_KEY.format(user_id=snapshot.session.user_id)
        self._store.set(key, json.dumps(snapshot.to_dict()))

    def load_active(self, user_id: str) -> Optional[ActiveSessionSnapshot]:
        raw = self._store.get(ACTIVE_SESSION_KEY.format(user_id=user_id))
        if not raw:
            return None
        try:
            return ActiveSessionSnapshot.from_dict(json.loads(raw))
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("active_session_unreadable", user_id=user_id, error=str(exc))
            return None

    def clear_active(self, user_id: str) -> None:
        self._store.remove(ACTIVE_SESSION_KEY.format(user_id=user_id))

    def _load_raw(self) -> list:
        raw = self._store.get(OFFLINE_SESSIONS_KEY)
        if not raw:
            return []
        try:
            items = json.loads(raw)
        except ValueError as exc:
            logger.warning("offline_sessions_unreadable", error=str(exc))
            return []
        if not isinstance(items, list):
            return []
        return [i for i in items if isinstance(i, dict)]
