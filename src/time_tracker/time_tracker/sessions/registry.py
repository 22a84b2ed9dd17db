from __future__ import annotations

import threading
from typing import Callable, Dict

from ..core.enums import SessionState
from .service import SessionLifecycle


class SessionRegistry:
    """One SessionLifecycle per user inside a server process.

    ``factory`` builds a lifecycle for a user id; a fresh lifecycle restores
    any running session mirrored on this device. Idle lifecycles of other
    users are dropped on each lookup since they hold nothing a new one
    would not restore.
    """

    def __init__(self, factory: Callable[[str], SessionLifecycle]):
        self._factory = factory
        self._lock = threading.Lock()
        self._lifecycles: Dict[str, SessionLifecycle] = {}

    def for_user(self, user_id: str) -> SessionLifecycle:
        key = str(user_id)
        with self._lock:
            self._evict_idle(keep=key)
            lifecycle = self._lifecycles.get(key)
            if lifecycle is None:
                lifecycle = self._factory(key)
                self._lifecycles[key] = lifecycle
                lifecycle.restore()
            return lifecycle

    def _evict_idle(self, *, keep: str) -> None:
        idle = [
            key
            for key, lifecycle in self._lifecycles.items()
            if key != keep and lifecycle.state == SessionState.IDLE
        ]
        for key in idle:
            del self._lifecycles[key]

    def __len__(self) -> int:
        return len(self._lifecycles)
