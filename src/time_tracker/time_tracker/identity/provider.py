from __future__ import annotations

from typing import Optional, Protocol

from .model import Identity


class IdentityProvider(Protocol):
    def current_identity(self) -> Optional[Identity]:
        """Return the signed-in user, or None when the session is missing or expired."""

        raise NotImplementedError


class StaticIdentityProvider(IdentityProvider):
    """Fixed identity for scripts and service-level use without Flask."""

    def __init__(self, identity: Optional[Identity] = None):
        self._identity = identity

    def current_identity(self) -> Optional[Identity]:
        return self._identity
