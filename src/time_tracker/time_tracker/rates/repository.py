from __future__ import annotations

from typing import Optional, Protocol

from .model import RateSettings


class RateSettingsRepository(Protocol):
    """Remote ``user_settings`` table.

    Implementations raise RemoteStoreError when the store is unreachable.
    """

    def get_for_user(self, user_id: str) -> Optional[RateSettings]:
        raise NotImplementedError

    def upsert(self, settings: RateSettings) -> None:
        raise NotImplementedError

    def create_if_missing(self, settings: RateSettings) -> bool:
        """Insert the row only when the user has none yet.

        Returns True when a row was created.
        """

        raise NotImplementedError
