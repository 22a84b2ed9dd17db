from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Identity:
    """The authenticated user as reported by the identity provider."""

    user_id: str
    email: Optional[str] = None
