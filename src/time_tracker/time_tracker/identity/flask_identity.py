from __future__ import annotations

from typing import Optional

from flask import has_request_context, session

from .model import Identity
from .provider import IdentityProvider


class FlaskSessionIdentityProvider(IdentityProvider):
    """Reads the user placed into the Flask session by the auth layer."""

    def current_identity(self) -> Optional[Identity]:
        if not has_request_context():
            return None
        user_id = session.get("user_id")
        if not user_id:
            return None
        return Identity(user_id=str(user_id), email=session.get("email"))
