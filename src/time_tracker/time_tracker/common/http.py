from __future__ import annotations

from functools import wraps

from flask import jsonify, session

from ..core.exceptions import (
    AuthenticationError,
    DomainError,
    InvalidTransitionError,
    RemoteStoreError,
    ValidationError,
)

_STATUS_BY_ERROR = (
    (AuthenticationError, 401),
    (InvalidTransitionError, 409),
    (ValidationError, 400),
    (RemoteStoreError, 503),
)


def json_error(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def error_response(exc: DomainError):
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return json_error(str(exc), status)
    return json_error(str(exc), 400)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return json_error("Please sign in to continue", 401)
        return view(*args, **kwargs)

    return wrapper
