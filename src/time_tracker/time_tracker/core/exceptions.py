class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when there is no authenticated user for an action."""


class InvalidTransitionError(DomainError):
    """Raised when a timer action is not valid from the current state."""


class RemoteStoreError(DomainError):
    """Raised when the remote store cannot be reached or rejects a write."""
