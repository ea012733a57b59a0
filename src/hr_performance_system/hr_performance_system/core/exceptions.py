class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""


class ConfigurationMissingError(DomainError):
    """Raised when no active attendance rule is configured.

    Batch jobs cannot price charges without it, so the whole run aborts.
    """


class PersistenceError(DomainError):
    """Raised when a write to the store fails or affects no rows."""
