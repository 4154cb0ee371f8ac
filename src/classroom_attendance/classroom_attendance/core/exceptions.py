class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced course, user or report does not exist."""


class PersistenceError(DomainError):
    """Raised when the snapshot could not be written to or read from storage.

    The in-memory tables stay authoritative; the caller is only told that
    durability is at risk.
    """


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""
