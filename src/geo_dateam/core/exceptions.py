class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 400


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""

    status_code = 404


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""

    status_code = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403


class ConflictError(DomainError):
    """Base for state-machine and uniqueness violations."""

    status_code = 409


class AlreadyClockedInError(ConflictError):
    """Raised on a second clock-in for the same user and date."""


class AlreadyClockedOutError(ConflictError):
    """Raised when today's record already has a clock-out time."""


class NoOpenRecordError(ConflictError):
    """Raised on clock-out without a clock-in for the date."""


class InvalidTransitionError(ConflictError):
    """Raised when an expense status is changed after it was resolved."""


class DuplicateRecordError(ConflictError):
    """Raised by a store when a unique key would be violated."""
