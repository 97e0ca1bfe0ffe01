class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a student, class, slot or booking does not exist."""


class InvalidTokenError(DomainError):
    """Raised for malformed, unknown or superseded identity tokens.

    All three cases share one message so callers cannot tell them apart.
    """

    def __init__(self, message: str = "Invalid QR token"):
        super().__init__(message)


class IneligibleError(DomainError):
    """Raised when a student's cohort may not book exam seats."""


class InvalidSeatError(DomainError):
    """Raised when bench/position coordinates fall outside the slot."""


class SeatTakenError(DomainError):
    """Raised when another student committed the requested seat first."""

    def __init__(self, message: str = "Seat already taken, refresh the layout and pick another seat"):
        super().__init__(message)


class TokenIssuanceError(DomainError):
    """Raised when no unique token could be issued within the retry budget."""


class DuplicateKeyError(DomainError):
    """Store-level unique constraint violation.

    `key` is the name of the violated index (e.g. ``uq_students_qr_token``).
    """

    def __init__(self, key: str, message: str = ""):
        super().__init__(message or f"Duplicate entry for {key}")
        self.key = key
