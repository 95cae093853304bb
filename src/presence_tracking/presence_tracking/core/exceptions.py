class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class ForbiddenError(DomainError):
    """Raised when the caller's role or location does not allow an action."""


class AbsenceRecordedError(ForbiddenError):
    """Check-in refused after the hard cutoff; the day was marked absent.

    The absent record has already been written when this is raised.
    """

    def __init__(self, message: str, record):
        super().__init__(message)
        self.record = record


class ConflictError(DomainError):
    """Raised on repeated check-in/check-out attempts or key collisions."""


class NotFoundError(DomainError):
    """Raised when a record or employee does not exist."""


class DuplicateError(DomainError):
    """Raised by a store when (employee, day) already has a record."""


class StaleRecordError(DomainError):
    """Raised by a store when a guarded update finds the record already changed."""
