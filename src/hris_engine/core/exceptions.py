class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced employee, shift, pattern or request is missing."""


class AuthorizationError(DomainError):
    """Raised when an actor is not allowed to perform an action."""


class InvalidTransitionError(DomainError):
    """Raised when a workflow operation is attempted from the wrong state."""


class InsufficientBalanceError(DomainError):
    """Raised when a leave deduction exceeds the remaining balance."""


class NoApproverAvailableError(DomainError):
    """Raised when the approval chain for an employee is empty."""


class OverlapConflictError(DomainError):
    """Raised on conflicting date-ranged shift assignments or leave requests."""
