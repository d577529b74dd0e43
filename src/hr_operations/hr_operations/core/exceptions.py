class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class ConflictError(DomainError):
    """Raised when the action clashes with existing state (duplicate, overlap, already processed)."""


class AuthorizationError(DomainError):
    """Raised when the acting employee lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when an employee, request, holiday or payslip does not exist."""


class InsufficientBalanceError(DomainError):
    """Raised when a paid leave balance cannot cover the requested days."""

    def __init__(self, leave_type: str, *, available: int, requested: int):
        super().__init__(
            f"Insufficient {leave_type.lower()} leave balance. Available: {available}, Requested: {requested}"
        )
        self.leave_type = leave_type
        self.available = int(available)
        self.requested = int(requested)
