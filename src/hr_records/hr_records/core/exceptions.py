class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when an employee, document or record does not exist."""


class AuthenticationError(DomainError):
    """Raised when credentials or bearer tokens are missing or invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class ConflictError(DomainError):
    """Raised on duplicate identities or illegal state transitions."""


class ExpiredOrInvalidTokenError(DomainError):
    """Raised when an OTP, reset token or upload grant is expired or wrong."""


class OTPNotIssuedError(ExpiredOrInvalidTokenError):
    pass


class OTPExpiredError(ExpiredOrInvalidTokenError):
    pass


class OTPMismatchError(ExpiredOrInvalidTokenError):
    pass


class OTPAttemptsExceededError(ExpiredOrInvalidTokenError):
    pass


class UpstreamError(DomainError):
    """Raised when an e-mail or storage collaborator fails."""
