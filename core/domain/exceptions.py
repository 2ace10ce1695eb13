"""
Domain exceptions.

Domain exceptions represent business rule violations
and domain-specific error conditions. Every exception belongs to
exactly one error kind (not found, validation failed, authorization
denied, limit exceeded, conflict, rate limited, invalid input);
the API layer maps kinds to HTTP status codes.
"""


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    def __init__(self, message: str, code: str = None):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class NotFoundError(DomainException):
    """Unknown license, activation, subscription or payment."""

    def __init__(self, message: str = "Resource not found", code: str = "NOT_FOUND"):
        super().__init__(message, code=code)


class ValidationFailedError(DomainException):
    """License exists but is not usable (expired, revoked, suspended, not found)."""

    def __init__(
        self,
        message: str = "License is not valid",
        code: str = "VALIDATION_FAILED",
        details: dict = None,
    ):
        super().__init__(message, code=code)
        self.details = details or {}


class AuthorizationDeniedError(DomainException):
    """Activation attempted against a license that cannot be used."""

    def __init__(self, message: str = "Activation denied", code: str = "AUTHORIZATION_DENIED"):
        super().__init__(message, code=code)


class LimitExceededError(DomainException):
    """A counted resource is at capacity."""

    def __init__(self, message: str = "Limit exceeded", code: str = "LIMIT_EXCEEDED"):
        super().__init__(message, code=code)


class ConflictError(DomainException):
    """Operation conflicts with the current state of a resource."""

    def __init__(self, message: str = "Conflict", code: str = "CONFLICT"):
        super().__init__(message, code=code)


class RateLimitedError(DomainException):
    """Request rejected by admission control."""

    def __init__(
        self,
        message: str = "Too many requests, please try again later.",
        retry_after: int = 0,
    ):
        super().__init__(message, code="RATE_LIMITED")
        self.retry_after = retry_after


class InvalidInputError(DomainException):
    """Malformed key, date or numeric field."""

    def __init__(self, message: str = "Invalid input", code: str = "INVALID_INPUT"):
        super().__init__(message, code=code)


class LicenseNotFoundError(NotFoundError):
    """Raised when a license is not found."""

    def __init__(self, message: str = "License not found"):
        super().__init__(message, code="LICENSE_NOT_FOUND")


class ActivationNotFoundError(NotFoundError):
    """Raised when an activation is not found."""

    def __init__(self, message: str = "Activation not found"):
        super().__init__(message, code="ACTIVATION_NOT_FOUND")


class SubscriptionNotFoundError(NotFoundError):
    """Raised when a subscription is not found."""

    def __init__(self, message: str = "Subscription not found"):
        super().__init__(message, code="SUBSCRIPTION_NOT_FOUND")


class PaymentNotFoundError(NotFoundError):
    """Raised when a payment is not found."""

    def __init__(self, message: str = "Payment not found"):
        super().__init__(message, code="PAYMENT_NOT_FOUND")


class InvalidLicenseKeyError(InvalidInputError):
    """Raised when a license key is malformed or fails its checksum."""

    def __init__(self, message: str = "License key format is invalid"):
        super().__init__(message, code="INVALID_LICENSE_KEY")


class SeatLimitExceededError(LimitExceededError):
    """Raised when the license user limit is reached."""

    def __init__(self, message: str = "License user limit reached"):
        super().__init__(message, code="SEAT_LIMIT_EXCEEDED")


class InvalidLicenseStatusError(ConflictError):
    """Raised when a status transition is not allowed from the current status."""

    def __init__(self, message: str = "Invalid license status"):
        super().__init__(message, code="INVALID_LICENSE_STATUS")


class DuplicateLicenseError(ConflictError):
    """Raised when a license already exists for the same phone and location."""

    def __init__(self, message: str = "License already exists"):
        super().__init__(message, code="DUPLICATE_LICENSE")


class JobAlreadyRunningError(ConflictError):
    """Raised when a singleton background job is already in flight."""

    def __init__(self, message: str = "Job is already running"):
        super().__init__(message, code="JOB_ALREADY_RUNNING")


class PaymentRejectedError(InvalidInputError):
    """Raised when a payment breaks a billing rule."""

    def __init__(self, message: str = "Payment rejected"):
        super().__init__(message, code="PAYMENT_REJECTED")
