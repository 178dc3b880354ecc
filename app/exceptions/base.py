"""
Base exception classes for the checkout services.
"""


class CheckoutException(Exception):
    """
    Base exception for all checkout errors.

    Every service-level error inherits from this class so the HTTP layer can
    render them with a single handler.

    Attributes:
        message: Human-readable error message
        details: Optional dict with additional context (entity IDs, amounts, ...)
        status_code: HTTP status the error maps to
    """

    status_code = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        if self.details:
            details_str = ', '.join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.__class__.__name__}('{self.message}', {details_str})"
        return f"{self.__class__.__name__}('{self.message}')"


class ResourceNotFoundException(CheckoutException):
    """Raised when an entity is absent (locally or in a downstream service)."""

    status_code = 404


class ResourceAlreadyExistsException(CheckoutException):
    """Raised on a uniqueness conflict."""

    status_code = 409


class InvalidInputException(CheckoutException):
    """Raised when the caller supplied a blank, negative or malformed value."""

    status_code = 400


class DownstreamUnavailableException(CheckoutException):
    """
    Raised by HTTP clients when a peer service could not be reached, timed out
    or answered with a 5xx.
    """

    def __init__(self, service: str, message: str, status: int | None = None):
        super().__init__(
            message,
            details={'service': service, 'upstream_status': status}
        )
        self.service = service
        self.upstream_status = status
        # brak odpowiedzi (timeout, connection refused) -> 503, 5xx -> 502
        self.status_code = 503 if status is None else 502


class OperationFailedException(CheckoutException):
    """
    Raised when an operation could not be carried out.

    Maps to 502 when the cause is a downstream failure, 500 otherwise.
    """

    def __init__(self, message: str, details: dict | None = None, cause: Exception | None = None):
        super().__init__(message, details)
        self.cause = cause
        if isinstance(cause, DownstreamUnavailableException):
            self.status_code = 502


class PersistenceFailureException(OperationFailedException):
    """Raised when a local store read or write failed."""
