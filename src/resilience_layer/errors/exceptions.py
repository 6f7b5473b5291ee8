"""
Exception taxonomy for the resilience layer.

Two families live here:

1. OperationError and its variants describe failures produced by the wrapped
   operation itself (network faults, HTTP-like statuses, domain error codes).
   The error classifier projects each variant onto a retryable/category
   classification.
2. ResilienceRejection and its variants signal that a call was never
   attempted (circuit open, local rate limit). They are distinct by type so
   callers can decide not to offer a "retry" action.

RetryNotAllowedError is raised when a manual retry is requested while the
controller's state does not permit one.
"""

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from resilience_layer.models.state_models import RetryState


class OperationError(Exception):
    """
    Base exception for failures of a wrapped operation.

    Attributes:
        message: Human-readable description
        code: Error code (see classification.error_codes)
        status: Optional HTTP-like status
        retry_after: Optional server-provided wait hint in seconds
        details: Optional structured details
    """

    default_code = "UNKNOWN_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        status: Optional[int] = None,
        retry_after: Optional[float] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.status = status
        self.retry_after = retry_after
        self.details = details or {}

    @classmethod
    def from_status(
        cls,
        status: int,
        message: Optional[str] = None,
        code: Optional[str] = None,
        retry_after: Optional[float] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> "OperationError":
        """
        Build the matching variant for an HTTP-like status.

        Args:
            status: HTTP-like status code
            message: Optional message (defaults to "HTTP <status>")
            code: Error code reported by the server, if any
            retry_after: Server-provided wait hint in seconds
            details: Structured details

        Returns:
            OperationError subclass instance matching the status
        """
        from resilience_layer.classification.error_codes import map_status_to_error_code

        resolved_code = map_status_to_error_code(status, code)
        error_cls = _variant_for_status(status)
        return error_cls(
            message or f"HTTP {status}",
            code=resolved_code,
            status=status,
            retry_after=retry_after,
            details=details,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, status={self.status!r}, message={self.message!r})"


class NetworkError(OperationError):
    """Connectivity lost before a response was received."""

    default_code = "NETWORK_ERROR"


class RequestTimeoutError(NetworkError):
    """
    The operation exceeded its own timeout.

    Per-attempt timeouts are the operation's concern; the resulting failure
    still flows through the classifier like any other.
    """

    default_code = "TIMEOUT_ERROR"


class ServerError(OperationError):
    """Server-side fault (5xx-equivalent)."""

    default_code = "SERVER_ERROR"


class ServerRateLimitError(OperationError):
    """The remote service rejected the call for exceeding its rate limit."""

    default_code = "RATE_LIMITED"


class AuthenticationError(OperationError):
    """Credentials missing, invalid or expired. Never retried."""

    default_code = "UNAUTHORIZED"


class AuthorizationError(OperationError):
    """Authenticated but not permitted. Never retried."""

    default_code = "FORBIDDEN"


class BadRequestError(OperationError):
    """Malformed or invalid request. Never retried."""

    default_code = "VALIDATION_ERROR"


class NotFoundError(OperationError):
    """The requested record does not exist."""

    default_code = "NOT_FOUND"


class ConflictError(OperationError):
    """Concurrent modification conflict."""

    default_code = "CONFLICT"


class DomainError(OperationError):
    """Business-rule failure identified only by its error code."""

    def __init__(self, message: str, code: str, **kwargs: Any):
        super().__init__(message, code=code, **kwargs)


_STATUS_VARIANTS: dict[int, type[OperationError]] = {
    401: AuthenticationError,
    403: AuthorizationError,
    404: NotFoundError,
    408: RequestTimeoutError,
    409: ConflictError,
    429: ServerRateLimitError,
    504: RequestTimeoutError,
}


def _variant_for_status(status: int) -> type[OperationError]:
    if status in _STATUS_VARIANTS:
        return _STATUS_VARIANTS[status]
    if status >= 500:
        return ServerError
    if status >= 400:
        return BadRequestError
    return OperationError


class ResilienceRejection(Exception):
    """
    Base exception for calls rejected before the operation was invoked.

    A rejection is terminal for the current execute() call.
    """

    code = "REJECTED"

    def __init__(self, message: str, retry_after: Optional[float] = None):
        super().__init__(message)
        self.message = message
        self.retry_after = retry_after


class CircuitOpenError(ResilienceRejection):
    """Raised when the circuit breaker is open and rejecting calls."""

    code = "CIRCUIT_OPEN"

    def __init__(self, message: str = "Circuit breaker is open", circuit_name: Optional[str] = None):
        super().__init__(message)
        self.circuit_name = circuit_name


class RateLimitExceeded(ResilienceRejection):
    """Raised when the local rate limiter has no free slot in its window."""

    code = "CLIENT_RATE_LIMITED"

    def __init__(self, message: str = "Rate limit exceeded", retry_after: Optional[float] = None):
        super().__init__(message, retry_after=retry_after)


class RetryNotAllowedError(Exception):
    """
    Raised when retry() is called while can_retry() is false.

    Either the attempt budget is spent, the last error is not retryable,
    there is no previous failure, or an attempt is already in flight.
    """

    def __init__(self, state: "RetryState"):
        self.state = state
        super().__init__(
            "Cannot retry: maximum attempts reached or error not retryable "
            f"(attempt={state.attempt}, is_retrying={state.is_retrying})"
        )
