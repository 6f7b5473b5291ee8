"""
Error code catalogue.

Maps the error codes returned by the remote service (and synthesized from
HTTP statuses) to a category, a severity and a default retryability flag.
Authentication and malformed-request codes are never retryable.
"""

from dataclasses import dataclass
from typing import Optional

from resilience_layer.models.enums import ErrorCategory, ErrorSeverity

UNKNOWN_ERROR = "UNKNOWN_ERROR"


@dataclass(frozen=True)
class ErrorMapping:
    """Classification defaults for a single error code."""

    code: str
    category: ErrorCategory
    severity: ErrorSeverity
    retryable: bool


def _entry(code: str, category: ErrorCategory, severity: ErrorSeverity, retryable: bool) -> tuple[str, ErrorMapping]:
    return code, ErrorMapping(code=code, category=category, severity=severity, retryable=retryable)


ERROR_MAPPINGS: dict[str, ErrorMapping] = dict(
    [
        # === Authentication ===
        _entry("UNAUTHORIZED", ErrorCategory.AUTH, ErrorSeverity.HIGH, False),
        _entry("TOKEN_EXPIRED", ErrorCategory.AUTH, ErrorSeverity.HIGH, False),
        _entry("INVALID_CREDENTIALS", ErrorCategory.AUTH, ErrorSeverity.MEDIUM, False),
        _entry("FORBIDDEN", ErrorCategory.AUTH, ErrorSeverity.MEDIUM, False),
        _entry("ACCOUNT_LOCKED", ErrorCategory.AUTH, ErrorSeverity.HIGH, False),
        # === Validation (malformed request) ===
        _entry("VALIDATION_ERROR", ErrorCategory.VALIDATION, ErrorSeverity.LOW, False),
        _entry("INVALID_EMAIL", ErrorCategory.VALIDATION, ErrorSeverity.LOW, False),
        _entry("WEAK_PASSWORD", ErrorCategory.VALIDATION, ErrorSeverity.LOW, False),
        _entry("REQUIRED_FIELD", ErrorCategory.VALIDATION, ErrorSeverity.LOW, False),
        _entry("INVALID_PHONE", ErrorCategory.VALIDATION, ErrorSeverity.LOW, False),
        # === Resources / business rules ===
        _entry("NOT_FOUND", ErrorCategory.BUSINESS, ErrorSeverity.MEDIUM, False),
        _entry("ALREADY_EXISTS", ErrorCategory.BUSINESS, ErrorSeverity.LOW, False),
        _entry("CONFLICT", ErrorCategory.BUSINESS, ErrorSeverity.MEDIUM, True),
        _entry("INSUFFICIENT_CREDITS", ErrorCategory.BUSINESS, ErrorSeverity.MEDIUM, False),
        _entry("AGENT_LIMIT_EXCEEDED", ErrorCategory.BUSINESS, ErrorSeverity.MEDIUM, False),
        _entry("CONTACT_LIMIT_EXCEEDED", ErrorCategory.BUSINESS, ErrorSeverity.MEDIUM, False),
        _entry("RATE_LIMITED", ErrorCategory.BUSINESS, ErrorSeverity.MEDIUM, True),
        # === Network ===
        _entry("NETWORK_ERROR", ErrorCategory.NETWORK, ErrorSeverity.HIGH, True),
        _entry("TIMEOUT_ERROR", ErrorCategory.NETWORK, ErrorSeverity.MEDIUM, True),
        # === Server ===
        _entry("SERVER_ERROR", ErrorCategory.SERVER, ErrorSeverity.HIGH, True),
        _entry("SERVICE_UNAVAILABLE", ErrorCategory.SERVER, ErrorSeverity.HIGH, True),
        _entry("BAD_GATEWAY", ErrorCategory.SERVER, ErrorSeverity.HIGH, True),
        # === Files ===
        _entry("FILE_TOO_LARGE", ErrorCategory.FILE, ErrorSeverity.LOW, False),
        _entry("INVALID_FILE_TYPE", ErrorCategory.FILE, ErrorSeverity.LOW, False),
        _entry("UPLOAD_FAILED", ErrorCategory.FILE, ErrorSeverity.MEDIUM, True),
        _entry("FILE_CORRUPTED", ErrorCategory.FILE, ErrorSeverity.MEDIUM, False),
        # === Payments ===
        _entry("PAYMENT_FAILED", ErrorCategory.PAYMENT, ErrorSeverity.HIGH, True),
        _entry("CARD_DECLINED", ErrorCategory.PAYMENT, ErrorSeverity.MEDIUM, True),
        _entry("PAYMENT_REQUIRED", ErrorCategory.PAYMENT, ErrorSeverity.MEDIUM, False),
        _entry("INSUFFICIENT_FUNDS", ErrorCategory.PAYMENT, ErrorSeverity.MEDIUM, True),
        # === Third-party integrations ===
        _entry("INTEGRATION_ERROR", ErrorCategory.INTEGRATION, ErrorSeverity.MEDIUM, True),
        _entry("AGENT_CONNECTION_FAILED", ErrorCategory.INTEGRATION, ErrorSeverity.HIGH, True),
        _entry("QUOTA_EXCEEDED", ErrorCategory.INTEGRATION, ErrorSeverity.MEDIUM, True),
        _entry("VOICE_NOT_FOUND", ErrorCategory.INTEGRATION, ErrorSeverity.LOW, False),
        # === Local rejections (call never attempted) ===
        _entry("CIRCUIT_OPEN", ErrorCategory.SERVER, ErrorSeverity.HIGH, False),
        _entry("CLIENT_RATE_LIMITED", ErrorCategory.BUSINESS, ErrorSeverity.MEDIUM, False),
        # === Generic ===
        _entry(UNKNOWN_ERROR, ErrorCategory.SERVER, ErrorSeverity.MEDIUM, True),
    ]
)


def get_error_mapping(code: Optional[str]) -> ErrorMapping:
    """Get the mapping for a code, falling back to UNKNOWN_ERROR."""
    if code is None:
        return ERROR_MAPPINGS[UNKNOWN_ERROR]
    return ERROR_MAPPINGS.get(code, ERROR_MAPPINGS[UNKNOWN_ERROR])


def is_retryable_code(code: Optional[str]) -> bool:
    """Check whether an error code is retryable by default."""
    return get_error_mapping(code).retryable


_STATUS_CODES: dict[int, str] = {
    400: "VALIDATION_ERROR",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    408: "TIMEOUT_ERROR",
    409: "CONFLICT",
    422: "VALIDATION_ERROR",
    429: "RATE_LIMITED",
    500: "SERVER_ERROR",
    502: "BAD_GATEWAY",
    503: "SERVICE_UNAVAILABLE",
    504: "TIMEOUT_ERROR",
}


def map_status_to_error_code(status: int, response_code: Optional[str] = None) -> str:
    """
    Map an HTTP-like status to an error code.

    A known error code supplied by the server response wins over the status.
    """
    if response_code and response_code in ERROR_MAPPINGS:
        return response_code

    if status in _STATUS_CODES:
        return _STATUS_CODES[status]
    if status >= 500:
        return "SERVER_ERROR"
    if status >= 400:
        return "VALIDATION_ERROR"
    return UNKNOWN_ERROR
