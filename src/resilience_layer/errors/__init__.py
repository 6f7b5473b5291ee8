"""
Typed failures and rejections.

Components:
- OperationError and variants: failures of the wrapped operation
- ResilienceRejection and variants: calls that were never attempted
- RetryNotAllowedError: manual retry requested when not permitted
- translate_httpx_error: httpx exception translation
"""

from resilience_layer.errors.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BadRequestError,
    CircuitOpenError,
    ConflictError,
    DomainError,
    NetworkError,
    NotFoundError,
    OperationError,
    RateLimitExceeded,
    RequestTimeoutError,
    ResilienceRejection,
    RetryNotAllowedError,
    ServerError,
    ServerRateLimitError,
)
from resilience_layer.errors.httpx_adapter import parse_retry_after, translate_httpx_error

__all__ = [
    "OperationError",
    "NetworkError",
    "RequestTimeoutError",
    "ServerError",
    "ServerRateLimitError",
    "AuthenticationError",
    "AuthorizationError",
    "BadRequestError",
    "NotFoundError",
    "ConflictError",
    "DomainError",
    "ResilienceRejection",
    "CircuitOpenError",
    "RateLimitExceeded",
    "RetryNotAllowedError",
    "parse_retry_after",
    "translate_httpx_error",
]
