"""
Error classifier.

Projects any failure raised by a wrapped operation onto a Classification:
whether it is worth retrying, its category and severity, and an optional
explicit wait hint (e.g. a server-provided Retry-After).

Classification rules:
    - OperationError variants: looked up by code in the error catalogue
    - httpx exceptions: translated to OperationError first
    - builtin TimeoutError / ConnectionError: timeout / network, retryable
    - ResilienceRejection: never retryable (the call was never attempted)
    - anything else: category UNKNOWN, not retryable

Authentication and validation failures are never retryable by default.
A RetryPolicy.retry_predicate, when supplied, overrides the retryable flag.
"""

from dataclasses import dataclass
from typing import Optional

import httpx

from resilience_layer.classification.error_codes import get_error_mapping
from resilience_layer.errors.exceptions import OperationError, ResilienceRejection
from resilience_layer.errors.httpx_adapter import translate_httpx_error
from resilience_layer.models.enums import ErrorCategory, ErrorSeverity
from resilience_layer.models.policy_models import RetryPolicy

UNCLASSIFIED = "UNCLASSIFIED"

_NEVER_RETRYABLE = frozenset({ErrorCategory.AUTH, ErrorCategory.VALIDATION})


@dataclass(frozen=True)
class Classification:
    """
    Result of classifying a failure.

    Attributes:
        retryable: Whether the failure is transient and worth reattempting
        category: Broad failure category
        code: Error code the failure was resolved to
        severity: Failure severity
        wait_hint: Explicit wait in seconds, overriding computed backoff for one attempt
    """

    retryable: bool
    category: ErrorCategory
    code: str
    severity: ErrorSeverity = ErrorSeverity.MEDIUM
    wait_hint: Optional[float] = None


def _from_code(code: Optional[str], wait_hint: Optional[float] = None) -> Classification:
    mapping = get_error_mapping(code)
    retryable = mapping.retryable and mapping.category not in _NEVER_RETRYABLE
    return Classification(
        retryable=retryable,
        category=mapping.category,
        code=mapping.code,
        severity=mapping.severity,
        wait_hint=wait_hint,
    )


def _default_classification(error: BaseException) -> Classification:
    if isinstance(error, httpx.HTTPError):
        error = translate_httpx_error(error)

    if isinstance(error, OperationError):
        return _from_code(error.code, wait_hint=error.retry_after)

    if isinstance(error, ResilienceRejection):
        return _from_code(error.code)

    # Builtin TimeoutError also covers asyncio.TimeoutError
    if isinstance(error, TimeoutError):
        return _from_code("TIMEOUT_ERROR")

    if isinstance(error, ConnectionError):
        return _from_code("NETWORK_ERROR")

    return Classification(
        retryable=False,
        category=ErrorCategory.UNKNOWN,
        code=UNCLASSIFIED,
        severity=ErrorSeverity.MEDIUM,
    )


def classify(error: BaseException, policy: Optional[RetryPolicy] = None) -> Classification:
    """
    Classify a failure raised by a wrapped operation.

    Args:
        error: The failure to classify
        policy: Optional retry policy whose retry_predicate takes precedence
            over the default retryable decision

    Returns:
        Classification with retryable flag, category, code and wait hint
    """
    classification = _default_classification(error)

    if policy is not None and policy.retry_predicate is not None:
        retryable = bool(policy.retry_predicate(error))
        if retryable != classification.retryable:
            classification = Classification(
                retryable=retryable,
                category=classification.category,
                code=classification.code,
                severity=classification.severity,
                wait_hint=classification.wait_hint,
            )

    return classification


def is_retryable(error: BaseException, policy: Optional[RetryPolicy] = None) -> bool:
    """Shortcut for classify(error, policy).retryable."""
    return classify(error, policy).retryable
