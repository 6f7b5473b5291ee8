"""
Translation of httpx failures into the OperationError taxonomy.

Data-access operations built on httpx can either raise httpx exceptions
directly (the classifier translates them on the fly) or call
translate_httpx_error() themselves to surface typed failures to callers.
"""

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional

import httpx
import structlog

from resilience_layer.errors.exceptions import (
    NetworkError,
    OperationError,
    RequestTimeoutError,
)

logger = structlog.get_logger(__name__)


def parse_retry_after(value: Optional[str], now: Optional[datetime] = None) -> Optional[float]:
    """
    Parse a Retry-After header value into seconds.

    Accepts both delta-seconds ("120") and HTTP-date forms. Returns None if
    the value is missing or unparseable; past dates yield 0.
    """
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None

    try:
        seconds = float(value)
    except ValueError:
        pass
    else:
        return max(0.0, seconds)

    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        logger.debug("Unparseable Retry-After header", value=value)
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    return max(0.0, (when - now).total_seconds())


def _response_error_code(response: httpx.Response) -> Optional[str]:
    """Extract an error code from a JSON error body ({"code": ...} or {"error": {"code": ...}})."""
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    code = body.get("code")
    if code is None and isinstance(body.get("error"), dict):
        code = body["error"].get("code")
    return code if isinstance(code, str) else None


def translate_httpx_error(error: httpx.HTTPError) -> OperationError:
    """
    Convert an httpx exception into the matching OperationError variant.

    Args:
        error: Any httpx.HTTPError (status errors, timeouts, transport errors)

    Returns:
        OperationError subclass carrying status, code and retry-after hint
    """
    if isinstance(error, httpx.HTTPStatusError):
        response = error.response
        return OperationError.from_status(
            response.status_code,
            message=str(error),
            code=_response_error_code(response),
            retry_after=parse_retry_after(response.headers.get("retry-after")),
            details={"url": str(error.request.url), "method": error.request.method},
        )

    if isinstance(error, httpx.TimeoutException):
        return RequestTimeoutError(str(error) or "Request timed out", details={"exception": type(error).__name__})

    if isinstance(error, httpx.RequestError):
        return NetworkError(str(error) or "Network error", details={"exception": type(error).__name__})

    return OperationError(str(error), details={"exception": type(error).__name__})
