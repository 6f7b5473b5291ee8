"""
Unit tests for httpx error translation and Retry-After parsing.
"""

from datetime import datetime, timezone

import httpx
import pytest

from resilience_layer.errors.exceptions import (
    AuthenticationError,
    BadRequestError,
    NetworkError,
    OperationError,
    RequestTimeoutError,
    ServerError,
    ServerRateLimitError,
)
from resilience_layer.errors.httpx_adapter import parse_retry_after, translate_httpx_error

REQUEST = httpx.Request("POST", "https://api.example.com/records")


def status_error(status: int, **response_kwargs) -> httpx.HTTPStatusError:
    response = httpx.Response(status, request=REQUEST, **response_kwargs)
    return httpx.HTTPStatusError(f"HTTP {status}", request=REQUEST, response=response)


# ============================================================================
# Retry-After
# ============================================================================


@pytest.mark.parametrize(
    "value,expected",
    [(None, None), ("", None), ("  ", None), ("120", 120.0), ("1.5", 1.5), ("-3", 0.0), ("soon", None)],
)
def test_parse_retry_after_seconds(value, expected):
    assert parse_retry_after(value) == expected


def test_parse_retry_after_http_date():
    now = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    assert parse_retry_after("Thu, 01 Jan 2026 12:00:30 GMT", now=now) == pytest.approx(30.0)
    assert parse_retry_after("Thu, 01 Jan 2026 11:00:00 GMT", now=now) == 0.0


# ============================================================================
# Translation
# ============================================================================


def test_rate_limited_status_carries_retry_after():
    error = translate_httpx_error(status_error(429, headers={"Retry-After": "7"}))

    assert isinstance(error, ServerRateLimitError)
    assert error.status == 429
    assert error.code == "RATE_LIMITED"
    assert error.retry_after == 7.0
    assert error.details == {"url": "https://api.example.com/records", "method": "POST"}


def test_server_status():
    error = translate_httpx_error(status_error(502))

    assert isinstance(error, ServerError)
    assert error.code == "BAD_GATEWAY"
    assert error.retry_after is None


def test_auth_status():
    error = translate_httpx_error(status_error(401))

    assert isinstance(error, AuthenticationError)
    assert error.code == "UNAUTHORIZED"


def test_json_body_error_code_wins():
    error = translate_httpx_error(status_error(400, json={"error": {"code": "INVALID_EMAIL"}}))

    assert isinstance(error, BadRequestError)
    assert error.code == "INVALID_EMAIL"

    flat = translate_httpx_error(status_error(402, json={"code": "INSUFFICIENT_CREDITS"}))
    assert flat.code == "INSUFFICIENT_CREDITS"


def test_non_json_body_ignored():
    error = translate_httpx_error(status_error(500, text="<html>oops</html>"))

    assert error.code == "SERVER_ERROR"


def test_timeout_and_transport_errors():
    timeout = translate_httpx_error(httpx.ConnectTimeout("connect timed out", request=REQUEST))
    network = translate_httpx_error(httpx.ConnectError("refused", request=REQUEST))

    assert isinstance(timeout, RequestTimeoutError)
    assert timeout.code == "TIMEOUT_ERROR"
    assert isinstance(network, NetworkError)
    assert not isinstance(network, RequestTimeoutError)
    assert network.code == "NETWORK_ERROR"


def test_other_httpx_errors_generic():
    error = translate_httpx_error(httpx.DecodingError("bad gzip", request=REQUEST))

    # DecodingError is a RequestError subclass
    assert isinstance(error, NetworkError)

    generic = translate_httpx_error(httpx.HTTPError("unexpected"))
    assert type(generic) is OperationError
    assert generic.details == {"exception": "HTTPError"}
