from __future__ import annotations

from datetime import UTC, datetime

import httpx
import pytest

from riskscreen.adapters.errors import (
    SourcePayloadError,
    classify_error,
    classify_status,
    parse_retry_after,
)
from riskscreen.domain.model import CircuitOpenError, ErrorKind

REQUEST = httpx.Request("GET", "https://source.example/search")


def _status_error(status: int, headers: dict[str, str] | None = None) -> httpx.HTTPStatusError:
    response = httpx.Response(status, headers=headers, request=REQUEST)
    return httpx.HTTPStatusError(f"HTTP {status}", request=REQUEST, response=response)


@pytest.mark.parametrize(
    ("status", "kind", "retryable"),
    [
        (429, ErrorKind.RATE_LIMITED, True),
        (401, ErrorKind.AUTH_FAILURE, False),
        (403, ErrorKind.AUTH_FAILURE, False),
        (404, ErrorKind.PERMANENT, False),
        (422, ErrorKind.PERMANENT, False),
        (500, ErrorKind.TRANSIENT, True),
        (503, ErrorKind.TRANSIENT, True),
    ],
)
def test_http_status_classification(status: int, kind: ErrorKind, retryable: bool) -> None:
    error = classify_error(_status_error(status))

    assert error.kind is kind
    assert error.retryable is retryable
    assert error.status_code == status
    assert "source.example" in error.message


def test_rate_limit_carries_retry_after_hint() -> None:
    error = classify_error(_status_error(429, {"Retry-After": "7"}))

    assert error.backoff_hint == 7.0


def test_status_without_request_is_still_classified() -> None:
    assert classify_status(httpx.Response(502)).kind is ErrorKind.TRANSIENT


@pytest.mark.parametrize(
    ("exc", "kind"),
    [
        (httpx.ReadTimeout("slow", request=REQUEST), ErrorKind.TRANSIENT),
        (TimeoutError(), ErrorKind.TRANSIENT),
        (httpx.ConnectError("refused", request=REQUEST), ErrorKind.TRANSIENT),
        (httpx.RemoteProtocolError("eof", request=REQUEST), ErrorKind.TRANSIENT),
        (SourcePayloadError("bad payload"), ErrorKind.PERMANENT),
        (KeyError("surprise"), ErrorKind.UNKNOWN),
    ],
)
def test_exception_classification(exc: BaseException, kind: ErrorKind) -> None:
    assert classify_error(exc).kind is kind


def test_already_classified_errors_pass_through() -> None:
    exc = CircuitOpenError("src", retry_in=3.0)

    assert classify_error(exc) is exc.error


def test_parse_retry_after_seconds_and_dates() -> None:
    now = datetime(2024, 5, 1, 12, 0, 0, tzinfo=UTC)

    assert parse_retry_after("120") == 120.0
    assert parse_retry_after("-5") == 0.0
    assert parse_retry_after("Wed, 01 May 2024 12:00:30 GMT", now=now) == pytest.approx(30.0)
    assert parse_retry_after("Wed, 01 May 2024 11:00:00 GMT", now=now) == 0.0
    assert parse_retry_after("soon") is None
    assert parse_retry_after(None) is None
    assert parse_retry_after("  ") is None
