"""Map connector exceptions onto the classified error taxonomy."""

from __future__ import annotations

from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from logging import getLogger

import httpx

from riskscreen.domain.model import ClassifiedError, ConnectorError, ErrorKind

log = getLogger(__name__)


class SourcePayloadError(RuntimeError):
    """A source answered, but with an application-level error or an unusable payload."""


def parse_retry_after(value: str | None, *, now: datetime | None = None) -> float | None:
    """Seconds to wait from a ``Retry-After`` header (delta-seconds or HTTP-date)."""

    if value is None or not value.strip():
        return None
    text = value.strip()
    try:
        return max(float(text), 0.0)
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(text)
    except (TypeError, ValueError):
        log.debug("Ignoring unparseable Retry-After header %r", value)
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=UTC)
    reference = now or datetime.now(UTC)
    return max((when - reference).total_seconds(), 0.0)


def classify_status(response: httpx.Response) -> ClassifiedError:
    status = response.status_code
    reason = f"HTTP {status}"
    if _has_request(response):
        reason = f"{reason} from {response.request.url.host}"
    if status == 429:
        return ClassifiedError.of(
            ErrorKind.RATE_LIMITED,
            reason,
            backoff_hint=parse_retry_after(response.headers.get("Retry-After")),
            status_code=status,
        )
    if status in {401, 403}:
        return ClassifiedError.of(ErrorKind.AUTH_FAILURE, reason, status_code=status)
    if 400 <= status < 500:
        return ClassifiedError.of(ErrorKind.PERMANENT, reason, status_code=status)
    if status >= 500:
        return ClassifiedError.of(ErrorKind.TRANSIENT, reason, status_code=status)
    return ClassifiedError.of(ErrorKind.UNKNOWN, reason, status_code=status)


def classify_error(exc: BaseException) -> ClassifiedError:
    """Classify any exception raised while calling a connector."""

    if isinstance(exc, ConnectorError):
        return exc.error
    if isinstance(exc, httpx.HTTPStatusError):
        return classify_status(exc.response)
    if isinstance(exc, SourcePayloadError):
        return ClassifiedError.of(ErrorKind.PERMANENT, str(exc))
    if isinstance(exc, (httpx.TimeoutException, TimeoutError)):
        return ClassifiedError.of(ErrorKind.TRANSIENT, f"timeout: {exc}" if str(exc) else "timeout")
    if isinstance(exc, (httpx.NetworkError, httpx.RemoteProtocolError)):
        return ClassifiedError.of(ErrorKind.TRANSIENT, f"{type(exc).__name__}: {exc}")
    return ClassifiedError.of(ErrorKind.UNKNOWN, f"{type(exc).__name__}: {exc}")


def _has_request(response: httpx.Response) -> bool:
    try:
        response.request  # noqa: B018
    except RuntimeError:
        return False
    return True
