"""Outcome classification for the envelope client.

Maps transport failures, HTTP statuses and envelope status codes onto the
closed error taxonomy in ``envelope_client.exceptions``.

Envelope status routing:
    200        -> success
    401        -> AccessTokenExpiredError
    405        -> PackageIdentityMissingError
    406, 407   -> EncryptionError
    otherwise  -> ServerError

``is_retryable`` is advisory. Nothing in this package retries.

This is an internal module and should not be imported directly by users.
"""

import errno
import socket
import ssl
from typing import Any

import httpx

from envelope_client.exceptions import (
    AccessTokenExpiredError,
    EncryptionError,
    EnvelopeClientError,
    EnvelopeStatusError,
    InvalidResponseError,
    InvalidURLError,
    NetworkUnavailableError,
    PackageIdentityMissingError,
    RequestFailedError,
    ServerError,
    StatusCodeError,
    TimeoutError,
)
from envelope_client.models import Envelope

DEFAULT_STATUS_TEXT = "serverError"

_ENVELOPE_ERRORS: dict[int, type[EnvelopeStatusError]] = {
    401: AccessTokenExpiredError,
    405: PackageIdentityMissingError,
    406: EncryptionError,
    407: EncryptionError,
}

# OS-level failures that mean the device has no usable network path
_CONNECTIVITY_ERRNOS = frozenset({
    errno.ENETDOWN,
    errno.ENETUNREACH,
    errno.ENETRESET,
    errno.EHOSTDOWN,
    errno.EHOSTUNREACH,
    errno.ECONNABORTED,
    errno.ECONNRESET,
    errno.ECONNREFUSED,
})


def classify_envelope(envelope: Envelope[Any]) -> EnvelopeStatusError | None:
    """Classify a decoded envelope.

    Args:
        envelope: The decoded response envelope.

    Returns:
        None for ``statusCode == 200``, otherwise the matching error
        carrying the envelope's statusText and statusCode verbatim.
    """
    if envelope.is_success:
        return None
    message = envelope.status_text if envelope.has_status_text else DEFAULT_STATUS_TEXT
    error_cls = _ENVELOPE_ERRORS.get(envelope.status_code, ServerError)
    return error_cls(message, envelope.status_code)


def _extract_error_message(response: httpx.Response) -> str | None:
    """Pull a message out of a non-envelope error body.

    Looks for a ``message`` or ``error`` string in a JSON object body and
    falls back to the trimmed text body.
    """
    try:
        body = response.json()
    except ValueError:
        text = response.text.strip()
        return text or None

    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            value = body.get(key)
            if isinstance(value, str):
                return value
    return None


def classify_http_status(response: httpx.Response) -> StatusCodeError:
    """Build a ``StatusCodeError`` for a response outside the envelope protocol."""
    try:
        response_body: Any = response.json()
    except ValueError:
        response_body = response.text
    return StatusCodeError(
        status_code=response.status_code,
        message=_extract_error_message(response),
        response_body=response_body,
    )


def _causes(exc: BaseException):
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def _is_connectivity_failure(exc: httpx.HTTPError) -> bool:
    """Whether a transport error means the network itself is unavailable.

    Decided from the cause chain only. TLS failures are never connectivity
    failures even though httpx reports them as ``ConnectError``.
    """
    for cause in _causes(exc):
        if isinstance(cause, ssl.SSLError):
            return False
        if isinstance(cause, socket.gaierror):
            return True
        if isinstance(cause, OSError) and cause.errno in _CONNECTIVITY_ERRNOS:
            return True
        if isinstance(cause, (ConnectionResetError, ConnectionAbortedError, BrokenPipeError)):
            return True
    return False


def classify_transport_error(
    exc: Exception,
    url: str | None = None,
    timeout: float | None = None,
) -> EnvelopeClientError:
    """Classify an exception raised while sending a request.

    Args:
        exc: The exception raised by the transport.
        url: The URL that was being requested.
        timeout: The configured timeout, reported on ``TimeoutError``.

    Returns:
        The matching error kind.
    """
    if isinstance(exc, EnvelopeClientError):
        return exc
    if isinstance(exc, httpx.TimeoutException):
        return TimeoutError(timeout=timeout, url=url)
    if isinstance(exc, (httpx.InvalidURL, httpx.UnsupportedProtocol)):
        return InvalidURLError(str(exc) or "Invalid URL.", url=url)
    if isinstance(exc, httpx.RemoteProtocolError):
        return InvalidResponseError(f"Invalid response from server: {exc}")
    if isinstance(exc, httpx.HTTPError) and _is_connectivity_failure(exc):
        cause = exc.__cause__ if isinstance(exc.__cause__, Exception) else exc
        return NetworkUnavailableError(url=url, cause=cause)
    return RequestFailedError(str(exc) or type(exc).__name__)


def is_retryable(error: EnvelopeClientError) -> bool:
    """Whether repeating the failed request is reasonable.

    True exactly for status-bearing errors whose code is >= 500, 408 or 429.
    """
    return error.is_retryable
