"""Exception hierarchy for the envelope API client.

This module defines every error the envelope client can report. The
hierarchy is closed: ``HTTPClient.request`` never raises across its public
boundary, it returns a ``Result`` whose ``error`` is one of these classes.
``Result.unwrap()`` raises the carried error for callers who prefer
exceptions.

Exception Hierarchy:
    EnvelopeClientError (base)
    ├── InvalidURLError - Endpoint could not be resolved to a valid URL
    ├── RequestFailedError - Generic transport failure
    ├── InvalidResponseError - Peer sent a malformed HTTP response
    ├── NetworkUnavailableError - No connectivity
    ├── TimeoutError - Request exceeded the configured timeout
    ├── StatusCodeError - Non-2xx HTTP response without an envelope
    ├── DecodingError - Body or result did not match the expected shape
    ├── EnvelopeStatusError - Envelope carried a non-200 statusCode
    │   ├── ServerError (any other code)
    │   ├── PackageIdentityMissingError (405)
    │   ├── EncryptionError (406, 407)
    │   └── AccessTokenExpiredError (401)
    └── CodecError - Local encrypt/decrypt failure
        ├── EncodeFailure
        └── DecodeFailure

Example:
    Branching on a result::

        result = client.get("user/profile", response_type=UserProfile)
        if result.ok:
            show(result.value)
        elif isinstance(result.error, AccessTokenExpiredError):
            sign_in_again()
        elif result.error.is_retryable:
            schedule_retry()
        else:
            print(result.error.description)
"""

from typing import Any


# Status codes the classifier reports as worth retrying
RETRYABLE_STATUS_CODES = frozenset({408, 429})


def _code_is_retryable(code: int) -> bool:
    return code >= 500 or code in RETRYABLE_STATUS_CODES


class EnvelopeClientError(Exception):
    """Base exception for all envelope client errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
        """
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation of the error."""
        return self.message

    @property
    def description(self) -> str:
        """User-visible text for this error kind."""
        return self.message

    @property
    def is_retryable(self) -> bool:
        """Whether a repeated attempt is reasonable.

        Only status-bearing errors can be retryable; see ``is_retryable``
        in ``envelope_client._classify``.
        """
        return False


class InvalidURLError(EnvelopeClientError):
    """The endpoint did not resolve to a syntactically valid URL.

    Raised by the request builder before any network activity.

    Attributes:
        url: The URL (or endpoint) that failed validation.
    """

    def __init__(self, message: str = "Invalid URL.", url: str | None = None) -> None:
        self.url = url
        super().__init__(message)

    @property
    def description(self) -> str:
        return "Invalid URL provided."


class RequestFailedError(EnvelopeClientError):
    """The request could not be completed for a reason other than connectivity.

    Attributes:
        detail: Description of the underlying failure.
    """

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(detail)

    @property
    def description(self) -> str:
        return f"Request failed: {self.detail}"


class InvalidResponseError(EnvelopeClientError):
    """The peer did not answer with a well-formed HTTP response."""

    def __init__(self, message: str = "Invalid response from server.") -> None:
        super().__init__(message)

    @property
    def description(self) -> str:
        return "Invalid response from server."


class NetworkUnavailableError(EnvelopeClientError):
    """No network connectivity to the server.

    Attributes:
        message: Human-readable error description.
        url: The URL that could not be reached.
        cause: The underlying exception that caused the failure.
    """

    def __init__(
        self,
        message: str = "Network connection unavailable.",
        url: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            url: The URL that could not be reached.
            cause: The underlying exception that caused the failure.
        """
        self.url = url
        self.cause = cause
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including URL if available."""
        if self.url:
            return f"{self.message} (url: {self.url})"
        return self.message

    @property
    def description(self) -> str:
        return "Network connection unavailable."


class TimeoutError(EnvelopeClientError):
    """Request timed out.

    Raised when a request takes longer than the configured timeout.

    Attributes:
        message: Human-readable error description.
        timeout: The timeout value in seconds.
        url: The URL that timed out.
    """

    def __init__(
        self,
        message: str = "Request timed out.",
        timeout: float | None = None,
        url: str | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            timeout: The timeout value in seconds.
            url: The URL that timed out.
        """
        self.timeout = timeout
        self.url = url
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including timeout if available."""
        parts = [self.message]
        if self.timeout is not None:
            parts.append(f"timeout: {self.timeout}s")
        if self.url:
            parts.append(f"url: {self.url}")
        return " ".join(parts) if len(parts) == 1 else f"{parts[0]} ({', '.join(parts[1:])})"

    @property
    def description(self) -> str:
        return "Request timed out."


class StatusCodeError(EnvelopeClientError):
    """Server answered with an HTTP error status and no envelope.

    This covers proxies and gateways answering outside the envelope
    protocol, and uploads that did not return the expected status.

    Attributes:
        status_code: HTTP status code from the server.
        response_message: Message extracted from the body, if any.
        response_body: Raw response body for debugging.
    """

    def __init__(
        self,
        status_code: int,
        message: str | None = None,
        response_body: Any = None,
    ) -> None:
        """Initialize the exception.

        Args:
            status_code: HTTP status code from the server.
            message: Message extracted from the response body.
            response_body: Raw response body for debugging.
        """
        self.status_code = status_code
        self.response_message = message
        self.response_body = response_body
        super().__init__(message or "Unknown error")

    def __str__(self) -> str:
        """Return string representation including status code."""
        return f"[HTTP {self.status_code}] {self.message}"

    @property
    def description(self) -> str:
        return f"Server error ({self.status_code}): {self.response_message or 'Unknown error'}"

    @property
    def is_retryable(self) -> bool:
        return _code_is_retryable(self.status_code)


class DecodingError(EnvelopeClientError):
    """The response could not be decoded into the expected shape.

    Attributes:
        detail: Description of the mismatch.
    """

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(detail)

    @property
    def description(self) -> str:
        return f"Decoding error: {self.detail}"


class EnvelopeStatusError(EnvelopeClientError):
    """The response envelope carried a non-200 ``statusCode``.

    Base class for every envelope rejection. The message and code are the
    envelope's ``statusText`` and ``statusCode``, verbatim.

    Attributes:
        message: The envelope's statusText (``"serverError"`` when absent).
        status_code: The envelope's statusCode (``-1`` when absent).
    """

    label = "Server Error"

    def __init__(self, message: str, code: int) -> None:
        """Initialize the exception.

        Args:
            message: The envelope's statusText.
            code: The envelope's statusCode.
        """
        self.status_code = code
        super().__init__(message)

    @property
    def code(self) -> int:
        """Alias for ``status_code``."""
        return self.status_code

    def __str__(self) -> str:
        return f"[{self.status_code}] {self.message}"

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return (self.message, self.status_code) == (other.message, other.status_code)

    def __hash__(self) -> int:
        return hash((type(self), self.message, self.status_code))

    @property
    def description(self) -> str:
        return f"{self.label} [{self.status_code}]: {self.message}"

    @property
    def is_retryable(self) -> bool:
        return _code_is_retryable(self.status_code)


class ServerError(EnvelopeStatusError):
    """Envelope rejection with any code not covered by a narrower kind."""


class PackageIdentityMissingError(EnvelopeStatusError):
    """The server did not accept the package identity headers (405)."""

    label = "Package identity missing"


class EncryptionError(EnvelopeStatusError):
    """The server could not decrypt or parse the encrypted body (406, 407)."""

    label = "Encryption failed"


class AccessTokenExpiredError(EnvelopeStatusError):
    """The access token was rejected (401).

    Callers typically respond by running the refresh exchange or signing
    in again.
    """

    label = "Access token expired"


class CodecError(EnvelopeClientError):
    """Local encryption or decryption failure.

    Codec failures are reported to the immediate caller and are never
    turned into network error kinds.
    """


class EncodeFailure(CodecError):
    """Plaintext could not be serialized or encrypted."""

    @property
    def description(self) -> str:
        return f"Encryption failed: {self.message}"


class DecodeFailure(CodecError):
    """Ciphertext could not be decoded, decrypted, or read as UTF-8."""

    @property
    def description(self) -> str:
        return f"Decryption failed: {self.message}"
