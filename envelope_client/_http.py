"""HTTP handling for the envelope client.

This module provides the request/response pipeline used by the facade
clients and sub-clients. A call:

1. builds a ``WireRequest`` (URL, headers, optional encrypted body)
2. sends it with the configured timeout
3. decodes the body as an ``Envelope``
4. classifies the envelope status
5. decodes ``result`` into the caller's expected type

Every failure is returned as ``Result.error``; ``request`` never raises.
Nothing here retries. ``Result.error.is_retryable`` tells the caller
whether retrying makes sense.

This is an internal module and should not be imported directly by users.
"""

import logging
from collections.abc import Mapping
from typing import Any

import httpx
from pydantic import PydanticUserError, TypeAdapter, ValidationError

from envelope_client._builder import HttpMethod, RequestBuilder, WireRequest, mask_headers
from envelope_client._classify import (
    classify_envelope,
    classify_http_status,
    classify_transport_error,
)
from envelope_client._tokens import InMemoryTokenStore, TokenStore
from envelope_client.config import ClientConfiguration
from envelope_client.exceptions import (
    DecodingError,
    EnvelopeClientError,
    InvalidResponseError,
    StatusCodeError,
)
from envelope_client.models import Envelope, Result

logger = logging.getLogger(__name__)


def decode_result(result: Any, response_type: Any) -> Any:
    """Validate an envelope ``result`` against the caller's expected type.

    Args:
        result: The raw ``result`` payload (None when absent).
        response_type: Expected type, or None to return the payload as-is.

    Raises:
        DecodingError: If the payload does not match ``response_type``, or
            ``response_type`` is not a type pydantic can validate.
    """
    if response_type is None:
        return result
    name = getattr(response_type, "__name__", repr(response_type))
    try:
        adapter = TypeAdapter(response_type)
    except PydanticUserError as exc:
        raise DecodingError(f"Cannot decode results into {name}: {exc}") from exc
    try:
        return adapter.validate_python(result)
    except ValidationError as exc:
        raise DecodingError(f"Result does not match {name}: {exc}") from exc


def interpret_response(response: httpx.Response, response_type: Any = None) -> Result[Any]:
    """Turn a received HTTP response into a ``Result``.

    Args:
        response: The HTTP response.
        response_type: Expected type of the envelope's ``result``.

    Returns:
        Success with the decoded result, or the classified error.
    """
    if not 100 <= response.status_code <= 599:
        return Result.failure(InvalidResponseError(f"Invalid HTTP status {response.status_code}"))

    try:
        payload = response.json()
    except ValueError:
        payload = None

    is_envelope = isinstance(payload, dict) and (
        response.is_success or "statusCode" in payload
    )
    if not is_envelope:
        if not response.is_success:
            return Result.failure(classify_http_status(response))
        return Result.failure(DecodingError("Response body is not a JSON object"))

    try:
        envelope = Envelope[Any].model_validate(payload)
    except ValidationError as exc:
        return Result.failure(DecodingError(f"Malformed response envelope: {exc}"))

    error = classify_envelope(envelope)
    if error is not None:
        return Result.failure(error, envelope=envelope)

    try:
        value = decode_result(envelope.result, response_type)
    except DecodingError as exc:
        return Result.failure(exc, envelope=envelope)
    return Result.success(value, envelope=envelope)


def interpret_upload_response(
    response: httpx.Response,
    response_type: Any = None,
    success_status: int = 201,
) -> Result[Any]:
    """Turn an upload response into a ``Result``.

    Uploads answer outside the envelope protocol: the body is decoded
    directly into ``response_type`` when the status matches.
    """
    if response.status_code != success_status:
        error = classify_http_status(response)
        if response.is_success:
            error = StatusCodeError(
                response.status_code,
                f"Expected HTTP {success_status}",
                response_body=error.response_body,
            )
        return Result.failure(error)
    try:
        payload = response.json()
    except ValueError:
        return Result.failure(DecodingError("Upload response body is not valid JSON"))
    try:
        return Result.success(decode_result(payload, response_type))
    except DecodingError as exc:
        return Result.failure(exc)


class _PipelineMixin:
    """Request preparation and logging shared by the sync and async clients."""

    configuration: ClientConfiguration
    _builder: RequestBuilder

    def _setup(
        self,
        configuration: ClientConfiguration | None,
        token_store: TokenStore | None,
    ) -> None:
        self.configuration = configuration or ClientConfiguration()
        self.token_store = token_store if token_store is not None else InMemoryTokenStore()
        self._builder = RequestBuilder(self.configuration, self.token_store)

    @property
    def base_url(self) -> str:
        return self.configuration.base_url

    @property
    def timeout(self) -> float:
        return self.configuration.timeout

    def _prepare(self, build, *args: Any, **kwargs: Any) -> WireRequest | Result[Any]:
        try:
            wire = build(*args, **kwargs)
        except EnvelopeClientError as exc:
            logger.warning("Could not build request for %r: %s", args[0] if args else None, exc)
            return Result.failure(exc)
        logger.debug(
            "%s %s headers=%s",
            wire.method.value,
            wire.url,
            mask_headers(wire.headers),
        )
        return wire

    def _transport_failure(self, wire: WireRequest, exc: Exception) -> Result[Any]:
        error = classify_transport_error(exc, url=wire.url, timeout=self.timeout)
        logger.warning("Request %s %s failed: %s", wire.method.value, wire.url, error)
        return Result.failure(error)

    def _finish(self, wire: WireRequest, result: Result[Any]) -> Result[Any]:
        if result.ok:
            logger.debug("Request %s %s succeeded", wire.method.value, wire.url)
        else:
            logger.info("Request %s %s failed: %s", wire.method.value, wire.url, result.error)
        return result


class HTTPClient(_PipelineMixin):
    """Synchronous client for the envelope API.

    Wraps ``httpx.Client``. Each call builds its headers and body fresh
    from the configuration and the current token store contents.

    Attributes:
        configuration: The client configuration.
        token_store: Where the access token is read from.
    """

    def __init__(
        self,
        configuration: ClientConfiguration | None = None,
        token_store: TokenStore | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP client.

        Args:
            configuration: Client configuration (defaults when omitted).
            token_store: Token store (an empty in-memory store when omitted).
            transport: Custom transport (e.g. ``httpx.MockTransport`` for testing).
        """
        self._setup(configuration, token_store)
        self._client = httpx.Client(timeout=self.timeout, transport=transport)

    def close(self) -> None:
        """Close the HTTP client and release resources."""
        self._client.close()

    def __enter__(self) -> "HTTPClient":
        """Enter context manager."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit context manager and close client."""
        self.close()

    def _send(self, wire: WireRequest) -> httpx.Response:
        request = self._client.build_request(
            wire.method.value,
            wire.url,
            headers=list(wire.header_items),
            content=wire.body,
        )
        response = self._client.send(request)
        logger.debug("%s %s -> HTTP %s", wire.method.value, wire.url, response.status_code)
        return response

    def request(
        self,
        endpoint: str,
        method: HttpMethod | str = HttpMethod.GET,
        body: Any = None,
        response_type: Any = None,
        headers: Mapping[str, str] | None = None,
        *,
        encrypt: bool = False,
    ) -> Result[Any]:
        """Perform a request and decode its envelope.

        Args:
            endpoint: Path relative to the base URL, or an absolute URL.
            method: HTTP method.
            body: Request value, ignored for GET.
            response_type: Expected type of the envelope's ``result``; None
                returns the raw payload.
            headers: Extra headers, overriding computed ones.
            encrypt: Send the body as an encrypted ``verificationCode``.

        Returns:
            A ``Result`` holding the decoded value or the classified error.
        """
        wire = self._prepare(
            self._builder.build, endpoint, method, headers, body, encrypt=encrypt
        )
        if isinstance(wire, Result):
            return wire
        try:
            response = self._send(wire)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            return self._transport_failure(wire, exc)
        return self._finish(wire, interpret_response(response, response_type))

    def get(
        self,
        endpoint: str,
        response_type: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[Any]:
        """Make a GET request."""
        return self.request(endpoint, HttpMethod.GET, None, response_type, headers)

    def post(
        self,
        endpoint: str,
        body: Any = None,
        response_type: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[Any]:
        """Make a POST request with a plain JSON body."""
        return self.request(endpoint, HttpMethod.POST, body, response_type, headers)

    def put(
        self,
        endpoint: str,
        body: Any = None,
        response_type: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[Any]:
        """Make a PUT request with a plain JSON body."""
        return self.request(endpoint, HttpMethod.PUT, body, response_type, headers)

    def patch(
        self,
        endpoint: str,
        body: Any = None,
        response_type: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[Any]:
        """Make a PATCH request with a plain JSON body."""
        return self.request(endpoint, HttpMethod.PATCH, body, response_type, headers)

    def delete(
        self,
        endpoint: str,
        response_type: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[Any]:
        """Make a DELETE request."""
        return self.request(endpoint, HttpMethod.DELETE, None, response_type, headers)

    def post_encrypted(
        self,
        endpoint: str,
        body: Any,
        response_type: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[Any]:
        """Make a POST request whose body is sent as an ``EncryptedRequest``."""
        return self.request(
            endpoint, HttpMethod.POST, body, response_type, headers, encrypt=True
        )

    def upload_file(
        self,
        endpoint: str,
        file_data: bytes,
        file_name: str,
        mime_type: str = "image/png",
        form_key: str | None = None,
        response_type: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[Any]:
        """Upload one file as ``multipart/form-data``.

        Args:
            endpoint: Upload path or absolute URL.
            file_data: Raw file content.
            file_name: Filename sent with the part.
            mime_type: Content-Type of the file part.
            form_key: Form field name (configured default when omitted).
            response_type: Expected type of the (non-envelope) response body.
            headers: Extra headers.

        Returns:
            Success when the server answers with the configured upload
            status, otherwise the classified error.
        """
        wire = self._prepare(
            self._builder.build_upload,
            endpoint,
            file_data,
            file_name,
            mime_type,
            form_key,
            headers,
        )
        if isinstance(wire, Result):
            return wire
        try:
            response = self._send(wire)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            return self._transport_failure(wire, exc)
        return self._finish(
            wire,
            interpret_upload_response(
                response, response_type, self.configuration.upload_success_status
            ),
        )


class AsyncHTTPClient(_PipelineMixin):
    """Asynchronous client for the envelope API.

    Wraps ``httpx.AsyncClient``. Calls share no mutable state other than the
    token store, so many may run concurrently on one client.

    Attributes:
        configuration: The client configuration.
        token_store: Where the access token is read from.
    """

    def __init__(
        self,
        configuration: ClientConfiguration | None = None,
        token_store: TokenStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the async HTTP client.

        Args:
            configuration: Client configuration (defaults when omitted).
            token_store: Token store (an empty in-memory store when omitted).
            transport: Custom transport (e.g. ``httpx.ASGITransport`` for testing).
        """
        self._setup(configuration, token_store)
        self._client = httpx.AsyncClient(timeout=self.timeout, transport=transport)

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHTTPClient":
        """Enter async context manager."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Exit async context manager and close client."""
        await self.close()

    async def _send(self, wire: WireRequest) -> httpx.Response:
        request = self._client.build_request(
            wire.method.value,
            wire.url,
            headers=list(wire.header_items),
            content=wire.body,
        )
        response = await self._client.send(request)
        logger.debug("%s %s -> HTTP %s", wire.method.value, wire.url, response.status_code)
        return response

    async def request(
        self,
        endpoint: str,
        method: HttpMethod | str = HttpMethod.GET,
        body: Any = None,
        response_type: Any = None,
        headers: Mapping[str, str] | None = None,
        *,
        encrypt: bool = False,
    ) -> Result[Any]:
        """Perform an async request and decode its envelope.

        See ``HTTPClient.request``.
        """
        wire = self._prepare(
            self._builder.build, endpoint, method, headers, body, encrypt=encrypt
        )
        if isinstance(wire, Result):
            return wire
        try:
            response = await self._send(wire)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            return self._transport_failure(wire, exc)
        return self._finish(wire, interpret_response(response, response_type))

    async def get(
        self,
        endpoint: str,
        response_type: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[Any]:
        """Make an async GET request."""
        return await self.request(endpoint, HttpMethod.GET, None, response_type, headers)

    async def post(
        self,
        endpoint: str,
        body: Any = None,
        response_type: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[Any]:
        """Make an async POST request with a plain JSON body."""
        return await self.request(endpoint, HttpMethod.POST, body, response_type, headers)

    async def put(
        self,
        endpoint: str,
        body: Any = None,
        response_type: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[Any]:
        """Make an async PUT request with a plain JSON body."""
        return await self.request(endpoint, HttpMethod.PUT, body, response_type, headers)

    async def patch(
        self,
        endpoint: str,
        body: Any = None,
        response_type: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[Any]:
        """Make an async PATCH request with a plain JSON body."""
        return await self.request(endpoint, HttpMethod.PATCH, body, response_type, headers)

    async def delete(
        self,
        endpoint: str,
        response_type: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[Any]:
        """Make an async DELETE request."""
        return await self.request(endpoint, HttpMethod.DELETE, None, response_type, headers)

    async def post_encrypted(
        self,
        endpoint: str,
        body: Any,
        response_type: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[Any]:
        """Make an async POST request whose body is sent as an ``EncryptedRequest``."""
        return await self.request(
            endpoint, HttpMethod.POST, body, response_type, headers, encrypt=True
        )

    async def upload_file(
        self,
        endpoint: str,
        file_data: bytes,
        file_name: str,
        mime_type: str = "image/png",
        form_key: str | None = None,
        response_type: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[Any]:
        """Upload one file as ``multipart/form-data``.

        See ``HTTPClient.upload_file``.
        """
        wire = self._prepare(
            self._builder.build_upload,
            endpoint,
            file_data,
            file_name,
            mime_type,
            form_key,
            headers,
        )
        if isinstance(wire, Result):
            return wire
        try:
            response = await self._send(wire)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            return self._transport_failure(wire, exc)
        return self._finish(
            wire,
            interpret_upload_response(
                response, response_type, self.configuration.upload_success_status
            ),
        )
