"""Request construction for the envelope client.

Turns an endpoint, method, headers and body into an immutable
``WireRequest``. Nothing here touches the network: URL validation and body
encryption failures surface before a connection is attempted.

Header precedence, lowest to highest:
    1. ``ClientConfiguration.default_headers``
    2. Computed headers (``Authorization``, ``packageName``, ``version``, ``language``)
    3. Caller-supplied headers

Later layers replace earlier ones by case-insensitive header name.

This is an internal module and should not be imported directly by users.
"""

import re
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any
from urllib.parse import urlsplit

import httpx

from envelope_client._tokens import TokenStore
from envelope_client.config import ClientConfiguration
from envelope_client.exceptions import EncodeFailure, InvalidURLError, RequestFailedError
from envelope_client.models import dump_json, encrypted_envelope


class HttpMethod(str, Enum):
    """HTTP methods supported by the client."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"

    @classmethod
    def coerce(cls, method: "HttpMethod | str") -> "HttpMethod":
        """Accept an ``HttpMethod`` or its name in any case."""
        if isinstance(method, cls):
            return method
        try:
            return cls(str(method).upper())
        except ValueError:
            raise RequestFailedError(f"Unsupported HTTP method: {method!r}") from None


_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")
_FORBIDDEN_URL_CHARS = re.compile(r"[\s\x00-\x1f\x7f<>\"{}|\\^`]")

MASKED = "***"


def resolve_url(base_url: str, endpoint: str) -> str:
    """Resolve an endpoint against a base URL.

    An endpoint that already carries a scheme is used as-is. Otherwise
    slashes are trimmed from the end of the base and both ends of the
    endpoint, and the two are joined with exactly one ``/``.

    Args:
        base_url: Configured base URL.
        endpoint: Relative path or absolute URL.

    Returns:
        The resolved URL.

    Raises:
        InvalidURLError: If the result is not a valid http(s) URL.
    """
    if _SCHEME_RE.match(endpoint):
        url = endpoint
    else:
        url = f"{base_url.strip('/')}/{endpoint.strip('/')}"

    if _FORBIDDEN_URL_CHARS.search(url):
        raise InvalidURLError(f"URL contains characters that are not allowed: {url!r}", url=url)
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError as exc:
        raise InvalidURLError(f"Malformed URL {url!r}: {exc}", url=url) from exc
    if parts.scheme.lower() not in ("http", "https") or not parts.hostname or port == 0:
        raise InvalidURLError(f"URL must be an absolute http(s) URL: {url!r}", url=url)
    return url


def mask_headers(headers: Mapping[str, str] | httpx.Headers) -> dict[str, str]:
    """Copy headers for logging with credentials masked."""
    masked = {}
    for name, value in headers.items():
        if name.lower() == "authorization":
            scheme = value.split(" ", 1)[0] if " " in value else ""
            masked[name] = f"{scheme} {MASKED}".strip()
        else:
            masked[name] = value
    return masked


_DISPOSITION_ESCAPES = {"\n": "%0A", "\r": "%0D", '"': "%22"}


def _quote_disposition(value: str) -> str:
    return "".join(_DISPOSITION_ESCAPES.get(ch, ch) for ch in value)


def encode_multipart(
    file_data: bytes,
    file_name: str,
    mime_type: str,
    form_key: str,
    boundary: str | None = None,
) -> tuple[bytes, str]:
    """Encode a single-file ``multipart/form-data`` body.

    Quotes and line breaks in ``form_key`` and ``file_name`` are
    percent-encoded, as browsers do for form-data names.

    Args:
        file_data: Raw file content.
        file_name: Filename reported in the part's Content-Disposition.
        mime_type: Content-Type of the file part.
        form_key: Form field name of the file part.
        boundary: Boundary token; a random one is generated when omitted.

    Returns:
        A tuple of (body, content_type header value).

    Raises:
        EncodeFailure: If ``mime_type`` contains a line break.
    """
    if "\r" in mime_type or "\n" in mime_type:
        raise EncodeFailure(f"Invalid MIME type: {mime_type!r}")
    boundary = boundary or uuid.uuid4().hex
    name = _quote_disposition(form_key)
    filename = _quote_disposition(file_name)
    head = (
        f"--{boundary}\r\n"
        f'Content-Disposition: form-data; name="{name}"; filename="{filename}"\r\n'
        f"Content-Type: {mime_type}\r\n\r\n"
    ).encode("utf-8")
    tail = f"\r\n--{boundary}--\r\n".encode("utf-8")
    return head + file_data + tail, f"multipart/form-data; boundary={boundary}"


@dataclass(frozen=True)
class WireRequest:
    """A fully built request, ready to send.

    Attributes:
        method: HTTP method.
        url: Resolved absolute URL.
        header_items: Header (name, value) pairs in send order.
        body: Serialized body, or None.
    """

    method: HttpMethod
    url: str
    header_items: tuple[tuple[str, str], ...]
    body: bytes | None = None

    @property
    def headers(self) -> httpx.Headers:
        """A fresh case-insensitive view of the headers."""
        return httpx.Headers(list(self.header_items))


class RequestBuilder:
    """Builds ``WireRequest`` objects from configuration and token state.

    The access token is read from the token store on every ``build`` call.

    Attributes:
        configuration: The client configuration.
        token_store: Where the access token is read from.
    """

    def __init__(self, configuration: ClientConfiguration, token_store: TokenStore) -> None:
        self.configuration = configuration
        self.token_store = token_store

    def compose_headers(self, headers: Mapping[str, str] | None = None) -> httpx.Headers:
        """Merge default, computed, and caller headers.

        Raises:
            RequestFailedError: If a header name or value cannot be sent.
        """
        try:
            merged = httpx.Headers(self.configuration.default_headers)
            token = self.token_store.get_access_token()
            if token:
                merged["Authorization"] = f"Bearer {token}"
            merged.update(self.configuration.identity_headers())
            if headers:
                merged.update(headers)
        except (UnicodeEncodeError, TypeError) as exc:
            raise RequestFailedError(f"Invalid header: {exc}") from exc
        return merged

    def serialize_body(self, body: Any, *, encrypt: bool = False, key: str | None = None) -> bytes:
        """Serialize a request body, optionally through the encrypted path.

        Raises:
            EncodeFailure: If the body cannot be serialized, or encryption
                is requested without a key.
        """
        if encrypt:
            passphrase = key if key is not None else self.configuration.encryption_key
            if passphrase is None:
                raise EncodeFailure("No encryption key configured")
            body = encrypted_envelope(body, passphrase)
        return dump_json(body).encode("utf-8")

    def build(
        self,
        endpoint: str,
        method: HttpMethod | str = HttpMethod.GET,
        headers: Mapping[str, str] | None = None,
        body: Any = None,
        *,
        encrypt: bool = False,
        key: str | None = None,
    ) -> WireRequest:
        """Build a request.

        The body is serialized only when the method is not GET and a body
        value is given.

        Args:
            endpoint: Relative path or absolute URL.
            method: HTTP method.
            headers: Caller headers, highest precedence.
            body: Request value; see ``dump_json`` for accepted types.
            encrypt: Send the body as an ``EncryptedRequest``.
            key: Passphrase overriding the configured encryption key.

        Raises:
            InvalidURLError: If the endpoint does not resolve to a valid URL.
            EncodeFailure: If the body cannot be serialized or encrypted.
            RequestFailedError: If the method is not supported.
        """
        http_method = HttpMethod.coerce(method)
        url = resolve_url(self.configuration.base_url, endpoint)
        merged = self.compose_headers(headers)

        content = None
        if http_method is not HttpMethod.GET and body is not None:
            content = self.serialize_body(body, encrypt=encrypt, key=key)

        return WireRequest(
            method=http_method,
            url=url,
            header_items=_header_items(merged),
            body=content,
        )

    def build_upload(
        self,
        endpoint: str,
        file_data: bytes,
        file_name: str,
        mime_type: str = "image/png",
        form_key: str | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> WireRequest:
        """Build a multipart upload POST.

        Raises:
            InvalidURLError: If the endpoint does not resolve to a valid URL.
        """
        url = resolve_url(self.configuration.base_url, endpoint)
        body, content_type = encode_multipart(
            file_data,
            file_name,
            mime_type,
            form_key or self.configuration.upload_form_key,
        )
        merged = self.compose_headers(headers)
        merged["Content-Type"] = content_type
        return WireRequest(
            method=HttpMethod.POST,
            url=url,
            header_items=_header_items(merged),
            body=body,
        )


def _header_items(headers: httpx.Headers) -> tuple[tuple[str, str], ...]:
    return tuple(
        (name.decode(headers.encoding), value.decode(headers.encoding))
        for name, value in headers.raw
    )
