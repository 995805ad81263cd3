"""Envelope API Client Library.

This module provides a typed Python client for a mobile backend that wraps
every response in a uniform status envelope and accepts selected request
bodies as AES-encrypted ``verificationCode`` payloads. It supports both
synchronous and asynchronous usage patterns.

Example:
    Synchronous usage::

        from envelope_client import APIClient, ClientConfiguration

        config = ClientConfiguration(
            base_url="https://api.staging.server.com/",
            package_name="com.example.app",
            encryption_key="shared-passphrase",
        )
        with APIClient(config) as client:
            result = client.post_encrypted("auth/google", {"idToken": "..."})
            if not result.ok:
                print(result.error.description)

    Asynchronous usage::

        from envelope_client import AsyncAPIClient

        async with AsyncAPIClient(config) as client:
            profile = await client.auth.profile()

Exports:
    APIClient: Synchronous client.
    AsyncAPIClient: Asynchronous client.

    Exceptions (returned as ``Result.error``):
        EnvelopeClientError: Base exception for all client errors.
        InvalidURLError: Endpoint does not resolve to a valid URL.
        RequestFailedError: Request could not be built.
        InvalidResponseError: Peer sent a malformed HTTP response.
        NetworkUnavailableError: No connectivity to the peer.
        TimeoutError: Request timed out.
        StatusCodeError: Non-envelope HTTP error status.
        DecodingError: Response could not be decoded.
        ServerError: Envelope reported a failure status.
        AccessTokenExpiredError: Envelope status 401.
        PackageIdentityMissingError: Envelope status 405.
        EncryptionError: Envelope status 406/407.
        EncodeFailure / DecodeFailure: Local codec failures.
"""

from envelope_client._auth import (
    AsyncAuthClient,
    AuthClient,
    AuthRequest,
    AuthResult,
    AuthUser,
    Endpoint,
    LikeLimit,
    Location,
    NotificationSettings,
    ProfileRequest,
    RefreshRequest,
    UserPhoto,
    UserProfile,
)
from envelope_client._builder import (
    HttpMethod,
    RequestBuilder,
    WireRequest,
    encode_multipart,
    resolve_url,
)
from envelope_client._classify import (
    classify_envelope,
    classify_http_status,
    classify_transport_error,
    is_retryable,
)
from envelope_client._codec import decrypt, derive_key, encrypt
from envelope_client._http import AsyncHTTPClient, HTTPClient, interpret_response
from envelope_client._stream import RequestEvent, request_events
from envelope_client._tokens import (
    InMemoryTokenStore,
    JsonFileTokenStore,
    TokenStore,
)
from envelope_client.client import APIClient, AsyncAPIClient
from envelope_client.config import ClientConfiguration, Environment
from envelope_client.exceptions import (
    AccessTokenExpiredError,
    CodecError,
    DecodeFailure,
    DecodingError,
    EncodeFailure,
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
from envelope_client.models import (
    EmptyBody,
    EncryptedRequest,
    Envelope,
    Result,
    dump_json,
    encrypted_envelope,
)

__all__ = [
    # Main clients
    "APIClient",
    "AsyncAPIClient",
    "HTTPClient",
    "AsyncHTTPClient",
    "AuthClient",
    "AsyncAuthClient",
    # Configuration
    "ClientConfiguration",
    "Environment",
    # Tokens
    "TokenStore",
    "InMemoryTokenStore",
    "JsonFileTokenStore",
    # Requests
    "HttpMethod",
    "RequestBuilder",
    "WireRequest",
    "encode_multipart",
    "resolve_url",
    "request_events",
    "RequestEvent",
    # Codec
    "encrypt",
    "decrypt",
    "derive_key",
    # Models
    "Envelope",
    "EncryptedRequest",
    "EmptyBody",
    "Result",
    "dump_json",
    "encrypted_envelope",
    "interpret_response",
    "Endpoint",
    "AuthRequest",
    "AuthResult",
    "AuthUser",
    "ProfileRequest",
    "RefreshRequest",
    "UserProfile",
    "Location",
    "LikeLimit",
    "UserPhoto",
    "NotificationSettings",
    # Classification
    "classify_envelope",
    "classify_http_status",
    "classify_transport_error",
    "is_retryable",
    # Exceptions
    "EnvelopeClientError",
    "InvalidURLError",
    "RequestFailedError",
    "InvalidResponseError",
    "NetworkUnavailableError",
    "TimeoutError",
    "StatusCodeError",
    "DecodingError",
    "EnvelopeStatusError",
    "ServerError",
    "PackageIdentityMissingError",
    "EncryptionError",
    "AccessTokenExpiredError",
    "CodecError",
    "EncodeFailure",
    "DecodeFailure",
]
