"""Main envelope API client classes.

This module provides the main entry points for talking to the backend:
- APIClient: Synchronous client
- AsyncAPIClient: Asynchronous client

Both own one HTTP client, a ``ClientConfiguration`` and a ``TokenStore``,
expose the generic request methods by delegation, and give namespaced
access to domain calls through sub-client properties (``client.auth``).

Example:
    Synchronous usage::

        from envelope_client import APIClient, AuthRequest, ClientConfiguration

        config = ClientConfiguration.from_env()
        with APIClient(config) as client:
            signed_in = client.auth.sign_in_with_google(AuthRequest(id_token="..."))
            profile = client.auth.profile()
            if profile.ok:
                print(profile.value.first_name)

    Asynchronous usage::

        from envelope_client import AsyncAPIClient

        async with AsyncAPIClient(config) as client:
            result = await client.get("sample", response_type=dict)
"""

from collections.abc import Mapping
from typing import Any

import httpx

from envelope_client._auth import AsyncAuthClient, AuthClient
from envelope_client._builder import HttpMethod
from envelope_client._http import AsyncHTTPClient, HTTPClient
from envelope_client._tokens import TokenStore
from envelope_client.config import ClientConfiguration
from envelope_client.models import Result


class APIClient:
    """Synchronous client for the envelope API.

    Every request method returns a ``Result`` and never raises for
    request, transport or protocol failures.

    Attributes:
        configuration: The client configuration.
        token_store: Where access and refresh tokens are kept.

    Example:
        Manual lifecycle management::

            client = APIClient(ClientConfiguration(package_name="com.example.app"))
            try:
                result = client.post("sample", {"name": "x"}, response_type=dict)
            finally:
                client.close()
    """

    def __init__(
        self,
        configuration: ClientConfiguration | None = None,
        token_store: TokenStore | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            configuration: Client configuration (defaults when omitted).
            token_store: Token store (an empty in-memory store when omitted).
            transport: Custom HTTP transport (e.g. ``httpx.MockTransport`` for testing).
        """
        self._http = HTTPClient(configuration, token_store, transport)
        self._auth: AuthClient | None = None

    def __enter__(self) -> "APIClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the client and release resources."""
        self._http.close()

    @property
    def configuration(self) -> ClientConfiguration:
        return self._http.configuration

    @property
    def token_store(self) -> TokenStore:
        return self._http.token_store

    @property
    def auth(self) -> AuthClient:
        """Access sign-in, refresh and profile endpoints.

        Returns:
            AuthClient instance sharing this client's token store.
        """
        if self._auth is None:
            self._auth = AuthClient(self._http)
        return self._auth

    # Generic request methods

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
        """Perform a request; see ``HTTPClient.request``."""
        return self._http.request(
            endpoint, method, body, response_type, headers, encrypt=encrypt
        )

    def get(
        self,
        endpoint: str,
        response_type: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[Any]:
        return self._http.get(endpoint, response_type, headers)

    def post(
        self,
        endpoint: str,
        body: Any = None,
        response_type: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[Any]:
        return self._http.post(endpoint, body, response_type, headers)

    def put(
        self,
        endpoint: str,
        body: Any = None,
        response_type: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[Any]:
        return self._http.put(endpoint, body, response_type, headers)

    def patch(
        self,
        endpoint: str,
        body: Any = None,
        response_type: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[Any]:
        return self._http.patch(endpoint, body, response_type, headers)

    def delete(
        self,
        endpoint: str,
        response_type: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[Any]:
        return self._http.delete(endpoint, response_type, headers)

    def post_encrypted(
        self,
        endpoint: str,
        body: Any,
        response_type: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[Any]:
        """POST with the body wrapped as ``{"verificationCode": <hex>}``."""
        return self._http.post_encrypted(endpoint, body, response_type, headers)

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
        """Upload one file as ``multipart/form-data``; see ``HTTPClient.upload_file``."""
        return self._http.upload_file(
            endpoint, file_data, file_name, mime_type, form_key, response_type, headers
        )


class AsyncAPIClient:
    """Asynchronous client for the envelope API.

    Mirrors ``APIClient``; all request methods are coroutines.

    Example:
        Concurrent requests::

            async with AsyncAPIClient(config) as client:
                first, second = await asyncio.gather(
                    client.get("sample"),
                    client.auth.profile(),
                )
    """

    def __init__(
        self,
        configuration: ClientConfiguration | None = None,
        token_store: TokenStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the async client.

        Args:
            configuration: Client configuration (defaults when omitted).
            token_store: Token store (an empty in-memory store when omitted).
            transport: Custom HTTP transport (e.g. ``httpx.ASGITransport`` for testing).
        """
        self._http = AsyncHTTPClient(configuration, token_store, transport)
        self._auth: AsyncAuthClient | None = None

    async def __aenter__(self) -> "AsyncAPIClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the client and release resources."""
        await self._http.close()

    @property
    def configuration(self) -> ClientConfiguration:
        return self._http.configuration

    @property
    def token_store(self) -> TokenStore:
        return self._http.token_store

    @property
    def http(self) -> AsyncHTTPClient:
        """The underlying HTTP client, e.g. for ``request_events``."""
        return self._http

    @property
    def auth(self) -> AsyncAuthClient:
        """Access sign-in, refresh and profile endpoints."""
        if self._auth is None:
            self._auth = AsyncAuthClient(self._http)
        return self._auth

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
        return await self._http.request(
            endpoint, method, body, response_type, headers, encrypt=encrypt
        )

    async def get(
        self,
        endpoint: str,
        response_type: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[Any]:
        return await self._http.get(endpoint, response_type, headers)

    async def post(
        self,
        endpoint: str,
        body: Any = None,
        response_type: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[Any]:
        return await self._http.post(endpoint, body, response_type, headers)

    async def put(
        self,
        endpoint: str,
        body: Any = None,
        response_type: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[Any]:
        return await self._http.put(endpoint, body, response_type, headers)

    async def patch(
        self,
        endpoint: str,
        body: Any = None,
        response_type: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[Any]:
        return await self._http.patch(endpoint, body, response_type, headers)

    async def delete(
        self,
        endpoint: str,
        response_type: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[Any]:
        return await self._http.delete(endpoint, response_type, headers)

    async def post_encrypted(
        self,
        endpoint: str,
        body: Any,
        response_type: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[Any]:
        return await self._http.post_encrypted(endpoint, body, response_type, headers)

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
        return await self._http.upload_file(
            endpoint, file_data, file_name, mime_type, form_key, response_type, headers
        )
