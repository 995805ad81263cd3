"""Base class for all sub-clients.

This module provides the base classes that domain sub-clients inherit
from. They give access to the shared HTTP client and its token store.

This is an internal module and should not be imported directly by users.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from envelope_client._http import AsyncHTTPClient, HTTPClient
    from envelope_client._tokens import TokenStore


class BaseClient:
    """Base class for synchronous sub-clients.

    Attributes:
        _http: The shared HTTP client for making requests.
    """

    def __init__(self, http_client: "HTTPClient") -> None:
        """Initialize the sub-client.

        Args:
            http_client: The shared HTTP client instance.
        """
        self._http = http_client

    @property
    def _tokens(self) -> "TokenStore":
        return self._http.token_store


class AsyncBaseClient:
    """Base class for asynchronous sub-clients.

    Attributes:
        _http: The shared async HTTP client for making requests.
    """

    def __init__(self, http_client: "AsyncHTTPClient") -> None:
        """Initialize the async sub-client.

        Args:
            http_client: The shared async HTTP client instance.
        """
        self._http = http_client

    @property
    def _tokens(self) -> "TokenStore":
        return self._http.token_store
