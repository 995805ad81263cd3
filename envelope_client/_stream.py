"""Event-sequence view of a single request.

``request_events`` runs one call through an ``AsyncHTTPClient`` and yields
its lifecycle as events, for callers that consume progress as a stream
(UI state machines, log pipelines). It adds no network behavior of its own.

Example::

    async for event in request_events(http, "auth/google", "POST", body, encrypt=True):
        if event.kind == "started":
            show_spinner()
        elif event.kind == "succeeded":
            render(event.result.value)
        else:
            show_error(event.result.error.description)
"""

from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal

from envelope_client._builder import HttpMethod
from envelope_client._http import AsyncHTTPClient
from envelope_client.models import Result

EventKind = Literal["started", "succeeded", "failed"]


@dataclass(frozen=True)
class RequestEvent:
    """One step of a request's lifecycle.

    Attributes:
        kind: ``started``, then exactly one of ``succeeded`` or ``failed``.
        endpoint: The endpoint as passed by the caller.
        method: HTTP method name.
        result: The outcome, on the terminal event only.
        timestamp: When the event was emitted (UTC).
    """

    kind: EventKind
    endpoint: str
    method: str
    result: Result[Any] | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_terminal(self) -> bool:
        return self.kind != "started"


async def request_events(
    client: AsyncHTTPClient,
    endpoint: str,
    method: HttpMethod | str = HttpMethod.GET,
    body: Any = None,
    response_type: Any = None,
    headers: Mapping[str, str] | None = None,
    *,
    encrypt: bool = False,
) -> AsyncIterator[RequestEvent]:
    """Yield ``started`` and then the terminal event for one request.

    Args:
        client: The async HTTP client to send through.
        endpoint: Relative path or absolute URL.
        method: HTTP method name.
        body: Request value.
        response_type: Expected type of the envelope's ``result``.
        headers: Extra headers.
        encrypt: Send the body as an ``EncryptedRequest``.

    Yields:
        Exactly two events.
    """
    http_method = (method.value if isinstance(method, HttpMethod) else str(method)).upper()
    yield RequestEvent(kind="started", endpoint=endpoint, method=http_method)
    result = await client.request(
        endpoint, method, body, response_type, headers, encrypt=encrypt
    )
    yield RequestEvent(
        kind="succeeded" if result.ok else "failed",
        endpoint=endpoint,
        method=http_method,
        result=result,
    )
