"""Sample endpoints for exercising the client against known envelopes.

``/sample`` echoes what it received. ``/sample/status/{code}`` answers with
an envelope carrying the requested status code, so callers can see how
each code is classified.
"""

from typing import Any

from fastapi import APIRouter, Body, Request

from sandbox.models import envelope_response

router = APIRouter(
    prefix="/sample",
    tags=["sample"],
)


def _identity(request: Request) -> dict[str, Any]:
    return {
        "packageName": request.headers.get("packageName"),
        "version": request.headers.get("version"),
        "language": request.headers.get("language"),
    }


@router.get("")
async def get_sample(request: Request):
    """Answer with the request's method and identity headers."""
    return envelope_response({"method": "GET", "headers": _identity(request)})


@router.post("")
async def post_sample(request: Request, body: Any = Body(default=None)):
    """Echo the posted JSON body back as ``result.echo``."""
    return envelope_response({"method": "POST", "headers": _identity(request), "echo": body})


@router.api_route("/status/{code}", methods=["GET", "POST"])
async def sample_status(code: int, text: str | None = None):
    """Answer with envelope status ``code`` and no result.

    Args:
        code: Envelope status code to report.
        text: ``statusText`` to report; omitted from the envelope when absent.
    """
    content = envelope_response(status_code=code, status_desc="Sample")
    if text is None:
        content.pop("statusText")
    else:
        content["statusText"] = text
    return content
