"""Exception handlers for the sandbox peer.

The legacy backend never signals failure through the HTTP status line: it
answers HTTP 200 and puts the outcome in the envelope's ``statusCode``.
The exceptions below carry that envelope status, and the handlers turn
them (and anything unexpected) into envelope responses.
"""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from sandbox.models import envelope_response

logger = logging.getLogger(__name__)


# Custom Exception Classes


class EnvelopeStatusException(Exception):
    """Base for failures reported inside the envelope.

    Args:
        status_text: Human-readable message for ``statusText``.
    """

    status_code: int = 500
    status_desc: str = "Internal Server Error"

    def __init__(self, status_text: str):
        self.status_text = status_text
        super().__init__(status_text)


class BadRequestError(EnvelopeStatusException):
    """Request body is missing or not shaped as expected."""

    status_code = 400
    status_desc = "Bad Request"


class InvalidTokenError(EnvelopeStatusException):
    """Access or refresh token is missing, unknown, or expired."""

    status_code = 401
    status_desc = "Unauthorized"

    def __init__(self, status_text: str = "Access token expired or invalid"):
        super().__init__(status_text)


class MissingPackageNameError(EnvelopeStatusException):
    """The ``packageName`` identity header is absent."""

    status_code = 405
    status_desc = "Package Name Missing"

    def __init__(self, status_text: str = "packageName header is required"):
        super().__init__(status_text)


class UndecryptableRequestError(EnvelopeStatusException):
    """``verificationCode`` is missing or cannot be decrypted."""

    status_code = 406
    status_desc = "Encryption Failed"


class InvalidPayloadError(EnvelopeStatusException):
    """Decrypted payload is not the expected JSON."""

    status_code = 407
    status_desc = "Encryption Failed"


# Exception Handlers


async def envelope_status_handler(request: Request, exc: EnvelopeStatusException):
    """Report an ``EnvelopeStatusException`` as an envelope.

    Args:
        request: The incoming request that triggered the error.
        exc: The exception.

    Returns:
        JSONResponse with HTTP 200 and the exception's envelope status.
    """
    logger.info(
        "%s %s -> envelope %s: %s",
        request.method,
        request.url.path,
        exc.status_code,
        exc.status_text,
    )
    return JSONResponse(
        content=envelope_response(
            status_code=exc.status_code,
            status_desc=exc.status_desc,
            status_text=exc.status_text,
        )
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report a request that failed FastAPI's body validation as status 400."""
    return JSONResponse(
        content=envelope_response(
            status_code=BadRequestError.status_code,
            status_desc=BadRequestError.status_desc,
            status_text="The request data failed validation",
        )
    )


async def generic_exception_handler(request: Request, exc: Exception):
    """Report any unhandled exception as envelope status 500.

    The traceback is logged, never returned to the caller.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        content=envelope_response(
            status_code=500,
            status_desc="Internal Server Error",
            status_text="An unexpected error occurred",
        )
    )
