"""Auth endpoints.

Google sign-in arrives as an encrypted ``verificationCode``; refresh is a
plain JSON body. Both issue a new access/refresh token pair.
"""

from fastapi import APIRouter
from pydantic import ValidationError

from envelope_client._auth import AuthRequest, RefreshRequest
from sandbox.dependencies import DecryptedPayloadDep, PackageNameDep, SandboxStateDep
from sandbox.exceptions import BadRequestError, InvalidPayloadError
from sandbox.models import envelope_response

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
)


# Route Handlers


@router.post("/google")
async def sign_in_with_google(
    package_name: PackageNameDep,
    payload: DecryptedPayloadDep,
    state: SandboxStateDep,
):
    """Exchange a Google ID token for sandbox tokens.

    Returns:
        Envelope whose ``result`` is an ``AuthResult``.
    """
    try:
        auth_request = AuthRequest.model_validate(payload)
    except ValidationError as exc:
        raise InvalidPayloadError(f"Decrypted payload is not a sign-in request: {exc}") from exc
    if not auth_request.id_token:
        raise BadRequestError("idToken is required")

    result = state.sign_in(auth_request)
    return envelope_response(result, status_text="Signed in successfully")


@router.post("/refresh")
async def refresh_tokens(
    package_name: PackageNameDep,
    body: RefreshRequest,
    state: SandboxStateDep,
):
    """Rotate the token pair for a refresh token.

    Returns:
        Envelope whose ``result`` is an ``AuthResult``; status 401 when the
        refresh token is unknown.
    """
    result = state.refresh(body.refresh_token)
    return envelope_response(result, status_text="Tokens refreshed")
