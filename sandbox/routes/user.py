"""User endpoints."""

from fastapi import APIRouter
from pydantic import ValidationError

from envelope_client._auth import ProfileRequest
from sandbox.dependencies import CurrentUserDep, DecryptedPayloadDep, PackageNameDep
from sandbox.exceptions import InvalidPayloadError
from sandbox.models import envelope_response

router = APIRouter(
    prefix="/user",
    tags=["user"],
)


@router.post("/profile")
async def get_profile(
    package_name: PackageNameDep,
    user: CurrentUserDep,
    payload: DecryptedPayloadDep,
):
    """Return the signed-in user's profile.

    Requires ``packageName``, a bearer access token, and an encrypted
    (empty) profile request, checked in that order.
    """
    try:
        ProfileRequest.model_validate(payload)
    except ValidationError as exc:
        raise InvalidPayloadError(f"Decrypted payload is not a profile request: {exc}") from exc
    return envelope_response(user, status_text="Profile fetched")
