"""Auth sub-client for the envelope API.

This module provides AuthClient and AsyncAuthClient for the sign-in,
token refresh, and profile endpoints. Sign-in and profile requests travel
through the encrypted path. A successful sign-in or refresh writes both
tokens to the client's token store; no other call writes tokens.

This is an internal module. Import from ``envelope_client`` instead.
"""

from enum import Enum

from pydantic import Field

from envelope_client._base import AsyncBaseClient, BaseClient
from envelope_client.exceptions import RequestFailedError
from envelope_client.models import LenientModel, Result, WireModel


class Endpoint(str, Enum):
    """Backend paths, relative to the configured base URL."""

    AUTH = "auth/google"
    AUTH_REFRESH = "auth/refresh"
    PROFILE = "user/profile"


# Request models


class AuthRequest(WireModel):
    """Google sign-in exchange, sent encrypted.

    Attributes:
        id_token: Google ID token.
        email: Account email.
        first_name: Given name.
        last_name: Family name.
    """

    id_token: str | None = None
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None


class ProfileRequest(WireModel):
    """Profile lookup; carries no fields but is still sent encrypted."""


class RefreshRequest(WireModel):
    """Token refresh exchange."""

    refresh_token: str


# Response models


class AuthUser(LenientModel):
    """The signed-in user as returned by the auth exchange.

    Missing strings decode to ``""`` and missing flags to ``False``.
    """

    id: str = ""
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    is_profile_completed: bool = False


class AuthResult(LenientModel):
    """Tokens issued by the auth exchange.

    Attributes:
        user: The signed-in user, when returned.
        access_token: Bearer token for subsequent calls.
        refresh_token: Token for the refresh exchange.
    """

    user: AuthUser | None = None
    access_token: str = ""
    refresh_token: str = ""


class Location(WireModel):
    type: str | None = None
    coordinates: list[float] | None = None


class LikeLimit(WireModel):
    count: int | None = None
    limit: int | None = None
    last_reset: str | None = None


class UserPhoto(WireModel):
    id: str | None = Field(default=None, alias="_id")
    public_id: str | None = None
    url: str | None = None
    is_primary: bool | None = None
    uploaded_at: str | None = None


class NotificationSettings(WireModel):
    messages: bool | None = None
    likes: bool | None = None
    new_matches: bool | None = None
    super_likes: bool | None = None


class UserProfile(WireModel):
    """Full user profile. Every field is optional."""

    id: str | None = Field(default=None, alias="_id")
    version: int | None = Field(default=None, alias="__v")
    updated_at: str | None = None
    created_at: str | None = None
    last_active: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    google_id: str | None = None
    apple_email_is_private: bool | None = None
    last_social_login_type: str | None = None
    dob: str | None = None
    age: int | None = None
    gender: str | None = None
    gender_interest: list[str] | None = None
    bio: str | None = None
    interests: list[str] | None = None
    country: str | None = None
    state: str | None = None
    city: str | None = None
    location: Location | None = None
    photos: list[UserPhoto] | None = None
    device_tokens: list[str] | None = None
    notification_settings: NotificationSettings | None = None
    enable_distance_preference: bool | None = None
    distance_preference: int | None = None
    enable_age_preference: bool | None = None
    min_age_preference: int | None = None
    max_age_preference: int | None = None
    daily_likes: LikeLimit | None = None
    super_likes: LikeLimit | None = None
    is_verified: bool | None = None
    is_premium: bool | None = None
    is_profile_completed: bool | None = None
    is_private: bool | None = None
    is_active: bool | None = None


def _store_tokens(client: BaseClient | AsyncBaseClient, result: Result[AuthResult]) -> None:
    if result.ok and result.value is not None and result.value.access_token:
        client._tokens.set_tokens(result.value.access_token, result.value.refresh_token)


def _no_refresh_token() -> Result[AuthResult]:
    return Result.failure(RequestFailedError("No refresh token stored"))


class AuthClient(BaseClient):
    """Sign-in, refresh and profile calls.

    Example:
        >>> result = client.auth.sign_in_with_google(
        ...     AuthRequest(id_token="...", email="sam@example.com")
        ... )
        >>> if result.ok:
        ...     print(result.envelope.status_text)
    """

    def sign_in_with_google(self, request: AuthRequest) -> Result[AuthResult]:
        """Exchange a Google ID token for access and refresh tokens.

        Stores both tokens on success.
        """
        result = self._http.post_encrypted(Endpoint.AUTH.value, request, AuthResult)
        _store_tokens(self, result)
        return result

    def refresh(self, refresh_token: str | None = None) -> Result[AuthResult]:
        """Exchange a refresh token for new tokens.

        Args:
            refresh_token: Token to use; read from the token store when omitted.
        """
        token = refresh_token or self._tokens.get_refresh_token()
        if not token:
            return _no_refresh_token()
        result = self._http.post(
            Endpoint.AUTH_REFRESH.value, RefreshRequest(refresh_token=token), AuthResult
        )
        _store_tokens(self, result)
        return result

    def profile(self) -> Result[UserProfile]:
        """Fetch the signed-in user's profile."""
        return self._http.post_encrypted(Endpoint.PROFILE.value, ProfileRequest(), UserProfile)

    def sign_out(self) -> None:
        """Forget the stored tokens."""
        self._tokens.clear()


class AsyncAuthClient(AsyncBaseClient):
    """Async sign-in, refresh and profile calls. See ``AuthClient``."""

    async def sign_in_with_google(self, request: AuthRequest) -> Result[AuthResult]:
        result = await self._http.post_encrypted(Endpoint.AUTH.value, request, AuthResult)
        _store_tokens(self, result)
        return result

    async def refresh(self, refresh_token: str | None = None) -> Result[AuthResult]:
        token = refresh_token or self._tokens.get_refresh_token()
        if not token:
            return _no_refresh_token()
        result = await self._http.post(
            Endpoint.AUTH_REFRESH.value, RefreshRequest(refresh_token=token), AuthResult
        )
        _store_tokens(self, result)
        return result

    async def profile(self) -> Result[UserProfile]:
        return await self._http.post_encrypted(
            Endpoint.PROFILE.value, ProfileRequest(), UserProfile
        )

    def sign_out(self) -> None:
        self._tokens.clear()
