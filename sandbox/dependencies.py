"""Dependency injection providers for the sandbox application.

This module holds the sandbox's shared state (issued tokens and user
profiles) and the dependencies route handlers use to check deployment
identity, bearer tokens, and encrypted request bodies.
"""

import json
import logging
import os
import secrets
import threading
import uuid
from datetime import datetime, timezone
from typing import Annotated, Any

from fastapi import Depends, Request

from envelope_client._auth import AuthRequest, AuthResult, AuthUser, UserProfile
from envelope_client._codec import decrypt
from envelope_client.exceptions import DecodeFailure
from sandbox.exceptions import (
    BadRequestError,
    InvalidPayloadError,
    InvalidTokenError,
    MissingPackageNameError,
    UndecryptableRequestError,
)

logger = logging.getLogger(__name__)

DEFAULT_ENCRYPTION_KEY = "sandbox-shared-passphrase"


class SandboxState:
    """Users and tokens known to the sandbox.

    Args:
        encryption_key: Passphrase shared with clients for ``verificationCode``.
    """

    def __init__(self, encryption_key: str):
        self.encryption_key = encryption_key
        self._lock = threading.Lock()
        self._profiles: dict[str, UserProfile] = {}
        self._users_by_google_id: dict[str, str] = {}
        self._access_tokens: dict[str, str] = {}
        self._refresh_tokens: dict[str, str] = {}

    def sign_in(self, request: AuthRequest) -> AuthResult:
        """Find or create the user behind a Google ID token and issue tokens."""
        with self._lock:
            user_id = self._users_by_google_id.get(request.id_token or "")
            if user_id is None:
                user_id = uuid.uuid4().hex[:24]
                now = datetime.now(timezone.utc).isoformat()
                self._profiles[user_id] = UserProfile(
                    id=user_id,
                    version=0,
                    created_at=now,
                    updated_at=now,
                    last_active=now,
                    first_name=request.first_name,
                    last_name=request.last_name,
                    email=request.email,
                    google_id=request.id_token,
                    last_social_login_type="google",
                    is_profile_completed=False,
                    is_active=True,
                )
                self._users_by_google_id[request.id_token or ""] = user_id
                logger.info("Created sandbox user %s", user_id)
            return self._issue(user_id)

    def refresh(self, refresh_token: str) -> AuthResult:
        """Rotate both tokens for a known refresh token.

        Raises:
            InvalidTokenError: If the refresh token is unknown or already used.
        """
        with self._lock:
            user_id = self._refresh_tokens.pop(refresh_token, None)
            if user_id is None:
                raise InvalidTokenError("Refresh token expired or invalid")
            self._access_tokens = {
                token: owner for token, owner in self._access_tokens.items() if owner != user_id
            }
            return self._issue(user_id)

    def user_for_access_token(self, access_token: str) -> UserProfile:
        """Look up the profile an access token belongs to.

        Raises:
            InvalidTokenError: If the token is unknown.
        """
        with self._lock:
            user_id = self._access_tokens.get(access_token)
            if user_id is None:
                raise InvalidTokenError()
            return self._profiles[user_id]

    def expire_access_tokens(self) -> None:
        """Invalidate every issued access token; refresh tokens stay valid."""
        with self._lock:
            self._access_tokens.clear()

    def _issue(self, user_id: str) -> AuthResult:
        access_token = secrets.token_hex(16)
        refresh_token = secrets.token_hex(16)
        self._access_tokens[access_token] = user_id
        self._refresh_tokens[refresh_token] = user_id
        profile = self._profiles[user_id]
        return AuthResult(
            user=AuthUser(
                id=user_id,
                first_name=profile.first_name or "",
                last_name=profile.last_name or "",
                email=profile.email or "",
                is_profile_completed=bool(profile.is_profile_completed),
            ),
            access_token=access_token,
            refresh_token=refresh_token,
        )


# Global state, created when the app starts
_sandbox_state: SandboxState | None = None


def get_sandbox_state() -> SandboxState:
    """Get the shared SandboxState instance.

    Raises:
        RuntimeError: If the sandbox hasn't been initialized yet.
    """
    if _sandbox_state is None:
        raise RuntimeError("Sandbox not initialized. Call initialize_sandbox() first.")
    return _sandbox_state


def initialize_sandbox(encryption_key: str | None = None) -> SandboxState:
    """Create fresh sandbox state.

    Args:
        encryption_key: Shared passphrase; read from ``ENVELOPE_ENCRYPTION_KEY``
            when omitted, falling back to ``DEFAULT_ENCRYPTION_KEY``.
    """
    global _sandbox_state

    key = encryption_key or os.environ.get("ENVELOPE_ENCRYPTION_KEY") or DEFAULT_ENCRYPTION_KEY
    _sandbox_state = SandboxState(key)
    return _sandbox_state


def shutdown_sandbox() -> None:
    """Drop all sandbox state."""
    global _sandbox_state
    _sandbox_state = None


SandboxStateDep = Annotated[SandboxState, Depends(get_sandbox_state)]


def require_package_name(request: Request) -> str:
    """Require the ``packageName`` identity header.

    Raises:
        MissingPackageNameError: If the header is absent or empty.
    """
    package_name = request.headers.get("packageName")
    if not package_name:
        raise MissingPackageNameError()
    return package_name


def require_user(request: Request, state: SandboxStateDep) -> UserProfile:
    """Require a valid ``Authorization: Bearer`` access token.

    Raises:
        InvalidTokenError: If the header is missing, malformed, or unknown.
    """
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise InvalidTokenError("Missing bearer token")
    return state.user_for_access_token(token.strip())


async def decrypted_payload(request: Request, state: SandboxStateDep) -> dict[str, Any]:
    """Decrypt a ``{"verificationCode": <hex>}`` body into its JSON object.

    Raises:
        BadRequestError: If the body is not a JSON object.
        UndecryptableRequestError: If ``verificationCode`` is missing or
            does not decrypt.
        InvalidPayloadError: If the plaintext is not a JSON object.
    """
    try:
        body = await request.json()
    except ValueError:
        raise BadRequestError("Request body must be JSON") from None
    if not isinstance(body, dict):
        raise BadRequestError("Request body must be a JSON object")

    code = body.get("verificationCode")
    if not isinstance(code, str):
        raise UndecryptableRequestError("verificationCode is required")
    try:
        plaintext = decrypt(code, state.encryption_key)
    except DecodeFailure as exc:
        logger.debug("Rejecting verificationCode: %s", exc)
        raise UndecryptableRequestError("verificationCode could not be decrypted") from exc

    try:
        payload = json.loads(plaintext)
    except ValueError:
        raise InvalidPayloadError("Decrypted payload is not valid JSON") from None
    if not isinstance(payload, dict):
        raise InvalidPayloadError("Decrypted payload must be a JSON object")
    return payload


PackageNameDep = Annotated[str, Depends(require_package_name)]
CurrentUserDep = Annotated[UserProfile, Depends(require_user)]
DecryptedPayloadDep = Annotated[dict[str, Any], Depends(decrypted_payload)]
