"""Unit tests for SandboxState and its lifecycle helpers."""

import pytest

from envelope_client import AuthRequest
from sandbox.dependencies import (
    DEFAULT_ENCRYPTION_KEY,
    get_sandbox_state,
    initialize_sandbox,
    shutdown_sandbox,
)
from sandbox.exceptions import InvalidTokenError


class TestLifecycle:
    """Tests for initialize_sandbox / shutdown_sandbox."""

    def test_uninitialized(self):
        shutdown_sandbox()
        with pytest.raises(RuntimeError, match="not initialized"):
            get_sandbox_state()

    def test_explicit_key(self):
        try:
            state = initialize_sandbox("k1")
            assert get_sandbox_state() is state
            assert state.encryption_key == "k1"
        finally:
            shutdown_sandbox()

    def test_key_from_environment(self, monkeypatch):
        monkeypatch.setenv("ENVELOPE_ENCRYPTION_KEY", "from-env")
        try:
            assert initialize_sandbox().encryption_key == "from-env"
        finally:
            shutdown_sandbox()

    def test_default_key(self, monkeypatch):
        monkeypatch.delenv("ENVELOPE_ENCRYPTION_KEY", raising=False)
        try:
            assert initialize_sandbox().encryption_key == DEFAULT_ENCRYPTION_KEY
        finally:
            shutdown_sandbox()


class TestSandboxState:
    """Tests for user and token bookkeeping."""

    def test_sign_in_creates_profile(self, sandbox_state):
        result = sandbox_state.sign_in(AuthRequest(id_token="g1", first_name="Ana"))

        profile = sandbox_state.user_for_access_token(result.access_token)
        assert profile.id == result.user.id
        assert profile.first_name == "Ana"
        assert profile.google_id == "g1"

    def test_distinct_accounts(self, sandbox_state):
        first = sandbox_state.sign_in(AuthRequest(id_token="g1"))
        second = sandbox_state.sign_in(AuthRequest(id_token="g2"))
        assert first.user.id != second.user.id

    def test_expire_access_tokens(self, sandbox_state):
        result = sandbox_state.sign_in(AuthRequest(id_token="g1"))
        sandbox_state.expire_access_tokens()

        with pytest.raises(InvalidTokenError):
            sandbox_state.user_for_access_token(result.access_token)
        assert sandbox_state.refresh(result.refresh_token).user.id == result.user.id

    def test_refresh_is_single_use(self, sandbox_state):
        result = sandbox_state.sign_in(AuthRequest(id_token="g1"))
        sandbox_state.refresh(result.refresh_token)

        with pytest.raises(InvalidTokenError) as exc_info:
            sandbox_state.refresh(result.refresh_token)
        assert exc_info.value.status_code == 401
