"""Unit tests for ClientConfiguration."""

import os

import pytest
from pydantic import ValidationError

from envelope_client import ClientConfiguration, Environment

ENV_VARS = [
    "ENVELOPE_ENVIRONMENT",
    "ENVELOPE_BASE_URL",
    "ENVELOPE_TIMEOUT",
    "ENVELOPE_PACKAGE_NAME",
    "ENVELOPE_APP_VERSION",
    "ENVELOPE_LANGUAGE",
    "ENVELOPE_ENCRYPTION_KEY",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every ENVELOPE_* variable for the test."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestClientConfiguration:
    """Tests for construction and validation."""

    def test_defaults(self) -> None:
        config = ClientConfiguration()
        assert config.timeout == 30.0
        assert config.default_headers == {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        assert config.encryption_key is None
        assert config.upload_form_key == "file"
        assert config.upload_success_status == 201

    def test_is_frozen(self) -> None:
        config = ClientConfiguration()
        with pytest.raises(ValidationError):
            config.base_url = "https://other.test/"

    @pytest.mark.parametrize("base_url", ["not a url", "ftp://files.test", "https://", "/relative"])
    def test_rejects_invalid_base_url(self, base_url: str) -> None:
        with pytest.raises(ValidationError):
            ClientConfiguration(base_url=base_url)

    def test_rejects_non_positive_timeout(self) -> None:
        with pytest.raises(ValidationError):
            ClientConfiguration(timeout=0)

    def test_key_is_hidden_from_repr(self) -> None:
        assert "s3cret" not in repr(ClientConfiguration(encryption_key="s3cret"))

    def test_identity_headers(self) -> None:
        config = ClientConfiguration(package_name="com.app", app_version="2.0", language="fr")
        assert config.identity_headers() == {
            "packageName": "com.app",
            "version": "2.0",
            "language": "fr",
        }

    def test_identity_headers_skip_unset(self) -> None:
        assert ClientConfiguration(package_name="com.app").identity_headers() == {
            "packageName": "com.app"
        }


class TestEnvironments:
    """Tests for named deployments."""

    def test_environment_urls(self) -> None:
        assert Environment.DEVELOPMENT.base_url == "https://api.staging.server.com/"
        assert Environment.PRODUCTION.base_url == "https://api.production.server.com/"

    def test_for_environment(self) -> None:
        config = ClientConfiguration.for_environment("production", package_name="com.app")
        assert config.base_url == "https://api.production.server.com/"
        assert config.package_name == "com.app"

    def test_unknown_environment(self) -> None:
        with pytest.raises(ValueError):
            ClientConfiguration.for_environment("qa")


class TestFromEnv:
    """Tests for ClientConfiguration.from_env."""

    def test_empty_environment_gives_defaults(self, clean_env) -> None:
        assert ClientConfiguration.from_env(dotenv=False) == ClientConfiguration()

    def test_reads_all_variables(self, clean_env) -> None:
        clean_env.setenv("ENVELOPE_ENVIRONMENT", "development")
        clean_env.setenv("ENVELOPE_TIMEOUT", "12.5")
        clean_env.setenv("ENVELOPE_PACKAGE_NAME", "com.app.package.development")
        clean_env.setenv("ENVELOPE_APP_VERSION", "1.0")
        clean_env.setenv("ENVELOPE_LANGUAGE", "en")
        clean_env.setenv("ENVELOPE_ENCRYPTION_KEY", "k")

        config = ClientConfiguration.from_env(dotenv=False)

        assert config.base_url == "https://api.staging.server.com/"
        assert config.timeout == 12.5
        assert config.package_name == "com.app.package.development"
        assert config.app_version == "1.0"
        assert config.language == "en"
        assert config.encryption_key == "k"

    def test_base_url_wins_over_environment(self, clean_env) -> None:
        clean_env.setenv("ENVELOPE_ENVIRONMENT", "production")
        clean_env.setenv("ENVELOPE_BASE_URL", "http://localhost:8000/")
        assert ClientConfiguration.from_env(dotenv=False).base_url == "http://localhost:8000/"

    def test_custom_prefix(self, clean_env) -> None:
        clean_env.setenv("MYAPP_PACKAGE_NAME", "com.mine")
        config = ClientConfiguration.from_env(prefix="MYAPP_", dotenv=False)
        assert config.package_name == "com.mine"

    def test_loads_dotenv_file(self, clean_env, tmp_path) -> None:
        (tmp_path / ".env").write_text("ENVELOPE_LANGUAGE=de\n")
        clean_env.chdir(tmp_path)
        try:
            assert ClientConfiguration.from_env().language == "de"
        finally:
            os.environ.pop("ENVELOPE_LANGUAGE", None)
