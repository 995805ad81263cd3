"""Client configuration.

A ``ClientConfiguration`` is supplied once, at construction, and is frozen
afterwards: the base URL cannot change under a live client. It can be built
directly, for one of the named deployment environments, or from
``ENVELOPE_*`` environment variables (a ``.env`` file is loaded first).

Example:
    Reading configuration from the environment::

        # .env
        # ENVELOPE_ENVIRONMENT=development
        # ENVELOPE_PACKAGE_NAME=com.app.package.development
        # ENVELOPE_ENCRYPTION_KEY=...

        config = ClientConfiguration.from_env()
        client = APIClient(config)
"""

import os
from enum import Enum
from typing import Any
from urllib.parse import urlsplit

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_BASE_URL = "https://api.example.com"
DEFAULT_TIMEOUT = 30.0
DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


class Environment(str, Enum):
    """Named backend deployments."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"

    @property
    def base_url(self) -> str:
        return _ENVIRONMENT_URLS[self]


_ENVIRONMENT_URLS = {
    Environment.DEVELOPMENT: "https://api.staging.server.com/",
    Environment.PRODUCTION: "https://api.production.server.com/",
}


class ClientConfiguration(BaseModel):
    """Settings shared by every request a client makes.

    Attributes:
        base_url: Base URL relative endpoints are joined to.
        timeout: Per-request timeout in seconds.
        default_headers: Headers sent with every request, lowest precedence.
        package_name: Sent as the ``packageName`` header when set.
        app_version: Sent as the ``version`` header when set.
        language: Sent as the ``language`` header when set.
        encryption_key: Passphrase for the encrypted request path.
        upload_form_key: Form field name for multipart uploads.
        upload_success_status: HTTP status that signals a successful upload.
    """

    model_config = ConfigDict(frozen=True)

    base_url: str = DEFAULT_BASE_URL
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    default_headers: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_HEADERS))
    package_name: str | None = None
    app_version: str | None = None
    language: str | None = None
    encryption_key: str | None = Field(default=None, repr=False)
    upload_form_key: str = "file"
    upload_success_status: int = 201

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        parts = urlsplit(v.strip())
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError(f"base_url must be an absolute http(s) URL, got {v!r}")
        return v.strip()

    def identity_headers(self) -> dict[str, str]:
        """Deployment identity headers for the configured fields."""
        headers: dict[str, str] = {}
        if self.package_name:
            headers["packageName"] = self.package_name
        if self.app_version:
            headers["version"] = self.app_version
        if self.language:
            headers["language"] = self.language
        return headers

    @classmethod
    def for_environment(
        cls, environment: Environment | str, **overrides: Any
    ) -> "ClientConfiguration":
        """Build a configuration pointing at a named deployment.

        Args:
            environment: The deployment, as an ``Environment`` or its value.
            **overrides: Any other configuration fields.
        """
        env = Environment(environment)
        return cls(base_url=env.base_url, **overrides)

    @classmethod
    def from_env(cls, prefix: str = "ENVELOPE_", dotenv: bool = True) -> "ClientConfiguration":
        """Build a configuration from environment variables.

        ``{prefix}BASE_URL`` wins over ``{prefix}ENVIRONMENT``. Unset
        variables fall back to the model defaults.

        Args:
            prefix: Variable name prefix.
            dotenv: Whether to load a ``.env`` file first. Variables already
                set in the process environment are not overridden.
        """
        if dotenv:
            load_dotenv(find_dotenv(usecwd=True))

        def read(name: str) -> str | None:
            value = os.environ.get(f"{prefix}{name}")
            return value if value else None

        values: dict[str, Any] = {}
        environment = read("ENVIRONMENT")
        if environment:
            values["base_url"] = Environment(environment.lower()).base_url
        base_url = read("BASE_URL")
        if base_url:
            values["base_url"] = base_url
        timeout = read("TIMEOUT")
        if timeout:
            values["timeout"] = float(timeout)
        for field, name in (
            ("package_name", "PACKAGE_NAME"),
            ("app_version", "APP_VERSION"),
            ("language", "LANGUAGE"),
            ("encryption_key", "ENCRYPTION_KEY"),
        ):
            value = read(name)
            if value is not None:
                values[field] = value
        return cls(**values)
