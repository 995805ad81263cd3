"""Token store adapters.

The client reads the access token from a ``TokenStore`` every time it
builds a request and never caches it, so a token rotated by one call is
picked up by the next. Only the auth sub-client writes tokens.

This is an internal module. Import from ``envelope_client`` instead.
"""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)

# Keys used by the mobile app's settings store; kept for file compatibility
ACCESS_TOKEN_KEY = "keyAccessTokent"
REFRESH_TOKEN_KEY = "keyRefreshTokent"


@runtime_checkable
class TokenStore(Protocol):
    """Persistence contract for auth tokens."""

    def get_access_token(self) -> str | None: ...

    def get_refresh_token(self) -> str | None: ...

    def set_tokens(self, access: str, refresh: str) -> None: ...

    def clear(self) -> None: ...


class InMemoryTokenStore:
    """Process-local token store, safe to share between threads."""

    def __init__(self, access: str | None = None, refresh: str | None = None) -> None:
        self._lock = threading.Lock()
        self._access = access
        self._refresh = refresh

    def get_access_token(self) -> str | None:
        with self._lock:
            return self._access

    def get_refresh_token(self) -> str | None:
        with self._lock:
            return self._refresh

    def set_tokens(self, access: str, refresh: str) -> None:
        with self._lock:
            self._access = access
            self._refresh = refresh

    def clear(self) -> None:
        with self._lock:
            self._access = None
            self._refresh = None


class JsonFileTokenStore:
    """Token store backed by a small JSON file.

    Writes go through a temporary file and ``os.replace`` so readers never
    observe a half-written file. A missing or unreadable file reads as "no tokens".

    Attributes:
        path: Location of the JSON file.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Token file %s could not be read (%s); treating as empty", self.path, exc)
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Token file %s is not valid JSON; treating as empty", self.path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Token file %s does not hold an object; treating as empty", self.path)
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".tokens-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def get_access_token(self) -> str | None:
        with self._lock:
            return self._read().get(ACCESS_TOKEN_KEY)

    def get_refresh_token(self) -> str | None:
        with self._lock:
            return self._read().get(REFRESH_TOKEN_KEY)

    def set_tokens(self, access: str, refresh: str) -> None:
        with self._lock:
            data = self._read()
            data[ACCESS_TOKEN_KEY] = access
            data[REFRESH_TOKEN_KEY] = refresh
            self._write(data)

    def clear(self) -> None:
        with self._lock:
            data = self._read()
            data.pop(ACCESS_TOKEN_KEY, None)
            data.pop(REFRESH_TOKEN_KEY, None)
            self._write(data)
