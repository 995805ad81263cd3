"""Unit tests for request construction.

This module tests envelope_client/_builder.py:

1. URL resolution and validation
2. Header layering and precedence
3. Body serialization, plain and encrypted
4. Multipart encoding
"""

import json

import httpx
import pytest

from envelope_client import (
    ClientConfiguration,
    EmptyBody,
    EncodeFailure,
    HTTPClient,
    HttpMethod,
    InMemoryTokenStore,
    InvalidURLError,
    RequestBuilder,
    RequestFailedError,
    decrypt,
    encode_multipart,
    resolve_url,
)
from envelope_client._builder import mask_headers


# =============================================================================
# URL resolution
# =============================================================================


class TestResolveUrl:
    """Tests for resolve_url."""

    @pytest.mark.parametrize(
        "base,endpoint",
        [
            ("https://a.com/", "/x"),
            ("https://a.com", "x"),
            ("https://a.com//", "x/"),
            ("https://a.com/", "/x/"),
        ],
    )
    def test_joins_with_one_slash(self, base: str, endpoint: str) -> None:
        assert resolve_url(base, endpoint) == "https://a.com/x"

    def test_keeps_base_path(self) -> None:
        assert resolve_url("https://a.com/api/v1/", "user/profile") == (
            "https://a.com/api/v1/user/profile"
        )

    def test_absolute_endpoint_is_used_as_is(self) -> None:
        assert resolve_url("https://a.com/", "https://b.com/y") == "https://b.com/y"

    def test_query_string_is_kept(self) -> None:
        assert resolve_url("https://a.com", "search?q=1") == "https://a.com/search?q=1"

    @pytest.mark.parametrize(
        "endpoint",
        [
            "has space",
            "tab\there",
            "ftp://files.a.com/x",
            "http://",
            "https://a.com:99999/x",
            "https://a.com:0/x",
            "x{y}",
        ],
    )
    def test_invalid_urls(self, endpoint: str) -> None:
        with pytest.raises(InvalidURLError):
            resolve_url("https://a.com", endpoint)

    def test_error_carries_url(self) -> None:
        with pytest.raises(InvalidURLError) as exc_info:
            resolve_url("https://a.com", "bad path")
        assert exc_info.value.url == "https://a.com/bad path"


# =============================================================================
# Headers
# =============================================================================


class TestComposeHeaders:
    """Tests for header layering."""

    def test_defaults_token_and_identity(self, configuration) -> None:
        builder = RequestBuilder(configuration, InMemoryTokenStore(access="T", refresh="R"))
        headers = builder.compose_headers()
        assert headers["Content-Type"] == "application/json"
        assert headers["Accept"] == "application/json"
        assert headers["Authorization"] == "Bearer T"
        assert headers["packageName"] == "com.app.package.development"
        assert headers["version"] == "1.4.0"
        assert headers["language"] == "en"

    def test_no_token_no_authorization(self, configuration, token_store) -> None:
        headers = RequestBuilder(configuration, token_store).compose_headers()
        assert "Authorization" not in headers

    def test_empty_token_is_ignored(self, configuration) -> None:
        builder = RequestBuilder(configuration, InMemoryTokenStore(access=""))
        assert "Authorization" not in builder.compose_headers()

    def test_caller_headers_win_case_insensitively(self, configuration) -> None:
        builder = RequestBuilder(configuration, InMemoryTokenStore(access="T"))
        headers = builder.compose_headers(
            {"authorization": "Bearer other", "content-type": "text/plain", "X-Extra": "1"}
        )
        assert headers["Authorization"] == "Bearer other"
        assert headers.get_list("Content-Type") == ["text/plain"]
        assert headers["x-extra"] == "1"

    def test_token_is_read_on_every_build(self, configuration, token_store) -> None:
        builder = RequestBuilder(configuration, token_store)
        assert "Authorization" not in builder.build("a").headers
        token_store.set_tokens("T2", "R2")
        assert builder.build("a").headers["Authorization"] == "Bearer T2"

    def test_unencodable_header_fails(self, configuration, token_store) -> None:
        builder = RequestBuilder(configuration, token_store)
        with pytest.raises(RequestFailedError):
            builder.compose_headers({"X-Name": "snow ☃"})

    def test_mask_headers(self) -> None:
        masked = mask_headers({"Authorization": "Bearer secret", "packageName": "p"})
        assert masked == {"Authorization": "Bearer ***", "packageName": "p"}


# =============================================================================
# Building requests
# =============================================================================


class TestBuild:
    """Tests for RequestBuilder.build."""

    def test_get_has_no_body(self, configuration, token_store) -> None:
        wire = RequestBuilder(configuration, token_store).build(
            "sample", HttpMethod.GET, body={"ignored": True}
        )
        assert wire.method is HttpMethod.GET
        assert wire.body is None

    def test_post_serializes_body(self, configuration, token_store) -> None:
        wire = RequestBuilder(configuration, token_store).build(
            "sample", "post", body={"name": "x"}
        )
        assert wire.method is HttpMethod.POST
        assert wire.url == "https://api.test.local/sample"
        assert json.loads(wire.body) == {"name": "x"}

    def test_post_without_body(self, configuration, token_store) -> None:
        wire = RequestBuilder(configuration, token_store).build("sample", HttpMethod.POST)
        assert wire.body is None

    def test_empty_body_model(self, configuration, token_store) -> None:
        wire = RequestBuilder(configuration, token_store).build(
            "sample", HttpMethod.POST, body=EmptyBody()
        )
        assert wire.body == b"{}"

    def test_encrypted_body(self, configuration, token_store) -> None:
        """The body is JSON-encoded, encrypted, and wrapped in verificationCode."""
        wire = RequestBuilder(configuration, token_store).build(
            "auth/google", HttpMethod.POST, body={"idToken": "abc"}, encrypt=True
        )
        wrapped = json.loads(wire.body)
        assert list(wrapped) == ["verificationCode"]
        assert json.loads(decrypt(wrapped["verificationCode"], "mysecret")) == {"idToken": "abc"}

    def test_encrypt_with_explicit_key(self, configuration, token_store) -> None:
        wire = RequestBuilder(configuration, token_store).build(
            "a", HttpMethod.POST, body={"k": 1}, encrypt=True, key="other"
        )
        code = json.loads(wire.body)["verificationCode"]
        assert json.loads(decrypt(code, "other")) == {"k": 1}

    def test_encrypt_with_empty_key(self, token_store) -> None:
        """An empty passphrase is a key like any other; only a missing one fails."""
        wire = RequestBuilder(ClientConfiguration(), token_store).build(
            "a", HttpMethod.POST, body={"k": 1}, encrypt=True, key=""
        )
        code = json.loads(wire.body)["verificationCode"]
        assert json.loads(decrypt(code, "")) == {"k": 1}

    def test_encrypt_without_key_fails(self, token_store) -> None:
        builder = RequestBuilder(ClientConfiguration(), token_store)
        with pytest.raises(EncodeFailure):
            builder.build("a", HttpMethod.POST, body={"k": 1}, encrypt=True)

    def test_invalid_method(self, configuration, token_store) -> None:
        with pytest.raises(RequestFailedError):
            RequestBuilder(configuration, token_store).build("a", "TRACE")

    def test_wire_request_is_immutable(self, configuration, token_store) -> None:
        wire = RequestBuilder(configuration, token_store).build("a")
        with pytest.raises(AttributeError):
            wire.url = "https://other.test/"  # type: ignore[misc]
        wire.headers["X-New"] = "1"
        assert "X-New" not in wire.headers


# =============================================================================
# Multipart uploads
# =============================================================================


class TestMultipart:
    """Tests for encode_multipart and build_upload."""

    def test_exact_layout(self) -> None:
        body, content_type = encode_multipart(
            b"\x89PNG", "a.png", "image/png", "file", boundary="B"
        )
        assert content_type == "multipart/form-data; boundary=B"
        assert body == (
            b"--B\r\n"
            b'Content-Disposition: form-data; name="file"; filename="a.png"\r\n'
            b"Content-Type: image/png\r\n\r\n"
            b"\x89PNG"
            b"\r\n--B--\r\n"
        )

    def test_disposition_values_are_escaped(self) -> None:
        body, _ = encode_multipart(
            b"x", 'evil".png\r\nX-Injected: 1', "image/png", 'fi"le\n', boundary="B"
        )
        head = body.split(b"\r\n\r\n", 1)[0]
        assert head == (
            b"--B\r\n"
            b'Content-Disposition: form-data; name="fi%22le%0A"; '
            b'filename="evil%22.png%0D%0AX-Injected: 1"\r\n'
            b"Content-Type: image/png"
        )

    def test_mime_type_with_line_break_fails(self) -> None:
        with pytest.raises(EncodeFailure):
            encode_multipart(b"x", "a.png", "image/png\r\nX-Injected: 1", "file")

    def test_build_upload_with_bad_mime_type_in_client(self, configuration, token_store) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(201, json={}))
        with HTTPClient(configuration, token_store, transport) as client:
            result = client.upload_file("files/upload", b"x", "a.png", "image/png\nX: 1")
        assert isinstance(result.error, EncodeFailure)

    def test_random_boundary(self) -> None:
        _, first = encode_multipart(b"", "a", "text/plain", "file")
        _, second = encode_multipart(b"", "a", "text/plain", "file")
        assert first != second

    def test_build_upload(self, configuration) -> None:
        builder = RequestBuilder(configuration, InMemoryTokenStore(access="T"))
        wire = builder.build_upload("files/upload", b"data", "a.txt", "text/plain")
        assert wire.method is HttpMethod.POST
        assert wire.headers["Content-Type"].startswith("multipart/form-data; boundary=")
        assert wire.headers["Authorization"] == "Bearer T"
        assert b'name="file"; filename="a.txt"' in wire.body

    def test_build_upload_custom_form_key(self, configuration, token_store) -> None:
        wire = RequestBuilder(configuration, token_store).build_upload(
            "files/upload", b"data", "a.txt", form_key="avatar"
        )
        assert b'name="avatar"' in wire.body
