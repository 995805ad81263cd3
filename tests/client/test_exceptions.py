"""Unit tests for the envelope client exception hierarchy.

This module tests the exception classes defined in envelope_client/exceptions.py.
The tests verify:

1. Exception Hierarchy: every error derives from EnvelopeClientError
2. Attributes and string representations
3. User-visible descriptions
4. Value equality of envelope errors
"""

import pytest

from envelope_client.exceptions import (
    AccessTokenExpiredError,
    CodecError,
    DecodeFailure,
    DecodingError,
    EncodeFailure,
    EncryptionError,
    EnvelopeClientError,
    EnvelopeStatusError,
    InvalidResponseError,
    InvalidURLError,
    NetworkUnavailableError,
    PackageIdentityMissingError,
    RequestFailedError,
    ServerError,
    StatusCodeError,
    TimeoutError,
)


# =============================================================================
# Exception Hierarchy Tests
# =============================================================================


class TestExceptionHierarchy:
    """Tests verifying the exception inheritance structure."""

    @pytest.mark.parametrize(
        "error_cls",
        [
            InvalidURLError,
            RequestFailedError,
            InvalidResponseError,
            NetworkUnavailableError,
            TimeoutError,
            StatusCodeError,
            DecodingError,
            EnvelopeStatusError,
            CodecError,
        ],
    )
    def test_derives_from_base(self, error_cls: type) -> None:
        assert issubclass(error_cls, EnvelopeClientError)

    @pytest.mark.parametrize(
        "error_cls",
        [ServerError, PackageIdentityMissingError, EncryptionError, AccessTokenExpiredError],
    )
    def test_envelope_kinds(self, error_cls: type) -> None:
        assert issubclass(error_cls, EnvelopeStatusError)

    def test_codec_kinds(self) -> None:
        assert issubclass(EncodeFailure, CodecError)
        assert issubclass(DecodeFailure, CodecError)

    def test_timeout_is_not_the_builtin(self) -> None:
        """The package's TimeoutError is not the builtin one."""
        assert not issubclass(TimeoutError, OSError)

    def test_catch_all_with_base(self) -> None:
        with pytest.raises(EnvelopeClientError):
            raise AccessTokenExpiredError("expired", 401)


# =============================================================================
# Attributes and representations
# =============================================================================


class TestNetworkErrors:
    """Tests for transport-level errors."""

    def test_network_unavailable_defaults(self) -> None:
        error = NetworkUnavailableError()
        assert str(error) == "Network connection unavailable."
        assert error.description == "Network connection unavailable."

    def test_network_unavailable_includes_url(self) -> None:
        cause = OSError("unreachable")
        error = NetworkUnavailableError(url="https://x.test", cause=cause)
        assert "https://x.test" in str(error)
        assert error.cause is cause

    def test_timeout_representation(self) -> None:
        error = TimeoutError(timeout=30.0, url="https://x.test/a")
        assert str(error) == "Request timed out. (timeout: 30.0s, url: https://x.test/a)"
        assert error.description == "Request timed out."

    def test_timeout_without_details(self) -> None:
        assert str(TimeoutError()) == "Request timed out."

    def test_invalid_url(self) -> None:
        error = InvalidURLError("bad", url="ht!tp://")
        assert error.url == "ht!tp://"
        assert error.description == "Invalid URL provided."

    def test_request_failed(self) -> None:
        assert RequestFailedError("boom").description == "Request failed: boom"

    def test_invalid_response(self) -> None:
        assert InvalidResponseError().description == "Invalid response from server."


class TestStatusCodeError:
    """Tests for StatusCodeError."""

    def test_attributes(self) -> None:
        error = StatusCodeError(502, "Bad gateway", response_body={"message": "Bad gateway"})
        assert error.status_code == 502
        assert error.response_message == "Bad gateway"
        assert error.response_body == {"message": "Bad gateway"}
        assert str(error) == "[HTTP 502] Bad gateway"

    def test_description(self) -> None:
        assert StatusCodeError(502, "Bad gateway").description == "Server error (502): Bad gateway"
        assert StatusCodeError(500).description == "Server error (500): Unknown error"


class TestEnvelopeStatusError:
    """Tests for envelope rejection errors."""

    def test_attributes(self) -> None:
        error = AccessTokenExpiredError("Token expired", 401)
        assert error.message == "Token expired"
        assert error.status_code == 401
        assert error.code == 401
        assert str(error) == "[401] Token expired"

    @pytest.mark.parametrize(
        "error,description",
        [
            (ServerError("oops", 500), "Server Error [500]: oops"),
            (PackageIdentityMissingError("no pkg", 405), "Package identity missing [405]: no pkg"),
            (EncryptionError("bad", 406), "Encryption failed [406]: bad"),
            (AccessTokenExpiredError("exp", 401), "Access token expired [401]: exp"),
        ],
    )
    def test_descriptions(self, error: EnvelopeStatusError, description: str) -> None:
        assert error.description == description

    def test_equality_by_value(self) -> None:
        assert ServerError("x", 500) == ServerError("x", 500)
        assert ServerError("x", 500) != ServerError("x", 501)
        assert ServerError("x", 500) != ServerError("y", 500)

    def test_equality_requires_same_kind(self) -> None:
        assert EncryptionError("x", 406) != ServerError("x", 406)

    def test_hashable(self) -> None:
        assert len({ServerError("x", 500), ServerError("x", 500)}) == 1


class TestCodecErrors:
    """Tests for local codec errors."""

    def test_encode_failure_description(self) -> None:
        assert EncodeFailure("no key").description == "Encryption failed: no key"

    def test_decode_failure_description(self) -> None:
        assert DecodeFailure("bad hex").description == "Decryption failed: bad hex"

    def test_decoding_error_description(self) -> None:
        assert DecodingError("wrong shape").description == "Decoding error: wrong shape"
