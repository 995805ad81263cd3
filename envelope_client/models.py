"""Wire models for the envelope API client.

Every response from the backend is wrapped in the same envelope::

    {"statusCode": 200, "statusDesc": "OK", "statusText": "ok", "result": {...}}

All four fields are optional on the wire. Missing (or null) fields decode to
documented defaults, never to a validation failure. Requests routed through
the encrypted path are wrapped as ``{"verificationCode": "<hex>"}``.
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticSerializationError

from envelope_client._codec import encrypt
from envelope_client.exceptions import EncodeFailure, EnvelopeClientError

T = TypeVar("T")

__all__ = [
    "EmptyBody",
    "EncryptedRequest",
    "Envelope",
    "LenientModel",
    "Result",
    "WireModel",
    "dump_json",
    "encrypted_envelope",
]


class WireModel(BaseModel):
    """Base for models exchanged with the backend.

    Fields use snake_case attributes with camelCase wire aliases; either
    name is accepted on input. Unknown wire fields are ignored.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class LenientModel(WireModel):
    """Wire model that treats explicit nulls like absent fields.

    Lets ``str``/``int``/``bool`` fields with defaults decode ``null``
    to their default instead of failing.
    """

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class Envelope(LenientModel, Generic[T]):
    """Uniform response wrapper.

    Attributes:
        status_code: Outcome code; 200 is the only success (default -1).
        status_desc: Short status label (default "Unknown").
        status_text: Human-readable message (default "").
        result: Payload, absent on most failures.
    """

    status_code: int = Field(default=-1, alias="statusCode")
    status_desc: str = Field(default="Unknown", alias="statusDesc")
    status_text: str = Field(default="", alias="statusText")
    result: T | None = None

    @property
    def is_success(self) -> bool:
        """Whether the envelope reports success."""
        return self.status_code == 200

    @property
    def has_status_text(self) -> bool:
        """Whether ``statusText`` was present on the wire."""
        return "status_text" in self.model_fields_set

    def to_wire(self) -> dict[str, Any]:
        """Serialize with wire field names."""
        return self.model_dump(mode="json", by_alias=True)


class EncryptedRequest(WireModel):
    """Single-field wrapper around a hex ciphertext."""

    verification_code: str = Field(alias="verificationCode")


class EmptyBody(WireModel):
    """Body with no fields, serialized as ``{}``."""


def dump_json(value: Any) -> str:
    """Serialize a request value to compact JSON text.

    Pydantic models are dumped with wire aliases and without unset
    optional fields, matching what the peer expects. Any other value is
    serialized through a pydantic ``TypeAdapter``.

    Args:
        value: Model, dataclass, mapping, sequence, or scalar.

    Returns:
        The JSON text (UTF-8, non-ASCII characters kept as-is).

    Raises:
        EncodeFailure: If the value is not JSON-serializable.
    """
    try:
        if isinstance(value, BaseModel):
            return value.model_dump_json(by_alias=True, exclude_none=True)
        return TypeAdapter(Any).dump_json(value).decode("utf-8")
    except (PydanticSerializationError, TypeError, ValueError) as exc:
        raise EncodeFailure(f"Failed to encode request body: {exc}") from exc


def encrypted_envelope(value: Any, key: str) -> EncryptedRequest:
    """Encrypt a request value into an ``EncryptedRequest``.

    The value is serialized to JSON, encrypted with the shared passphrase,
    and wrapped as ``{"verificationCode": <hex>}``.

    Args:
        value: Any value ``dump_json`` accepts.
        key: Shared passphrase.

    Returns:
        The wrapped ciphertext.

    Raises:
        EncodeFailure: If serialization or encryption fails.
    """
    return EncryptedRequest(verification_code=encrypt(dump_json(value), key))


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a single request.

    Exactly one of ``value``/``error`` is meaningful: a request either
    produced a fully decoded value or a classified error, never both.

    Attributes:
        value: Decoded result on success.
        error: Classified error on failure.
        envelope: The decoded envelope, when one was received.
    """

    value: T | None = None
    error: EnvelopeClientError | None = None
    envelope: Envelope[Any] | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T, envelope: Envelope[Any] | None = None) -> "Result[T]":
        return cls(value=value, envelope=envelope)

    @classmethod
    def failure(
        cls, error: EnvelopeClientError, envelope: Envelope[Any] | None = None
    ) -> "Result[T]":
        return cls(error=error, envelope=envelope)

    def unwrap(self) -> T:
        """Return the value, raising the carried error on failure."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
