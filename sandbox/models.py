"""Shared response models for sandbox endpoints.

The envelope and the auth/profile payloads are the client library's own
models, so the sandbox and the client cannot drift apart on the wire format.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from envelope_client.models import Envelope


def envelope_response(
    result: Any = None,
    status_code: int = 200,
    status_desc: str = "OK",
    status_text: str = "success",
) -> dict[str, Any]:
    """Build the JSON body of an envelope answer.

    Args:
        result: Payload; pydantic models are dumped with wire aliases.
        status_code: Envelope status (200 is success).
        status_desc: Short status label.
        status_text: Human-readable message.

    Returns:
        A JSON-compatible dict.
    """
    if isinstance(result, BaseModel):
        result = result.model_dump(mode="json", by_alias=True, exclude_none=True)
    envelope = Envelope[Any](
        status_code=status_code,
        status_desc=status_desc,
        status_text=status_text,
        result=result,
    )
    return envelope.to_wire()


class UploadedFile(BaseModel):
    """Answer to a multipart upload (sent without an envelope).

    Args:
        file_name: Filename reported by the client.
        content_type: Content-Type of the file part.
        size: Number of bytes received.
        url: Where the file would be served from.
    """

    model_config = ConfigDict(populate_by_name=True)

    file_name: str = Field(alias="fileName")
    content_type: str = Field(alias="contentType")
    size: int
    url: str
