"""File upload endpoint.

Uploads answer outside the envelope protocol: HTTP 201 with the stored
file's description as the body.
"""

from fastapi import APIRouter, File, UploadFile, status

from sandbox.models import UploadedFile

router = APIRouter(
    prefix="/files",
    tags=["files"],
)


@router.post("/upload", status_code=status.HTTP_201_CREATED, response_model=UploadedFile)
async def upload_file(file: UploadFile = File(...)):
    """Accept one multipart file under the ``file`` form key."""
    data = await file.read()
    name = file.filename or "upload"
    return UploadedFile(
        file_name=name,
        content_type=file.content_type or "application/octet-stream",
        size=len(data),
        url=f"https://files.sandbox.local/{name}",
    )
