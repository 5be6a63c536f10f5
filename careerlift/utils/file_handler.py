from pathlib import Path
from typing import Tuple
from fastapi import UploadFile

from careerlift.errors import InvalidRequest

ALLOWED_EXTENSIONS = {
    '.pdf': 'application/pdf',
    '.txt': 'text/plain',
    '.png': 'image/png',
    '.jpg': 'image/jpeg',
    '.jpeg': 'image/jpeg',
    '.webp': 'image/webp',
}

CHUNK_SIZE = 8192


async def read_upload(file: UploadFile, max_size: int) -> Tuple[bytes, str]:
    """
    Read an uploaded resume into memory with size validation.

    Returns:
        (data, mime_type)
    """
    if file is None or not file.filename:
        raise InvalidRequest("No resume file uploaded.")

    file_ext = Path(file.filename).suffix.lower()
    if file_ext not in ALLOWED_EXTENSIONS:
        raise InvalidRequest(
            f"Invalid file type. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
        )

    # Validate size BEFORE reading when the client sent it
    if file.size is not None and file.size > max_size:
        raise InvalidRequest(f"File too large ({file.size} bytes). Maximum allowed: {max_size} bytes")

    chunks = []
    bytes_read = 0
    while chunk := await file.read(CHUNK_SIZE):
        bytes_read += len(chunk)
        if bytes_read > max_size:
            raise InvalidRequest(f"File exceeds maximum size of {max_size} bytes")
        chunks.append(chunk)

    data = b"".join(chunks)
    if not data:
        raise InvalidRequest("Uploaded file is empty.")

    mime_type = file.content_type
    if not mime_type or mime_type == "application/octet-stream":
        mime_type = ALLOWED_EXTENSIONS[file_ext]
    return data, mime_type
