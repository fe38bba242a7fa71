import asyncio
import mimetypes
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel

from core.data_url import to_data_url

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MiB

MESSAGE_TOO_LARGE = "File size must be less than 10MB"
MESSAGE_NOT_IMAGE = "Please select an image file"
MESSAGE_READ_FAILED = "Error reading file"

_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/bmp": "bmp",
    "image/tiff": "tiff",
}


class ClientValidationError(Exception):
    """Input rejected locally, before any network call."""


class FileHandle(BaseModel):
    """A file the user picked; type and size are as declared by the picker."""
    name: str
    mime_type: str
    size: int
    path: Path

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "FileHandle":
        path = Path(path)
        mime_type, _ = mimetypes.guess_type(path.name)
        size = path.stat().st_size if path.exists() else 0
        return cls(name=path.name, mime_type=mime_type or "application/octet-stream", size=size, path=path)


class ImageRef(BaseModel):
    filename: str
    mime_type: str
    data: bytes
    data_url: str


def check_file(handle: FileHandle) -> None:
    """Reject oversized and non-image files from their declared metadata alone"""
    if handle.size > MAX_FILE_SIZE:
        raise ClientValidationError(MESSAGE_TOO_LARGE)
    if not handle.mime_type.startswith("image/"):
        raise ClientValidationError(MESSAGE_NOT_IMAGE)


async def load_image(handle: FileHandle) -> ImageRef:
    """
    Validate and read a picked file into an ImageRef.

    Raises:
        ClientValidationError: size/type rejected or the file could not be read
    """
    check_file(handle)
    try:
        data = await asyncio.to_thread(handle.path.read_bytes)
    except OSError as e:
        raise ClientValidationError(MESSAGE_READ_FAILED) from e

    # the declared size can be stale
    if len(data) > MAX_FILE_SIZE:
        raise ClientValidationError(MESSAGE_TOO_LARGE)

    return ImageRef(
        filename=handle.name,
        mime_type=handle.mime_type,
        data=data,
        data_url=to_data_url(handle.mime_type, data),
    )


def extension_for(mime_type: Optional[str]) -> str:
    return _EXTENSIONS.get((mime_type or "").lower(), "png")
