"""Data URL helpers (data:<mime>;base64,<payload>)."""

import base64
import binascii

from models.image_edit import SourceImage


class InvalidDataURL(ValueError):
    pass


def parse_data_url(value: str) -> SourceImage:
    """
    Decode an image data URL into its MIME type and raw bytes.

    Raises:
        InvalidDataURL: if the URL is malformed, not an image, or not base64
    """
    if not isinstance(value, str) or not value.startswith("data:"):
        raise InvalidDataURL("not a data URL")

    try:
        header, payload = value.split(",", 1)
    except ValueError:
        raise InvalidDataURL("missing ',' separator")

    meta = header[len("data:"):].split(";")
    mime_type = meta[0].strip().lower()
    if not mime_type:
        raise InvalidDataURL("missing MIME type")
    if not mime_type.startswith("image/"):
        raise InvalidDataURL(f"unsupported MIME type '{mime_type}'")
    if "base64" not in (m.strip().lower() for m in meta[1:]):
        raise InvalidDataURL("payload is not base64 encoded")

    try:
        data = base64.b64decode("".join(payload.split()), validate=True)
    except (binascii.Error, ValueError):
        raise InvalidDataURL("payload is not valid base64")

    if not data:
        raise InvalidDataURL("empty payload")

    return SourceImage(mime_type=mime_type, data=data)


def to_data_url(mime_type: str, data: bytes) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"
