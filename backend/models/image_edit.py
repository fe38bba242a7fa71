from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator


class ErrorKind(str, Enum):
    MISSING_CREDENTIAL = "MissingCredential"
    MISSING_IMAGE = "MissingImage"
    MISSING_INSTRUCTIONS = "MissingInstructions"
    INVALID_IMAGE = "InvalidImage"
    INVALID_CREDENTIAL = "InvalidCredential"
    QUOTA_EXCEEDED = "QuotaExceeded"
    PERMISSION_DENIED = "PermissionDenied"
    MODEL_UNAVAILABLE = "ModelUnavailable"
    CONTENT_BLOCKED = "ContentBlocked"
    UPSTREAM_ERROR = "UpstreamError"
    # Client-side only
    NETWORK_ERROR = "NetworkError"
    CLIENT_VALIDATION_ERROR = "ClientValidationError"


# ---------- wire models ----------

class ProcessImageRequest(BaseModel):
    # Optional so that a missing field is reported by the handler (400), not as a schema error
    apiKey: Optional[str] = None
    imageData: Optional[str] = None  # data URL: data:<mime>;base64,<payload>
    instructions: Optional[str] = None

class ProcessImageResponse(BaseModel):
    success: bool = True
    images: List[str] = []
    editedImage: Optional[str] = None  # first of images, kept for older clients
    text: str = ""
    message: Optional[str] = None

class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    errorKind: Optional[ErrorKind] = None
    details: Optional[str] = None

# ---------- domain models ----------

class SourceImage(BaseModel):
    """Decoded input image."""
    mime_type: str
    data: bytes

class EditRequest(BaseModel):
    credential: str
    image: SourceImage
    instructions: str

class GeneratedImage(BaseModel):
    """One inline image returned by the model."""
    mime_type: str
    data: bytes

    def to_data_url(self) -> str:
        from core.data_url import to_data_url  # core.data_url imports this module
        return to_data_url(self.mime_type, self.data)

class EditResult(BaseModel):
    """Normalized outcome of one edit request, independent of the upstream response shape."""
    succeeded: bool
    images: List[GeneratedImage] = Field(default_factory=list)
    text: str = ""
    error_kind: Optional[ErrorKind] = None
    error_detail: Optional[str] = None

    @model_validator(mode="after")
    def _check_failure_shape(self):
        if not self.succeeded:
            if self.images:
                raise ValueError("a failed EditResult cannot carry images")
            if self.error_kind is None:
                raise ValueError("a failed EditResult requires an error_kind")
        return self

    @property
    def is_empty(self) -> bool:
        """Successful but neither images nor text came back."""
        return self.succeeded and not self.images and not self.text.strip()

    @classmethod
    def failure(cls, kind: ErrorKind, detail: Optional[str] = None) -> "EditResult":
        return cls(succeeded=False, error_kind=kind, error_detail=detail)
