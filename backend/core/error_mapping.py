"""
Error classification for the image edit endpoint.

Upstream (Gemini) failures arrive as exceptions whose message is the only
reliable signal. They are classified by case-insensitive substring match
against UPSTREAM_RULES, tried top to bottom; the first hit wins and anything
unmatched is an UpstreamError. The mapped kind drives the user-facing message
and HTTP status; the raw upstream message is kept separately as details.
"""

from typing import Dict, NamedTuple, Optional, Tuple

from models.image_edit import ErrorKind


class ErrorRule(NamedTuple):
    kind: ErrorKind
    substrings: Tuple[str, ...]
    message: str
    status_code: int


# Order matters: a message mentioning both an API key and a quota is a credential error.
UPSTREAM_RULES: Tuple[ErrorRule, ...] = (
    ErrorRule(
        ErrorKind.INVALID_CREDENTIAL,
        ("api key", "api_key"),
        "Invalid API key. Please check your Gemini API key.",
        401,
    ),
    ErrorRule(
        ErrorKind.QUOTA_EXCEEDED,
        ("quota", "resource_exhausted"),
        "API quota exceeded. Please check your Gemini API usage.",
        429,
    ),
    ErrorRule(
        ErrorKind.PERMISSION_DENIED,
        ("permission",),
        "Permission denied. Please check your API key permissions.",
        500,
    ),
    ErrorRule(
        ErrorKind.MODEL_UNAVAILABLE,
        ("model",),
        "Model not available. Please try again later.",
        500,
    ),
    ErrorRule(
        ErrorKind.CONTENT_BLOCKED,
        ("safety",),
        "Content blocked by safety filters. Please try a different image or instruction.",
        500,
    ),
)

UPSTREAM_FALLBACK = ErrorRule(
    ErrorKind.UPSTREAM_ERROR,
    (),
    "An error occurred while processing the image",
    500,
)

# Request validation failures, reported before the provider is contacted
VALIDATION_MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.MISSING_CREDENTIAL: "API key is required",
    ErrorKind.MISSING_IMAGE: "Image data is required",
    ErrorKind.MISSING_INSTRUCTIONS: "Instructions are required",
    ErrorKind.INVALID_IMAGE: "Invalid image data. Expected a base64 image data URL.",
}

CLIENT_MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.NETWORK_ERROR: "Backend server not available. Please make sure the API server is running.",
    ErrorKind.CLIENT_VALIDATION_ERROR: "Invalid input",
}

_RULES_BY_KIND: Dict[ErrorKind, ErrorRule] = {rule.kind: rule for rule in UPSTREAM_RULES}
_RULES_BY_KIND[UPSTREAM_FALLBACK.kind] = UPSTREAM_FALLBACK


def classify_upstream_error(message: Optional[str]) -> ErrorKind:
    """Map a raw upstream error message to an ErrorKind."""
    haystack = (message or "").lower()
    for rule in UPSTREAM_RULES:
        if any(needle in haystack for needle in rule.substrings):
            return rule.kind
    return UPSTREAM_FALLBACK.kind


def user_message(kind: ErrorKind) -> str:
    if kind in VALIDATION_MESSAGES:
        return VALIDATION_MESSAGES[kind]
    if kind in CLIENT_MESSAGES:
        return CLIENT_MESSAGES[kind]
    return _RULES_BY_KIND.get(kind, UPSTREAM_FALLBACK).message


def http_status(kind: ErrorKind) -> int:
    if kind in VALIDATION_MESSAGES:
        return 400
    return _RULES_BY_KIND.get(kind, UPSTREAM_FALLBACK).status_code
