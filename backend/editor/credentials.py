"""Durable storage of the user's Gemini API key."""

import json
import logging
import os
from pathlib import Path
from typing import Optional, Tuple, Union

logger = logging.getLogger(__name__)

STORAGE_KEY = "gemini_api_key"
DEFAULT_STORAGE_PATH = Path.home() / ".ai-image-editor" / "storage.json"

# Gemini API keys start with this prefix
GEMINI_KEY_PREFIX = "AIza"


def validate_credential_format(key: Optional[str]) -> Tuple[bool, Optional[str]]:
    """Pure format check, no network call.

    Returns:
        (is_valid, error_message)
    """
    key = (key or "").strip()
    if not key:
        return False, "Please enter a valid API key"
    if not key.startswith(GEMINI_KEY_PREFIX):
        return False, "API key format appears invalid. Please verify."
    return True, None


class CredentialStore:
    """A single string under a fixed key in a small JSON file. No encryption, no expiry."""

    def __init__(self, path: Union[str, Path, None] = None):
        self.path = Path(path) if path else DEFAULT_STORAGE_PATH

    def _read_all(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable credential store %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f)
        os.replace(tmp_path, self.path)

    def load(self) -> Optional[str]:
        value = self._read_all().get(STORAGE_KEY)
        return value if isinstance(value, str) and value else None

    def save(self, key: str) -> None:
        data = self._read_all()
        data[STORAGE_KEY] = key
        self._write_all(data)

    def clear(self) -> None:
        data = self._read_all()
        if data.pop(STORAGE_KEY, None) is not None:
            self._write_all(data)
