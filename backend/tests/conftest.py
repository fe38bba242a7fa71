"""
Shared pytest fixtures and configuration for all tests
"""
import pytest
import sys
from pathlib import Path

# Add backend to Python path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from google.genai import types

from core.data_url import to_data_url

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
VALID_API_KEY = "AIzaSyTestKey0123456789"


def image_part(data: bytes, mime_type: str = "image/png") -> types.Part:
    return types.Part(inline_data=types.Blob(data=data, mime_type=mime_type))


def text_part(text: str) -> types.Part:
    return types.Part(text=text)


def response_with(*parts) -> types.GenerateContentResponse:
    """A GenerateContentResponse (or stream chunk) whose first candidate holds parts"""
    return types.GenerateContentResponse(
        candidates=[types.Candidate(content=types.Content(role="model", parts=list(parts)))]
    )


async def stream_of(*chunks):
    for chunk in chunks:
        yield chunk


def data_url_for(data: bytes, mime_type: str = "image/png") -> str:
    return to_data_url(mime_type, data)


@pytest.fixture
def png_data_url():
    """Provide a small PNG as a data URL"""
    return data_url_for(PNG_BYTES)


@pytest.fixture
def valid_payload(png_data_url):
    """Provide a complete /api/process-image request body"""
    return {
        "apiKey": VALID_API_KEY,
        "imageData": png_data_url,
        "instructions": "make the sky purple",
    }


@pytest.fixture
def credential_store(tmp_path):
    """Provide a CredentialStore backed by a temp file, holding a valid key"""
    from editor.credentials import CredentialStore
    store = CredentialStore(tmp_path / "storage.json")
    store.save(VALID_API_KEY)
    return store


@pytest.fixture
def image_ref(png_data_url):
    """Provide an already loaded ImageRef"""
    from editor.files import ImageRef
    return ImageRef(filename="photo.png", mime_type="image/png", data=PNG_BYTES, data_url=png_data_url)
