import logging
from typing import List, Optional

import httpx
from pydantic import BaseModel, ValidationError

from models.image_edit import ErrorKind

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8080"
DEFAULT_TIMEOUT = 60.0


class NetworkError(Exception):
    """The API server could not be reached or did not answer in time."""


class ApiResult(BaseModel):
    success: bool
    images: List[str] = []
    editedImage: Optional[str] = None
    text: str = ""
    message: Optional[str] = None
    error: Optional[str] = None
    errorKind: Optional[ErrorKind] = None
    details: Optional[str] = None

    @property
    def all_images(self) -> List[str]:
        """images, falling back to the single editedImage field"""
        if self.images:
            return self.images
        return [self.editedImage] if self.editedImage else []


class EditApiClient:
    def __init__(self, base_url: str = DEFAULT_BASE_URL, timeout: float = DEFAULT_TIMEOUT,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport)

    async def process_image(self, api_key: str, image_data: str, instructions: str) -> ApiResult:
        """POST /api/process-image and return the server's result, successful or not"""
        payload = {
            "apiKey": api_key,
            "imageData": image_data,
            "instructions": instructions,
        }
        try:
            async with self._client() as client:
                response = await client.post("/api/process-image", json=payload)
        except httpx.TimeoutException as e:
            raise NetworkError(f"Request timed out after {self.timeout:.0f}s") from e
        except httpx.TransportError as e:
            logger.error("API call failed: %s", e)
            raise NetworkError(str(e) or "Connection failed") from e

        return self._parse(response)

    async def health(self) -> dict:
        try:
            async with self._client() as client:
                response = await client.get("/api/health")
        except httpx.TransportError as e:
            raise NetworkError(str(e) or "Connection failed") from e
        if not response.is_success:
            raise NetworkError(f"HTTP error! status: {response.status_code}")
        return response.json()

    def _parse(self, response: httpx.Response) -> ApiResult:
        try:
            return ApiResult.model_validate(response.json())
        except (ValueError, ValidationError):
            logger.error("Unexpected response (%s): %s", response.status_code, response.text[:200])

        if response.is_success:
            return ApiResult(success=False, error="Invalid response from server", errorKind=ErrorKind.UPSTREAM_ERROR)
        return ApiResult(
            success=False,
            error=f"HTTP error! status: {response.status_code}",
            errorKind=ErrorKind.UPSTREAM_ERROR,
        )
