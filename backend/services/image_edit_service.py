import asyncio
import logging
import time
from typing import Callable, Optional

from config.settings import settings
from core.data_url import InvalidDataURL, parse_data_url
from core.error_mapping import classify_upstream_error
from models.image_edit import EditRequest, EditResult, ErrorKind, ProcessImageRequest
from services.gemini_service import GeminiService
from services.response_normalizer import NormalizedContent, normalize

logger = logging.getLogger(__name__)

TIMEOUT_DETAIL = "Upstream request timed out"


class ImageEditService:
    def __init__(self, provider_factory: Optional[Callable[[str], GeminiService]] = None,
                 timeout_seconds: Optional[float] = None):
        self.provider_factory = provider_factory or GeminiService
        self.timeout_seconds = timeout_seconds or settings.UPSTREAM_TIMEOUT_SECONDS

    def validate(self, payload: ProcessImageRequest) -> Optional[ErrorKind]:
        """Return the first violated requirement, checked in order, or None"""
        if not (payload.apiKey or "").strip():
            return ErrorKind.MISSING_CREDENTIAL
        if not (payload.imageData or "").strip():
            return ErrorKind.MISSING_IMAGE
        if not (payload.instructions or "").strip():
            return ErrorKind.MISSING_INSTRUCTIONS
        return None

    async def handle(self, payload: ProcessImageRequest) -> EditResult:
        """Validate, call the provider, and normalize whatever comes back.

        Never raises: every failure is turned into a failed EditResult.
        """
        error_kind = self.validate(payload)
        if error_kind:
            return EditResult.failure(error_kind)

        try:
            image = parse_data_url(payload.imageData.strip())
        except InvalidDataURL as e:
            logger.warning("Rejected image data: %s", e)
            return EditResult.failure(ErrorKind.INVALID_IMAGE, str(e))

        request = EditRequest(
            credential=payload.apiKey.strip(),
            image=image,
            instructions=payload.instructions.strip(),
        )

        start_time = time.perf_counter()
        try:
            content = await asyncio.wait_for(self._run(request), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.error("Upstream call exceeded %.0fs", self.timeout_seconds)
            return EditResult.failure(ErrorKind.UPSTREAM_ERROR, TIMEOUT_DETAIL)
        except Exception as e:
            detail = str(e) or e.__class__.__name__
            kind = classify_upstream_error(detail)
            logger.error("Upstream call failed (%s): %s", kind.value, detail)
            return EditResult.failure(kind, detail)

        logger.info(
            "Generated %d image(s) and %d text chars in %.2fs",
            len(content.images), len(content.text), time.perf_counter() - start_time,
        )
        return EditResult(succeeded=True, images=content.images, text=content.text)

    async def _run(self, request: EditRequest) -> NormalizedContent:
        provider = self.provider_factory(request.credential)
        try:
            response = await provider.generate(request)
            return await normalize(response)
        finally:
            await provider.aclose()
