import logging
from typing import List, Optional

from google import genai
from google.genai import types

from config.settings import settings
from models.image_edit import EditRequest, SourceImage
from services.response_normalizer import SingleShotResponse, StreamedResponse, UpstreamResponse

logger = logging.getLogger(__name__)

EDIT_PROMPT_TEMPLATE = (
    "Please edit this image according to these instructions: {instructions}. "
    "Generate a high-quality edited version of this image. "
    "Maintain the original image quality and dimensions as much as possible. "
    "Focus on making realistic and natural-looking edits."
)

RESPONSE_MODALITIES = ["IMAGE", "TEXT"]


def build_prompt(instructions: str) -> str:
    return EDIT_PROMPT_TEMPLATE.format(instructions=instructions.strip())


def build_contents(image: SourceImage, instructions: str) -> List[types.Content]:
    """One user turn: the source image first, then the instruction prompt."""
    return [
        types.Content(
            role="user",
            parts=[
                types.Part.from_bytes(data=image.data, mime_type=image.mime_type),
                types.Part.from_text(text=build_prompt(instructions)),
            ],
        )
    ]


class GeminiService:
    """Thin adapter over google-genai's async client.

    The credential is per request: the service is built for each call with the
    caller's key and never stores it anywhere else.
    """

    def __init__(self, api_key: str, model: Optional[str] = None, mode: Optional[str] = None):
        self.client = genai.Client(api_key=api_key)
        self.model = model or settings.GEMINI_MODEL
        self.mode = mode or settings.UPSTREAM_MODE

    async def generate(self, request: EditRequest) -> UpstreamResponse:
        """Start the edit upstream and return the response in its native shape."""
        contents = build_contents(request.image, request.instructions)
        config = types.GenerateContentConfig(response_modalities=RESPONSE_MODALITIES)

        logger.info(
            "Calling %s (%s) with %.1f KB %s image",
            self.model, self.mode, len(request.image.data) / 1024.0, request.image.mime_type,
        )

        if self.mode == "single":
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=contents,
                config=config,
            )
            return SingleShotResponse(response=response)

        chunks = await self.client.aio.models.generate_content_stream(
            model=self.model,
            contents=contents,
            config=config,
        )
        return StreamedResponse(chunks=chunks)

    async def aclose(self) -> None:
        """Release the SDK's async HTTP pool; the client is not reused after this."""
        await self.client.aio.aclose()
