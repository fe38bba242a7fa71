"""
Unit tests for the Gemini adapter (no network: the SDK client is replaced)
"""
import pytest
from types import SimpleNamespace
from unittest.mock import AsyncMock

from models.image_edit import EditRequest, SourceImage
from services.gemini_service import GeminiService, build_contents, build_prompt
from services.response_normalizer import SingleShotResponse, StreamedResponse
from conftest import PNG_BYTES, VALID_API_KEY, response_with, stream_of, text_part


def make_request():
    return EditRequest(
        credential=VALID_API_KEY,
        image=SourceImage(mime_type="image/png", data=PNG_BYTES),
        instructions="make the sky purple",
    )


def fake_client(stream=None, single=None):
    models = SimpleNamespace(
        generate_content_stream=AsyncMock(return_value=stream),
        generate_content=AsyncMock(return_value=single),
    )
    return SimpleNamespace(aio=SimpleNamespace(models=models, aclose=AsyncMock()))


@pytest.mark.unit
class TestPrompt:
    """Tests for prompt and contents construction"""

    def test_prompt_embeds_instructions(self):
        prompt = build_prompt("  make the sky purple ")

        assert "according to these instructions: make the sky purple." in prompt
        assert "dimensions" in prompt
        assert "realistic" in prompt

    def test_contents_hold_image_then_prompt(self):
        contents = build_contents(SourceImage(mime_type="image/png", data=PNG_BYTES), "add a hat")

        assert len(contents) == 1
        assert contents[0].role == "user"
        image, prompt = contents[0].parts
        assert image.inline_data.data == PNG_BYTES
        assert image.inline_data.mime_type == "image/png"
        assert "add a hat" in prompt.text


@pytest.mark.unit
@pytest.mark.asyncio
class TestGenerate:
    """Tests for stream/single mode routing"""

    async def test_stream_mode(self):
        stream = stream_of(response_with(text_part("hi")))
        service = GeminiService(VALID_API_KEY, model="test-model", mode="stream")
        service.client = fake_client(stream=stream)

        response = await service.generate(make_request())

        assert isinstance(response, StreamedResponse)
        assert response.chunks is stream
        call = service.client.aio.models.generate_content_stream.call_args
        assert call.kwargs["model"] == "test-model"
        assert call.kwargs["config"].response_modalities == ["IMAGE", "TEXT"]
        service.client.aio.models.generate_content.assert_not_called()

    async def test_single_mode(self):
        single = response_with(text_part("hi"))
        service = GeminiService(VALID_API_KEY, mode="single")
        service.client = fake_client(single=single)

        response = await service.generate(make_request())

        assert isinstance(response, SingleShotResponse)
        assert response.response is single
        service.client.aio.models.generate_content_stream.assert_not_called()

    async def test_aclose_closes_async_client(self):
        service = GeminiService(VALID_API_KEY)
        service.client = fake_client()

        await service.aclose()

        service.client.aio.aclose.assert_awaited_once()
