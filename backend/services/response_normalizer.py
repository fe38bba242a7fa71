"""
Normalization of Gemini responses into images + text.

The provider answers in one of two shapes:

* StreamedResponse   - an async iterator of GenerateContentResponse chunks
* SingleShotResponse - a single GenerateContentResponse

Both are reduced by the same part reducer: inline image parts are appended in
arrival order, text parts are concatenated in order. Callers only ever see
NormalizedContent.
"""

import base64
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Iterable, List, Literal, Union

from models.image_edit import GeneratedImage

DEFAULT_IMAGE_MIME = "image/png"


@dataclass
class NormalizedContent:
    images: List[GeneratedImage] = field(default_factory=list)
    text: str = ""


@dataclass
class StreamedResponse:
    chunks: AsyncIterator[Any]
    kind: Literal["stream"] = "stream"


@dataclass
class SingleShotResponse:
    response: Any
    kind: Literal["single"] = "single"


UpstreamResponse = Union[StreamedResponse, SingleShotResponse]


def _candidate_parts(response: Any) -> Iterable[Any]:
    """Parts of the first candidate, or nothing for empty/blocked chunks."""
    candidates = getattr(response, "candidates", None)
    if not candidates:
        return ()
    content = getattr(candidates[0], "content", None)
    if content is None:
        return ()
    return getattr(content, "parts", None) or ()


def _decode_inline(data: Union[bytes, str]) -> bytes:
    # the SDK hands back bytes; raw REST payloads carry base64 text
    if isinstance(data, str):
        return base64.b64decode(data)
    return data


class _PartReducer:
    def __init__(self):
        self.images: List[GeneratedImage] = []
        self._text: List[str] = []

    def feed(self, parts: Iterable[Any]) -> None:
        for part in parts:
            inline = getattr(part, "inline_data", None)
            if inline is not None and getattr(inline, "data", None):
                self.images.append(GeneratedImage(
                    mime_type=getattr(inline, "mime_type", None) or DEFAULT_IMAGE_MIME,
                    data=_decode_inline(inline.data),
                ))
                continue
            text = getattr(part, "text", None)
            if text:
                self._text.append(text)

    def result(self) -> NormalizedContent:
        return NormalizedContent(images=self.images, text="".join(self._text))


async def normalize_stream(response: StreamedResponse) -> NormalizedContent:
    """Consume the whole stream before returning."""
    reducer = _PartReducer()
    async for chunk in response.chunks:
        reducer.feed(_candidate_parts(chunk))
    return reducer.result()


def normalize_single(response: SingleShotResponse) -> NormalizedContent:
    reducer = _PartReducer()
    reducer.feed(_candidate_parts(response.response))
    return reducer.result()


async def normalize(response: UpstreamResponse) -> NormalizedContent:
    if isinstance(response, StreamedResponse):
        return await normalize_stream(response)
    if isinstance(response, SingleShotResponse):
        return normalize_single(response)
    raise TypeError(f"Unsupported upstream response type: {type(response).__name__}")
