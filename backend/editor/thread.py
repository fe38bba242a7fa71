"""
Chat thread view model.

Each submission is one ChatEntry: the prompt (with a thumbnail of the source
image) followed by either a loading placeholder or its outcome. The placeholder
is replaced in place, so an entry never shows loading and a result together.
"""

import itertools
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class MessageKind(str, Enum):
    PROMPT = "prompt"
    LOADING = "loading"
    IMAGE = "image"
    TEXT = "text"
    ERROR = "error"


class ChatMessage(BaseModel):
    kind: MessageKind
    content: str = ""
    thumbnail: Optional[str] = None


class ChatEntry(BaseModel):
    id: int
    messages: List[ChatMessage] = Field(default_factory=list)

    @property
    def is_loading(self) -> bool:
        return any(m.kind == MessageKind.LOADING for m in self.messages)


class ChatThread:
    def __init__(self):
        self.entries: List[ChatEntry] = []
        self._ids = itertools.count(1)

    def show_prompt_with_loading(self, prompt: str, thumbnail: Optional[str] = None) -> int:
        if self.loading_entry() is not None:
            raise RuntimeError("a submission is already loading")
        entry = ChatEntry(id=next(self._ids), messages=[
            ChatMessage(kind=MessageKind.PROMPT, content=prompt, thumbnail=thumbnail),
            ChatMessage(kind=MessageKind.LOADING, content="loading"),
        ])
        self.entries.append(entry)
        return entry.id

    def resolve(self, entry_id: int, images: List[str], text: str = "") -> ChatEntry:
        """Swap the placeholder for the model's text (first) and images"""
        outcome = []
        if text and text.strip():
            outcome.append(ChatMessage(kind=MessageKind.TEXT, content=text.strip()))
        outcome.extend(ChatMessage(kind=MessageKind.IMAGE, content=image) for image in images)
        return self._replace_loading(entry_id, outcome)

    def fail(self, entry_id: int, message: str) -> ChatEntry:
        return self._replace_loading(entry_id, [ChatMessage(kind=MessageKind.ERROR, content=message)])

    def loading_entry(self) -> Optional[ChatEntry]:
        return next((e for e in self.entries if e.is_loading), None)

    def clear(self) -> None:
        self.entries.clear()

    def _get(self, entry_id: int) -> ChatEntry:
        for entry in self.entries:
            if entry.id == entry_id:
                return entry
        raise KeyError(f"no chat entry {entry_id}")

    def _replace_loading(self, entry_id: int, outcome: List[ChatMessage]) -> ChatEntry:
        entry = self._get(entry_id)
        messages = []
        for message in entry.messages:
            if message.kind == MessageKind.LOADING:
                messages.extend(outcome)
            else:
                messages.append(message)
        entry.messages = messages
        return entry
