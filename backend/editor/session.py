from typing import List, Optional

from pydantic import BaseModel, Field

from editor.files import ImageRef


class HistoryEntry(BaseModel):
    prompt: str
    result_images: List[str] = Field(default_factory=list)  # data URLs
    result_text: str = ""


class ClientSession(BaseModel):
    """Everything the editor holds for one user; owned by EditController."""
    credential: Optional[str] = None
    image: Optional[ImageRef] = None
    instructions: str = ""
    pending: bool = False
    history: List[HistoryEntry] = Field(default_factory=list)

    def reset(self) -> None:
        """Forget the image, prompt and results. The credential survives."""
        self.image = None
        self.instructions = ""
        self.history = []
