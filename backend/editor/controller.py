"""
Client-side edit controller.

States:
    IDLE            no image selected
    IMAGE_SELECTED  image loaded, ready to submit once there are instructions
    SUBMITTING      exactly one edit request in flight

Single-flight is a precondition of submit(): while a request is pending every
further submit() call is rejected without touching the network. Every
failure produces exactly one notification and leaves the controller back in
IMAGE_SELECTED.
"""

import logging
from enum import Enum
from typing import Callable, List, Optional

from pydantic import BaseModel

from editor.credentials import CredentialStore, validate_credential_format
from editor.files import ClientValidationError, FileHandle, load_image
from editor.session import ClientSession, HistoryEntry
from editor.thread import ChatThread
from editor.transport import ApiResult, EditApiClient, NetworkError
from core.error_mapping import user_message
from models.image_edit import ErrorKind

logger = logging.getLogger(__name__)

MESSAGE_NO_API_KEY = "Please enter your API key first"
MESSAGE_NO_IMAGE = "Please attach an image first"
MESSAGE_NO_INSTRUCTIONS = "Please enter editing instructions"
MESSAGE_BACKEND_DOWN = user_message(ErrorKind.NETWORK_ERROR)


class EditorState(str, Enum):
    IDLE = "idle"
    IMAGE_SELECTED = "image_selected"
    SUBMITTING = "submitting"


class Notification(BaseModel):
    message: str
    level: str = "info"  # success | error | info


class EditController:
    def __init__(self, api: EditApiClient, credentials: Optional[CredentialStore] = None,
                 on_notify: Optional[Callable[[Notification], None]] = None):
        self.api = api
        self.credentials = credentials or CredentialStore()
        self.on_notify = on_notify
        self.session = ClientSession(credential=self.credentials.load())
        self.thread = ChatThread()
        self.notifications: List[Notification] = []
        self._epoch = 0  # bumped by reset() to orphan in-flight requests

    # ---------- state ----------

    @property
    def state(self) -> EditorState:
        if self.session.pending:
            return EditorState.SUBMITTING
        if self.session.image is not None:
            return EditorState.IMAGE_SELECTED
        return EditorState.IDLE

    @property
    def needs_credential(self) -> bool:
        return not self.session.credential

    @property
    def can_submit(self) -> bool:
        """Whether the submit control is enabled."""
        return (
            self.session.image is not None
            and bool(self.session.instructions.strip())
            and not self.session.pending
        )

    def notify(self, message: str, level: str = "info") -> None:
        notification = Notification(message=message, level=level)
        self.notifications.append(notification)
        if self.on_notify:
            self.on_notify(notification)

    # ---------- credential ----------

    def save_credential(self, key: str) -> bool:
        valid, error = validate_credential_format(key)
        if not valid:
            self.notify(error, "error")
            return False
        key = key.strip()
        self.credentials.save(key)
        self.session.credential = key
        self.notify("API key saved successfully!", "success")
        return True

    def clear_credential(self) -> None:
        self.credentials.clear()
        self.session.credential = None

    # ---------- inputs ----------

    async def select_image(self, handle: FileHandle) -> bool:
        try:
            image = await load_image(handle)
        except ClientValidationError as e:
            self.notify(str(e), "error")
            return False
        self.session.image = image
        self.notify("Image loaded successfully!", "success")
        return True

    def remove_image(self) -> None:
        self.session.image = None
        self.notify("Image removed", "info")

    def set_instructions(self, text: str) -> None:
        self.session.instructions = text or ""

    def reset(self) -> None:
        """Back to IDLE: clears image, instructions, history and the thread."""
        self.session.reset()
        self._epoch += 1
        self.thread.clear()
        self.notify("Reset complete", "info")

    # ---------- submission ----------

    def _precheck(self) -> Optional[str]:
        if self.needs_credential:
            return MESSAGE_NO_API_KEY
        valid, error = validate_credential_format(self.session.credential)
        if not valid:
            return error
        if self.session.image is None:
            return MESSAGE_NO_IMAGE
        if not self.session.instructions.strip():
            return MESSAGE_NO_INSTRUCTIONS
        return None

    async def submit(self) -> Optional[HistoryEntry]:
        """Send the current image and instructions; returns the new history entry on success"""
        if self.session.pending:
            logger.debug("Submit ignored: a request is already in flight")
            return None

        problem = self._precheck()
        if problem:
            self.notify(problem, "error")
            return None

        image = self.session.image
        prompt = self.session.instructions.strip()
        epoch = self._epoch

        # pending is set before the first await so re-entrant calls are refused
        self.session.pending = True
        entry_id = self.thread.show_prompt_with_loading(prompt, image.data_url)
        result: Optional[ApiResult] = None
        failure: Optional[str] = None
        try:
            result = await self.api.process_image(self.session.credential, image.data_url, prompt)
        except NetworkError as e:
            logger.error("Edit request failed: %s", e)
            failure = MESSAGE_BACKEND_DOWN
        except Exception as e:
            logger.exception("Unexpected error during edit request")
            failure = str(e) or e.__class__.__name__
        finally:
            self.session.pending = False

        if epoch != self._epoch:
            logger.info("Dropping the result of a request sent before reset")
            return None

        if failure is not None:
            self.thread.fail(entry_id, failure)
            self.notify(f"Error: {failure}", "error")
            return None
        return self._apply_result(entry_id, prompt, result)

    def _apply_result(self, entry_id: int, prompt: str, result: ApiResult) -> Optional[HistoryEntry]:
        if not result.success:
            message = result.error or "Unknown error occurred"
            self.thread.fail(entry_id, message)
            self.notify(f"Error: {message}", "error")
            return None

        images = result.all_images
        text = result.text.strip()
        self.thread.resolve(entry_id, images, text)

        entry = HistoryEntry(prompt=prompt, result_images=images, result_text=text)
        self.session.history.append(entry)

        if images and text:
            self.notify("AI provided both text and images!", "success")
        elif images:
            self.notify("AI processing completed!", "success")
        elif text:
            self.notify("AI provided text response", "info")
        else:
            self.notify("No response received from AI", "error")

        if images or text:
            self.session.instructions = ""
        return entry
