import asyncio
import functools
import logging
from typing import Optional

import httpx
from fastapi import UploadFile

from ..core.config import Settings
from ..core.errors import GENERATION_MESSAGES, ErrorKind, GenerationError, TransitionError, UploadError
from ..schemas.tryon import ImagePart, Screen, Slot, SourceFile, UploadedImage, ViewState
from . import state as transitions
from .gemini import GeminiClient
from .image_utils import check_upload, declared_size, encode_image_part
from .previews import PreviewStore
from .samples import fetch_sample, sample_url

logger = logging.getLogger(__name__)


class TryOnSession:
    """Owns the single in-memory view state and sequences the I/O around it.

    All state changes go through the pure functions in ``services.state``;
    this class only awaits files, samples and the generation client.
    """

    def __init__(
        self,
        settings: Settings,
        client: GeminiClient,
        previews: Optional[PreviewStore] = None,
        sample_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self.client = client
        self.previews = previews or PreviewStore()
        self.sample_transport = sample_transport
        self._state = ViewState()
        self._task: Optional[asyncio.Task] = None

    @property
    def state(self) -> ViewState:
        return self._state

    async def select_image(self, file: UploadFile, slot: Slot) -> ViewState:
        """Validate, encode and store a file in a slot.

        Raises UploadError (also recorded as ``upload_error``) or
        TransitionError when the upload screen is not active.
        """
        if self._state.is_generating or self._state.screen is not Screen.UPLOAD:
            raise TransitionError("images can only be selected on the upload screen")

        self._state = transitions.clear_upload_error(self._state)

        try:
            size = declared_size(file)
            check_upload(file.content_type, size, self.settings.max_upload_bytes)
            part = await encode_image_part(file)
        except UploadError as e:
            logger.info("%s upload rejected (%s): %s", slot.value, e.kind.value, file.filename)
            self._state = transitions.set_upload_error(self._state, e.message)
            raise

        logger.info("%s upload accepted: %s, %s bytes", slot.value, file.content_type, size)

        handle = self.previews.add(part)
        image = UploadedImage(
            source=SourceFile(filename=file.filename, content_type=file.content_type, size=size),
            preview=handle,
            part=part,
        )
        try:
            # the screen may have changed while the file was being read
            self._state, replaced = transitions.fill_slot(self._state, slot, image)
        except TransitionError:
            self.previews.release(handle)
            raise

        if replaced is not None:
            self.previews.release(replaced.preview)
        return self._state

    async def select_sample(self, slot: Slot, index: int) -> ViewState:
        if self._state.is_generating or self._state.screen is not Screen.UPLOAD:
            raise TransitionError("samples can only be selected on the upload screen")

        url = sample_url(slot, index)
        try:
            file = await fetch_sample(url, slot, self.settings, self.sample_transport)
        except UploadError as e:
            # a generation may have started while the sample was downloading
            if self._state.is_generating or self._state.screen is not Screen.UPLOAD:
                raise TransitionError("samples can only be selected on the upload screen") from e
            self._state = transitions.set_upload_error(self._state, e.message)
            raise

        try:
            return await self.select_image(file, slot)
        finally:
            await file.close()

    def request_generation(self) -> Optional[asyncio.Task]:
        """Start a try-on attempt.

        Returns the running task, or None when a slot is still empty (the
        prompt-for-both message is then in ``upload_error``).
        """
        new = transitions.start_generation(self._state)
        self._state = new
        if not new.is_generating:
            return None

        # parts are immutable, so later slot changes cannot reach this call
        person = new.person.part
        clothing = new.clothing.part
        logger.info("generation #%s started", new.epoch)

        self._task = asyncio.create_task(self._generate(new.epoch, person, clothing))
        self._task.add_done_callback(functools.partial(self._settle_cancelled, new.epoch))
        return self._task

    async def _generate(self, epoch: int, person: ImagePart, clothing: ImagePart) -> None:
        try:
            image = await self.client.generate(person, clothing)
        except GenerationError as e:
            logger.warning("generation #%s failed: %s", epoch, e.kind.value)
            self._state = transitions.fail_generation(self._state, epoch, e.message)
        except Exception:
            logger.exception("generation #%s crashed", epoch)
            self._state = transitions.fail_generation(self._state, epoch, GENERATION_MESSAGES[ErrorKind.UNKNOWN])
        else:
            self._state = transitions.complete_generation(self._state, epoch, image)

    def _settle_cancelled(self, epoch: int, task: asyncio.Task) -> None:
        # also covers a task cancelled before its first step
        if task.cancelled():
            logger.warning("generation #%s cancelled", epoch)
            self._state = transitions.fail_generation(self._state, epoch, GENERATION_MESSAGES[ErrorKind.UNKNOWN])

    async def wait(self) -> None:
        """Wait for the current attempt, if any.

        A cancelled waiter leaves the attempt running.
        """
        if self._task is not None:
            await asyncio.shield(self._task)

    def reset(self) -> ViewState:
        self._state, released = transitions.reset(self._state)
        for image in released:
            self.previews.release(image.preview)
        return self._state
