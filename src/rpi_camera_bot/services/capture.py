"""Serialized camera capture: a bounded request queue and its single worker."""

import asyncio
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

from rpi_camera_bot.adapters.telegram_client import (
    CHAT_ACTION_TYPING,
    CHAT_ACTION_UPLOAD_PHOTO,
    TelegramApiError,
    TelegramClient,
)
from rpi_camera_bot.domain.capture import (
    CaptureError,
    CaptureRequest,
    CaptureTimeoutError,
)
from rpi_camera_bot.services.diagnostics import Diagnostics
from rpi_camera_bot.services.photos import PhotoRepository

QUEUE_CAPACITY = 4
CAPTION_FORMAT = "%Y-%m-%d (%a) %H:%M:%S"

logger = logging.getLogger(__name__)


class Camera(Protocol):
    """Blocking interface to the physical camera."""

    def capture(self, width: int, height: int, params: Mapping[str, Any]) -> bytes:
        """Capture a still image and return the encoded bytes."""


class CaptureQueue:
    """Bounded FIFO of capture requests."""

    def __init__(self, capacity: int = QUEUE_CAPACITY) -> None:
        self._queue: asyncio.Queue[CaptureRequest] = asyncio.Queue(maxsize=capacity)

    async def submit(self, request: CaptureRequest) -> None:
        """Enqueue a request, waiting for free space when the queue is full."""
        await self._queue.put(request)

    async def next(self) -> CaptureRequest:
        """Wait for and return the oldest pending request."""
        return await self._queue.get()

    def task_done(self) -> None:
        """Mark the most recently taken request as finished."""
        self._queue.task_done()

    async def join(self) -> None:
        """Wait until every submitted request has been finished."""
        await self._queue.join()

    @property
    def depth(self) -> int:
        """Number of requests waiting to be taken."""
        return self._queue.qsize()

    @property
    def capacity(self) -> int:
        return self._queue.maxsize


def _local_now() -> datetime:
    return datetime.now().astimezone()


@dataclass
class CaptureWorker:
    """Single consumer that owns the camera.

    The camera lock is held across capture and upload so that the device is
    never used by two requests at once, whoever calls ``process``.
    """

    queue: CaptureQueue
    camera: Camera
    telegram_client: TelegramClient
    photo_repository: PhotoRepository
    diagnostics: Diagnostics
    capture_timeout_seconds: float = 30.0
    photo_retention_per_user: int = 0
    clock: Callable[[], datetime] = _local_now
    _camera_lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False)

    async def run(self) -> None:
        """Consume requests forever."""
        while True:
            request = await self.queue.next()
            try:
                await self.process(request)
            except Exception:
                logger.exception(
                    "Capture request failed unexpectedly",
                    extra={"requester_id": request.requester_id},
                )
            finally:
                self.queue.task_done()

    async def process(self, request: CaptureRequest) -> bool:
        """Capture, deliver and record one request.

        Returns true only when the photo was delivered and its metadata saved.
        """
        async with self._camera_lock:
            await self._send_action(request.chat_id, CHAT_ACTION_TYPING)
            capture = asyncio.ensure_future(
                asyncio.to_thread(
                    self.camera.capture,
                    request.width,
                    request.height,
                    request.camera_params,
                )
            )
            try:
                image = await self._await_capture(capture)
            except CaptureError as exc:
                message = f"Image capture failed: {exc}"
                self.diagnostics.log_error(message)
                await self._reply_failure(request, message)
                if not capture.done():
                    await self._wait_for_stalled_capture(capture)
                return False

            caption = self.clock().strftime(CAPTION_FORMAT)
            options = {**request.reply_options, "caption": caption}
            await self._send_action(request.chat_id, CHAT_ACTION_UPLOAD_PHOTO)
            try:
                sent = await self.telegram_client.send_photo(
                    request.chat_id, image, options
                )
            except TelegramApiError as exc:
                self.diagnostics.log_error(f"Failed to send photo: {exc}")
                return False

            try:
                self.photo_repository.save_photo(
                    request.requester_id, sent.file_id, caption
                )
            except Exception as exc:  # noqa: BLE001
                self.diagnostics.log_error(f"Failed to save photo metadata: {exc}")
                return False
            self._apply_retention(request.requester_id)
            return True

    async def _await_capture(self, capture: "asyncio.Future[bytes]") -> bytes:
        # the thread cannot be cancelled, so only the wait times out
        try:
            return await asyncio.wait_for(
                asyncio.shield(capture), timeout=self.capture_timeout_seconds
            )
        except TimeoutError as exc:
            raise CaptureTimeoutError(
                f"camera did not respond within {self.capture_timeout_seconds:g}s"
            ) from exc

    async def _wait_for_stalled_capture(
        self, capture: "asyncio.Future[bytes]"
    ) -> None:
        """Keep the camera locked until a timed-out device call returns."""
        try:
            await capture
        except Exception as exc:  # noqa: BLE001
            logger.warning("Timed-out capture finished with an error: %s", exc)
        else:
            logger.info("Timed-out capture finished late, image discarded")

    async def _reply_failure(self, request: CaptureRequest, message: str) -> None:
        # error details are arbitrary text, so no markup parsing
        options = {
            key: value
            for key, value in request.reply_options.items()
            if key != "parse_mode"
        }
        try:
            await self.telegram_client.send_message(request.chat_id, message, options)
        except TelegramApiError as exc:
            self.diagnostics.log_error(f"Failed to send capture error: {exc}")

    async def _send_action(self, chat_id: int, action: str) -> None:
        try:
            await self.telegram_client.send_chat_action(chat_id, action)
        except TelegramApiError as exc:
            logger.warning("Failed to send chat action %s: %s", action, exc)

    def _apply_retention(self, owner_id: str) -> None:
        if self.photo_retention_per_user <= 0:
            return
        try:
            removed = self.photo_repository.prune_photos(
                owner_id, self.photo_retention_per_user
            )
        except Exception as exc:  # noqa: BLE001
            self.diagnostics.log_error(f"Failed to prune old photos: {exc}")
            return
        if removed:
            logger.info("Pruned %d old photo records for %s", removed, owner_id)
