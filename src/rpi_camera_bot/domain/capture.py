"""Domain models for camera capture requests."""

from dataclasses import dataclass, field
from typing import Any


class CaptureError(RuntimeError):
    """Raised when the camera fails to produce an image."""


class CaptureTimeoutError(CaptureError):
    """Raised when the camera does not answer within the time budget."""


@dataclass(frozen=True)
class CaptureRequest:
    """A pending capture-and-deliver job."""

    requester_id: str
    chat_id: int
    width: int
    height: int
    camera_params: dict[str, Any] = field(default_factory=dict)
    reply_options: dict[str, Any] = field(default_factory=dict)
