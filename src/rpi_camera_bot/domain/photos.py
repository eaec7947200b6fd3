"""Domain models for captured photo metadata."""

from dataclasses import dataclass


@dataclass(frozen=True)
class PhotoRecord:
    """A photo that was captured and uploaded to Telegram."""

    owner_id: str
    file_id: str
    caption: str
    id: int | None = None
