"""Photo metadata persistence interface."""

from typing import Protocol

from rpi_camera_bot.domain.photos import PhotoRecord


class PhotoRepository(Protocol):
    """Persistence interface for captured photo metadata."""

    def save_photo(self, owner_id: str, file_id: str, caption: str) -> PhotoRecord:
        """Store a photo record and return it."""

    def get_photos(self, owner_id: str, limit: int) -> list[PhotoRecord]:
        """Return the owner's most recent photos, newest first."""

    def prune_photos(self, owner_id: str, keep: int) -> int:
        """Delete all but the newest ``keep`` photos and return the count removed."""
