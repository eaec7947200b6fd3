"""Supabase-backed photo repository."""

from dataclasses import dataclass

from supabase import Client

from rpi_camera_bot.domain.photos import PhotoRecord
from rpi_camera_bot.services.photos import PhotoRepository


@dataclass
class SupabasePhotoRepository(PhotoRepository):
    """Supabase implementation for photo metadata persistence."""

    client: Client

    def save_photo(self, owner_id: str, file_id: str, caption: str) -> PhotoRecord:
        """Create a photo metadata row and return it."""
        response = (
            self.client.table("photos")
            .insert({"owner_id": owner_id, "file_id": file_id, "caption": caption})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create photo metadata")
        return _parse_row(response.data[0])

    def get_photos(self, owner_id: str, limit: int) -> list[PhotoRecord]:
        """Return the most recent photos for an owner."""
        response = (
            self.client.table("photos")
            .select("id, owner_id, file_id, caption")
            .eq("owner_id", owner_id)
            .order("id", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]

    def prune_photos(self, owner_id: str, keep: int) -> int:
        """Delete photo rows older than the newest ``keep`` for an owner."""
        response = (
            self.client.table("photos")
            .select("id")
            .eq("owner_id", owner_id)
            .order("id", desc=True)
            .execute()
        )
        stale_ids = [row["id"] for row in (response.data or [])[keep:]]
        if not stale_ids:
            return 0
        self.client.table("photos").delete().in_("id", stale_ids).execute()
        return len(stale_ids)


def _parse_row(row: dict[str, object]) -> PhotoRecord:
    raw_id = row.get("id")
    return PhotoRecord(
        id=int(raw_id) if raw_id is not None else None,
        owner_id=str(row["owner_id"]),
        file_id=str(row["file_id"]),
        caption=str(row.get("caption") or ""),
    )
