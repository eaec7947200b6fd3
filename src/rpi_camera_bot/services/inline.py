"""Inline query answers built from previously captured photos."""

from dataclasses import dataclass
from uuid import uuid4

from rpi_camera_bot.adapters.telegram_client import TelegramApiError, TelegramClient
from rpi_camera_bot.api.telegram_models import TelegramInlineQuery
from rpi_camera_bot.config import BotConfig
from rpi_camera_bot.domain.photos import PhotoRecord
from rpi_camera_bot.services.diagnostics import Diagnostics
from rpi_camera_bot.services.photos import PhotoRepository

LATEST_PHOTOS_LIMIT = 20


@dataclass
class InlineAnswerService:
    """Answer inline queries with the requester's latest photos."""

    config: BotConfig
    photo_repository: PhotoRepository
    telegram_client: TelegramClient
    diagnostics: Diagnostics
    limit: int = LATEST_PHOTOS_LIMIT

    async def handle_inline_query(self, query: TelegramInlineQuery) -> bool:
        """Answer one inline query; return true when photos were offered."""
        username = query.from_user.username
        if username is None:
            self.diagnostics.log_error(
                "Inline Query - user not allowed (has no username): "
                f"{query.from_user.first_name}"
            )
            return False
        if not self.config.is_allowed(username):
            self.diagnostics.log_error(f"Inline Query - id not allowed: {username}")
            return False

        results = self.build_results(username)
        if not results:
            self.diagnostics.log_error("No cached photos for inline query.")
        try:
            await self.telegram_client.answer_inline_query(query.id, results)
        except TelegramApiError as exc:
            self.diagnostics.log_error(f"Failed to answer inline query: {exc}")
            return False
        return bool(results)

    def build_results(self, owner_id: str) -> list[dict[str, object]]:
        """Return cached-photo results for the owner, newest first."""
        photos = self.photo_repository.get_photos(owner_id, self.limit)
        return [_cached_photo_result(photo) for photo in photos]


def _cached_photo_result(photo: PhotoRecord) -> dict[str, object]:
    result_id = str(photo.id) if photo.id is not None else uuid4().hex
    return {
        "type": "photo",
        "id": result_id,
        "photo_file_id": photo.file_id,
        "caption": photo.caption,
    }
