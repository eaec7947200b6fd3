"""Telegram Bot API client adapter."""

import json
import logging
from dataclasses import dataclass
from typing import Any, Protocol

import httpx
from pydantic import ValidationError

from rpi_camera_bot.api.telegram_models import TelegramUpdate, TelegramUser

CHAT_ACTION_TYPING = "typing"
CHAT_ACTION_UPLOAD_PHOTO = "upload_photo"

logger = logging.getLogger(__name__)


class TelegramApiError(RuntimeError):
    """Raised when the Bot API rejects a request or cannot be reached."""


@dataclass(frozen=True)
class SentPhoto:
    """Acknowledgment of an uploaded photo."""

    message_id: int
    file_id: str


class TelegramClient(Protocol):
    """Interface for Telegram API interactions."""

    async def get_me(self) -> TelegramUser:
        """Return the bot's own user record."""

    async def delete_webhook(self) -> None:
        """Remove any configured webhook."""

    async def get_updates(
        self, offset: int, timeout: int = 0, limit: int = 100
    ) -> list[TelegramUpdate]:
        """Fetch pending updates starting at the given offset."""

    async def send_message(
        self, chat_id: int, text: str, options: dict[str, Any] | None = None
    ) -> None:
        """Send a text message to a Telegram chat."""

    async def send_chat_action(self, chat_id: int, action: str) -> None:
        """Show a presence indicator such as 'typing' in a chat."""

    async def send_photo(
        self, chat_id: int, photo: bytes, options: dict[str, Any] | None = None
    ) -> SentPhoto:
        """Upload a photo to a chat and return the stored file reference."""

    async def answer_inline_query(
        self, inline_query_id: str, results: list[dict[str, object]]
    ) -> None:
        """Answer an inline query with a list of results."""

    async def set_my_commands(self, commands: list[dict[str, str]]) -> None:
        """Set the bot command list."""


@dataclass
class HttpxTelegramClient:
    """Telegram client implemented with httpx."""

    bot_token: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, bot_token: str) -> "HttpxTelegramClient":
        """Create a Telegram client with a managed httpx session."""
        return cls(bot_token=bot_token, http_client=httpx.AsyncClient())

    async def get_me(self) -> TelegramUser:
        """Return the bot's own user record."""
        result = await self._call("getMe")
        return TelegramUser.model_validate(result)

    async def delete_webhook(self) -> None:
        """Remove any webhook so that getUpdates can be used."""
        await self._call("deleteWebhook")

    async def get_updates(
        self, offset: int, timeout: int = 0, limit: int = 100
    ) -> list[TelegramUpdate]:
        """Fetch pending updates starting at the given offset."""
        result = await self._call(
            "getUpdates",
            {"offset": offset, "timeout": timeout, "limit": limit},
            request_timeout=timeout + 10,
        )
        updates = []
        for item in result or []:
            update = _parse_update(item)
            if update is not None:
                updates.append(update)
        return updates

    async def send_message(
        self, chat_id: int, text: str, options: dict[str, Any] | None = None
    ) -> None:
        """Send a message using Telegram's sendMessage API."""
        payload: dict[str, Any] = {"chat_id": chat_id, "text": text}
        payload.update(options or {})
        await self._call("sendMessage", payload)

    async def send_chat_action(self, chat_id: int, action: str) -> None:
        """Send a chat action using Telegram's sendChatAction API."""
        await self._call("sendChatAction", {"chat_id": chat_id, "action": action})

    async def send_photo(
        self, chat_id: int, photo: bytes, options: dict[str, Any] | None = None
    ) -> SentPhoto:
        """Upload photo bytes as multipart form data."""
        data = {"chat_id": str(chat_id)}
        for key, value in (options or {}).items():
            data[key] = value if isinstance(value, str) else json.dumps(value)
        result = await self._call(
            "sendPhoto",
            data=data,
            files={"photo": ("photo.jpg", photo, "image/jpeg")},
            request_timeout=60,
        )
        sizes = result.get("photo") or []
        if not sizes:
            raise TelegramApiError("sendPhoto returned no photo sizes")
        largest = max(sizes, key=lambda size: size["width"] * size["height"])
        return SentPhoto(message_id=result["message_id"], file_id=largest["file_id"])

    async def answer_inline_query(
        self, inline_query_id: str, results: list[dict[str, object]]
    ) -> None:
        """Answer an inline query using Telegram's API."""
        await self._call(
            "answerInlineQuery",
            {"inline_query_id": inline_query_id, "results": results},
        )

    async def set_my_commands(self, commands: list[dict[str, str]]) -> None:
        """Set the bot command list."""
        await self._call("setMyCommands", {"commands": commands})

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()

    async def _call(
        self,
        method: str,
        payload: dict[str, Any] | None = None,
        *,
        data: dict[str, str] | None = None,
        files: dict[str, tuple[str, bytes, str]] | None = None,
        request_timeout: float = 10,
    ) -> Any:
        url = f"https://api.telegram.org/bot{self.bot_token}/{method}"
        try:
            if files is not None:
                response = await self.http_client.post(
                    url, data=data, files=files, timeout=request_timeout
                )
            else:
                response = await self.http_client.post(
                    url, json=payload or {}, timeout=request_timeout
                )
            body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise TelegramApiError(f"{method} failed: {exc}") from exc
        if not body.get("ok"):
            description = body.get("description") or f"HTTP {response.status_code}"
            raise TelegramApiError(f"{method} failed: {description}")
        return body.get("result")


def _parse_update(item: Any) -> TelegramUpdate | None:
    """Validate one update; a malformed one keeps only its id so it is skipped."""
    try:
        return TelegramUpdate.model_validate(item)
    except ValidationError as exc:
        update_id = item.get("update_id") if isinstance(item, dict) else None
        if not isinstance(update_id, int):
            logger.warning("Dropping update without a usable id: %s", exc)
            return None
        logger.warning("Skipping malformed update %d: %s", update_id, exc)
        return TelegramUpdate(update_id=update_id)
