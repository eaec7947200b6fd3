"""Dispatcher for chat messages from authorized users."""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from rpi_camera_bot.adapters.telegram_client import (
    CHAT_ACTION_TYPING,
    TelegramApiError,
    TelegramClient,
)
from rpi_camera_bot.api.telegram_models import TelegramMessage
from rpi_camera_bot.config import BotConfig
from rpi_camera_bot.domain.capture import CaptureRequest
from rpi_camera_bot.domain.sessions import Session, SessionStatus
from rpi_camera_bot.services.capture import CaptureQueue
from rpi_camera_bot.services.diagnostics import Diagnostics
from rpi_camera_bot.services.sessions import SessionStore
from rpi_camera_bot.services.status import status_text
from rpi_camera_bot.telegram_commands import BotCommand, reply_keyboard

UNKNOWN_COMMAND = "unknown"
MESSAGE_DEFAULT = "Welcome! Send /capture to take a photo with the camera."
MESSAGE_UNKNOWN_COMMAND = "Unknown command."

logger = logging.getLogger(__name__)


def classify(text: str) -> BotCommand | None:
    """Return the command the text starts with, if any."""
    for command in BotCommand:
        if text.startswith(command.value.text):
            return command
    return None


def help_text() -> str:
    """Build the static help message."""
    return (
        "Following commands are supported:\n\n"
        "*For Raspberry Pi Camera Module*\n\n"
        f"{BotCommand.CAPTURE.value.text} : capture a still image with *raspistill*\n\n"
        "*Others*\n\n"
        f"{BotCommand.STATUS.value.text} : show this bot's status\n"
        f"{BotCommand.HELP.value.text} : show this help message"
    )


def reply_options() -> dict[str, Any]:
    """Presentation options attached to every reply."""
    return {"reply_markup": reply_keyboard(), "parse_mode": "Markdown"}


@dataclass
class UpdateDispatcher:
    """Admit messages, track sessions and answer or enqueue captures."""

    config: BotConfig
    sessions: SessionStore
    capture_queue: CaptureQueue
    telegram_client: TelegramClient
    diagnostics: Diagnostics
    launched: datetime = field(default_factory=lambda: datetime.now(tz=UTC))

    async def handle_message(self, update_id: int, message: TelegramMessage) -> bool:
        """Process one message update.

        Returns true when a reply was sent or a capture was enqueued.
        """
        sender = message.from_user
        if sender is None or sender.username is None:
            name = sender.first_name if sender else "unknown sender"
            self.diagnostics.log_error(
                f"Message - User not allowed (has no username): {name}"
            )
            return False
        user_id = sender.username
        if not self.config.is_allowed(user_id):
            self.diagnostics.log_error(f"Message - Id not allowed: {user_id}")
            return False

        async with self.sessions.transaction() as tx:
            session = tx.get(user_id)
            if session is None:
                self.diagnostics.log_error(f"Session does not exist for id: {user_id}")
                return False
            if session.last_update_id == update_id:
                self.diagnostics.log_error(f"Duplicated update id: {update_id}")
                return False
            tx.upsert(user_id, lambda current: current.with_update(update_id))
            return await self._respond(session, message)

    async def _respond(self, session: Session, message: TelegramMessage) -> bool:
        text = message.text or ""
        chat_id = message.chat.id
        options = reply_options()

        if session.status is SessionStatus.WAITING:
            command = classify(text)
            self.diagnostics.log_usage(
                session.user_id,
                command.value.text if command else UNKNOWN_COMMAND,
            )
            await self._send_typing(chat_id)

            if command is BotCommand.CAPTURE:
                if self.config.is_in_maintenance:
                    return await self._send(
                        chat_id, self.config.maintenance_message, options
                    )
                await self.capture_queue.submit(
                    CaptureRequest(
                        requester_id=session.user_id,
                        chat_id=chat_id,
                        width=self.config.image_width,
                        height=self.config.image_height,
                        camera_params=dict(self.config.camera_params),
                        reply_options=options,
                    )
                )
                logger.debug("Queued capture for %s", session.user_id)
                return True
            return await self._send(chat_id, self._reply_text(command, text), options)
        return False

    def _reply_text(self, command: BotCommand | None, text: str) -> str:
        if command is BotCommand.START:
            return MESSAGE_DEFAULT
        if command is BotCommand.STATUS:
            return status_text(self.launched)
        if command is BotCommand.HELP:
            return help_text()
        if text:
            return f"*{text}*: {MESSAGE_UNKNOWN_COMMAND}"
        return MESSAGE_UNKNOWN_COMMAND

    async def _send(self, chat_id: int, text: str, options: dict[str, Any]) -> bool:
        try:
            await self.telegram_client.send_message(chat_id, text, options)
        except TelegramApiError as exc:
            self.diagnostics.log_error(f"Failed to send message: {exc}")
            return False
        return True

    async def _send_typing(self, chat_id: int) -> None:
        try:
            await self.telegram_client.send_chat_action(chat_id, CHAT_ACTION_TYPING)
        except TelegramApiError as exc:
            logger.warning("Failed to send typing action: %s", exc)
