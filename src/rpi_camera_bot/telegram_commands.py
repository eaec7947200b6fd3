"""Telegram bot command configuration."""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class TelegramCommand:
    """Declarative bot command definition."""

    command: str
    description: str

    @property
    def text(self) -> str:
        """Return the command as typed in a chat."""
        return f"/{self.command}"


class BotCommand(Enum):
    """Enum of bot commands (single source of truth)."""

    START = TelegramCommand("start", "Start using the bot")
    CAPTURE = TelegramCommand("capture", "Capture a still image with the camera")
    STATUS = TelegramCommand("status", "Show this bot's status")
    HELP = TelegramCommand("help", "Show the help message")


def telegram_commands() -> list[dict[str, str]]:
    """Return commands formatted for Telegram API."""
    return [
        {"command": entry.value.command, "description": entry.value.description}
        for entry in BotCommand
    ]


def reply_keyboard() -> dict[str, object]:
    """Build the persistent reply keyboard shown under every bot message."""
    return {
        "keyboard": [
            [{"text": BotCommand.CAPTURE.value.text}],
            [
                {"text": BotCommand.STATUS.value.text},
                {"text": BotCommand.HELP.value.text},
            ],
        ],
        "resize_keyboard": True,
    }
