"""Polling entrypoint for the camera bot."""

import asyncio
import contextlib
import logging

from rpi_camera_bot.adapters.telegram_client import TelegramApiError
from rpi_camera_bot.app_logging import configure_logging
from rpi_camera_bot.containers import AppContainer, build_container
from rpi_camera_bot.telegram_commands import telegram_commands

logger = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the bot cannot start serving."""


async def run_bot(container: AppContainer) -> None:
    """Announce the bot, start the capture worker and poll for updates."""
    client = container.telegram_client
    try:
        me = await client.get_me()
    except TelegramApiError as exc:
        raise StartupError("Failed to get info of the bot") from exc
    container.diagnostics.log_info(f"Starting bot: @{me.username} ({me.first_name})")

    # getUpdates does not work while a webhook is set
    try:
        await client.delete_webhook()
    except TelegramApiError as exc:
        raise StartupError("Failed to delete webhook") from exc

    try:
        await client.set_my_commands(telegram_commands())
    except TelegramApiError:
        logger.exception("Failed to sync Telegram bot commands")

    worker = asyncio.create_task(container.capture_worker.run())
    try:
        await container.poller.run()
    finally:
        worker.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await worker
        await container.close_resources()


def main() -> None:
    """Run the bot until interrupted."""
    container = build_container()
    configure_logging(container.config.is_verbose)
    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(run_bot(container))


if __name__ == "__main__":
    main()
