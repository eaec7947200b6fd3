"""Update intake: routing and the getUpdates polling loop."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from rpi_camera_bot.adapters.telegram_client import TelegramApiError
from rpi_camera_bot.api.telegram_models import TelegramUpdate
from rpi_camera_bot.services.diagnostics import Diagnostics
from rpi_camera_bot.services.dispatcher import UpdateDispatcher
from rpi_camera_bot.services.inline import InlineAnswerService

logger = logging.getLogger(__name__)


class UpdateSource(Protocol):
    """Interface for fetching pending updates."""

    async def get_updates(
        self, offset: int, timeout: int = 0, limit: int = 100
    ) -> list[TelegramUpdate]:
        """Return updates with an id of at least ``offset``."""


@dataclass
class UpdateRouter:
    """Send each update to the component that handles its payload."""

    dispatcher: UpdateDispatcher
    inline_service: InlineAnswerService

    async def route(self, update: TelegramUpdate) -> bool:
        """Handle one update and return whether it produced an answer."""
        if update.message is not None:
            return await self.dispatcher.handle_message(
                update.update_id, update.message
            )
        if update.inline_query is not None:
            return await self.inline_service.handle_inline_query(update.inline_query)
        logger.debug("Ignoring update %d without a supported payload", update.update_id)
        return False


@dataclass
class UpdatePoller:
    """Long-running getUpdates loop that processes updates one at a time."""

    source: UpdateSource
    router: UpdateRouter
    diagnostics: Diagnostics
    interval_seconds: float = 1.0
    offset: int = 0

    async def run(self) -> None:
        """Poll forever, sleeping the monitor interval between rounds."""
        while True:
            await self.poll_once()
            await asyncio.sleep(self.interval_seconds)

    async def poll_once(self) -> int:
        """Fetch and process one batch of updates; return how many were seen."""
        try:
            updates = await self.source.get_updates(self.offset)
        except TelegramApiError as exc:
            self.diagnostics.log_error(f"Error while receiving update ({exc})")
            return 0
        except Exception:
            logger.exception("Unexpected error while receiving updates")
            return 0
        for update in updates:
            self.offset = max(self.offset, update.update_id + 1)
            try:
                await self.router.route(update)
            except Exception:
                logger.exception("Failed to process update %d", update.update_id)
        return len(updates)
