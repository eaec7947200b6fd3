"""FastAPI application factory."""

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Body, FastAPI, Request
from pydantic import ValidationError

from rpi_camera_bot.api.admin import router as admin_router
from rpi_camera_bot.api.telegram_models import TelegramUpdate
from rpi_camera_bot.app_logging import configure_logging
from rpi_camera_bot.containers import AppContainer
from rpi_camera_bot.telegram_commands import telegram_commands


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app that receives updates through a webhook."""
    configure_logging(container.config.is_verbose)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        try:
            await state_container.telegram_client.set_my_commands(telegram_commands())
        except Exception:
            logger.exception("Failed to sync Telegram bot commands")
        worker = asyncio.create_task(state_container.capture_worker.run())
        yield
        worker.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await worker
        await state_container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/telegram/webhook")
    async def telegram_webhook(
        request: Request, payload: dict[str, Any] = Body(...)
    ) -> dict[str, str]:
        """Handle Telegram webhook updates."""
        state_container: AppContainer = request.app.state.container
        try:
            update = TelegramUpdate.model_validate(payload)
        except ValidationError as exc:
            # acknowledged so Telegram does not redeliver it
            logger.warning(
                "Skipping malformed update %s: %s", payload.get("update_id"), exc
            )
            return {"status": "ok"}
        try:
            await state_container.router.route(update)
        except Exception:
            logger.exception("Failed to process update %d", update.update_id)
        return {"status": "ok"}

    return app
