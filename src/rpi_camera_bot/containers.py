"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import create_client

from rpi_camera_bot.adapters.loggly_client import HttpxLogglyClient
from rpi_camera_bot.adapters.raspistill_camera import RaspiStillCamera
from rpi_camera_bot.adapters.supabase_photo_repository import SupabasePhotoRepository
from rpi_camera_bot.adapters.telegram_client import (
    HttpxTelegramClient,
    TelegramClient,
)
from rpi_camera_bot.config import BotConfig, Settings
from rpi_camera_bot.services.capture import CaptureQueue, CaptureWorker
from rpi_camera_bot.services.diagnostics import Diagnostics
from rpi_camera_bot.services.dispatcher import UpdateDispatcher
from rpi_camera_bot.services.inline import InlineAnswerService
from rpi_camera_bot.services.polling import UpdatePoller, UpdateRouter
from rpi_camera_bot.services.sessions import SessionStore


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    config: BotConfig
    telegram_client: TelegramClient
    diagnostics: Diagnostics
    sessions: SessionStore
    capture_queue: CaptureQueue
    capture_worker: CaptureWorker
    dispatcher: UpdateDispatcher
    inline_service: InlineAnswerService
    router: UpdateRouter
    poller: UpdatePoller
    launched: datetime
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container.

    Raises ``ConfigurationError`` or a pydantic ``ValidationError`` when the
    required configuration is missing.
    """
    resolved_settings = settings or Settings()
    config = BotConfig.from_settings(resolved_settings)
    launched = datetime.now(tz=UTC)

    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    photo_repository = SupabasePhotoRepository(supabase_client)
    telegram_client = HttpxTelegramClient.create(resolved_settings.telegram_bot_token)
    loggly_client = (
        HttpxLogglyClient.create(resolved_settings.loggly_token)
        if resolved_settings.loggly_token
        else None
    )
    diagnostics = Diagnostics(sink=loggly_client)
    sessions = SessionStore(config.allowed_usernames)
    capture_queue = CaptureQueue()
    capture_worker = CaptureWorker(
        queue=capture_queue,
        camera=RaspiStillCamera(timeout_seconds=config.capture_timeout_seconds),
        telegram_client=telegram_client,
        photo_repository=photo_repository,
        diagnostics=diagnostics,
        capture_timeout_seconds=config.capture_timeout_seconds,
        photo_retention_per_user=config.photo_retention_per_user,
    )
    dispatcher = UpdateDispatcher(
        config=config,
        sessions=sessions,
        capture_queue=capture_queue,
        telegram_client=telegram_client,
        diagnostics=diagnostics,
        launched=launched,
    )
    inline_service = InlineAnswerService(
        config=config,
        photo_repository=photo_repository,
        telegram_client=telegram_client,
        diagnostics=diagnostics,
    )
    router = UpdateRouter(dispatcher=dispatcher, inline_service=inline_service)
    poller = UpdatePoller(
        source=telegram_client,
        router=router,
        diagnostics=diagnostics,
        interval_seconds=config.monitor_interval_seconds,
    )

    async def close_resources() -> None:
        await diagnostics.drain()
        await telegram_client.close()
        if loggly_client is not None:
            await loggly_client.close()

    return AppContainer(
        settings=resolved_settings,
        config=config,
        telegram_client=telegram_client,
        diagnostics=diagnostics,
        sessions=sessions,
        capture_queue=capture_queue,
        capture_worker=capture_worker,
        dispatcher=dispatcher,
        inline_service=inline_service,
        router=router,
        poller=poller,
        launched=launched,
        close_resources=close_resources,
    )
