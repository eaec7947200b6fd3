"""Best-effort diagnostics: local logging plus optional remote shipping."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime

from rpi_camera_bot.adapters.loggly_client import LogSink

APP_NAME = "RPiCameraBot"

logger = logging.getLogger(__name__)


@dataclass
class Diagnostics:
    """Diagnostics sink whose failures never reach the caller.

    Every call logs locally. When a remote sink is configured the event is
    also shipped from a background task, so the caller never waits on it.
    """

    sink: LogSink | None = None
    app_name: str = APP_NAME
    _pending: set[asyncio.Task] = field(default_factory=set, init=False, repr=False)

    def log_info(self, message: str) -> None:
        """Record an informational message."""
        logger.info(message)
        self._ship({"severity": "Log", "message": message})

    def log_error(self, message: str) -> None:
        """Record an error message."""
        logger.error(message)
        self._ship({"severity": "Error", "message": message})

    def log_usage(self, user_id: str, command: str) -> None:
        """Record that a user issued a command."""
        logger.debug("Usage: %s -> %s", user_id, command)
        self._ship(
            {"severity": "Verbose", "obj": {"username": user_id, "command": command}}
        )

    async def drain(self) -> None:
        """Wait for in-flight remote events to finish."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    def _ship(self, event: dict[str, object]) -> None:
        if self.sink is None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        payload = {
            "app": self.app_name,
            "timestamp": datetime.now(tz=UTC).isoformat(),
            **event,
        }
        task = loop.create_task(self._send(payload))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _send(self, payload: dict[str, object]) -> None:
        try:
            await self.sink.send(payload)
        except Exception as exc:  # noqa: BLE001
            logger.debug("Dropped remote log event: %s", exc)
