"""Loggly HTTP input client."""

from dataclasses import dataclass
from typing import Protocol

import httpx


class LogSink(Protocol):
    """Interface for shipping structured log events to a remote collector."""

    async def send(self, event: dict[str, object]) -> None:
        """Ship one log event."""


@dataclass
class HttpxLogglyClient(LogSink):
    """Loggly client using the HTTP/S event endpoint."""

    token: str
    http_client: httpx.AsyncClient
    tag: str = "http"

    @classmethod
    def create(cls, token: str) -> "HttpxLogglyClient":
        """Create a Loggly client with a managed httpx session."""
        return cls(token=token, http_client=httpx.AsyncClient())

    async def send(self, event: dict[str, object]) -> None:
        """Post a JSON event to Loggly."""
        url = f"https://logs-01.loggly.com/inputs/{self.token}/tag/{self.tag}/"
        response = await self.http_client.post(url, json=event, timeout=10)
        response.raise_for_status()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
