"""Push gateway client adapter."""

from dataclasses import dataclass
from typing import Protocol

import httpx


class PushClient(Protocol):
    """Interface for real-time notification fan-out."""

    async def publish(self, room: str, event: str, payload: dict[str, object]) -> None:
        """Publish an event to every client joined to a room."""


@dataclass
class HttpxPushClient:
    """Push client that posts events to an HTTP gateway."""

    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, base_url: str) -> "HttpxPushClient":
        """Create a push client with a managed httpx session."""
        return cls(base_url=base_url.rstrip("/"), http_client=httpx.AsyncClient())

    async def publish(self, room: str, event: str, payload: dict[str, object]) -> None:
        """Post an event to the gateway's events endpoint."""
        response = await self.http_client.post(
            f"{self.base_url}/events",
            json={"room": room, "event": event, "payload": payload},
            timeout=10,
        )
        response.raise_for_status()

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()
