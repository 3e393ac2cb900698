"""
Subscriber fan-out for restaurant status pushes.

Subscribers are anything with an ``is_open`` flag and an async
``send_json``; in production they wrap WebSocket connections. A broadcast
goes to every open subscriber and skips the rest. Subscribers leave only
through disconnect().
"""

import logging
from typing import Any, Protocol

from fastapi.websockets import WebSocket, WebSocketState

logger = logging.getLogger(__name__)


class Subscriber(Protocol):
    @property
    def is_open(self) -> bool:
        ...

    async def send_json(self, message: dict[str, Any]) -> None:
        ...


class WebSocketSubscriber:
    """Adapts a Starlette WebSocket to the Subscriber protocol."""

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket

    @property
    def is_open(self) -> bool:
        return (
            self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    async def send_json(self, message: dict[str, Any]) -> None:
        await self.websocket.send_json(message)


class Broadcaster:
    """Set of subscribers with connect/disconnect/broadcast."""

    def __init__(self):
        self._subscribers: set[Subscriber] = set()

    def __len__(self) -> int:
        return len(self._subscribers)

    async def connect(self, subscriber: Subscriber, snapshot: dict[str, Any]) -> None:
        """Send ``snapshot`` to a new subscriber, then start broadcasting to it."""
        await subscriber.send_json(snapshot)
        self._subscribers.add(subscriber)
        logger.info(f"Status subscriber connected ({len(self._subscribers)} total)")

    def disconnect(self, subscriber: Subscriber) -> None:
        self._subscribers.discard(subscriber)
        logger.info(f"Status subscriber disconnected ({len(self._subscribers)} total)")

    async def broadcast(self, message: dict[str, Any]) -> int:
        """
        Deliver ``message`` to every open subscriber.

        Returns:
            int: Number of subscribers that received it
        """
        delivered = 0
        # Copy: subscribers may disconnect while we await a send
        for subscriber in list(self._subscribers):
            if not subscriber.is_open:
                continue
            try:
                await subscriber.send_json(message)
            except Exception as e:
                logger.warning(f"Skipping status subscriber after send error: {e}")
                continue
            delivered += 1
        return delivered
