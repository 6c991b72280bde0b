"""SSE Manager: in-process broadcaster for list-view refresh events."""

import asyncio
import json
import logging
from collections.abc import AsyncGenerator
from typing import Any

logger = logging.getLogger(__name__)


class SSEManager:
    """Fans events out to every connected SSE subscriber.

    Each subscriber gets its own bounded asyncio.Queue. A subscriber that
    falls ``max_queue`` events behind is disconnected instead of blocking the
    broadcaster.
    """

    def __init__(self, max_queue: int = 100) -> None:
        self._max_queue = max_queue
        self._queues: list[asyncio.Queue[str | None]] = []

    async def subscribe(self) -> AsyncGenerator[str, None]:
        """Yield formatted SSE messages until the manager shuts down.

        The subscription is dropped when the consumer stops iterating.
        """
        queue: asyncio.Queue[str | None] = asyncio.Queue(maxsize=self._max_queue)
        self._queues.append(queue)
        try:
            while True:
                event = await queue.get()
                if event is None:
                    break
                yield event
        finally:
            if queue in self._queues:
                self._queues.remove(queue)

    async def broadcast(self, event_type: str, data: dict[str, Any]) -> int:
        """Send one event to all subscribers. Returns how many received it."""
        sse_message = f"event: {event_type}\ndata: {json.dumps(data)}\n\n"
        delivered = 0
        slow: list[asyncio.Queue[str | None]] = []

        for queue in self._queues:
            try:
                queue.put_nowait(sse_message)
                delivered += 1
            except asyncio.QueueFull:
                slow.append(queue)
                logger.warning("SSE subscriber fell behind, disconnecting it")

        for queue in slow:
            self._queues.remove(queue)
            _close(queue)
        return delivered

    async def shutdown(self) -> None:
        """Disconnect every subscriber."""
        for queue in self._queues:
            _close(queue)
        self._queues.clear()

    @property
    def client_count(self) -> int:
        return len(self._queues)


def _close(queue: asyncio.Queue[str | None]) -> None:
    # Make room for the sentinel so the subscriber loop always terminates.
    while queue.full():
        queue.get_nowait()
    queue.put_nowait(None)
