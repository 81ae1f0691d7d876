"""SseChannel — EventSink that feeds one server-sent events response."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator

from helpdesk.application.errors import SubscriberGoneError
from helpdesk.application.ports.event_sink import EventSink
from helpdesk.domain.entities.progress_event import ProgressEvent

logger = logging.getLogger(__name__)

_END_OF_STREAM = None


class SseChannel(EventSink):
    """Single-subscriber FIFO between the pipeline and the HTTP response.

    Events leave in exactly the order they were sent. Once the subscriber
    disconnects (or the channel is closed) every send fails fast.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[ProgressEvent | None] = asyncio.Queue()
        self._closed = False
        self._disconnected = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def disconnected(self) -> bool:
        return self._disconnected

    async def send(self, event: ProgressEvent) -> None:
        if self._disconnected:
            raise SubscriberGoneError("subscriber disconnected")
        if self._closed:
            raise SubscriberGoneError("channel already closed")
        await self._queue.put(event)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._queue.put(_END_OF_STREAM)

    def disconnect(self) -> None:
        """Called by the HTTP layer when the client goes away."""
        if not self._disconnected:
            self._disconnected = True
            self._closed = True
            logger.debug("SSE subscriber disconnected")

    async def stream(self) -> AsyncIterator[str]:
        """Yield SSE frames until the channel is closed."""
        while True:
            event = await self._queue.get()
            if event is _END_OF_STREAM:
                return
            yield event.to_sse()
