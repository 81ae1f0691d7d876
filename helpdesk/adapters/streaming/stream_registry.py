"""StreamRegistry — process-wide map of active processing streams.

Created in the application lifespan and injected where needed. It only lets
later requests about the same ticket reach a live stream; a missing entry is
never an error.
"""

from __future__ import annotations

import asyncio
import logging

from helpdesk.application.errors import TransportError
from helpdesk.application.ports.event_sink import EventSink
from helpdesk.domain.entities.progress_event import ProgressEvent

logger = logging.getLogger(__name__)


class StreamRegistry:
    def __init__(self) -> None:
        self._streams: dict[str, EventSink] = {}
        self._tasks: set[asyncio.Task] = set()

    def __len__(self) -> int:
        return len(self._streams)

    def __contains__(self, stream_id: str) -> bool:
        return stream_id in self._streams

    def register(self, stream_id: str, sink: EventSink) -> None:
        if stream_id in self._streams:
            logger.info("Stream %s replaced by a newer subscriber", stream_id)
        self._streams[stream_id] = sink

    def unregister(self, stream_id: str, sink: EventSink | None = None) -> None:
        """Remove *stream_id*; with *sink* given, only if it is still the registered one."""
        current = self._streams.get(stream_id)
        if current is None:
            return
        if sink is not None and current is not sink:
            return
        del self._streams[stream_id]

    def get(self, stream_id: str) -> EventSink | None:
        return self._streams.get(stream_id)

    async def publish(self, stream_id: str, event: ProgressEvent) -> bool:
        """Send *event* to the stream if one is active.

        Returns:
            True if delivered, False if no live stream was found.
        """
        sink = self._streams.get(stream_id)
        if sink is None:
            return False
        try:
            await sink.send(event)
        except TransportError:
            self.unregister(stream_id, sink)
            return False
        return True

    def track(self, task: asyncio.Task) -> None:
        """Hold a reference to a pipeline task until it finishes."""
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def shutdown(self) -> None:
        """Close every registered stream and cancel unfinished pipeline tasks."""
        streams = list(self._streams.items())
        self._streams.clear()
        for stream_id, sink in streams:
            try:
                await sink.close()
            except Exception:
                logger.exception("Failed to close stream %s", stream_id)

        tasks = [t for t in self._tasks if not t.done()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("Stream registry shut down (%d streams, %d tasks)", len(streams), len(tasks))
