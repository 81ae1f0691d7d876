"""Port interface for delivering progress events to one subscriber."""

from abc import ABC, abstractmethod

from helpdesk.domain.entities.progress_event import ProgressEvent


class EventSink(ABC):
    @abstractmethod
    async def send(self, event: ProgressEvent) -> None:
        """Deliver one event.

        Raises:
            TransportError: the subscriber is gone; further sends will fail too.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Signal end of stream. Idempotent."""
        ...
