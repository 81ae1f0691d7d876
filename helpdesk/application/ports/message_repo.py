"""Port interface for ticket conversation messages."""

from abc import ABC, abstractmethod

from helpdesk.domain.entities.message import Message


class MessageRepository(ABC):
    @abstractmethod
    async def save(self, message: Message) -> Message:
        ...

    @abstractmethod
    async def get_by_ticket(self, ticket_id: int) -> list[Message]:
        """Oldest first."""
        ...
