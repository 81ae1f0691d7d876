"""Port interface for ticket persistence."""

from abc import ABC, abstractmethod

from helpdesk.domain.entities.ticket import Ticket
from helpdesk.domain.value_objects.enums import TicketCategory, TicketStatus


class TicketRepository(ABC):
    @abstractmethod
    async def save(self, ticket: Ticket) -> Ticket:
        ...

    @abstractmethod
    async def get_by_id(self, ticket_id: int) -> Ticket | None:
        ...

    @abstractmethod
    async def find(
        self,
        status: TicketStatus | None = None,
        category: TicketCategory | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[Ticket]:
        """Newest first."""
        ...

    @abstractmethod
    async def get_by_customer(self, customer_id: int) -> list[Ticket]:
        ...

    @abstractmethod
    async def update(self, ticket: Ticket) -> Ticket:
        ...
