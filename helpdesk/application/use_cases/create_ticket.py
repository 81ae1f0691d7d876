"""CreateTicketUseCase — open a ticket for a (possibly new) customer."""

from __future__ import annotations

import logging

from helpdesk.application.ports.customer_repo import CustomerRepository
from helpdesk.application.ports.message_repo import MessageRepository
from helpdesk.application.ports.ticket_repo import TicketRepository
from helpdesk.application.use_cases.analyze_ticket import AnalyzedTicket, classify_ticket
from helpdesk.domain.entities.customer import Customer
from helpdesk.domain.entities.message import Message
from helpdesk.domain.entities.ticket import Ticket

logger = logging.getLogger(__name__)

DEFAULT_CUSTOMER_EMAIL = "demo@example.com"
DEFAULT_CUSTOMER_NAME = "Demo User"
DEFAULT_CUSTOMER_COMPANY = "Guest"


class CreateTicketUseCase:
    def __init__(
        self,
        customer_repo: CustomerRepository,
        ticket_repo: TicketRepository,
        message_repo: MessageRepository,
    ):
        self._customers = customer_repo
        self._tickets = ticket_repo
        self._messages = message_repo

    async def execute(
        self,
        title: str,
        description: str,
        customer_email: str | None = None,
        customer_name: str | None = None,
        tags: list[str] | None = None,
    ) -> AnalyzedTicket:
        """Create the ticket, its opening message, and classify it right away."""
        customer = await self._find_or_create_customer(customer_email, customer_name)

        ticket = Ticket(
            id=None,
            title=title,
            description=description,
            customer_id=customer.id,
            tags=list(tags or []),
        )
        result = classify_ticket(ticket)
        await self._tickets.save(ticket)

        await self._messages.save(
            Message(id=None, ticket_id=ticket.id, content=description, customer_id=customer.id)
        )

        logger.info(
            "Ticket %d created for %s → %s (%s)",
            ticket.id, customer.email, result.routing.agent.value, ticket.category.value,
        )
        return result

    async def _find_or_create_customer(
        self, email: str | None, name: str | None
    ) -> Customer:
        email = (email or "").strip().lower() or DEFAULT_CUSTOMER_EMAIL
        customer = await self._customers.get_by_email(email)
        if customer is not None:
            return customer

        customer = Customer(
            id=None,
            email=email,
            name=name or DEFAULT_CUSTOMER_NAME,
            company=DEFAULT_CUSTOMER_COMPANY,
        )
        return await self._customers.save(customer)
