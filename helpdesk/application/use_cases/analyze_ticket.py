"""AnalyzeTicketUseCase — classify a stored ticket and write the result back."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from helpdesk.application.ports.ticket_repo import TicketRepository
from helpdesk.domain.entities.classification import ClassificationResult
from helpdesk.domain.entities.ticket import Ticket
from helpdesk.domain.policies.routing import RoutingDecision, decide_routing
from helpdesk.domain.policies.text_analysis import analyze

logger = logging.getLogger(__name__)


@dataclass
class AnalyzedTicket:
    ticket: Ticket
    classification: ClassificationResult
    routing: RoutingDecision


def classify_ticket(ticket: Ticket) -> AnalyzedTicket:
    """Run the analyzer on *ticket* and copy the lasting fields onto it."""
    classification = analyze(ticket.title, ticket.description)
    routing = decide_routing(classification)
    ticket.apply_classification(classification, routing.priority, routing.agent)
    return AnalyzedTicket(ticket=ticket, classification=classification, routing=routing)


class AnalyzeTicketUseCase:
    """Classifies a ticket and persists category, priority, sentiment and confidence."""

    def __init__(self, ticket_repo: TicketRepository):
        self._tickets = ticket_repo

    async def execute(self, ticket_id: int) -> AnalyzedTicket | None:
        """Classify the ticket with *ticket_id*.

        Returns:
            AnalyzedTicket, or None if the ticket does not exist.
        """
        ticket = await self._tickets.get_by_id(ticket_id)
        if ticket is None:
            return None

        result = classify_ticket(ticket)
        await self._tickets.update(ticket)

        logger.info(
            "Ticket %d: category=%s, confidence=%.2f, sentiment=%.2f, priority=%s",
            ticket.id, ticket.category.value, ticket.confidence,
            ticket.sentiment, ticket.priority.value,
        )
        return result
