"""Ticket entity — a support request raised by a host or guest."""

from dataclasses import dataclass, field
from datetime import datetime

from helpdesk.domain.entities.classification import ClassificationResult
from helpdesk.domain.value_objects.enums import (
    AgentType,
    TicketCategory,
    TicketPriority,
    TicketStatus,
)

CLOSED_STATUSES = (TicketStatus.RESOLVED, TicketStatus.CLOSED)


@dataclass
class Ticket:
    id: int | None
    title: str
    description: str
    customer_id: int
    status: TicketStatus = TicketStatus.OPEN
    priority: TicketPriority = TicketPriority.MEDIUM
    category: TicketCategory = TicketCategory.GENERAL
    sentiment: float | None = None
    confidence: float | None = None
    assigned_agent: AgentType | None = None
    tags: list[str] = field(default_factory=list)
    created_at: datetime | None = None
    resolved_at: datetime | None = None

    def apply_classification(
        self,
        result: ClassificationResult,
        priority: TicketPriority,
        agent: AgentType,
    ) -> None:
        """Copy the fields of a classification that outlive the request."""
        self.category = result.category
        self.sentiment = result.sentiment
        self.confidence = result.confidence
        self.priority = priority
        self.assigned_agent = agent

    def change_status(self, status: TicketStatus, now: datetime) -> None:
        self.status = status
        if status == TicketStatus.RESOLVED:
            self.resolved_at = now

    def is_open(self) -> bool:
        return self.status not in CLOSED_STATUSES
