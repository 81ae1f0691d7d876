"""Message entity — one entry in a ticket conversation."""

from dataclasses import dataclass
from datetime import datetime

from helpdesk.domain.value_objects.enums import AgentType


@dataclass
class Message:
    id: int | None
    ticket_id: int
    content: str
    customer_id: int | None = None
    agent_type: AgentType | None = None
    is_internal: bool = False
    created_at: datetime | None = None

    @property
    def author(self) -> str:
        if self.customer_id is not None:
            return "Customer"
        if self.agent_type is not None:
            return self.agent_type.value
        return "Agent"
