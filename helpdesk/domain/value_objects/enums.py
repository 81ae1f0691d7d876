"""Domain enums — pure Python, no external dependencies."""

from enum import Enum


class TicketCategory(str, Enum):
    # Declaration order is the tie-break order for category selection.
    TECHNICAL = "TECHNICAL"
    BILLING = "BILLING"
    PRODUCT = "PRODUCT"
    GENERAL = "GENERAL"
    COMPLAINT = "COMPLAINT"


class TicketStatus(str, Enum):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    WAITING_CUSTOMER = "WAITING_CUSTOMER"
    ESCALATED = "ESCALATED"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"


class TicketPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class AgentType(str, Enum):
    ROUTER = "ROUTER"
    KNOWLEDGE_BASE = "KNOWLEDGE_BASE"
    TECHNICAL = "TECHNICAL"
    BILLING = "BILLING"
    PRODUCT = "PRODUCT"
    ESCALATION = "ESCALATION"
    QA = "QA"


class EventType(str, Enum):
    START = "start"
    STATUS = "status"
    AGENT_ACTIVITY = "agent_activity"
    INSIGHT = "insight"
    COMMUNICATION = "communication"
    COMPLETE = "complete"
    ERROR = "error"


class StageName(str, Enum):
    START = "start"
    ROUTER_ANALYSIS = "router-analysis"
    KNOWLEDGE_SEARCH = "knowledge-search"
    SPECIALIST_SOLUTION = "specialist-solution"
    QA_REVIEW = "qa-review"
    COMPLETE = "complete"
    ERROR = "error"
