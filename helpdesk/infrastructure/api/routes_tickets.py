"""Ticket endpoints — CRUD, conversation messages, ad-hoc analysis."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.adapters.streaming.stream_registry import StreamRegistry
from helpdesk.application.ports.customer_repo import CustomerRepository
from helpdesk.application.ports.message_repo import MessageRepository
from helpdesk.application.ports.ticket_repo import TicketRepository
from helpdesk.application.use_cases.create_ticket import CreateTicketUseCase
from helpdesk.domain.entities.customer import Customer
from helpdesk.domain.entities.message import Message
from helpdesk.domain.entities.progress_event import ProgressEvent
from helpdesk.domain.entities.ticket import Ticket
from helpdesk.domain.policies.routing import agent_name, decide_routing
from helpdesk.domain.policies.text_analysis import analyze
from helpdesk.domain.value_objects.enums import (
    AgentType,
    EventType,
    TicketCategory,
    TicketPriority,
    TicketStatus,
)
from helpdesk.infrastructure.api.dependencies import (
    get_create_ticket_uc,
    get_customer_repo,
    get_message_repo,
    get_session,
    get_stream_registry,
    get_ticket_repo,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tickets", tags=["tickets"])


# ── Request models ──────────────────────────────────────────────────


class CreateTicketRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    description: str = Field(..., min_length=1)
    customer_email: str | None = None
    customer_name: str | None = None
    tags: list[str] = Field(default_factory=list)


class UpdateTicketRequest(BaseModel):
    status: TicketStatus | None = None
    priority: TicketPriority | None = None
    assigned_agent: AgentType | None = None


class AddMessageRequest(BaseModel):
    content: str = Field(..., min_length=1)
    agent_type: AgentType | None = None
    is_internal: bool = False


class AnalyzeTextRequest(BaseModel):
    title: str = ""
    description: str = ""


# ── Endpoints ───────────────────────────────────────────────────────


@router.get("")
async def list_tickets(
    status: TicketStatus | None = None,
    category: TicketCategory | None = None,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    tickets: TicketRepository = Depends(get_ticket_repo),
):
    """List tickets, newest first."""
    items = await tickets.find(status=status, category=category, limit=limit, offset=offset)
    return {
        "total": len(items),
        "limit": limit,
        "offset": offset,
        "tickets": [serialize_ticket(t) for t in items],
    }


@router.post("", status_code=201)
async def create_ticket(
    body: CreateTicketRequest,
    uc: CreateTicketUseCase = Depends(get_create_ticket_uc),
    session: AsyncSession = Depends(get_session),
):
    """Open a ticket and classify it right away."""
    result = await uc.execute(
        title=body.title,
        description=body.description,
        customer_email=body.customer_email,
        customer_name=body.customer_name,
        tags=body.tags,
    )
    await session.commit()
    return {
        "ticket": serialize_ticket(result.ticket),
        "classification": result.classification.to_dict(),
        "routing": result.routing.to_dict(),
    }


@router.post("/analyze")
async def analyze_text(body: AnalyzeTextRequest):
    """Classify raw text without storing anything."""
    result = analyze(body.title, body.description)
    return {
        "classification": result.to_dict(),
        "confidence": result.confidence,
        "routing": decide_routing(result).to_dict(),
    }


@router.get("/{ticket_id}")
async def get_ticket(
    ticket_id: int,
    tickets: TicketRepository = Depends(get_ticket_repo),
    customers: CustomerRepository = Depends(get_customer_repo),
    messages: MessageRepository = Depends(get_message_repo),
):
    """Get a single ticket with its customer and conversation."""
    ticket = await _require_ticket(tickets, ticket_id)
    customer = await customers.get_by_id(ticket.customer_id)
    conversation = await messages.get_by_ticket(ticket_id)

    data = serialize_ticket(ticket)
    data["customer"] = serialize_customer(customer) if customer else None
    data["messages"] = [serialize_message(m) for m in conversation]
    return data


@router.patch("/{ticket_id}")
async def update_ticket(
    ticket_id: int,
    body: UpdateTicketRequest,
    tickets: TicketRepository = Depends(get_ticket_repo),
    session: AsyncSession = Depends(get_session),
):
    """Change status, priority or the assigned agent."""
    ticket = await _require_ticket(tickets, ticket_id)

    if body.status is not None:
        ticket.change_status(body.status, _utc_now())
    if body.priority is not None:
        ticket.priority = body.priority
    if body.assigned_agent is not None:
        ticket.assigned_agent = body.assigned_agent

    await tickets.update(ticket)
    await session.commit()
    logger.info("Ticket %d updated: status=%s, priority=%s",
                ticket_id, ticket.status.value, ticket.priority.value)
    return serialize_ticket(ticket)


@router.get("/{ticket_id}/messages")
async def list_messages(
    ticket_id: int,
    tickets: TicketRepository = Depends(get_ticket_repo),
    messages: MessageRepository = Depends(get_message_repo),
):
    await _require_ticket(tickets, ticket_id)
    conversation = await messages.get_by_ticket(ticket_id)
    return {"total": len(conversation), "messages": [serialize_message(m) for m in conversation]}


@router.post("/{ticket_id}/messages", status_code=201)
async def add_message(
    ticket_id: int,
    body: AddMessageRequest,
    tickets: TicketRepository = Depends(get_ticket_repo),
    messages: MessageRepository = Depends(get_message_repo),
    registry: StreamRegistry = Depends(get_stream_registry),
    session: AsyncSession = Depends(get_session),
):
    """Append to the conversation; a live processing stream gets notified."""
    ticket = await _require_ticket(tickets, ticket_id)

    message = Message(
        id=None,
        ticket_id=ticket_id,
        content=body.content,
        customer_id=None if body.agent_type else ticket.customer_id,
        agent_type=body.agent_type,
        is_internal=body.is_internal,
    )
    await messages.save(message)
    await session.commit()

    delivered = await registry.publish(
        str(ticket_id),
        ProgressEvent(
            type=EventType.COMMUNICATION,
            data={
                "message": "New message on ticket",
                "message_id": message.id,
                "author": message.author,
                "content": message.content,
                "is_internal": message.is_internal,
            },
            agent=agent_name(message.agent_type) if message.agent_type else None,
        ),
    )
    if delivered:
        logger.debug("Ticket %d: message %s forwarded to live stream", ticket_id, message.id)

    return {"message": serialize_message(message), "streamed": delivered}


# ── Helpers ─────────────────────────────────────────────────────────


async def _require_ticket(tickets: TicketRepository, ticket_id: int) -> Ticket:
    ticket = await tickets.get_by_id(ticket_id)
    if ticket is None:
        raise HTTPException(status_code=404, detail="Ticket not found")
    return ticket


def _utc_now() -> datetime:
    # Columns are timezone-naive UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def serialize_ticket(t: Ticket) -> dict:
    """Convert a Ticket to an API response dict."""
    return {
        "id": t.id,
        "title": t.title,
        "description": t.description,
        "customer_id": t.customer_id,
        "status": t.status.value,
        "priority": t.priority.value,
        "category": t.category.value,
        "sentiment": t.sentiment,
        "confidence": t.confidence,
        "assigned_agent": t.assigned_agent.value if t.assigned_agent else None,
        "assigned_agent_name": agent_name(t.assigned_agent) if t.assigned_agent else None,
        "tags": list(t.tags),
        "created_at": _iso(t.created_at),
        "resolved_at": _iso(t.resolved_at),
    }


def serialize_customer(c: Customer) -> dict:
    return {"id": c.id, "email": c.email, "name": c.name, "company": c.company}


def serialize_message(m: Message) -> dict:
    return {
        "id": m.id,
        "ticket_id": m.ticket_id,
        "content": m.content,
        "author": m.author,
        "customer_id": m.customer_id,
        "agent_type": m.agent_type.value if m.agent_type else None,
        "is_internal": m.is_internal,
        "created_at": _iso(m.created_at),
    }
