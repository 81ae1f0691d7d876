"""SQLAlchemy repository implementations."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.adapters.persistence.models import CustomerModel, MessageModel, TicketModel
from helpdesk.application.ports.customer_repo import CustomerRepository
from helpdesk.application.ports.message_repo import MessageRepository
from helpdesk.application.ports.ticket_repo import TicketRepository
from helpdesk.domain.entities.customer import Customer
from helpdesk.domain.entities.message import Message
from helpdesk.domain.entities.ticket import Ticket
from helpdesk.domain.value_objects.enums import (
    AgentType,
    TicketCategory,
    TicketPriority,
    TicketStatus,
)


# ─── Mappers ─────────────────────────────────────────────────────────


def _customer_to_domain(m: CustomerModel) -> Customer:
    return Customer(id=m.id, email=m.email, name=m.name, company=m.company)


def _ticket_to_domain(m: TicketModel) -> Ticket:
    return Ticket(
        id=m.id,
        title=m.title,
        description=m.description,
        customer_id=m.customer_id,
        status=TicketStatus(m.status),
        priority=TicketPriority(m.priority),
        category=TicketCategory(m.category),
        sentiment=m.sentiment,
        confidence=m.confidence,
        assigned_agent=AgentType(m.assigned_agent) if m.assigned_agent else None,
        tags=list(m.tags) if m.tags else [],
        created_at=m.created_at,
        resolved_at=m.resolved_at,
    )


def _message_to_domain(m: MessageModel) -> Message:
    return Message(
        id=m.id,
        ticket_id=m.ticket_id,
        content=m.content,
        customer_id=m.customer_id,
        agent_type=AgentType(m.agent_type) if m.agent_type else None,
        is_internal=m.is_internal,
        created_at=m.created_at,
    )


def _copy_ticket_fields(ticket: Ticket, m: TicketModel) -> None:
    m.title = ticket.title
    m.description = ticket.description
    m.customer_id = ticket.customer_id
    m.status = ticket.status.value
    m.priority = ticket.priority.value
    m.category = ticket.category.value
    m.sentiment = ticket.sentiment
    m.confidence = ticket.confidence
    m.assigned_agent = ticket.assigned_agent.value if ticket.assigned_agent else None
    m.tags = list(ticket.tags)
    m.resolved_at = ticket.resolved_at


# ─── Repositories ────────────────────────────────────────────────────


class SqlCustomerRepository(CustomerRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def save(self, customer: Customer) -> Customer:
        m = CustomerModel(email=customer.email, name=customer.name, company=customer.company)
        self._s.add(m)
        await self._s.flush()
        customer.id = m.id
        return customer

    async def get_by_id(self, customer_id: int) -> Customer | None:
        m = await self._s.get(CustomerModel, customer_id)
        return _customer_to_domain(m) if m else None

    async def get_by_email(self, email: str) -> Customer | None:
        result = await self._s.execute(
            select(CustomerModel).where(CustomerModel.email == email.lower())
        )
        m = result.scalar_one_or_none()
        return _customer_to_domain(m) if m else None


class SqlTicketRepository(TicketRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def save(self, ticket: Ticket) -> Ticket:
        m = TicketModel()
        _copy_ticket_fields(ticket, m)
        self._s.add(m)
        await self._s.flush()
        await self._s.refresh(m)
        ticket.id = m.id
        ticket.created_at = m.created_at
        return ticket

    async def get_by_id(self, ticket_id: int) -> Ticket | None:
        m = await self._s.get(TicketModel, ticket_id)
        return _ticket_to_domain(m) if m else None

    async def find(
        self,
        status: TicketStatus | None = None,
        category: TicketCategory | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[Ticket]:
        stmt = select(TicketModel)
        if status is not None:
            stmt = stmt.where(TicketModel.status == status.value)
        if category is not None:
            stmt = stmt.where(TicketModel.category == category.value)
        stmt = stmt.order_by(TicketModel.created_at.desc(), TicketModel.id.desc())
        result = await self._s.execute(stmt.offset(offset).limit(limit))
        return [_ticket_to_domain(m) for m in result.scalars()]

    async def get_by_customer(self, customer_id: int) -> list[Ticket]:
        result = await self._s.execute(
            select(TicketModel)
            .where(TicketModel.customer_id == customer_id)
            .order_by(TicketModel.created_at.desc(), TicketModel.id.desc())
        )
        return [_ticket_to_domain(m) for m in result.scalars()]

    async def update(self, ticket: Ticket) -> Ticket:
        m = await self._s.get(TicketModel, ticket.id)
        if m is None:
            raise LookupError(f"Ticket {ticket.id} not found")
        _copy_ticket_fields(ticket, m)
        await self._s.flush()
        return ticket


class SqlMessageRepository(MessageRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def save(self, message: Message) -> Message:
        m = MessageModel(
            ticket_id=message.ticket_id,
            content=message.content,
            customer_id=message.customer_id,
            agent_type=message.agent_type.value if message.agent_type else None,
            is_internal=message.is_internal,
        )
        self._s.add(m)
        await self._s.flush()
        await self._s.refresh(m)
        message.id = m.id
        message.created_at = m.created_at
        return message

    async def get_by_ticket(self, ticket_id: int) -> list[Message]:
        result = await self._s.execute(
            select(MessageModel)
            .where(MessageModel.ticket_id == ticket_id)
            .order_by(MessageModel.created_at, MessageModel.id)
        )
        return [_message_to_domain(m) for m in result.scalars()]
