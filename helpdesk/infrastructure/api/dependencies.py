"""FastAPI dependency injection — wires adapters into use cases.

Long-lived objects (Database, LLM client, StreamRegistry) are created in the
lifespan and read from ``app.state``; tests override these functions.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.adapters.persistence.repositories import (
    SqlCustomerRepository,
    SqlMessageRepository,
    SqlTicketRepository,
)
from helpdesk.adapters.streaming.stream_registry import StreamRegistry
from helpdesk.application.ports.customer_repo import CustomerRepository
from helpdesk.application.ports.llm_port import LLMPort
from helpdesk.application.ports.message_repo import MessageRepository
from helpdesk.application.ports.ticket_repo import TicketRepository
from helpdesk.application.use_cases.analyze_ticket import AnalyzeTicketUseCase
from helpdesk.application.use_cases.create_ticket import CreateTicketUseCase
from helpdesk.application.use_cases.process_ticket import ProcessTicketUseCase
from helpdesk.config import settings


async def get_session(request: Request) -> AsyncIterator[AsyncSession]:
    async with request.app.state.db.session() as session:
        yield session


def get_stream_registry(request: Request) -> StreamRegistry:
    return request.app.state.streams


def get_llm(request: Request) -> LLMPort:
    return request.app.state.llm


def get_ticket_repo(session: AsyncSession = Depends(get_session)) -> TicketRepository:
    return SqlTicketRepository(session)


def get_customer_repo(session: AsyncSession = Depends(get_session)) -> CustomerRepository:
    return SqlCustomerRepository(session)


def get_message_repo(session: AsyncSession = Depends(get_session)) -> MessageRepository:
    return SqlMessageRepository(session)


def get_analyze_ticket_uc(
    tickets: TicketRepository = Depends(get_ticket_repo),
) -> AnalyzeTicketUseCase:
    return AnalyzeTicketUseCase(ticket_repo=tickets)


def get_create_ticket_uc(
    customers: CustomerRepository = Depends(get_customer_repo),
    tickets: TicketRepository = Depends(get_ticket_repo),
    messages: MessageRepository = Depends(get_message_repo),
) -> CreateTicketUseCase:
    return CreateTicketUseCase(
        customer_repo=customers, ticket_repo=tickets, message_repo=messages
    )


def get_process_ticket_uc(llm: LLMPort = Depends(get_llm)) -> ProcessTicketUseCase:
    return ProcessTicketUseCase(
        llm=llm,
        llm_timeout=settings.llm_timeout_seconds,
        stage_delay=settings.stage_delay_seconds,
        debug=settings.debug,
    )
