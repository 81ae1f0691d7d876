"""Tests for AnalyzeTicketUseCase."""

import pytest

from helpdesk.application.use_cases.analyze_ticket import AnalyzeTicketUseCase, classify_ticket
from helpdesk.domain.value_objects.enums import AgentType, TicketCategory, TicketPriority
from tests.fakes import FakeTicketRepo


def test_classify_ticket_copies_result_onto_ticket(calendar_ticket):
    analyzed = classify_ticket(calendar_ticket)

    assert analyzed.ticket is calendar_ticket
    assert calendar_ticket.category == TicketCategory.TECHNICAL
    assert calendar_ticket.priority == TicketPriority.HIGH
    assert calendar_ticket.assigned_agent == AgentType.TECHNICAL
    assert calendar_ticket.sentiment == analyzed.classification.sentiment
    assert calendar_ticket.confidence == analyzed.routing.confidence


@pytest.mark.asyncio
async def test_execute_persists_classification(calendar_ticket):
    repo = FakeTicketRepo([calendar_ticket])
    uc = AnalyzeTicketUseCase(ticket_repo=repo)

    analyzed = await uc.execute(calendar_ticket.id)

    assert analyzed is not None
    assert repo.updates == 1
    stored = repo.tickets[calendar_ticket.id]
    assert stored.category == TicketCategory.TECHNICAL
    assert stored.priority == TicketPriority.HIGH


@pytest.mark.asyncio
async def test_execute_unknown_ticket_returns_none():
    repo = FakeTicketRepo()
    assert await AnalyzeTicketUseCase(ticket_repo=repo).execute(999) is None
    assert repo.updates == 0
