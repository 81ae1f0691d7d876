"""Analytics endpoints — dashboard summary + agent workload."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.adapters.persistence.models import TicketModel
from helpdesk.domain.entities.ticket import CLOSED_STATUSES
from helpdesk.domain.policies.routing import AGENT_PROFILES
from helpdesk.infrastructure.api.dependencies import get_session

router = APIRouter(prefix="/analytics", tags=["analytics"])


async def _count_by(session: AsyncSession, column) -> dict[str, int]:
    rows = (
        await session.execute(select(column, func.count(TicketModel.id)).group_by(column))
    ).all()
    return {row[0]: row[1] for row in rows if row[0] is not None}


@router.get("/summary")
async def analytics_summary(session: AsyncSession = Depends(get_session)):
    """Aggregate stats for the dashboard."""
    total_tickets = (
        await session.execute(select(func.count(TicketModel.id)))
    ).scalar() or 0

    closed = [s.value for s in CLOSED_STATUSES]
    open_tickets = (
        await session.execute(
            select(func.count(TicketModel.id)).where(TicketModel.status.not_in(closed))
        )
    ).scalar() or 0

    # Only tickets that went through the analyzer carry these
    averages = (
        await session.execute(
            select(func.avg(TicketModel.sentiment), func.avg(TicketModel.confidence))
        )
    ).one()

    return {
        "total_tickets": total_tickets,
        "open_tickets": open_tickets,
        "by_status": await _count_by(session, TicketModel.status),
        "by_category": await _count_by(session, TicketModel.category),
        "by_priority": await _count_by(session, TicketModel.priority),
        "avg_sentiment": round(float(averages[0]), 3) if averages[0] is not None else None,
        "avg_confidence": round(float(averages[1]), 3) if averages[1] is not None else None,
    }


@router.get("/agents")
async def agent_load(session: AsyncSession = Depends(get_session)):
    """Agent directory with the number of tickets routed to each agent."""
    assigned = await _count_by(session, TicketModel.assigned_agent)
    return {
        "total_agents": len(AGENT_PROFILES),
        "agents": [
            {
                "type": agent.value,
                "name": profile.name,
                "role": profile.role,
                "description": profile.description,
                "assigned_tickets": assigned.get(agent.value, 0),
            }
            for agent, profile in AGENT_PROFILES.items()
        ],
    }
