"""Customer endpoints — hosts and guests with their tickets."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.adapters.persistence.models import CustomerModel, TicketModel
from helpdesk.application.ports.customer_repo import CustomerRepository
from helpdesk.application.ports.ticket_repo import TicketRepository
from helpdesk.infrastructure.api.dependencies import (
    get_customer_repo,
    get_session,
    get_ticket_repo,
)
from helpdesk.infrastructure.api.routes_tickets import serialize_customer, serialize_ticket

router = APIRouter(prefix="/customers", tags=["customers"])


@router.get("")
async def list_customers(session: AsyncSession = Depends(get_session)):
    """List customers with their ticket counts."""
    result = await session.execute(
        select(
            CustomerModel.id,
            CustomerModel.email,
            CustomerModel.name,
            CustomerModel.company,
            func.count(TicketModel.id).label("ticket_count"),
        )
        .outerjoin(TicketModel, TicketModel.customer_id == CustomerModel.id)
        .group_by(CustomerModel.id)
        .order_by(CustomerModel.id)
    )
    customers = result.all()

    return {
        "total": len(customers),
        "customers": [
            {
                "id": c.id,
                "email": c.email,
                "name": c.name,
                "company": c.company,
                "ticket_count": c.ticket_count,
            }
            for c in customers
        ],
    }


@router.get("/{customer_id}")
async def get_customer(
    customer_id: int,
    customers: CustomerRepository = Depends(get_customer_repo),
    tickets: TicketRepository = Depends(get_ticket_repo),
):
    customer = await customers.get_by_id(customer_id)
    if customer is None:
        raise HTTPException(status_code=404, detail="Customer not found")

    data = serialize_customer(customer)
    data["is_host"] = customer.is_host()
    data["tickets"] = [serialize_ticket(t) for t in await tickets.get_by_customer(customer_id)]
    return data
