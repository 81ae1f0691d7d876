"""Seed the database with demo vacation-rental customers and tickets.

Usage:
    python -m helpdesk.tools.seed_db
    python -m helpdesk.tools.seed_db --drop  # drop existing data first
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from datetime import datetime, timezone

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from helpdesk.adapters.persistence.database import Database
from helpdesk.adapters.persistence.models import CustomerModel, MessageModel, TicketModel
from helpdesk.config import settings
from helpdesk.domain.value_objects.enums import AgentType

logging.basicConfig(level=logging.INFO, format="%(levelname)s | %(name)s | %(message)s")
logger = logging.getLogger(__name__)

DEMO_CUSTOMERS: list[dict] = [
    {"email": "demo@example.com", "name": "Demo User", "company": "Guest"},
    {"email": "sarah.chen@email.com", "name": "Sarah Chen", "company": "Host - Beach House Rentals"},
    {"email": "mike.johnson@email.com", "name": "Mike Johnson", "company": "Guest"},
    {"email": "emily.davis@email.com", "name": "Emily Davis", "company": "Host - Mountain Retreats"},
    {"email": "alex.kumar@email.com", "name": "Alex Kumar", "company": "Guest"},
]

DEMO_TICKETS: list[dict] = [
    {
        "customer": "sarah.chen@email.com",
        "title": "Calendar Sync Not Working with Airbnb",
        "description": (
            "I've been trying to sync my calendar with Airbnb for the past 2 days but it "
            "keeps failing. I'm getting double bookings because of this. I followed the iCal "
            'instructions but the sync shows "last updated 3 days ago". This is urgent as I '
            "have guests checking in tomorrow!"
        ),
        "status": "OPEN",
        "priority": "HIGH",
        "category": "TECHNICAL",
        "sentiment": -0.4,
        "tags": ["calendar-sync", "integration", "urgent"],
    },
    {
        "customer": "mike.johnson@email.com",
        "title": "Guest Demanding Full Refund - Claimed Misleading Photos",
        "description": (
            "A guest who stayed last week is demanding a full refund claiming my photos were "
            "misleading. They stayed the entire 5 nights and are now threatening to post on "
            "social media. My cancellation policy is Strict and they cancelled after check-in. "
            "What are my options?"
        ),
        "status": "IN_PROGRESS",
        "priority": "URGENT",
        "category": "BILLING",
        "sentiment": -0.8,
        "assigned_agent": AgentType.BILLING.value,
        "tags": ["refund-dispute", "guest-complaint", "escalation"],
        "reply": (
            "I understand your frustration with this refund request. Since the guest stayed "
            "for the entire reservation and your cancellation policy is Strict, you are within "
            "your rights to deny the refund. However, let's explore some options to resolve "
            "this amicably and protect your reputation..."
        ),
    },
    {
        "customer": "emily.davis@email.com",
        "title": "How to Set Up Smart Pricing?",
        "description": (
            "I'm new to hosting and want to optimize my pricing. I heard about Smart Pricing "
            "but can't figure out how to enable it. Also, should I set different prices for "
            "weekends? My property is near the beach and I want to maximize summer bookings."
        ),
        "status": "OPEN",
        "priority": "MEDIUM",
        "category": "PRODUCT",
        "sentiment": 0.2,
        "tags": ["pricing", "new-host", "smart-pricing"],
    },
    {
        "customer": "sarah.chen@email.com",
        "title": "Payout Missing for Last 3 Bookings",
        "description": (
            "I haven't received payouts for my last 3 bookings totaling $2,400. The dashboard "
            'shows "paid" but nothing in my bank account. I\'ve checked with my bank and they '
            "confirm no pending deposits. This is affecting my mortgage payment. Please help "
            "urgently!"
        ),
        "status": "RESOLVED",
        "priority": "URGENT",
        "category": "BILLING",
        "sentiment": -0.6,
        "tags": ["payout-missing", "financial-urgent", "host-payment"],
    },
    {
        "customer": "emily.davis@email.com",
        "title": "App Crashes When Uploading Photos",
        "description": (
            "Every time I try to upload photos for my new listing, the app crashes. I've tried "
            "both iPhone and iPad. Already reinstalled the app twice. I need to get my listing "
            "live before the weekend. Can I upload photos another way?"
        ),
        "status": "OPEN",
        "priority": "HIGH",
        "category": "TECHNICAL",
        "sentiment": -0.3,
        "tags": ["app-bug", "photo-upload", "listing-creation"],
    },
]


async def _drop_data(session: AsyncSession) -> None:
    """Delete all data in FK order."""
    for model in [MessageModel, TicketModel, CustomerModel]:
        await session.execute(delete(model))
    await session.flush()
    logger.info("Existing data dropped")


async def _seed_customers(session: AsyncSession) -> dict[str, int]:
    """Insert demo customers whose email is not taken yet; return email → id."""
    existing = {
        m.email: m.id for m in (await session.execute(select(CustomerModel))).scalars()
    }
    created = 0
    for row in DEMO_CUSTOMERS:
        if row["email"] in existing:
            continue
        m = CustomerModel(**row)
        session.add(m)
        await session.flush()
        existing[m.email] = m.id
        created += 1
    logger.info("Customers: %d created, %d already present", created, len(existing) - created)
    return existing


async def _seed_tickets(session: AsyncSession, customer_ids: dict[str, int]) -> int:
    ticket_count = (await session.execute(select(func.count(TicketModel.id)))).scalar() or 0
    if ticket_count:
        logger.info("Tickets table not empty (%d rows), skipping demo tickets", ticket_count)
        return 0

    now = datetime.now(timezone.utc).replace(tzinfo=None)
    for row in DEMO_TICKETS:
        customer_id = customer_ids[row["customer"]]
        ticket = TicketModel(
            title=row["title"],
            description=row["description"],
            status=row["status"],
            priority=row["priority"],
            category=row["category"],
            sentiment=row["sentiment"],
            assigned_agent=row.get("assigned_agent"),
            tags=row["tags"],
            customer_id=customer_id,
            resolved_at=now if row["status"] == "RESOLVED" else None,
        )
        session.add(ticket)
        await session.flush()

        session.add(
            MessageModel(ticket_id=ticket.id, content=row["description"], customer_id=customer_id)
        )
        if row.get("reply"):
            session.add(
                MessageModel(
                    ticket_id=ticket.id,
                    content=row["reply"],
                    agent_type=row["assigned_agent"],
                )
            )
    await session.flush()
    logger.info("Tickets: %d created", len(DEMO_TICKETS))
    return len(DEMO_TICKETS)


async def seed(drop: bool = False, database_url: str | None = None) -> dict[str, int]:
    """Seed demo data. Returns counts of created rows."""
    db = Database(database_url or settings.database_url)
    try:
        async with db.session() as session:
            if drop:
                await _drop_data(session)
            customer_ids = await _seed_customers(session)
            tickets = await _seed_tickets(session, customer_ids)
            await session.commit()
    finally:
        await db.dispose()
    return {"customers": len(customer_ids), "tickets": tickets}


def main():
    parser = argparse.ArgumentParser(description="Seed the helpdesk database with demo data")
    parser.add_argument(
        "--drop", action="store_true",
        help="Drop existing data before seeding",
    )
    args = parser.parse_args()

    counts = asyncio.run(seed(drop=args.drop))
    logger.info("Seed complete: %s", counts)


if __name__ == "__main__":
    main()
