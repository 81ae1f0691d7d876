"""Pytest configuration and shared fixtures."""

import pytest

from helpdesk.domain.entities.ticket import Ticket


@pytest.fixture
def calendar_ticket_text():
    return (
        "iCal sync broken",
        "My calendar sync stopped working, getting double bookings, this is urgent",
    )


@pytest.fixture
def refund_ticket_text():
    return ("Refund question", "Guest wants a refund for last week's stay")


@pytest.fixture
def calendar_ticket(calendar_ticket_text):
    title, description = calendar_ticket_text
    return Ticket(id=7, title=title, description=description, customer_id=1)
