"""API tests through FastAPI's TestClient with in-memory dependencies."""

from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from helpdesk.adapters.streaming.stream_registry import StreamRegistry
from helpdesk.application.ports.event_sink import EventSink
from helpdesk.application.ports.llm_port import LLMPort, LLMReply
from helpdesk.application.use_cases.process_ticket import ProcessTicketUseCase
from helpdesk.domain.entities.customer import Customer
from helpdesk.domain.entities.ticket import Ticket
from helpdesk.domain.value_objects.enums import TicketStatus
from helpdesk.infrastructure.api.dependencies import (
    get_customer_repo,
    get_message_repo,
    get_process_ticket_uc,
    get_session,
    get_stream_registry,
    get_ticket_repo,
)
from helpdesk.main import create_app
from tests.fakes import FakeCustomerRepo, FakeMessageRepo, FakeSession, FakeTicketRepo

# ─── Fakes ──────────────────────────────────────────────────────────


class EchoLLM(LLMPort):
    def __init__(self, fail: bool = False):
        self.fail = fail

    async def invoke(self, prompt):
        if self.fail:
            raise RuntimeError("upstream 503")
        return LLMReply(content="ok", model="echo")


class CollectingSink(EventSink):
    def __init__(self):
        self.events = []

    async def send(self, event):
        self.events.append(event)

    async def close(self):
        pass


class Env:
    def __init__(self):
        self.customer = Customer(id=1, email="sarah.chen@email.com", name="Sarah Chen",
                                 company="Host - Beach House Rentals")
        self.ticket = Ticket(
            id=7,
            title="iCal sync broken",
            description="My calendar sync stopped working, getting double bookings, this is urgent",
            customer_id=1,
        )
        self.tickets = FakeTicketRepo([self.ticket])
        self.customers = FakeCustomerRepo([self.customer])
        self.messages = FakeMessageRepo()
        self.session = FakeSession()
        self.registry = StreamRegistry()
        self.llm = EchoLLM()


@pytest.fixture
def env():
    return Env()


@pytest.fixture
def client(env):
    app = create_app()

    async def session_override():
        yield env.session

    app.dependency_overrides[get_session] = session_override
    app.dependency_overrides[get_ticket_repo] = lambda: env.tickets
    app.dependency_overrides[get_customer_repo] = lambda: env.customers
    app.dependency_overrides[get_message_repo] = lambda: env.messages
    app.dependency_overrides[get_stream_registry] = lambda: env.registry
    app.dependency_overrides[get_process_ticket_uc] = lambda: ProcessTicketUseCase(llm=env.llm)
    # Not entering the client context keeps the lifespan (and the real DB) out
    return TestClient(app)


def _events(body: str) -> list[dict]:
    return [
        json.loads(chunk[len("data: "):])
        for chunk in body.split("\n\n")
        if chunk.startswith("data: ")
    ]


# ─── Tickets ────────────────────────────────────────────────────────


def test_create_ticket_classifies_and_commits(client, env):
    resp = client.post(
        "/api/tickets",
        json={"title": "Refund question", "description": "Guest wants a refund for last week's stay"},
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["ticket"]["category"] == "BILLING"
    assert body["ticket"]["status"] == "OPEN"
    assert body["routing"]["suggested_agent"] == "BILLING"
    assert body["classification"]["entities"]["dates"] == ["last week"]
    assert env.session.commits == 1
    assert any(c.email == "demo@example.com" for c in env.customers.customers.values())


def test_create_ticket_rejects_empty_title(client):
    resp = client.post("/api/tickets", json={"title": "", "description": "x"})
    assert resp.status_code == 422


def test_list_tickets_filters_by_status(client, env):
    resp = client.get("/api/tickets", params={"status": "OPEN"})
    assert resp.status_code == 200
    assert [t["id"] for t in resp.json()["tickets"]] == [7]

    resp = client.get("/api/tickets", params={"status": "RESOLVED"})
    assert resp.json()["tickets"] == []


def test_list_tickets_validates_limit(client):
    assert client.get("/api/tickets", params={"limit": 0}).status_code == 422
    assert client.get("/api/tickets", params={"limit": 101}).status_code == 422


def test_get_ticket_includes_customer_and_messages(client):
    resp = client.get("/api/tickets/7")

    assert resp.status_code == 200
    body = resp.json()
    assert body["customer"]["name"] == "Sarah Chen"
    assert body["messages"] == []


def test_get_unknown_ticket_is_404(client):
    assert client.get("/api/tickets/999").status_code == 404


def test_resolving_ticket_sets_resolved_at(client, env):
    resp = client.patch("/api/tickets/7", json={"status": "RESOLVED", "priority": "URGENT"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "RESOLVED"
    assert body["priority"] == "URGENT"
    assert body["resolved_at"] is not None
    assert env.ticket.status == TicketStatus.RESOLVED
    assert env.session.commits == 1


def test_update_rejects_unknown_status(client):
    assert client.patch("/api/tickets/7", json={"status": "DONE"}).status_code == 422


def test_analyze_endpoint_stores_nothing(client, env):
    resp = client.post("/api/tickets/analyze", json={"title": "", "description": ""})

    assert resp.status_code == 200
    body = resp.json()
    assert body["classification"]["category"] == "GENERAL"
    assert body["routing"]["suggested_agent"] == "PRODUCT"
    assert env.session.commits == 0


# ─── Messages ───────────────────────────────────────────────────────


def test_message_without_live_stream(client, env):
    resp = client.post("/api/tickets/7/messages", json={"content": "Any update?"})

    assert resp.status_code == 201
    body = resp.json()
    assert body["streamed"] is False
    assert body["message"]["author"] == "Customer"
    assert body["message"]["customer_id"] == 1
    assert len(env.messages.messages) == 1


def test_message_is_published_to_live_stream(client, env):
    sink = CollectingSink()
    env.registry.register("7", sink)

    resp = client.post(
        "/api/tickets/7/messages",
        json={"content": "Checking the iCal feed now", "agent_type": "TECHNICAL", "is_internal": True},
    )

    assert resp.json()["streamed"] is True
    assert len(sink.events) == 1
    event = sink.events[0]
    assert event.type.value == "communication"
    assert event.agent == "Technical Support Agent"
    assert event.data["content"] == "Checking the iCal feed now"
    assert event.data["is_internal"] is True


def test_list_messages(client):
    client.post("/api/tickets/7/messages", json={"content": "first"})
    client.post("/api/tickets/7/messages", json={"content": "second"})

    resp = client.get("/api/tickets/7/messages")
    assert [m["content"] for m in resp.json()["messages"]] == ["first", "second"]


# ─── Processing stream ──────────────────────────────────────────────


def test_process_stream_emits_full_sequence(client, env):
    resp = client.get("/api/tickets/7/process")

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/event-stream")
    assert resp.headers["cache-control"] == "no-cache"

    events = _events(resp.text)
    assert [e["type"] for e in events] == [
        "start",
        "status", "insight",
        "status", "communication",
        "status", "agent_activity",
        "status", "insight",
        "complete",
    ]
    assert events[-1]["data"]["category"] == "TECHNICAL"

    # Classification was persisted before streaming
    assert env.tickets.updates == 1
    assert env.session.commits == 1
    assert env.ticket.priority.value == "HIGH"
    assert "7" not in env.registry


def test_process_stream_reports_llm_failure(client, env):
    env.llm.fail = True

    events = _events(client.get("/api/tickets/7/process").text)

    assert [e["type"] for e in events] == ["start", "status", "error"]
    assert events[-1]["data"]["message"] == "AI agent failed to respond"


def test_process_unknown_ticket_is_404(client, env):
    assert client.get("/api/tickets/999/process").status_code == 404
    assert env.session.commits == 0


# ─── Health ─────────────────────────────────────────────────────────


def test_health_reports_degraded_database(client):
    resp = client.get("/api/health")

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "degraded"
    assert body["database"].startswith("error")
