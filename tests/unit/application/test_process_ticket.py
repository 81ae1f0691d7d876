"""Tests for ProcessTicketUseCase with in-memory fakes."""

from __future__ import annotations

import asyncio

import pytest

from helpdesk.application.errors import SubscriberGoneError
from helpdesk.application.ports.event_sink import EventSink
from helpdesk.application.ports.llm_port import LLMPort, LLMReply
from helpdesk.application.use_cases.process_ticket import (
    COLLABORATOR_FAILURE_MESSAGE,
    INTERNAL_FAILURE_MESSAGE,
    STAGES,
    OutcomeStatus,
    ProcessTicketUseCase,
)
from helpdesk.domain.policies.text_analysis import analyze
from helpdesk.domain.value_objects.enums import EventType, StageName

# ─── In-memory fakes ────────────────────────────────────────────────


class FakeLLM(LLMPort):
    """Answers every call; optionally raises on the N-th call (1-based)."""

    def __init__(self, fail_on_call: int | None = None, error: Exception | None = None):
        self.calls: list = []
        self._fail_on = fail_on_call
        self._error = error or RuntimeError("model overloaded")

    async def invoke(self, prompt):
        self.calls.append(prompt)
        if self._fail_on is not None and len(self.calls) == self._fail_on:
            raise self._error
        return LLMReply(content=f"reply {len(self.calls)}", model="fake")


class SlowLLM(LLMPort):
    async def invoke(self, prompt):
        await asyncio.sleep(5)
        return LLMReply(content="too late")


class BrokenReplyLLM(LLMPort):
    """Returns something that is not an LLMReply."""

    async def invoke(self, prompt):
        return None


class RecordingSink(EventSink):
    """Keeps delivered events; raises SubscriberGoneError after *accept* events."""

    def __init__(self, accept: int | None = None):
        self.events = []
        self.attempts = 0
        self.closed = False
        self.close_calls = 0
        self._accept = accept

    async def send(self, event):
        self.attempts += 1
        if self._accept is not None and len(self.events) >= self._accept:
            raise SubscriberGoneError("client went away")
        self.events.append(event)

    async def close(self):
        self.close_calls += 1
        self.closed = True

    @property
    def types(self) -> list[str]:
        return [e.type.value for e in self.events]

    @property
    def phases(self) -> list[str | None]:
        return [e.phase for e in self.events]


async def _run(ticket, llm, sink, **kwargs):
    uc = ProcessTicketUseCase(llm=llm, **kwargs)
    analysis = analyze(ticket.title, ticket.description)
    return await uc.run(ticket, analysis, sink)


# ─── Tests ──────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_successful_run_walks_every_stage(calendar_ticket):
    llm = FakeLLM()
    sink = RecordingSink()

    outcome = await _run(calendar_ticket, llm, sink)

    assert outcome.status == OutcomeStatus.COMPLETE
    assert outcome.succeeded
    assert sink.types == [
        "start",
        "status", "insight",
        "status", "communication",
        "status", "agent_activity",
        "status", "insight",
        "complete",
    ]
    assert sink.phases == [
        "start",
        "router-analysis", "router-analysis",
        "knowledge-search", "knowledge-search",
        "specialist-solution", "specialist-solution",
        "qa-review", "qa-review",
        "complete",
    ]
    assert len(llm.calls) == len(STAGES) == 4
    assert sink.closed and sink.close_calls == 1


@pytest.mark.asyncio
async def test_start_event_replays_classification(calendar_ticket):
    sink = RecordingSink()
    await _run(calendar_ticket, FakeLLM(), sink)

    start = sink.events[0].data
    assert start["ticket_id"] == 7
    assert start["classification"]["category"] == "TECHNICAL"
    assert start["routing"]["suggested_agent"] == "TECHNICAL"

    router_status = sink.events[1].data
    assert router_status["stage"] == "router-analysis"
    assert "Explicit urgency request" in router_status["urgency_indicators"]
    assert router_status["category_scores"]["TECHNICAL"] == 1.0


@pytest.mark.asyncio
async def test_specialist_stage_is_attributed_to_routed_agent(calendar_ticket):
    sink = RecordingSink()
    await _run(calendar_ticket, FakeLLM(), sink)

    specialist_events = [e for e in sink.events if e.phase == "specialist-solution"]
    assert {e.agent for e in specialist_events} == {"Technical Support Agent"}


@pytest.mark.asyncio
async def test_complete_event_summarizes_run(calendar_ticket):
    sink = RecordingSink()
    outcome = await _run(calendar_ticket, FakeLLM(), sink)

    complete = sink.events[-1]
    assert complete.type == EventType.COMPLETE
    assert complete.data["category"] == "TECHNICAL"
    assert complete.data["priority"] == "HIGH"
    assert complete.data["response"] == "reply 3"
    assert complete.data["qa_review"] == "reply 4"
    assert complete.data["solution"] == outcome.solution
    assert outcome.solution[0].startswith("Priority attention required")
    assert outcome.response == "reply 3"


@pytest.mark.asyncio
async def test_llm_failure_on_second_stage_emits_single_error(calendar_ticket):
    sink = RecordingSink()

    outcome = await _run(calendar_ticket, FakeLLM(fail_on_call=2), sink)

    assert outcome.status == OutcomeStatus.ERROR
    assert outcome.stage == StageName.KNOWLEDGE_SEARCH
    assert sink.types == ["start", "status", "insight", "status", "error"]
    error = sink.events[-1]
    assert error.data["message"] == COLLABORATOR_FAILURE_MESSAGE
    assert "details" not in error.data
    assert sink.closed


@pytest.mark.asyncio
async def test_debug_mode_adds_error_details(calendar_ticket):
    sink = RecordingSink()

    await _run(calendar_ticket, FakeLLM(fail_on_call=1), sink, debug=True)

    error = sink.events[-1]
    assert error.type == EventType.ERROR
    assert "model overloaded" in error.data["details"]


@pytest.mark.asyncio
async def test_llm_timeout_is_a_collaborator_failure(calendar_ticket):
    sink = RecordingSink()

    outcome = await _run(calendar_ticket, SlowLLM(), sink, llm_timeout=0.01)

    assert outcome.status == OutcomeStatus.ERROR
    assert sink.types == ["start", "status", "error"]
    assert sink.events[-1].data["message"] == COLLABORATOR_FAILURE_MESSAGE


@pytest.mark.asyncio
async def test_internal_error_reports_processing_failed(calendar_ticket):
    sink = RecordingSink()

    outcome = await _run(calendar_ticket, BrokenReplyLLM(), sink)

    assert outcome.status == OutcomeStatus.ERROR
    assert sink.events[-1].type == EventType.ERROR
    assert sink.events[-1].data["message"] == INTERNAL_FAILURE_MESSAGE
    assert sink.closed


@pytest.mark.asyncio
async def test_disconnect_stops_all_further_sends(calendar_ticket):
    llm = FakeLLM()
    sink = RecordingSink(accept=3)

    outcome = await _run(calendar_ticket, llm, sink)

    assert outcome.status == OutcomeStatus.DISCONNECTED
    assert len(sink.events) == 3
    assert sink.attempts == 4
    assert EventType.ERROR not in [e.type for e in sink.events]
    assert sink.closed
    # Failure surfaced while emitting the knowledge-search status, before its LLM call
    assert len(llm.calls) == 1


@pytest.mark.asyncio
async def test_disconnect_while_reporting_error_is_swallowed(calendar_ticket):
    # start, router status, router insight, knowledge status, then the error is refused
    sink = RecordingSink(accept=4)

    outcome = await _run(calendar_ticket, FakeLLM(fail_on_call=2), sink)

    assert outcome.status == OutcomeStatus.ERROR
    assert sink.types == ["start", "status", "insight", "status"]
    assert sink.attempts == 5
    assert sink.closed


@pytest.mark.asyncio
async def test_stage_delay_paces_the_run(calendar_ticket, monkeypatch):
    delays = []

    async def fake_sleep(seconds):
        delays.append(seconds)

    monkeypatch.setattr(asyncio, "sleep", fake_sleep)

    await _run(calendar_ticket, FakeLLM(), RecordingSink(), stage_delay=0.25)

    assert delays == [0.25] * len(STAGES)
