"""ProcessTicketUseCase — staged ticket processing reported as progress events.

Pipeline:
    start → router-analysis → knowledge-search → specialist-solution
          → qa-review → complete
with ``error`` reachable from any stage. Stages run strictly in order; the
first failure aborts the run. Every run ends with exactly one terminal event
(``complete`` or ``error``) unless the subscriber is already gone.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum

from helpdesk.application import prompts
from helpdesk.application.errors import CollaboratorError, TransportError
from helpdesk.application.ports.event_sink import EventSink
from helpdesk.application.ports.llm_port import ChatMessage, LLMPort
from helpdesk.domain.entities.classification import ClassificationResult
from helpdesk.domain.entities.progress_event import ProgressEvent
from helpdesk.domain.entities.ticket import Ticket
from helpdesk.domain.policies.routing import (
    RoutingDecision,
    SolutionPlan,
    agent_name,
    build_solution,
    decide_routing,
    knowledge_base_steps,
)
from helpdesk.domain.value_objects.enums import AgentType, EventType, StageName

logger = logging.getLogger(__name__)

COLLABORATOR_FAILURE_MESSAGE = "AI agent failed to respond"
INTERNAL_FAILURE_MESSAGE = "Processing failed"


@dataclass(frozen=True)
class Stage:
    """One step of the fixed processing sequence.

    ``agent`` None means the specialist chosen by the routing decision.
    """

    name: StageName
    label: str
    agent: AgentType | None
    result_type: EventType
    invokes_llm: bool = True


STAGES: tuple[Stage, ...] = (
    Stage(
        name=StageName.ROUTER_ANALYSIS,
        label="Router Agent analyzing ticket patterns",
        agent=AgentType.ROUTER,
        result_type=EventType.INSIGHT,
    ),
    Stage(
        name=StageName.KNOWLEDGE_SEARCH,
        label="Searching knowledge base and historical solutions",
        agent=AgentType.KNOWLEDGE_BASE,
        result_type=EventType.COMMUNICATION,
    ),
    Stage(
        name=StageName.SPECIALIST_SOLUTION,
        label="Specialist crafting solution",
        agent=None,
        result_type=EventType.AGENT_ACTIVITY,
    ),
    Stage(
        name=StageName.QA_REVIEW,
        label="Reviewing solution for accuracy and completeness",
        agent=AgentType.QA,
        result_type=EventType.INSIGHT,
    ),
)


class OutcomeStatus(str, Enum):
    COMPLETE = "complete"
    ERROR = "error"
    DISCONNECTED = "disconnected"


@dataclass
class PipelineOutcome:
    """What a run ended with; the caller decides what to persist."""

    status: OutcomeStatus
    ticket_id: int
    stage: StageName
    routing: RoutingDecision
    sentiment: float
    error: str | None = None
    solution: list[str] = field(default_factory=list)
    response: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == OutcomeStatus.COMPLETE


@dataclass
class _RunState:
    ticket: Ticket
    analysis: ClassificationResult
    routing: RoutingDecision
    stage: StageName = StageName.START
    outputs: dict[StageName, str] = field(default_factory=dict)
    playbook: list[str] = field(default_factory=list)
    plan: SolutionPlan | None = None


class ProcessTicketUseCase:
    """Drives one ticket through the stage sequence and reports each step."""

    def __init__(
        self,
        llm: LLMPort,
        llm_timeout: float = 30.0,
        stage_delay: float = 0.0,
        debug: bool = False,
    ):
        self._llm = llm
        self._llm_timeout = llm_timeout
        self._stage_delay = stage_delay
        self._debug = debug

    async def run(
        self, ticket: Ticket, analysis: ClassificationResult, sink: EventSink
    ) -> PipelineOutcome:
        """Process *ticket* and stream progress to *sink*.

        Never raises for collaborator, transport or internal failures; they
        are reported through the returned outcome (and an ``error`` event
        when the subscriber is still listening). The sink is always closed.
        """
        state = _RunState(ticket=ticket, analysis=analysis, routing=decide_routing(analysis))
        started = time.monotonic()

        try:
            await self._emit(
                sink,
                EventType.START,
                {
                    "message": "Initializing AI agents...",
                    "ticket_id": ticket.id,
                    "classification": analysis.to_dict(),
                    "routing": state.routing.to_dict(),
                },
                phase=StageName.START,
            )

            for stage in STAGES:
                await self._pause()
                state.stage = stage.name
                await self._run_stage(stage, state, sink)

            state.stage = StageName.COMPLETE
            outcome = self._outcome(state, OutcomeStatus.COMPLETE)
            await self._emit(
                sink,
                EventType.COMPLETE,
                {
                    "ticket_id": ticket.id,
                    "category": state.routing.category.value,
                    "confidence": state.routing.confidence,
                    "priority": state.routing.priority.value,
                    "sentiment": analysis.sentiment,
                    "suggested_agent": state.routing.agent.value,
                    "solution": outcome.solution,
                    "solution_confidence": state.plan.confidence if state.plan else None,
                    "response": outcome.response,
                    "qa_review": state.outputs.get(StageName.QA_REVIEW),
                    "agents_involved": len(STAGES),
                    "processing_time_ms": int((time.monotonic() - started) * 1000),
                },
                phase=StageName.COMPLETE,
            )
            logger.info("Ticket %s: processing complete", ticket.id)
            return outcome

        except TransportError:
            logger.info(
                "Ticket %s: subscriber disconnected during %s, aborting",
                ticket.id, state.stage.value,
            )
            return self._outcome(state, OutcomeStatus.DISCONNECTED, "subscriber disconnected")

        except CollaboratorError as e:
            logger.warning("Ticket %s: %s", ticket.id, e)
            await self._fail(sink, state, COLLABORATOR_FAILURE_MESSAGE, e)
            return self._outcome(state, OutcomeStatus.ERROR, str(e))

        except Exception as e:
            logger.exception("Ticket %s: processing failed in %s", ticket.id, state.stage.value)
            await self._fail(sink, state, INTERNAL_FAILURE_MESSAGE, e)
            return self._outcome(state, OutcomeStatus.ERROR, str(e))

        finally:
            await sink.close()

    # ── Stages ──────────────────────────────────────────────────────

    async def _run_stage(self, stage: Stage, state: _RunState, sink: EventSink) -> None:
        agent = agent_name(stage.agent or state.routing.agent)
        self._prepare(stage, state)

        await self._emit(
            sink,
            EventType.STATUS,
            {"stage": stage.name.value, "message": stage.label, **self._started_payload(stage, state)},
            agent=agent,
            phase=stage.name,
        )

        reply = None
        if stage.invokes_llm:
            reply = await self._consult(stage, self._prompt(stage, state))
            state.outputs[stage.name] = reply

        await self._emit(
            sink,
            stage.result_type,
            self._result_payload(stage, state, reply),
            agent=agent,
            phase=stage.name,
        )

    def _prepare(self, stage: Stage, state: _RunState) -> None:
        """Compute the rule-based material a stage works from."""
        if stage.name == StageName.KNOWLEDGE_SEARCH:
            state.playbook = knowledge_base_steps(state.routing.category, state.analysis.keywords)
        elif stage.name == StageName.SPECIALIST_SOLUTION:
            state.plan = build_solution(state.analysis, state.routing.category)

    def _started_payload(self, stage: Stage, state: _RunState) -> dict:
        analysis = state.analysis
        if stage.name == StageName.ROUTER_ANALYSIS:
            return {
                "category_scores": {c.value: s for c, s in analysis.category_scores.items()},
                "urgency_indicators": list(analysis.urgency_indicators),
                "keywords": list(analysis.keywords),
                "sentiment": analysis.sentiment,
            }
        if stage.name == StageName.KNOWLEDGE_SEARCH:
            return {"keywords": list(analysis.keywords), "category": analysis.category.value}
        if stage.name == StageName.SPECIALIST_SOLUTION:
            return {
                "specialist": state.routing.agent_name,
                "issues": list(analysis.entities.issues),
                "systems": list(analysis.entities.systems),
                "dates": list(analysis.entities.dates),
            }
        if stage.name == StageName.QA_REVIEW:
            return {"solution": list(state.plan.steps) if state.plan else []}
        return {}

    def _prompt(self, stage: Stage, state: _RunState) -> list[ChatMessage]:
        ticket, analysis, routing = state.ticket, state.analysis, state.routing
        if stage.name == StageName.ROUTER_ANALYSIS:
            return prompts.router_prompt(ticket, analysis, routing)
        if stage.name == StageName.KNOWLEDGE_SEARCH:
            return prompts.knowledge_prompt(
                ticket, analysis, state.playbook, state.outputs.get(StageName.ROUTER_ANALYSIS, "")
            )
        if stage.name == StageName.SPECIALIST_SOLUTION:
            return prompts.specialist_prompt(
                ticket, routing.agent_name, state.plan,
                state.outputs.get(StageName.KNOWLEDGE_SEARCH, ""),
            )
        if stage.name == StageName.QA_REVIEW:
            return prompts.qa_prompt(ticket, state.outputs.get(StageName.SPECIALIST_SOLUTION, ""))
        raise ValueError(f"No prompt for stage {stage.name.value}")

    def _result_payload(self, stage: Stage, state: _RunState, reply: str | None) -> dict:
        if stage.name == StageName.ROUTER_ANALYSIS:
            return {"routing": state.routing.to_dict(), "analysis": reply}
        if stage.name == StageName.KNOWLEDGE_SEARCH:
            return {
                "from": agent_name(AgentType.KNOWLEDGE_BASE),
                "to": agent_name(AgentType.ROUTER),
                "message": "Found relevant solutions and patterns",
                "suggested_steps": list(state.playbook),
                "notes": reply,
            }
        if stage.name == StageName.SPECIALIST_SOLUTION:
            plan = state.plan
            return {
                "steps": list(plan.steps),
                "confidence": plan.confidence,
                "evidence": list(plan.evidence),
                "response": reply,
            }
        if stage.name == StageName.QA_REVIEW:
            return {"review": reply}
        return {"result": reply}

    # ── Helpers ─────────────────────────────────────────────────────

    async def _consult(self, stage: Stage, messages: list[ChatMessage]) -> str:
        """Call the LLM collaborator, bounded by the configured timeout."""
        try:
            reply = await asyncio.wait_for(self._llm.invoke(messages), timeout=self._llm_timeout)
        except asyncio.TimeoutError as e:
            raise CollaboratorError(
                f"{stage.name.value}: no reply within {self._llm_timeout:g}s"
            ) from e
        except Exception as e:
            raise CollaboratorError(f"{stage.name.value}: {e}") from e
        return reply.content

    async def _emit(
        self,
        sink: EventSink,
        event_type: EventType,
        data: dict,
        agent: str | None = None,
        phase: StageName | None = None,
    ) -> None:
        event = ProgressEvent(
            type=event_type,
            data=data,
            agent=agent,
            phase=phase.value if phase is not None else None,
        )
        await sink.send(event)

    async def _fail(
        self, sink: EventSink, state: _RunState, message: str, error: Exception
    ) -> None:
        """Send the single terminal error event; a gone subscriber is ignored."""
        data: dict = {"message": message, "stage": state.stage.value}
        if self._debug:
            data["details"] = str(error)
        try:
            await self._emit(sink, EventType.ERROR, data, phase=StageName.ERROR)
        except TransportError:
            logger.info("Ticket %s: subscriber gone before error event", state.ticket.id)
        except Exception:
            logger.exception("Ticket %s: could not deliver error event", state.ticket.id)

    async def _pause(self) -> None:
        if self._stage_delay > 0:
            await asyncio.sleep(self._stage_delay)

    def _outcome(
        self, state: _RunState, status: OutcomeStatus, error: str | None = None
    ) -> PipelineOutcome:
        return PipelineOutcome(
            status=status,
            ticket_id=state.ticket.id,
            stage=state.stage,
            routing=state.routing,
            sentiment=state.analysis.sentiment,
            error=error,
            solution=list(state.plan.steps) if state.plan else [],
            response=state.outputs.get(StageName.SPECIALIST_SOLUTION),
        )
