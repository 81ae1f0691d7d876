"""Prompt templates for the processing stages.

Each builder returns a chat message list for the LLM collaborator, built from
the ticket text and what earlier stages produced.
"""

from __future__ import annotations

from helpdesk.application.ports.llm_port import ChatMessage
from helpdesk.domain.entities.classification import ClassificationResult
from helpdesk.domain.entities.ticket import Ticket
from helpdesk.domain.policies.routing import RoutingDecision, SolutionPlan

PLATFORM_CONTEXT = (
    "You work in customer support for a vacation-rental platform. "
    "Customers are hosts and guests dealing with listings, bookings, "
    "calendar sync, smart locks, payouts and refunds."
)

ROUTER_SYSTEM = f"""\
{PLATFORM_CONTEXT}
You are the Router Agent. Given a ticket and a rule-based classification,
explain in 2-3 sentences why the ticket belongs to the suggested specialist
and what the specialist should look at first. Be concise and factual."""

KNOWLEDGE_SYSTEM = f"""\
{PLATFORM_CONTEXT}
You are the Knowledge Base assistant. Given a ticket and a candidate
playbook, list the two or three most relevant help topics or past fixes
a specialist should read. One short line each."""

SPECIALIST_SYSTEM = f"""\
{PLATFORM_CONTEXT}
You are the {{specialist}}. Write the reply that will be sent to the customer.
Use the provided steps, stay friendly and professional, and keep it under
150 words. Do not invent policies that are not in the steps."""

QA_SYSTEM = f"""\
{PLATFORM_CONTEXT}
You are the QA Agent. Review the drafted reply for accuracy, completeness
and tone. Answer with one short paragraph: what is good, and what (if
anything) must change before sending."""


def _ticket_block(ticket: Ticket) -> str:
    return f"Ticket #{ticket.id}: {ticket.title}\n\n{ticket.description}"


def router_prompt(
    ticket: Ticket, analysis: ClassificationResult, routing: RoutingDecision
) -> list[ChatMessage]:
    scores = ", ".join(
        f"{category.value}: {score * 100:.0f}%"
        for category, score in analysis.category_scores.items()
    )
    user = (
        f"{_ticket_block(ticket)}\n\n"
        f"Keywords: {', '.join(analysis.keywords) or 'none'}\n"
        f"Sentiment score: {analysis.sentiment:.2f}\n"
        f"Category scores: {scores}\n"
        f"Urgency indicators: {', '.join(analysis.urgency_indicators) or 'none'}\n"
        f"Suggested specialist: {routing.agent_name}"
    )
    return [
        {"role": "system", "content": ROUTER_SYSTEM},
        {"role": "user", "content": user},
    ]


def knowledge_prompt(
    ticket: Ticket, analysis: ClassificationResult, playbook: list[str], router_notes: str
) -> list[ChatMessage]:
    user = (
        f"{_ticket_block(ticket)}\n\n"
        f"Category: {analysis.category.value}\n"
        f"Router notes: {router_notes}\n"
        "Candidate playbook:\n" + "\n".join(f"- {step}" for step in playbook)
    )
    return [
        {"role": "system", "content": KNOWLEDGE_SYSTEM},
        {"role": "user", "content": user},
    ]


def specialist_prompt(
    ticket: Ticket, specialist: str, plan: SolutionPlan, knowledge_notes: str
) -> list[ChatMessage]:
    user = (
        f"{_ticket_block(ticket)}\n\n"
        f"Knowledge base notes: {knowledge_notes}\n"
        "Steps to cover:\n" + "\n".join(f"{i}. {step}" for i, step in enumerate(plan.steps, 1))
    )
    return [
        {"role": "system", "content": SPECIALIST_SYSTEM.format(specialist=specialist)},
        {"role": "user", "content": user},
    ]


def qa_prompt(ticket: Ticket, draft: str) -> list[ChatMessage]:
    user = f"{_ticket_block(ticket)}\n\nDrafted reply:\n{draft}"
    return [
        {"role": "system", "content": QA_SYSTEM},
        {"role": "user", "content": user},
    ]
