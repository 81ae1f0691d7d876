"""Tests for routing decisions and knowledge-base playbooks."""

from helpdesk.domain.policies.routing import (
    AGENT_PROFILES,
    PLAYBOOKS,
    build_solution,
    decide_routing,
    knowledge_base_steps,
)
from helpdesk.domain.policies.text_analysis import analyze
from helpdesk.domain.value_objects.enums import AgentType, TicketCategory, TicketPriority


def test_urgent_technical_ticket_goes_to_technical_agent(calendar_ticket_text):
    decision = decide_routing(analyze(*calendar_ticket_text))

    assert decision.category == TicketCategory.TECHNICAL
    assert decision.agent == AgentType.TECHNICAL
    assert decision.priority == TicketPriority.HIGH
    assert decision.confidence == 1.0
    assert decision.reasoning == "Based on keywords: calendar, sync, broken"


def test_non_urgent_ticket_gets_medium_priority(refund_ticket_text):
    decision = decide_routing(analyze(*refund_ticket_text))

    assert decision.agent == AgentType.BILLING
    assert decision.priority == TicketPriority.MEDIUM


def test_complaint_is_escalated():
    decision = decide_routing(analyze("Complaint", "Terrible and unacceptable service"))
    assert decision.agent == AgentType.ESCALATION
    assert decision.agent_name == "Escalation Specialist"


def test_general_ticket_goes_to_product_expert():
    decision = decide_routing(analyze("", ""))

    assert decision.category == TicketCategory.GENERAL
    assert decision.agent == AgentType.PRODUCT
    assert decision.reasoning == "Based on keywords: no keywords"


def test_routing_to_dict_uses_plain_values(refund_ticket_text):
    data = decide_routing(analyze(*refund_ticket_text)).to_dict()

    assert data["category"] == "BILLING"
    assert data["suggested_agent"] == "BILLING"
    assert data["specialist"] == "Billing Support Agent"
    assert data["priority"] == "MEDIUM"


def test_every_agent_has_a_profile():
    assert set(AGENT_PROFILES) == set(AgentType)


def test_playbook_matches_first_overlapping_keyword():
    steps = knowledge_base_steps(TicketCategory.TECHNICAL, ["lock", "calendar"])
    assert steps == PLAYBOOKS[TicketCategory.TECHNICAL]["smart lock"]


def test_playbook_default_when_no_keyword_matches():
    steps = knowledge_base_steps(TicketCategory.BILLING, ["invoice"])
    assert steps == PLAYBOOKS[TicketCategory.BILLING]["default"]


def test_categories_without_playbooks_use_product_playbooks():
    assert knowledge_base_steps(TicketCategory.GENERAL, []) == PLAYBOOKS[TicketCategory.PRODUCT]["default"]
    assert knowledge_base_steps(TicketCategory.COMPLAINT, ["pricing"]) == PLAYBOOKS[TicketCategory.PRODUCT]["pricing"]


def test_playbook_steps_are_a_fresh_list():
    steps = knowledge_base_steps(TicketCategory.TECHNICAL, ["calendar"])
    steps.append("mutated")
    assert "mutated" not in PLAYBOOKS[TicketCategory.TECHNICAL]["calendar"]


def test_solution_adds_urgency_and_system_steps(calendar_ticket_text):
    result = analyze(*calendar_ticket_text)
    plan = build_solution(result, TicketCategory.TECHNICAL)

    assert plan.steps[0] == "Priority attention required due to: Explicit urgency request"
    assert plan.steps[1:5] == PLAYBOOKS[TicketCategory.TECHNICAL]["calendar"]
    assert plan.steps[-1] == "Specific to ical: Check integration settings"
    assert plan.confidence == 0.95
    assert plan.evidence[2] == "System-specific solution for ical"


def test_solution_confidence_grows_with_keywords():
    plan = build_solution(analyze("", ""), TicketCategory.GENERAL)

    assert plan.confidence == 0.7
    assert plan.steps == PLAYBOOKS[TicketCategory.PRODUCT]["default"]
    assert plan.evidence[-1] == "General solution provided"
