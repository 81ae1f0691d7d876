"""Routing policy — turn a classification into an agent assignment and a plan.

Also holds the agent directory: a plain table of display strings per agent.
"""

from __future__ import annotations

from dataclasses import dataclass

from helpdesk.domain.entities.classification import ClassificationResult
from helpdesk.domain.value_objects.enums import AgentType, TicketCategory, TicketPriority


@dataclass(frozen=True)
class AgentProfile:
    name: str
    role: str
    description: str


AGENT_PROFILES: dict[AgentType, AgentProfile] = {
    AgentType.ROUTER: AgentProfile(
        name="Router Agent",
        role="Triage",
        description="Reads incoming tickets and routes them to the right specialist.",
    ),
    AgentType.KNOWLEDGE_BASE: AgentProfile(
        name="Knowledge Base",
        role="Retrieval",
        description="Looks up playbooks and past resolutions for similar tickets.",
    ),
    AgentType.TECHNICAL: AgentProfile(
        name="Technical Support Agent",
        role="Specialist",
        description="Calendar sync, integrations, smart locks and login problems.",
    ),
    AgentType.BILLING: AgentProfile(
        name="Billing Support Agent",
        role="Specialist",
        description="Payments, payouts, refunds, fees and taxes.",
    ),
    AgentType.PRODUCT: AgentProfile(
        name="Product Expert Agent",
        role="Specialist",
        description="Listings, pricing tools, policies and how-to questions.",
    ),
    AgentType.ESCALATION: AgentProfile(
        name="Escalation Specialist",
        role="Specialist",
        description="Complaints and sensitive cases that need a human touch.",
    ),
    AgentType.QA: AgentProfile(
        name="QA Agent",
        role="Review",
        description="Checks drafted answers for accuracy, completeness and tone.",
    ),
}

CATEGORY_AGENTS: dict[TicketCategory, AgentType] = {
    TicketCategory.TECHNICAL: AgentType.TECHNICAL,
    TicketCategory.BILLING: AgentType.BILLING,
    TicketCategory.PRODUCT: AgentType.PRODUCT,
    TicketCategory.COMPLAINT: AgentType.ESCALATION,
    TicketCategory.GENERAL: AgentType.PRODUCT,
}

# ── Knowledge-base playbooks ────────────────────────────────────────

PLAYBOOKS: dict[TicketCategory, dict[str, list[str]]] = {
    TicketCategory.TECHNICAL: {
        "calendar": [
            "Disconnect and reconnect calendar sync",
            "Verify iCal URL is current",
            "Check timezone settings match",
            "Enable two-way sync",
        ],
        "smart lock": [
            "Verify WiFi connection",
            "Check API credentials",
            "Test manual code generation",
            "Update firmware if available",
        ],
        "default": [
            "Clear cache and cookies",
            "Try different browser",
            "Check system status page",
            "Contact technical support",
        ],
    },
    TicketCategory.BILLING: {
        "refund": [
            "Review cancellation policy",
            "Check if issue was reported during stay",
            "Calculate refund based on policy",
            "Process through payment system",
        ],
        "payout": [
            "Verify bank account details",
            "Check payout schedule",
            "Look for any holds or disputes",
            "Contact finance team if delayed",
        ],
        "default": [
            "Review transaction history",
            "Check payment method on file",
            "Verify all fees and charges",
            "Submit support ticket if needed",
        ],
    },
    TicketCategory.PRODUCT: {
        "pricing": [
            "Access pricing rules in Settings",
            "Set base rate competitively",
            "Add seasonal adjustments",
            "Configure length-of-stay discounts",
        ],
        "listing": [
            "Complete all required fields",
            "Add high-quality photos",
            "Write detailed description",
            "Set house rules clearly",
        ],
        "default": [
            "Check help documentation",
            "Watch tutorial videos",
            "Review best practices guide",
            "Contact product support",
        ],
    },
}

BASE_SOLUTION_CONFIDENCE = 0.7
CONFIDENCE_PER_KEYWORD = 0.05
MAX_SOLUTION_CONFIDENCE = 0.95


@dataclass(frozen=True)
class RoutingDecision:
    category: TicketCategory
    confidence: float
    priority: TicketPriority
    agent: AgentType
    reasoning: str

    @property
    def agent_name(self) -> str:
        return AGENT_PROFILES[self.agent].name

    def to_dict(self) -> dict:
        return {
            "category": self.category.value,
            "confidence": self.confidence,
            "priority": self.priority.value,
            "suggested_agent": self.agent.value,
            "specialist": self.agent_name,
            "reasoning": self.reasoning,
        }


@dataclass(frozen=True)
class SolutionPlan:
    steps: list[str]
    confidence: float
    evidence: list[str]


def agent_name(agent: AgentType) -> str:
    return AGENT_PROFILES[agent].name


def decide_routing(result: ClassificationResult) -> RoutingDecision:
    """Pick the specialist and urgency for a classified ticket."""
    priority = TicketPriority.HIGH if result.is_urgent else TicketPriority.MEDIUM
    top_keywords = ", ".join(result.keywords[:3]) or "no keywords"
    return RoutingDecision(
        category=result.category,
        confidence=result.confidence,
        priority=priority,
        agent=CATEGORY_AGENTS[result.category],
        reasoning=f"Based on keywords: {top_keywords}",
    )


def knowledge_base_steps(category: TicketCategory, keywords: list[str]) -> list[str]:
    """Playbook for the first keyword overlapping a playbook key, else the default."""
    playbooks = PLAYBOOKS.get(category, PLAYBOOKS[TicketCategory.PRODUCT])
    for keyword in keywords:
        for key, steps in playbooks.items():
            if key in keyword or keyword in key:
                return list(steps)
    return list(playbooks["default"])


def build_solution(result: ClassificationResult, category: TicketCategory) -> SolutionPlan:
    steps = knowledge_base_steps(category, result.keywords)

    if result.urgency_indicators:
        steps.insert(0, f"Priority attention required due to: {result.urgency_indicators[0]}")

    systems = result.entities.systems
    if systems:
        steps.append(f"Specific to {systems[0]}: Check integration settings")

    confidence = min(
        MAX_SOLUTION_CONFIDENCE,
        BASE_SOLUTION_CONFIDENCE + len(result.keywords) * CONFIDENCE_PER_KEYWORD,
    )

    evidence = [
        f"Based on {len(result.keywords)} relevant keywords",
        f"Category match: {result.category_scores[category] * 100:.0f}%",
        f"System-specific solution for {systems[0]}" if systems else "General solution provided",
    ]
    return SolutionPlan(steps=steps, confidence=confidence, evidence=evidence)
