"""ClassificationResult — output of the rule-based ticket analyzer."""

from dataclasses import dataclass, field

from helpdesk.domain.value_objects.enums import TicketCategory


@dataclass(frozen=True)
class TicketEntities:
    systems: list[str] = field(default_factory=list)
    dates: list[str] = field(default_factory=list)
    issues: list[str] = field(default_factory=list)
    features: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "systems": list(self.systems),
            "dates": list(self.dates),
            "issues": list(self.issues),
            "features": list(self.features),
        }


@dataclass(frozen=True)
class ClassificationResult:
    keywords: list[str]
    entities: TicketEntities
    sentiment: float
    category: TicketCategory
    category_scores: dict[TicketCategory, float]
    urgency_indicators: list[str]

    @property
    def confidence(self) -> float:
        """Normalized score of the winning category."""
        return self.category_scores[self.category]

    @property
    def is_urgent(self) -> bool:
        return bool(self.urgency_indicators)

    def to_dict(self) -> dict:
        return {
            "keywords": list(self.keywords),
            "entities": self.entities.to_dict(),
            "sentiment": self.sentiment,
            "category": self.category.value,
            "category_scores": {c.value: s for c, s in self.category_scores.items()},
            "urgency_indicators": list(self.urgency_indicators),
        }
