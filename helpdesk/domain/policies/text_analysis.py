"""Ticket text analysis — deterministic keyword/regex classification.

Pure function of the ticket text: no clock, no randomness, no I/O.
Given the same title and description, ``analyze`` always returns an equal
ClassificationResult.
"""

from __future__ import annotations

import re

from helpdesk.domain.entities.classification import ClassificationResult, TicketEntities
from helpdesk.domain.value_objects.enums import TicketCategory

# ── Keyword vocabulary (vacation-rental domain) ─────────────────────

DOMAIN_KEYWORDS: dict[str, list[str]] = {
    "technical": [
        "calendar", "sync", "api", "integration", "error", "broken", "bug",
        "password", "login", "ical", "smart lock", "lock", "code", "wifi",
        "connection",
    ],
    "billing": [
        "payment", "refund", "payout", "charge", "fee", "commission", "tax",
        "invoice", "deposit", "money", "price", "cost",
    ],
    "product": [
        "feature", "how to", "guide", "setup", "pricing", "listing",
        "property", "amenity", "rules", "policy", "availability",
    ],
    "issues": [
        "not working", "broken", "failed", "cant", "wont", "problem",
        "issue", "error", "help", "urgent", "asap",
    ],
}

MULTI_WORD_KEYWORDS = ["smart lock", "how to", "not working"]

STOPWORDS = frozenset({
    "the", "and", "but", "for", "with", "this", "that", "have", "has",
    "had", "can", "cant", "wont", "from", "been",
})

MAX_GENERIC_KEYWORDS = 5

# ── Entity vocabularies ─────────────────────────────────────────────

SYSTEMS = [
    "airbnb", "vrbo", "booking.com", "ical", "calendar", "pms",
    "property management system", "smart lock", "august", "yale",
]

DATE_PATTERNS = [
    re.compile(r"\d+\s*(days?|hours?|minutes?|weeks?)\s*ago"),
    re.compile(r"yesterday|today|tomorrow"),
    re.compile(r"last\s*(week|month|year)"),
]

ISSUE_PHRASES = [
    "not working", "broken", "stopped working", "error", "failed",
    "cant access", "wont sync",
]

FEATURES = [
    "calendar sync", "pricing", "refund", "payout", "booking", "guest",
    "host", "listing",
]

# ── Sentiment lexicon ───────────────────────────────────────────────

NEGATIVE_WORDS = [
    "broken", "not working", "failed", "error", "cant", "wont", "problem",
    "issue", "urgent", "frustrated", "angry", "terrible", "worst", "never",
]

POSITIVE_WORDS = [
    "working", "fixed", "solved", "great", "excellent", "perfect", "love",
    "amazing", "best",
]

URGENCY_TERMS = ["urgent", "asap", "immediately"]

SENTIMENT_STEP = 0.2
URGENCY_PENALTY = 0.3

# ── Category tiers ──────────────────────────────────────────────────

TIER_WEIGHTS = {"strong": 0.3, "medium": 0.2, "weak": 0.1}

# GENERAL has no tiers: it only wins through the zero-score fallback.
CATEGORY_TIERS: dict[TicketCategory, dict[str, list[str]]] = {
    TicketCategory.TECHNICAL: {
        "strong": [
            "api", "integration", "sync", "calendar", "ical", "smart lock",
            "error", "bug", "broken",
        ],
        "medium": ["login", "password", "connection", "technical", "system"],
        "weak": ["not working", "issue", "problem"],
    },
    TicketCategory.BILLING: {
        "strong": ["payment", "refund", "payout", "charge", "money", "tax", "invoice"],
        "medium": ["fee", "commission", "price", "cost", "deposit"],
        "weak": ["billing", "financial"],
    },
    TicketCategory.PRODUCT: {
        "strong": ["how to", "guide", "feature", "setup", "tutorial"],
        "medium": ["listing", "property", "availability", "amenity"],
        "weak": ["help", "question", "new"],
    },
    TicketCategory.COMPLAINT: {
        "strong": ["complaint", "terrible", "worst", "unacceptable", "fraud"],
        "medium": ["angry", "frustrated", "disappointed", "upset"],
        "weak": ["issue", "problem"],
    },
}

# ── Urgency patterns (declaration order is output order) ────────────

URGENCY_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"urgent|asap|immediately", re.IGNORECASE), "Explicit urgency request"),
    (re.compile(r"\d+\s*days?\s*ago", re.IGNORECASE), "Time elapsed indicator"),
    (re.compile(r"losing money|revenue loss|costing", re.IGNORECASE), "Financial impact"),
    (re.compile(r"double booking|overbooked", re.IGNORECASE), "Booking conflict"),
    (
        re.compile(r"guest arriving|check.?in today|arriving soon", re.IGNORECASE),
        "Imminent guest arrival",
    ),
    (
        re.compile(r"multiple properties|all my properties", re.IGNORECASE),
        "Multiple properties affected",
    ),
]


def normalize(title: str | None, description: str | None) -> str:
    """Concatenate title and description with one space and lower-case."""
    return f"{title or ''} {description or ''}".lower()


def analyze(title: str | None, description: str | None) -> ClassificationResult:
    """Classify ticket text into keywords, entities, sentiment, category and urgency.

    Never raises for string input; empty text falls back to GENERAL.
    """
    text = normalize(title, description)

    keywords = extract_keywords(text)
    scores = score_categories(text, keywords)

    return ClassificationResult(
        keywords=keywords,
        entities=extract_entities(text),
        sentiment=score_sentiment(text),
        category=pick_category(scores),
        category_scores=scores,
        urgency_indicators=find_urgency_indicators(text),
    )


def extract_keywords(text: str) -> list[str]:
    """Domain phrases and terms found in *text*, plus up to 5 generic long words."""
    found: list[str] = [k for k in MULTI_WORD_KEYWORDS if k in text]

    for group in DOMAIN_KEYWORDS.values():
        for keyword in group:
            if " " not in keyword and keyword in text:
                found.append(keyword)

    generic = [
        word for word in text.split()
        if len(word) > 3 and word not in STOPWORDS and word not in found
    ]

    return list(dict.fromkeys(found + generic[:MAX_GENERIC_KEYWORDS]))


def extract_entities(text: str) -> TicketEntities:
    dates: list[str] = []
    for pattern in DATE_PATTERNS:
        dates.extend(m.group(0) for m in pattern.finditer(text))

    return TicketEntities(
        systems=[s for s in SYSTEMS if s in text],
        dates=dates,
        issues=[i for i in ISSUE_PHRASES if i in text],
        features=[f for f in FEATURES if f in text],
    )


def score_sentiment(text: str) -> float:
    """Lexicon sentiment in [-1, 1]; negative means unhappy or pressured."""
    score = 0.0
    for word in NEGATIVE_WORDS:
        if word in text:
            score -= SENTIMENT_STEP
    for word in POSITIVE_WORDS:
        if word in text:
            score += SENTIMENT_STEP

    if any(term in text for term in URGENCY_TERMS):
        score -= URGENCY_PENALTY

    return max(-1.0, min(1.0, score))


def score_categories(text: str, keywords: list[str]) -> dict[TicketCategory, float]:
    """Weighted tier hits per category, normalized by the maximum score.

    NOTE: scores are anchored on the max, not a probability distribution;
    two tickets with very different signal strength can share a profile.
    """
    scores: dict[TicketCategory, float] = {category: 0.0 for category in TicketCategory}

    for category, tiers in CATEGORY_TIERS.items():
        for tier, terms in tiers.items():
            weight = TIER_WEIGHTS[tier]
            for term in terms:
                if term in text or term in keywords:
                    scores[category] += weight

    max_score = max(scores.values())
    if max_score > 0:
        return {category: score / max_score for category, score in scores.items()}

    scores[TicketCategory.GENERAL] = 1.0
    return scores


def pick_category(scores: dict[TicketCategory, float]) -> TicketCategory:
    """Arg-max over *scores*; ties go to the earliest declared category."""
    best = TicketCategory.GENERAL
    best_score = float("-inf")
    for category in TicketCategory:
        score = scores.get(category, 0.0)
        if score > best_score:
            best, best_score = category, score
    return best


def find_urgency_indicators(text: str) -> list[str]:
    return [label for pattern, label in URGENCY_PATTERNS if pattern.search(text)]
