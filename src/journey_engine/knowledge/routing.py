"""Confidence routing and the tiered fallback cascade.

Routing is an ordered list of ``(predicate, tier)`` rules evaluated top-down;
the first predicate that holds decides the tier.  Escalation keywords sit at
the top and pre-empt every band below a direct answer; a direct-strength
match is always answered.
"""

from __future__ import annotations

import logging
import random
import re
from dataclasses import dataclass
from typing import Callable, Literal

from journey_engine.knowledge.models import KnowledgeBase, MatchContext

logger = logging.getLogger(__name__)

ResponseTier = Literal[
    "escalation",
    "direct_answer",
    "answer_with_disclaimer",
    "soft_fallback",
    "hard_fallback",
]

FALLBACK_TIERS: frozenset[str] = frozenset({"escalation", "soft_fallback", "hard_fallback"})

DIRECT_ANSWER_CONFIDENCE = 0.5
DISCLAIMER_CONFIDENCE = 0.3
SOFT_FALLBACK_CONFIDENCE = 0.2

ESCALATION_KEYWORDS: tuple[str, ...] = (
    "complex",
    "custom",
    "enterprise",
    "specifiek",
    "integratie met",
    "on-premise",
    "contract",
    "legal",
)

DISCLAIMER = "Als dit niet helemaal je vraag beantwoordt, stel gerust een andere vraag!"

_DEFAULT_HARD_FALLBACK = (
    "Goede vraag! Daar heb ik nog geen pasklaar antwoord op. "
    "Wil je een demo plannen zodat we het persoonlijk kunnen bespreken?"
)
_DEFAULT_ESCALATION = (
    "Dit is een specifieke vraag die het beste persoonlijk besproken kan worden. "
    "Plan een gesprek met ons team."
)

_QUESTION_START = re.compile(
    r"^(wie|wat|waar|wanneer|waarom|hoe|kan|is|zijn|heeft|hebben|moet|mag)\s",
    re.IGNORECASE,
)


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RoutingRule:
    tier: ResponseTier
    predicate: Callable[[str, float], bool]


def _compile_phrase_pattern(phrase: str) -> re.Pattern[str]:
    return re.compile(rf"\b{re.escape(phrase.lower())}\b")


def contains_escalation_keyword(
    query: str, keywords: tuple[str, ...] = ESCALATION_KEYWORDS
) -> bool:
    """Whole-word match, so ``custom`` does not fire on ``customer``."""
    lowered = query.lower()
    return any(_compile_phrase_pattern(kw).search(lowered) for kw in keywords)


def build_routing_rules(
    *,
    escalation_keywords: tuple[str, ...] = ESCALATION_KEYWORDS,
    direct_answer: float = DIRECT_ANSWER_CONFIDENCE,
    disclaimer: float = DISCLAIMER_CONFIDENCE,
    soft_fallback: float = SOFT_FALLBACK_CONFIDENCE,
) -> tuple[RoutingRule, ...]:
    """Ordered rule list; the final rule always matches.

    Escalation is checked before the bands but only below *direct_answer*.
    """
    if not soft_fallback <= disclaimer <= direct_answer:
        raise ValueError(
            "Confidence bands must satisfy soft_fallback <= disclaimer <= direct_answer"
        )
    patterns = tuple(_compile_phrase_pattern(kw) for kw in escalation_keywords)

    def escalates(query: str, confidence: float) -> bool:
        if confidence >= direct_answer:
            return False
        lowered = query.lower()
        return any(p.search(lowered) for p in patterns)

    return (
        RoutingRule("escalation", escalates),
        RoutingRule("direct_answer", lambda q, c: c >= direct_answer),
        RoutingRule("answer_with_disclaimer", lambda q, c: c >= disclaimer),
        RoutingRule("soft_fallback", lambda q, c: c >= soft_fallback),
        RoutingRule("hard_fallback", lambda q, c: True),
    )


DEFAULT_ROUTING_RULES = build_routing_rules()


def classify_response(
    query: str,
    confidence: float,
    rules: tuple[RoutingRule, ...] = DEFAULT_ROUTING_RULES,
) -> ResponseTier:
    for rule in rules:
        if rule.predicate(query, confidence):
            return rule.tier
    return "hard_fallback"


def looks_like_question(message: str) -> bool:
    """Interrogative opener or trailing question mark."""
    text = message.strip()
    return bool(_QUESTION_START.match(text)) or text.endswith("?")


# ---------------------------------------------------------------------------
# Fallback payloads
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FallbackResponse:
    tier: ResponseTier
    message: str
    suggestions: tuple[str, ...]


def build_fallback(
    tier: ResponseTier,
    query: str,
    context: MatchContext | None,
    kb: KnowledgeBase,
    rng: random.Random | None = None,
) -> FallbackResponse:
    """Message and suggestions for a fallback tier.

    *rng* picks the hard-fallback message; pass a seeded ``random.Random``
    for reproducible output.
    """
    if tier not in FALLBACK_TIERS:
        raise ValueError(f"{tier!r} is not a fallback tier")

    ctx = context or MatchContext()

    if tier == "escalation":
        return FallbackResponse(
            tier=tier,
            message=kb.escalation_message or _DEFAULT_ESCALATION,
            suggestions=("Plan een demo call", "Stuur een email", "Stel een andere vraag"),
        )

    if tier == "soft_fallback":
        return FallbackResponse(
            tier=tier,
            message=(
                "Ik denk dat je vraagt over dit onderwerp, maar ik wil zeker weten "
                "dat ik je goed help. Bedoel je:"
            ),
            suggestions=("Pricing en kosten", "Product features", "Implementatie en setup"),
        )

    if ctx.modules_viewed >= 3:
        suggestions = ("Bereken je ROI", "Plan een demo", "Stel een andere vraag")
    else:
        suggestions = ("Bekijk product features", "Zie pricing info", "Stel een andere vraag")

    if kb.fallback_responses:
        message = (rng or random.Random()).choice(kb.fallback_responses)
    else:
        logger.warning("Knowledge base %s has no fallback responses", kb.version)
        message = _DEFAULT_HARD_FALLBACK

    logger.debug("Hard fallback for %r", query)
    return FallbackResponse(tier=tier, message=message, suggestions=suggestions)
