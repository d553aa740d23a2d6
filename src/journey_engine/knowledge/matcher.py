"""Confidence-scored question matching against the knowledge base.

Per entry:

  base  = 0.7 * keyword_score + 0.3 * question_score
  final = min(base * context_boost, 1.0)

``keyword_score`` is the fraction of the entry's keywords that fuzzily appear
in the query (substring containment in either direction); ``question_score``
is the fraction of the canonical question's tokens present in the query.
Stop words are dropped from both sides so phrasing ("wat", "hoe", "the")
does not dilute the overlap.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from journey_engine.knowledge.models import (
    KnowledgeBase,
    KnowledgeEntry,
    MatchContext,
    QuestionMatch,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

KEYWORD_WEIGHT = 0.7
QUESTION_WEIGHT = 0.3
DEFAULT_MIN_CONFIDENCE = 0.3
DEFAULT_RELATED_LIMIT = 3

PRICING_BOOST = 1.5
IMPLEMENTATION_BOOST = 1.3
USE_CASE_BOOST = 1.2
MODULE_BOOST = 1.4

CALCULATOR_PAGE = "/calculator"

# Tokens shorter than this never count as "contained in" a keyword, so
# fragments like "ai" do not match every keyword that happens to contain them.
_MIN_FUZZY_TOKEN = 3

_TOKEN_RE = re.compile(r"[a-z0-9À-ɏ']+")

STOP_WORDS: frozenset[str] = frozenset({
    # Dutch
    "de", "het", "een", "en", "of", "is", "zijn", "er", "van", "in", "op",
    "te", "voor", "met", "aan", "bij", "naar", "om", "ook", "dit", "dat",
    "die", "je", "jij", "jullie", "ik", "mijn", "we", "wij", "u", "kan",
    "kunnen", "wat", "hoe", "hoeveel", "welke", "wie", "waar", "wanneer",
    "waarom", "wordt", "worden", "heb", "heeft", "hebben",
    # English
    "a", "an", "the", "and", "or", "is", "are", "do", "does", "can", "i",
    "you", "your", "we", "of", "to", "for", "in", "on", "it", "with",
    "what", "how", "much", "which", "who", "where", "when", "why",
})


def tokenize(text: str) -> set[str]:
    return {t for t in _TOKEN_RE.findall(text.lower()) if t not in STOP_WORDS}


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------

def _keyword_in_query(keyword: str, query_tokens: set[str]) -> bool:
    kw = keyword.lower().strip()
    if not kw:
        return False
    for token in query_tokens:
        if kw in token:
            return True
        if len(token) >= _MIN_FUZZY_TOKEN and token in kw:
            return True
    return False


def keyword_score(query_tokens: set[str], keywords: tuple[str, ...] | list[str]) -> float:
    """Fraction of *keywords* that fuzzily appear among *query_tokens*."""
    if not keywords:
        return 0.0
    hits = sum(1 for kw in keywords if _keyword_in_query(kw, query_tokens))
    return hits / len(keywords)


def question_score(query_tokens: set[str], question: str) -> float:
    """Fraction of the canonical question's tokens present in the query."""
    question_tokens = tokenize(question)
    if not question_tokens:
        return 0.0
    return len(question_tokens & query_tokens) / len(question_tokens)


def context_boost(entry: KnowledgeEntry, context: MatchContext) -> float:
    """Multiplicative boost; every rule that applies multiplies in."""
    boost = 1.0
    if entry.category == "pricing" and (
        context.modules_viewed >= 3 or context.current_page == CALCULATOR_PAGE
    ):
        boost *= PRICING_BOOST
    if entry.category == "implementation" and context.icp_score >= 70:
        boost *= IMPLEMENTATION_BOOST
    if entry.category == "use_cases" and context.industry:
        boost *= USE_CASE_BOOST
    if context.current_page and any(m in context.current_page for m in entry.related_modules):
        boost *= MODULE_BOOST
    return boost


@dataclass(frozen=True)
class ScoredEntry:
    entry: KnowledgeEntry
    keyword_score: float
    question_score: float
    base_score: float
    boost: float
    confidence: float


def score_entry(
    query_tokens: set[str],
    entry: KnowledgeEntry,
    context: MatchContext,
) -> ScoredEntry:
    kw = keyword_score(query_tokens, entry.keywords)
    q = question_score(query_tokens, entry.question)
    base = KEYWORD_WEIGHT * kw + QUESTION_WEIGHT * q
    boost = context_boost(entry, context)
    return ScoredEntry(
        entry=entry,
        keyword_score=kw,
        question_score=q,
        base_score=base,
        boost=boost,
        confidence=min(base * boost, 1.0),
    )


def score_questions(
    query: str,
    kb: KnowledgeBase,
    context: MatchContext | None = None,
) -> list[ScoredEntry]:
    """Score every entry, best first; equal scores keep knowledge-base order."""
    ctx = context or MatchContext()
    query_tokens = tokenize(query)
    scored = [score_entry(query_tokens, entry, ctx) for entry in kb.entries()]
    scored.sort(key=lambda s: s.confidence, reverse=True)
    return scored


def best_match(
    query: str,
    kb: KnowledgeBase,
    context: MatchContext | None = None,
) -> QuestionMatch | None:
    """Highest-scoring entry regardless of confidence; ``None`` for an empty base."""
    scored = score_questions(query, kb, context)
    if not scored:
        return None
    top = scored[0]
    return QuestionMatch.from_entry(top.entry, top.confidence)


def match_question(
    query: str,
    kb: KnowledgeBase,
    context: MatchContext | None = None,
    min_confidence: float = DEFAULT_MIN_CONFIDENCE,
) -> QuestionMatch | None:
    """Best match at or above *min_confidence*, else ``None``."""
    match = best_match(query, kb, context)
    if match is None or match.confidence < min_confidence:
        logger.debug(
            "No match for %r (best=%.3f)", query, match.confidence if match else 0.0
        )
        return None
    logger.debug("Matched %r -> %s (%.3f)", query, match.question_id, match.confidence)
    return match


def related_questions(
    match: QuestionMatch,
    kb: KnowledgeBase,
    limit: int = DEFAULT_RELATED_LIMIT,
) -> list[QuestionMatch]:
    """Other entries sharing the match's category or a related module.

    Related entries are curated, not scored, so their confidence is 1.0.
    """
    related: list[QuestionMatch] = []
    modules = set(match.related_modules)
    for entry in kb.entries():
        if len(related) >= limit:
            break
        if entry.id == match.question_id:
            continue
        if entry.category == match.category or modules & set(entry.related_modules):
            related.append(QuestionMatch.from_entry(entry, 1.0))
    return related


# ---------------------------------------------------------------------------
# Proactive suggestions
# ---------------------------------------------------------------------------

_INDUSTRY_SUGGESTIONS: dict[str, tuple[str, ...]] = {
    "ecommerce": ("Hoe helpt dit e-commerce bedrijven?", "Wat is de AI Ad Builder?"),
    "saas": ("Is dit geschikt voor SaaS bedrijven?", "Hoe werkt de Campaign Orchestrator?"),
    "agency": ("Werken jullie met marketing agencies?", "Kan ik meerdere accounts beheren?"),
}

_DEFAULT_SUGGESTIONS = (
    "Wat is de AI Ad Builder?",
    "Wat kost het platform?",
    "Kan ik een demo krijgen?",
)


def proactive_suggestions(context: MatchContext, limit: int = 3) -> list[str]:
    """Questions worth offering before the visitor asks anything."""
    suggestions: list[str] = []
    if context.modules_viewed >= 3:
        suggestions += [
            "Wat kost het platform?",
            "Wat is de ROI van het platform?",
            "Hoe lang duurt de implementatie?",
        ]
    if context.current_page == CALCULATOR_PAGE:
        suggestions += [
            "Is er een gratis trial?",
            "Hoe lang duurt de implementatie?",
            "Welke integraties ondersteunen jullie?",
        ]
    if context.icp_score >= 70:
        suggestions += [
            "Kan ik een demo krijgen?",
            "Hebben jullie training en support?",
            "Hoe zit het met data security?",
        ]
    if context.industry:
        suggestions += _INDUSTRY_SUGGESTIONS.get(context.industry, ())

    if not suggestions:
        suggestions = list(_DEFAULT_SUGGESTIONS)
    return suggestions[:limit]
