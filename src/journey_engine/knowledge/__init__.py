"""Knowledge base models, loading, matching and confidence routing."""

from journey_engine.knowledge.loader import (
    DEFAULT_KNOWLEDGE_BASE_PATH,
    load_knowledge_base,
    parse_knowledge_base,
)
from journey_engine.knowledge.matcher import (
    best_match,
    match_question,
    proactive_suggestions,
    related_questions,
    score_questions,
    tokenize,
)
from journey_engine.knowledge.models import (
    KnowledgeBase,
    KnowledgeCategory,
    KnowledgeCTA,
    KnowledgeEntry,
    MatchContext,
    QuestionMatch,
)
from journey_engine.knowledge.routing import (
    DEFAULT_ROUTING_RULES,
    ESCALATION_KEYWORDS,
    FallbackResponse,
    ResponseTier,
    RoutingRule,
    build_fallback,
    build_routing_rules,
    classify_response,
    looks_like_question,
)
from journey_engine.knowledge.validator import (
    validate_knowledge_base,
    validate_knowledge_base_file,
)

__all__ = [
    "DEFAULT_KNOWLEDGE_BASE_PATH",
    "DEFAULT_ROUTING_RULES",
    "ESCALATION_KEYWORDS",
    "FallbackResponse",
    "KnowledgeBase",
    "KnowledgeCTA",
    "KnowledgeCategory",
    "KnowledgeEntry",
    "MatchContext",
    "QuestionMatch",
    "ResponseTier",
    "RoutingRule",
    "best_match",
    "build_fallback",
    "build_routing_rules",
    "classify_response",
    "load_knowledge_base",
    "looks_like_question",
    "match_question",
    "parse_knowledge_base",
    "proactive_suggestions",
    "related_questions",
    "score_questions",
    "tokenize",
    "validate_knowledge_base",
    "validate_knowledge_base_file",
]
