"""Journey Engine: rule-based engagement decisions for a guided product tour.

Given a snapshot of visitor behavior the engine scores the lead, picks at
most one proactive nudge, unlocks achievements, recommends the next best
action and matches free-text questions against a curated knowledge base.
All decisions are pure; callers own persistence and rendering.

Public API::

    from journey_engine import BehaviorSnapshot, JourneyEngine, ProfileInput
    from journey_engine.knowledge import load_knowledge_base, match_question
    from journey_engine.nudges import select_nudge, update_history
"""

from journey_engine.config import EngineConfig, load_engine_config
from journey_engine.engine import AnswerOutcome, Evaluation, JourneyEngine
from journey_engine.errors import ConfigError, JourneyEngineError, KnowledgeBaseError
from journey_engine.icp import score_profile
from journey_engine.models import (
    BehaviorSnapshot,
    NextBestAction,
    Nudge,
    NudgeRecord,
    ProfileInput,
    ScoreBreakdown,
)

__all__ = [
    "AnswerOutcome",
    "BehaviorSnapshot",
    "ConfigError",
    "EngineConfig",
    "Evaluation",
    "JourneyEngine",
    "JourneyEngineError",
    "KnowledgeBaseError",
    "NextBestAction",
    "Nudge",
    "NudgeRecord",
    "ProfileInput",
    "ScoreBreakdown",
    "load_engine_config",
    "score_profile",
]
__version__ = "0.1.0"
