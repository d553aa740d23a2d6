"""JourneyEngine facade: one evaluation cycle in a single call."""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from journey_engine import achievements as achievements_mod
from journey_engine import nudges as nudges_mod
from journey_engine import predictions
from journey_engine.achievements import Achievement, AchievementTier, UnlockedSet
from journey_engine.config import EngineConfig
from journey_engine.icp import score_profile
from journey_engine.knowledge.loader import load_knowledge_base
from journey_engine.knowledge.matcher import best_match, related_questions
from journey_engine.knowledge.models import KnowledgeBase, MatchContext, QuestionMatch
from journey_engine.knowledge.routing import (
    DISCLAIMER,
    FALLBACK_TIERS,
    FallbackResponse,
    ResponseTier,
    build_fallback,
    classify_response,
    looks_like_question,
)
from journey_engine.models import (
    BehaviorSnapshot,
    NextBestAction,
    Nudge,
    NudgeHistory,
    ProfileInput,
    ScoreBreakdown,
)
from journey_engine.telemetry import (
    DecisionSink,
    NoOpDecisionSink,
    achievements_decision,
    answer_decision,
    next_action_decision,
    nudge_decision,
)
from journey_engine.timing import typing_delay_ms

logger = logging.getLogger(__name__)


@dataclass
class Evaluation:
    """Decisions for one cycle plus the state the caller must persist."""

    nudge: Nudge | None
    nudge_history: NudgeHistory
    new_achievements: list[Achievement]
    unlocked: UnlockedSet
    total_points: int
    achievement_tier: AchievementTier
    next_action: NextBestAction | None
    journey_progress: int
    minutes_to_completion: int
    proactive_message: str | None = None


@dataclass
class AnswerOutcome:
    query: str
    tier: ResponseTier
    confidence: float
    match: QuestionMatch | None = None
    related: list[QuestionMatch] = field(default_factory=list)
    disclaimer: str | None = None
    fallback: FallbackResponse | None = None
    should_consult_llm: bool = False
    typing_delay_ms: int = 0

    @property
    def message(self) -> str:
        if self.fallback is not None:
            return self.fallback.message
        if self.match is None:
            return ""
        if self.disclaimer:
            return f"{self.match.answer}\n\n{self.disclaimer}"
        return self.match.answer


class JourneyEngine:
    """Wires the decision components together without keeping session state.

    Everything that persists across cycles (nudge history, unlocked
    achievements) goes in through arguments and comes back in the result.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        knowledge_base: KnowledgeBase | None = None,
        *,
        telemetry_sink: DecisionSink | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self._knowledge_base = knowledge_base
        self.telemetry_sink = telemetry_sink or NoOpDecisionSink()
        self.rng = rng or random.Random()
        self._routing_rules = self.config.routing_rules()

    @property
    def knowledge_base(self) -> KnowledgeBase:
        """Knowledge base, loaded from ``config.knowledge_base_path`` on first use."""
        if self._knowledge_base is None:
            self._knowledge_base = load_knowledge_base(self.config.knowledge_base_path)
        return self._knowledge_base

    # -- profile ------------------------------------------------------------

    def score_profile(self, profile: ProfileInput) -> ScoreBreakdown:
        return score_profile(profile)

    def snapshot_with_profile(
        self, snapshot: BehaviorSnapshot, profile: ProfileInput
    ) -> BehaviorSnapshot:
        """Copy of *snapshot* carrying the profile's ICP score and industry."""
        breakdown = score_profile(profile)
        return snapshot.model_copy(
            update={"icp_score": breakdown.total_score, "industry": profile.industry}
        )

    # -- evaluation cycle ---------------------------------------------------

    def evaluate(
        self,
        snapshot: BehaviorSnapshot,
        *,
        nudge_history: NudgeHistory | None = None,
        unlocked: Iterable[str] = frozenset(),
        now: datetime | None = None,
    ) -> Evaluation:
        """Run nudge selection, achievement unlocks and next-best-action.

        The returned ``nudge_history`` already records the selected nudge as
        shown; the caller persists it together with ``unlocked``.
        """
        at = now or datetime.now(timezone.utc)
        history = dict(nudge_history or {})

        trigger = nudges_mod.select_trigger(snapshot, history, at)
        nudge = None
        if trigger is not None:
            nudge = nudges_mod.nudge_content(trigger.id)
            history = nudges_mod.update_history(trigger.id, history, at)
        self.telemetry_sink.emit(nudge_decision(trigger))

        new_achievements, grown = achievements_mod.unlock(snapshot, unlocked)
        points = achievements_mod.total_points(grown)
        tier = achievements_mod.achievement_tier(points)
        self.telemetry_sink.emit(achievements_decision(new_achievements, points, tier))

        action = predictions.predict_next_best_action(snapshot)
        self.telemetry_sink.emit(next_action_decision(action))

        logger.debug(
            "Evaluated cycle: nudge=%s achievements=%d action=%s",
            nudge.id if nudge else None,
            len(new_achievements),
            action.id if action else None,
        )
        return Evaluation(
            nudge=nudge,
            nudge_history=history,
            new_achievements=new_achievements,
            unlocked=grown,
            total_points=points,
            achievement_tier=tier,
            next_action=action,
            journey_progress=predictions.calculate_journey_progress(snapshot),
            minutes_to_completion=predictions.estimate_time_to_completion(snapshot),
            proactive_message=nudges_mod.proactive_chat_message(snapshot),
        )

    # -- questions ----------------------------------------------------------

    def answer(self, query: str, snapshot: BehaviorSnapshot | None = None) -> AnswerOutcome:
        """Match *query* and route it to an answer tier or a fallback."""
        kb = self.knowledge_base
        context = MatchContext.from_snapshot(snapshot) if snapshot else MatchContext()

        top = best_match(query, kb, context)
        confidence = top.confidence if top else 0.0
        tier = classify_response(query, confidence, self._routing_rules)
        match = top if top and confidence >= self.config.min_confidence else None

        outcome = AnswerOutcome(query=query, tier=tier, confidence=confidence, match=match)
        if match is not None:
            outcome.related = related_questions(
                match, kb, self.config.related_questions_limit
            )
        if tier == "answer_with_disclaimer":
            outcome.disclaimer = DISCLAIMER
        if tier in FALLBACK_TIERS:
            outcome.fallback = build_fallback(tier, query, context, kb, self.rng)
            outcome.should_consult_llm = tier != "escalation" and looks_like_question(query)

        outcome.typing_delay_ms = typing_delay_ms(
            len(outcome.message), self.rng, **self.config.typing.as_kwargs()
        )

        self.telemetry_sink.emit(
            answer_decision(
                tier,
                confidence,
                match.question_id if match else None,
                outcome.should_consult_llm,
            )
        )
        return outcome
