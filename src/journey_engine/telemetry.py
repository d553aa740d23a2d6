"""Decision events reported by the facade after each engine decision.

The engine itself performs no I/O.  Every nudge, achievement, next-action
and answer decision becomes one :class:`DecisionEvent` handed to a sink, so
callers can forward decisions to their analytics layer.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from journey_engine.achievements import Achievement, AchievementTier
from journey_engine.models import NextBestAction
from journey_engine.nudges import NudgeTrigger

NUDGE = "journey.nudge"
ACHIEVEMENTS = "journey.achievements"
NEXT_ACTION = "journey.next_action"
ANSWER = "journey.answer"

DECISION_KINDS: frozenset[str] = frozenset({NUDGE, ACHIEVEMENTS, NEXT_ACTION, ANSWER})


@dataclass(frozen=True)
class DecisionEvent:
    """One engine decision; ``attributes`` hold only JSON-safe values."""

    kind: str
    attributes: dict[str, Any] = field(default_factory=dict)
    timestamp_ms: float = field(default_factory=lambda: time.time() * 1000)

    def __post_init__(self) -> None:
        if self.kind not in DECISION_KINDS:
            raise ValueError(f"Unknown decision kind {self.kind!r}")

    def summary(self) -> str:
        parts = [f"{k}={v}" for k, v in self.attributes.items()]
        return " ".join([self.kind, *parts])


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def nudge_decision(trigger: NudgeTrigger | None) -> DecisionEvent:
    return DecisionEvent(
        NUDGE,
        {
            "trigger_id": trigger.id if trigger else None,
            "trigger_type": trigger.trigger_type if trigger else None,
        },
    )


def achievements_decision(
    new_achievements: list[Achievement], total_points: int, tier: AchievementTier
) -> DecisionEvent:
    return DecisionEvent(
        ACHIEVEMENTS,
        {
            "unlocked": [a.id for a in new_achievements],
            "total_points": total_points,
            "tier": tier.tier,
        },
    )


def next_action_decision(action: NextBestAction | None) -> DecisionEvent:
    return DecisionEvent(
        NEXT_ACTION,
        {
            "action_id": action.id if action else None,
            "priority": action.priority if action else None,
            "confidence": action.confidence if action else None,
        },
    )


def answer_decision(
    tier: str, confidence: float, question_id: str | None, should_consult_llm: bool
) -> DecisionEvent:
    return DecisionEvent(
        ANSWER,
        {
            "tier": tier,
            "confidence": round(confidence, 4),
            "question_id": question_id,
            "should_consult_llm": should_consult_llm,
        },
    )


# ---------------------------------------------------------------------------
# Sinks
# ---------------------------------------------------------------------------

@runtime_checkable
class DecisionSink(Protocol):
    def emit(self, event: DecisionEvent) -> None:
        raise NotImplementedError


class NoOpDecisionSink:
    """Default sink that records nothing."""

    def emit(self, event: DecisionEvent) -> None:
        _ = event


class InMemoryDecisionSink:
    """Keeps every decision in order."""

    def __init__(self) -> None:
        self.events: list[DecisionEvent] = []

    def emit(self, event: DecisionEvent) -> None:
        self.events.append(event)

    def of_kind(self, kind: str) -> list[DecisionEvent]:
        return [e for e in self.events if e.kind == kind]

    def last(self, kind: str) -> DecisionEvent | None:
        matching = self.of_kind(kind)
        return matching[-1] if matching else None


class LoggerDecisionSink:
    """Logs each decision's summary line with the raw attributes attached."""

    def __init__(self, logger_name: str = "journey_engine.decisions") -> None:
        self.logger = logging.getLogger(logger_name)

    def emit(self, event: DecisionEvent) -> None:
        self.logger.info(
            "%s",
            event.summary(),
            extra={
                "decision": event.kind,
                "decision_attributes": event.attributes,
                "decision_timestamp_ms": event.timestamp_ms,
            },
        )
