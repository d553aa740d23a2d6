"""Tests for journey_engine.telemetry."""

from __future__ import annotations

import logging

import pytest

from journey_engine.achievements import ACHIEVEMENTS_BY_ID, achievement_tier
from journey_engine.nudges import TRIGGERS_BY_ID
from journey_engine.telemetry import (
    ACHIEVEMENTS,
    ANSWER,
    NEXT_ACTION,
    NUDGE,
    DecisionEvent,
    DecisionSink,
    InMemoryDecisionSink,
    LoggerDecisionSink,
    NoOpDecisionSink,
    achievements_decision,
    answer_decision,
    next_action_decision,
    nudge_decision,
)


def test_sinks_satisfy_protocol():
    for sink in (NoOpDecisionSink(), InMemoryDecisionSink(), LoggerDecisionSink()):
        assert isinstance(sink, DecisionSink)


def test_unknown_kind_rejected():
    with pytest.raises(ValueError, match="journey.clicked"):
        DecisionEvent("journey.clicked")


def test_timestamp_defaults_to_now():
    assert DecisionEvent(NUDGE).timestamp_ms > 0


class TestBuilders:
    def test_nudge_without_trigger(self):
        event = nudge_decision(None)
        assert event.kind == NUDGE
        assert event.attributes == {"trigger_id": None, "trigger_type": None}

    def test_nudge_with_trigger(self):
        event = nudge_decision(TRIGGERS_BY_ID["calculator_prompt"])
        assert event.attributes == {"trigger_id": "calculator_prompt", "trigger_type": "intent"}

    def test_achievements(self):
        new = [ACHIEVEMENTS_BY_ID["first_step"], ACHIEVEMENTS_BY_ID["explorer"]]
        event = achievements_decision(new, 120, achievement_tier(120))
        assert event.kind == ACHIEVEMENTS
        assert event.attributes == {
            "unlocked": ["first_step", "explorer"],
            "total_points": 120,
            "tier": "silver",
        }

    def test_no_next_action(self):
        event = next_action_decision(None)
        assert event.kind == NEXT_ACTION
        assert set(event.attributes.values()) == {None}

    def test_answer_rounds_confidence(self):
        event = answer_decision("direct_answer", 0.666666, "pricing_cost", False)
        assert event.kind == ANSWER
        assert event.attributes["confidence"] == 0.6667
        assert event.summary() == (
            "journey.answer tier=direct_answer confidence=0.6667 "
            "question_id=pricing_cost should_consult_llm=False"
        )


def test_in_memory_sink_filters_by_kind():
    sink = InMemoryDecisionSink()
    sink.emit(nudge_decision(None))
    sink.emit(answer_decision("escalation", 0.1, None, False))
    sink.emit(answer_decision("direct_answer", 0.9, "pricing_cost", False))
    assert len(sink.events) == 3
    assert [e.attributes["tier"] for e in sink.of_kind(ANSWER)] == ["escalation", "direct_answer"]
    assert sink.last(ANSWER).attributes["question_id"] == "pricing_cost"
    assert sink.last(NEXT_ACTION) is None


def test_logger_sink_emits_summary_with_attributes(caplog):
    sink = LoggerDecisionSink("journey_engine.decisions.test")
    event = next_action_decision(None)
    with caplog.at_level(logging.INFO, logger="journey_engine.decisions.test"):
        sink.emit(event)
    record = caplog.records[-1]
    assert record.getMessage() == event.summary()
    assert record.decision == NEXT_ACTION
    assert record.decision_attributes == event.attributes
    assert record.decision_timestamp_ms == event.timestamp_ms
