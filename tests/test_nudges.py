"""Tests for journey_engine.nudges."""

from __future__ import annotations

from datetime import timedelta

import pytest

from conftest import make_snapshot
from journey_engine.models import NudgeRecord
from journey_engine.nudges import (
    NUDGE_TRIGGERS,
    TRIGGERS_BY_ID,
    NudgeTrigger,
    adaptive_threshold,
    calculate_trigger_score,
    eligible_triggers,
    nudge_content,
    proactive_chat_message,
    resolve_trigger,
    select_nudge,
    select_trigger,
    update_history,
)


def _calculator_prompt_snapshot():
    # Engaged, high-ICP visitor who has not opened the calculator yet.
    return make_snapshot(modules=4, time_on_site_seconds=500, icp_score=80)


class TestTriggerScore:
    def test_empty_snapshot_scores_zero(self):
        score = calculate_trigger_score(make_snapshot())
        assert score.total_score == 0
        assert score.threshold == 0.7

    def test_saturated_snapshot_scores_one(self):
        snapshot = make_snapshot(
            modules=6, steps=5, time_on_site_seconds=1200, icp_score=100
        )
        score = calculate_trigger_score(snapshot)
        assert score.time_weight == 1.0
        assert score.engagement_weight == pytest.approx(1.0)
        assert score.intent_weight == 1.0
        assert score.total_score == pytest.approx(1.0)

    def test_intent_signals_add_and_cap(self):
        snapshot = make_snapshot(icp_score=60, calculator_completed=True, has_seen_pricing=True)
        assert calculate_trigger_score(snapshot).intent_weight == 1.0
        snapshot = make_snapshot(icp_score=40, has_seen_pricing=True)
        assert calculate_trigger_score(snapshot).intent_weight == pytest.approx(0.6)

    def test_custom_weights(self):
        snapshot = make_snapshot(icp_score=50)
        score = calculate_trigger_score(snapshot, {"time": 0, "engagement": 0, "intent": 1})
        assert score.total_score == pytest.approx(0.5)


class TestAdaptiveThreshold:
    def test_engaged_high_icp_lowers_threshold(self):
        assert adaptive_threshold(make_snapshot(modules=2, icp_score=80)) == 0.5

    def test_passive_first_visit_raises_threshold(self):
        assert adaptive_threshold(make_snapshot(time_on_site_seconds=20)) == 0.8

    def test_default(self):
        assert adaptive_threshold(make_snapshot(modules=1, time_on_site_seconds=90)) == 0.7


class TestConditions:
    def test_calculator_prompt_condition_holds_after_two_modules(self):
        snapshot = make_snapshot(modules=2, calculator_completed=False, time_on_site_seconds=150)
        assert TRIGGERS_BY_ID["calculator_prompt"].condition(snapshot) is True
        assert TRIGGERS_BY_ID["calculator_completed"].condition(snapshot) is False

    def test_trigger_ids_are_unique(self):
        assert len(TRIGGERS_BY_ID) == len(NUDGE_TRIGGERS) == 10


class TestEligibility:
    def test_calculator_prompt_selected_when_it_clears_threshold(self, now):
        nudge = select_nudge(_calculator_prompt_snapshot(), {}, now)
        assert nudge is not None
        assert nudge.id == "calculator_prompt"
        assert nudge.action is not None and nudge.action.type == "open_calculator"

    def test_below_threshold_is_not_eligible(self, now):
        snapshot = make_snapshot(modules=2, time_on_site_seconds=150)
        assert TRIGGERS_BY_ID["calculator_prompt"] not in eligible_triggers(snapshot, {}, now)

    def test_within_cooldown_not_eligible(self, now):
        history = {"calculator_prompt": NudgeRecord(count=1, last_shown_at=now - timedelta(minutes=10))}
        assert select_nudge(_calculator_prompt_snapshot(), history, now) is None

    def test_after_cooldown_eligible_again(self, now):
        history = {"calculator_prompt": NudgeRecord(count=1, last_shown_at=now - timedelta(minutes=31))}
        nudge = select_nudge(_calculator_prompt_snapshot(), history, now)
        assert nudge is not None and nudge.id == "calculator_prompt"

    def test_max_occurrences_reached(self, now):
        history = {"calculator_prompt": NudgeRecord(count=2, last_shown_at=now - timedelta(days=3))}
        assert select_nudge(_calculator_prompt_snapshot(), history, now) is None

    def test_stale_history_ids_are_ignored(self, now):
        history = {"retired_trigger": NudgeRecord(count=5, last_shown_at=now)}
        snapshot = _calculator_prompt_snapshot()
        assert eligible_triggers(snapshot, history, now) == eligible_triggers(snapshot, {}, now)

    def test_naive_history_timestamps_are_utc(self, now):
        naive = (now - timedelta(minutes=10)).replace(tzinfo=None)
        history = {"calculator_prompt": NudgeRecord(count=1, last_shown_at=naive)}
        assert select_nudge(_calculator_prompt_snapshot(), history, now) is None

    def test_never_returns_trigger_in_cooldown_or_exhausted(self, now):
        snapshot = make_snapshot(
            modules=3, time_on_site_seconds=400, icp_score=90,
            calculator_completed=True, has_seen_pricing=True,
        )
        history = {}
        shown = []
        for _ in range(6):
            trigger = select_trigger(snapshot, history, now)
            if trigger is None:
                break
            record = history.get(trigger.id)
            if record is not None:
                assert (now - record.last_shown_at) >= timedelta(minutes=trigger.cooldown_minutes)
                assert trigger.max_occurrences is None or record.count < trigger.max_occurrences
            shown.append(trigger.id)
            history = update_history(trigger.id, history, now)
        assert len(shown) == len(set(shown))


class TestResolution:
    def test_milestone_beats_higher_priority_intent(self, now):
        # halfway (milestone, priority 8) and high_icp_demo_push (intent, priority 10)
        snapshot = make_snapshot(
            modules=3, time_on_site_seconds=200, icp_score=90, calculator_completed=True
        )
        eligible = {t.id for t in eligible_triggers(snapshot, {}, now)}
        assert {"halfway_milestone", "high_icp_demo_push"} <= eligible
        assert select_trigger(snapshot, {}, now).id == "halfway_milestone"

    def test_milestone_wins_regardless_of_priority(self):
        low_milestone = NudgeTrigger(
            id="m", name="m", trigger_type="milestone", priority=1,
            cooldown_minutes=0, condition=lambda s: True,
        )
        high_intent = NudgeTrigger(
            id="i", name="i", trigger_type="intent", priority=10,
            cooldown_minutes=0, condition=lambda s: True,
        )
        assert resolve_trigger([high_intent, low_milestone]) is low_milestone

    def test_priority_within_bucket_then_declaration_order(self):
        a = NudgeTrigger(id="a", name="a", trigger_type="intent", priority=5,
                         cooldown_minutes=0, condition=lambda s: True)
        b = NudgeTrigger(id="b", name="b", trigger_type="intent", priority=9,
                         cooldown_minutes=0, condition=lambda s: True)
        c = NudgeTrigger(id="c", name="c", trigger_type="intent", priority=9,
                         cooldown_minutes=0, condition=lambda s: True)
        assert resolve_trigger([a, b, c]) is b

    def test_empty(self):
        assert resolve_trigger([]) is None


class TestFirstModule:
    def test_fires_once(self, now):
        snapshot = make_snapshot(modules=1, time_on_site_seconds=60, icp_score=80)
        nudge = select_nudge(snapshot, {}, now)
        assert nudge is not None and nudge.id == "first_module_congrats"

        history = update_history(nudge.id, {}, now)
        assert select_nudge(snapshot, history, now + timedelta(days=2)) is None


class TestUpdateHistory:
    def test_returns_new_mapping(self, now):
        original = {"inactive_2min": NudgeRecord(count=1, last_shown_at=now - timedelta(hours=1))}
        updated = update_history("inactive_2min", original, now)
        assert updated is not original
        assert original["inactive_2min"].count == 1
        assert updated["inactive_2min"].count == 2
        assert updated["inactive_2min"].last_shown_at == now

    def test_first_show(self, now):
        updated = update_history("welcome_explore", None, now)
        assert updated == {"welcome_explore": NudgeRecord(count=1, last_shown_at=now)}


class TestContent:
    def test_unknown_trigger_falls_back_to_welcome(self):
        assert nudge_content("nope").id == "welcome_explore"

    def test_every_trigger_has_content(self):
        for trigger in NUDGE_TRIGGERS:
            assert nudge_content(trigger.id).id == trigger.id


class TestProactiveChatMessage:
    def test_thorough_explorer(self):
        snapshot = make_snapshot(modules=3, icp_score=80, time_on_site_seconds=200)
        assert "grondig" in proactive_chat_message(snapshot)

    def test_after_calculator(self):
        snapshot = make_snapshot(calculator_completed=True, icp_score=65, messages_count=1)
        assert "ROI" in proactive_chat_message(snapshot)

    def test_idle_mid_journey(self):
        snapshot = make_snapshot(modules=2, inactivity_seconds=90)
        assert proactive_chat_message(snapshot).startswith("Vragen")

    def test_nothing_to_say(self):
        assert proactive_chat_message(make_snapshot()) is None
