"""Nudge trigger engine: pick at most one proactive nudge per evaluation.

Triggers are declarative records in ``NUDGE_TRIGGERS``.  Selection is a
two-stage filter-then-resolve:

  1. Eligibility: condition holds, multi-signal score clears the trigger's
     threshold (when it declares one), cooldown elapsed, and
     ``max_occurrences`` not yet reached.
  2. Resolution: milestone triggers outrank every other type; within a
     type bucket the highest declared priority wins.

History is passed in and returned, never mutated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Callable, Literal

from journey_engine.models import (
    BehaviorSnapshot,
    Nudge,
    NudgeAction,
    NudgeHistory,
    NudgeRecord,
)

logger = logging.getLogger(__name__)

TriggerType = Literal["milestone", "time-based", "intent", "inactivity"]

DEFAULT_WEIGHTS: dict[str, float] = {"time": 0.3, "engagement": 0.4, "intent": 0.3}
INTENT_HEAVY_WEIGHTS: dict[str, float] = {"time": 0.2, "engagement": 0.3, "intent": 0.5}
DEFAULT_THRESHOLD = 0.7

_FULL_TIME_SECONDS = 600
_FULL_MODULES = 6
_FULL_STEPS = 5


@dataclass(frozen=True)
class TriggerScore:
    """Multi-signal score for one trigger; every weight is in [0, 1]."""

    time_weight: float
    engagement_weight: float
    intent_weight: float
    total_score: float
    threshold: float = DEFAULT_THRESHOLD

    @property
    def passes(self) -> bool:
        return self.total_score >= self.threshold


@dataclass(frozen=True)
class NudgeTrigger:
    id: str
    name: str
    trigger_type: TriggerType
    priority: int
    cooldown_minutes: float
    condition: Callable[[BehaviorSnapshot], bool]
    scoring_fn: Callable[[BehaviorSnapshot], TriggerScore] | None = None
    max_occurrences: int | None = None


def calculate_trigger_score(
    snapshot: BehaviorSnapshot,
    weights: dict[str, float] | None = None,
) -> TriggerScore:
    """Weighted time/engagement/intent score with the default threshold."""
    w = weights or DEFAULT_WEIGHTS
    time_weight = min(snapshot.time_on_site_seconds / _FULL_TIME_SECONDS, 1.0)

    modules = min(snapshot.modules_count / _FULL_MODULES, 1.0)
    steps = min(snapshot.steps_count / _FULL_STEPS, 1.0)
    engagement_weight = modules * 0.7 + steps * 0.3

    intent = snapshot.icp_score / 100
    if snapshot.calculator_completed:
        intent += 0.3
    if snapshot.has_seen_pricing:
        intent += 0.2
    intent_weight = min(intent, 1.0)

    total = (
        time_weight * w.get("time", 0.0)
        + engagement_weight * w.get("engagement", 0.0)
        + intent_weight * w.get("intent", 0.0)
    )
    return TriggerScore(
        time_weight=time_weight,
        engagement_weight=engagement_weight,
        intent_weight=intent_weight,
        total_score=total,
        threshold=DEFAULT_THRESHOLD,
    )


def adaptive_threshold(snapshot: BehaviorSnapshot) -> float:
    """Lower the bar for engaged high-ICP visitors, raise it for passive ones."""
    if snapshot.icp_score > 75 and snapshot.modules_count >= 2:
        return 0.5
    if (
        snapshot.modules_count == 0
        and snapshot.messages_count == 0
        and snapshot.time_on_site_seconds < 60
    ):
        return 0.8
    return DEFAULT_THRESHOLD


def _scored(
    threshold: float | Callable[[BehaviorSnapshot], float],
    weights: dict[str, float] | None = None,
) -> Callable[[BehaviorSnapshot], TriggerScore]:
    def score(snapshot: BehaviorSnapshot) -> TriggerScore:
        base = calculate_trigger_score(snapshot, weights)
        bar = threshold(snapshot) if callable(threshold) else threshold
        return replace(base, threshold=bar)

    return score


# ---------------------------------------------------------------------------
# Trigger table
# ---------------------------------------------------------------------------

NUDGE_TRIGGERS: tuple[NudgeTrigger, ...] = (
    # Milestones
    NudgeTrigger(
        id="first_module_congrats",
        name="First Module Explored",
        trigger_type="milestone",
        priority=9,
        cooldown_minutes=1440,
        max_occurrences=1,
        condition=lambda s: s.modules_count == 1 and s.steps_count == 1,
        scoring_fn=_scored(0.3),
    ),
    NudgeTrigger(
        id="halfway_milestone",
        name="Halfway Through Journey",
        trigger_type="milestone",
        priority=8,
        cooldown_minutes=1440,
        max_occurrences=1,
        condition=lambda s: s.modules_count == 3 and s.steps_count >= 3,
        scoring_fn=_scored(0.4),
    ),
    NudgeTrigger(
        id="all_modules_explored",
        name="All Modules Complete - Next Step",
        trigger_type="milestone",
        priority=10,
        cooldown_minutes=1440,
        max_occurrences=1,
        condition=lambda s: s.modules_count >= 6 and s.steps_count >= 6,
        scoring_fn=_scored(0.2),
    ),
    NudgeTrigger(
        id="calculator_completed",
        name="Calculator Done - Schedule Demo",
        trigger_type="milestone",
        priority=10,
        cooldown_minutes=1440,
        max_occurrences=1,
        condition=lambda s: (
            s.calculator_completed and not s.has_scheduled_demo and s.time_on_site_seconds > 300
        ),
        scoring_fn=_scored(0.3),
    ),
    # Time-based
    NudgeTrigger(
        id="welcome_explore",
        name="Welcome: Encourage Exploration",
        trigger_type="time-based",
        priority=6,
        cooldown_minutes=1440,
        max_occurrences=1,
        condition=lambda s: (
            30 < s.time_on_site_seconds < 90
            and s.modules_count == 0
            and s.messages_count == 0
        ),
        scoring_fn=_scored(adaptive_threshold),
    ),
    # Intent
    NudgeTrigger(
        id="calculator_prompt",
        name="Suggest Calculator After 2 Modules",
        trigger_type="intent",
        priority=9,
        cooldown_minutes=30,
        max_occurrences=2,
        condition=lambda s: (
            s.modules_count >= 2
            and not s.calculator_completed
            and 120 < s.time_on_site_seconds < 600
        ),
        scoring_fn=_scored(0.6),
    ),
    NudgeTrigger(
        id="high_icp_demo_push",
        name="High ICP Score - Strong Demo CTA",
        trigger_type="intent",
        priority=10,
        cooldown_minutes=120,
        max_occurrences=2,
        condition=lambda s: (
            s.icp_score > 75
            and s.modules_count >= 3
            and s.calculator_completed
            and not s.has_scheduled_demo
        ),
        scoring_fn=_scored(0.5, INTENT_HEAVY_WEIGHTS),
    ),
    NudgeTrigger(
        id="seen_pricing_no_demo",
        name="Saw Pricing But No Demo",
        trigger_type="intent",
        priority=8,
        cooldown_minutes=60,
        max_occurrences=2,
        condition=lambda s: (
            s.has_seen_pricing and not s.has_scheduled_demo and s.time_on_site_seconds > 180
        ),
        scoring_fn=_scored(0.55),
    ),
    NudgeTrigger(
        id="founding_member_urgency",
        name="Founding Member Urgency (High ICP)",
        trigger_type="intent",
        priority=9,
        cooldown_minutes=180,
        max_occurrences=2,
        condition=lambda s: (
            s.icp_score > 70
            and s.calculator_completed
            and s.has_seen_pricing
            and not s.has_scheduled_demo
        ),
        scoring_fn=_scored(0.45, INTENT_HEAVY_WEIGHTS),
    ),
    # Inactivity
    NudgeTrigger(
        id="inactive_2min",
        name="Inactive for 3 minutes",
        trigger_type="inactivity",
        priority=4,
        cooldown_minutes=30,
        max_occurrences=1,
        condition=lambda s: (
            s.inactivity_seconds > 180
            and 0 < s.modules_count < 3
            and not s.calculator_completed
        ),
        scoring_fn=_scored(0.75),
    ),
)

TRIGGERS_BY_ID: dict[str, NudgeTrigger] = {t.id: t for t in NUDGE_TRIGGERS}


# ---------------------------------------------------------------------------
# Nudge copy
# ---------------------------------------------------------------------------

NUDGE_CONTENT: dict[str, Nudge] = {
    "welcome_explore": Nudge(
        id="welcome_explore",
        type="info",
        title="Welkom!",
        message="Verken onze modules om te ontdekken hoe ons platform jouw marketing kan transformeren.",
        action=NudgeAction(label="Start ontdekkingstour", type="navigate", value="/explorer"),
        icon="rocket",
        duration_ms=7000,
    ),
    "first_module_congrats": Nudge(
        id="first_module_congrats",
        type="celebration",
        title="Eerste module voltooid!",
        message="Geweldig begin! Nog 5 modules te ontdekken.",
        icon="sparkles",
        duration_ms=4000,
    ),
    "calculator_prompt": Nudge(
        id="calculator_prompt",
        type="cta",
        title="Benieuwd naar je ROI?",
        message="Je hebt al 2 modules verkend. Bereken nu hoeveel je kunt besparen!",
        action=NudgeAction(label="Bereken mijn ROI", type="open_calculator"),
        icon="chart",
        duration_ms=8000,
    ),
    "halfway_milestone": Nudge(
        id="halfway_milestone",
        type="success",
        title="Lekker bezig!",
        message="Je hebt al meerdere modules bekeken! Blijf ontdekken.",
        icon="bolt",
        duration_ms=5000,
    ),
    "all_modules_explored": Nudge(
        id="all_modules_explored",
        type="celebration",
        title="Alle modules voltooid!",
        message="Geweldig! Je hebt het volledige platform verkend. Klaar voor de volgende stap?",
        action=NudgeAction(label="Bereken ROI", type="open_calculator"),
        icon="trophy",
        duration_ms=10000,
    ),
    "calculator_completed": Nudge(
        id="calculator_completed",
        type="cta",
        title="Wow, indrukwekkende cijfers!",
        message="Zie je de potentie? Laten we bespreken hoe we dit realiseren.",
        action=NudgeAction(label="Plan strategic consultation", type="schedule_demo"),
        icon="briefcase",
        duration_ms=10000,
    ),
    "high_icp_demo_push": Nudge(
        id="high_icp_demo_push",
        type="cta",
        title="Perfect match!",
        message="Jouw profiel is ideaal voor ons platform. Nog 2 Founding Member slots beschikbaar!",
        action=NudgeAction(label="Claim je slot", type="schedule_demo"),
        icon="trophy",
        duration_ms=12000,
    ),
    "inactive_2min": Nudge(
        id="inactive_2min",
        type="info",
        title="Pro tip",
        message="Bereken je ROI om te zien hoeveel je kunt besparen met ons platform!",
        action=NudgeAction(label="Bereken nu", type="open_calculator"),
        icon="coin",
        duration_ms=8000,
    ),
    "seen_pricing_no_demo": Nudge(
        id="seen_pricing_no_demo",
        type="cta",
        title="Interesse?",
        message="Je hebt onze pricing bekeken. Laten we bespreken hoe we je kunnen helpen!",
        action=NudgeAction(label="Plan gesprek", type="schedule_demo"),
        icon="handshake",
        duration_ms=9000,
    ),
    "founding_member_urgency": Nudge(
        id="founding_member_urgency",
        type="warning",
        title="Founding Member Slots",
        message="Nog maar 2 slots beschikbaar! Lock je rate voor 24 maanden.",
        action=NudgeAction(label="Claim je slot", type="schedule_demo"),
        icon="clock",
        duration_ms=12000,
    ),
}


def nudge_content(trigger_id: str) -> Nudge:
    """Copy for *trigger_id*, falling back to the welcome nudge."""
    return NUDGE_CONTENT.get(trigger_id, NUDGE_CONTENT["welcome_explore"])


# ---------------------------------------------------------------------------
# Eligibility and resolution
# ---------------------------------------------------------------------------

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _aware(value: datetime) -> datetime:
    # naive timestamps are taken as UTC
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def minutes_since(last_shown_at: datetime, now: datetime) -> float:
    return (_aware(now) - _aware(last_shown_at)).total_seconds() / 60


def is_eligible(
    trigger: NudgeTrigger,
    snapshot: BehaviorSnapshot,
    history: NudgeHistory,
    now: datetime,
) -> bool:
    if not trigger.condition(snapshot):
        return False

    if trigger.scoring_fn is not None and not trigger.scoring_fn(snapshot).passes:
        return False

    record = history.get(trigger.id)
    if record is None:
        return True

    if minutes_since(record.last_shown_at, now) < trigger.cooldown_minutes:
        return False
    if trigger.max_occurrences is not None and record.count >= trigger.max_occurrences:
        return False
    return True


def eligible_triggers(
    snapshot: BehaviorSnapshot,
    history: NudgeHistory | None = None,
    now: datetime | None = None,
    triggers: tuple[NudgeTrigger, ...] = NUDGE_TRIGGERS,
) -> list[NudgeTrigger]:
    """All triggers that may fire now, in declaration order.

    History entries for ids no longer in *triggers* are ignored.
    """
    hist = history or {}
    at = now or _utcnow()
    return [t for t in triggers if is_eligible(t, snapshot, hist, at)]


def resolve_trigger(eligible: list[NudgeTrigger]) -> NudgeTrigger | None:
    """Milestones first, then highest priority; declaration order breaks ties."""
    if not eligible:
        return None
    milestones = [t for t in eligible if t.trigger_type == "milestone"]
    bucket = milestones or eligible
    # sorted() is stable, so equal priorities keep declaration order
    return sorted(bucket, key=lambda t: t.priority, reverse=True)[0]


def select_trigger(
    snapshot: BehaviorSnapshot,
    history: NudgeHistory | None = None,
    now: datetime | None = None,
    triggers: tuple[NudgeTrigger, ...] = NUDGE_TRIGGERS,
) -> NudgeTrigger | None:
    eligible = eligible_triggers(snapshot, history, now, triggers)
    selected = resolve_trigger(eligible)
    logger.debug(
        "Nudge eligibility: %s -> %s",
        [t.id for t in eligible],
        selected.id if selected else None,
    )
    return selected


def select_nudge(
    snapshot: BehaviorSnapshot,
    history: NudgeHistory | None = None,
    now: datetime | None = None,
    triggers: tuple[NudgeTrigger, ...] = NUDGE_TRIGGERS,
) -> Nudge | None:
    """Return the single nudge to show this cycle, or ``None``.

    Does NOT record the nudge; the caller calls :func:`update_history`
    once it has actually shown it.
    """
    trigger = select_trigger(snapshot, history, now, triggers)
    if trigger is None:
        return None
    return nudge_content(trigger.id)


def update_history(
    trigger_id: str,
    history: NudgeHistory | None = None,
    now: datetime | None = None,
) -> NudgeHistory:
    """Return a new history with *trigger_id*'s count incremented and stamped."""
    hist = dict(history or {})
    previous = hist.get(trigger_id)
    hist[trigger_id] = NudgeRecord(
        count=(previous.count if previous else 0) + 1,
        last_shown_at=now or _utcnow(),
    )
    return hist


def proactive_chat_message(snapshot: BehaviorSnapshot) -> str | None:
    """Opening line for the chat widget when the visitor has not started chatting."""
    if (
        snapshot.icp_score > 70
        and snapshot.modules_count >= 3
        and snapshot.messages_count == 0
        and snapshot.time_on_site_seconds > 180
    ):
        return "Ik zie dat je het platform grondig verkent! Kan ik je ergens bij helpen?"

    if snapshot.calculator_completed and snapshot.icp_score > 60 and snapshot.messages_count < 3:
        return "Indrukwekkende ROI cijfers! Wil je bespreken hoe we dit kunnen realiseren?"

    if (
        2 <= snapshot.modules_count < 5
        and snapshot.inactivity_seconds > 60
        and snapshot.messages_count == 0
    ):
        return "Vragen over wat je tot nu toe hebt gezien? Ik help je graag!"

    return None
