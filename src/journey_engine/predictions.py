"""Next-best-action prediction.

Each rule inspects the snapshot independently and may propose one candidate.
Candidates are ranked by priority, then confidence; the winner is returned.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable

from journey_engine.models import ActionLink, BehaviorSnapshot, NextBestAction

logger = logging.getLogger(__name__)

TARGET_MODULES = 6
AVG_MODULE_SECONDS = 150
HIGH_INTENT_ICP = 70

# Industry -> last viewed module -> typical next modules.
COMMON_PATHS: dict[str, dict[str, tuple[str, ...]]] = {
    "ecommerce": {
        "command-center": ("ad-builder", "analytics-hub"),
        "ad-builder": ("analytics-hub", "roi-calculator"),
        "analytics-hub": ("roi-calculator", "content-pipeline"),
        "roi-calculator": ("demo-scheduling", "pricing"),
    },
    "saas": {
        "command-center": ("campaign-orchestrator", "content-pipeline"),
        "campaign-orchestrator": ("content-pipeline", "analytics-hub"),
        "content-pipeline": ("roi-calculator", "analytics-hub"),
        "roi-calculator": ("demo-scheduling", "pricing"),
    },
    "agency": {
        "command-center": ("multi-account-manager", "ad-builder"),
        "multi-account-manager": ("ad-builder", "analytics-hub"),
        "ad-builder": ("roi-calculator", "analytics-hub"),
        "roi-calculator": ("demo-scheduling", "pricing"),
    },
    "other": {
        "command-center": ("ad-builder", "analytics-hub", "content-pipeline"),
        "ad-builder": ("analytics-hub", "roi-calculator"),
        "analytics-hub": ("roi-calculator",),
        "roi-calculator": ("demo-scheduling",),
    },
}

MODULE_TIME_ESTIMATES: dict[str, int] = {
    "command-center": 120,
    "ad-builder": 180,
    "analytics-hub": 150,
    "campaign-orchestrator": 180,
    "content-pipeline": 150,
    "multi-account-manager": 180,
    "roi-calculator": 240,
    "demo-scheduling": 300,
}

MODULE_TITLES: dict[str, str] = {
    "command-center": "Command Center Overview",
    "ad-builder": "AI Ad Builder Studio",
    "analytics-hub": "Analytics Hub",
    "campaign-orchestrator": "Campaign Orchestrator",
    "content-pipeline": "Content Pipeline",
    "multi-account-manager": "Multi-Account Manager",
    "roi-calculator": "ROI Calculator",
    "demo-scheduling": "Schedule Your Demo",
}


def module_title(module_id: str) -> str:
    return MODULE_TITLES.get(module_id, module_id)


# ---------------------------------------------------------------------------
# Candidate rules
# ---------------------------------------------------------------------------

def _demo_after_calculator(s: BehaviorSnapshot) -> NextBestAction | None:
    if not (s.calculator_completed and s.icp_score > HIGH_INTENT_ICP and not s.has_scheduled_demo):
        return None
    industry = s.industry or "profile"
    return NextBestAction(
        id="demo_after_calculator",
        type="demo",
        priority=10,
        confidence=0.95,
        title="Ready for the Next Step?",
        message=(
            f"Based on your {industry} and ROI calculations, let's discuss implementation. "
            "Most teams like yours see value in a 30-min strategy call."
        ),
        reason="Calculator completed with high ICP score",
        action=ActionLink(label="Schedule Strategy Call", target="/demo-scheduling"),
    )


def _calculator_after_modules(s: BehaviorSnapshot) -> NextBestAction | None:
    if not (s.modules_count >= 2 and not s.calculator_completed and s.time_on_site_seconds > 120):
        return None
    return NextBestAction(
        id="calculator_after_modules",
        type="calculator",
        priority=9,
        confidence=0.85,
        title="Calculate Your Potential ROI",
        message=(
            f"You've explored {s.modules_count} modules. "
            "Want to see your potential savings? Takes 2 minutes."
        ),
        reason="2+ modules viewed, no calculator yet",
        action=ActionLink(label="Open ROI Calculator", target="/roi-calculator"),
    )


def _path_suggestion(s: BehaviorSnapshot) -> NextBestAction | None:
    last = s.last_viewed_module
    if last is None or s.industry is None:
        return None
    paths = COMMON_PATHS.get(s.industry, COMMON_PATHS["other"])
    unseen = [m for m in paths.get(last, ()) if m not in s.modules_viewed]
    if not unseen:
        return None
    next_module = unseen[0]
    minutes = math.ceil(MODULE_TIME_ESTIMATES.get(next_module, 120) / 60)
    return NextBestAction(
        id=f"suggest_{next_module}",
        type="suggest_module",
        priority=7,
        confidence=0.75,
        title=module_title(next_module),
        message=f"Most {s.industry} teams explore this next. {minutes} min to complete.",
        reason=f"Common path after {last} for {s.industry}",
        action=ActionLink(label="Explore Module", target=f"/explorer?module={next_module}"),
    )


def _halfway_encouragement(s: BehaviorSnapshot) -> NextBestAction | None:
    if s.modules_count != 3 or "halfway" in s.completed_steps:
        return None
    return NextBestAction(
        id="halfway_encouragement",
        type="tip",
        priority=6,
        confidence=1.0,
        title="Goed bezig!",
        message="Geweldige vooruitgang! Blijf verkennen om alle mogelijkheden te ontdekken.",
        reason="Milestone: 3 modules viewed",
    )


def _chat_offer(s: BehaviorSnapshot) -> NextBestAction | None:
    if not (s.time_on_site_seconds > 300 and s.modules_count < 3 and s.messages_count == 0):
        return None
    return NextBestAction(
        id="chat_offer_help",
        type="chat",
        priority=5,
        confidence=0.65,
        title="Need Guidance?",
        message=(
            "Taking your time exploring? I can point you to the most relevant "
            "modules for your needs."
        ),
        reason="Long time on site, low exploration",
        action=ActionLink(label="Chat with Assistant", target="open-chat"),
    )


def _resume_after_inactivity(s: BehaviorSnapshot) -> NextBestAction | None:
    if not (s.inactivity_seconds > 120 and 0 < s.modules_count < 5):
        return None
    return NextBestAction(
        id="inactivity_nudge",
        type="suggest_module",
        priority=4,
        confidence=0.55,
        title="Continue Your Journey",
        message=(
            f"Pick up where you left off! "
            f"{TARGET_MODULES - s.modules_count} modules remaining."
        ),
        reason="Inactivity detected",
        action=ActionLink(label="Resume Exploring", target="/explorer"),
    )


ActionRule = Callable[[BehaviorSnapshot], NextBestAction | None]

ACTION_RULES: tuple[ActionRule, ...] = (
    _demo_after_calculator,
    _calculator_after_modules,
    _path_suggestion,
    _halfway_encouragement,
    _chat_offer,
    _resume_after_inactivity,
)


def candidate_actions(
    snapshot: BehaviorSnapshot,
    rules: tuple[ActionRule, ...] = ACTION_RULES,
) -> list[NextBestAction]:
    """Every candidate the rules produce, ranked best first."""
    candidates = [a for rule in rules if (a := rule(snapshot)) is not None]
    candidates.sort(key=lambda a: (a.priority, a.confidence), reverse=True)
    return candidates


def predict_next_best_action(
    snapshot: BehaviorSnapshot,
    rules: tuple[ActionRule, ...] = ACTION_RULES,
) -> NextBestAction | None:
    candidates = candidate_actions(snapshot, rules)
    if not candidates:
        return None
    logger.debug("Next-best-action candidates: %s", [a.id for a in candidates])
    return candidates[0]


# ---------------------------------------------------------------------------
# Progress helpers
# ---------------------------------------------------------------------------

def calculate_journey_progress(snapshot: BehaviorSnapshot) -> int:
    """Percent of the journey done: modules plus calculator/demo bonuses, max 100."""
    progress = snapshot.modules_count / TARGET_MODULES * 100
    if snapshot.calculator_completed:
        progress += 10
    if snapshot.has_scheduled_demo:
        progress += 10
    return min(round(progress), 100)


def estimate_time_to_completion(snapshot: BehaviorSnapshot) -> int:
    """Minutes left to finish the journey."""
    remaining = max(TARGET_MODULES - snapshot.modules_count, 0)
    seconds = remaining * AVG_MODULE_SECONDS
    if not snapshot.calculator_completed:
        seconds += MODULE_TIME_ESTIMATES["roi-calculator"]
    if snapshot.icp_score > HIGH_INTENT_ICP and not snapshot.has_scheduled_demo:
        seconds += MODULE_TIME_ESTIMATES["demo-scheduling"]
    return math.ceil(seconds / 60)


def progress_message(snapshot: BehaviorSnapshot) -> str:
    progress = calculate_journey_progress(snapshot)
    if progress < 25:
        return "Just getting started! Let's explore what's possible."
    if progress < 50:
        return f"{progress}% complete. You're making great progress!"
    if progress < 75:
        return f"Over halfway there! {100 - progress}% remaining."
    if progress < 100:
        return f"Almost done! Just {100 - progress}% left to see everything."
    return "You've explored everything! Ready to move forward?"
