"""Achievement evaluation over behavior snapshots.

Achievements are declarative records; evaluation walks the table and never
re-emits an id the caller already holds.  The unlocked set is a caller-owned
``frozenset`` that only grows.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Literal

from journey_engine.models import BehaviorSnapshot

logger = logging.getLogger(__name__)

Category = Literal["exploration", "engagement", "mastery", "conversion", "special"]
Rarity = Literal["common", "rare", "epic", "legendary"]
AchievementTierName = Literal["bronze", "silver", "gold", "platinum", "diamond"]

UnlockedSet = frozenset[str]

CATEGORY_PRIORITY: tuple[Category, ...] = (
    "conversion",
    "mastery",
    "engagement",
    "exploration",
    "special",
)

# (minimum points, tier); checked from the top
TIER_LADDER: tuple[tuple[int, AchievementTierName], ...] = (
    (1000, "diamond"),
    (500, "platinum"),
    (250, "gold"),
    (100, "silver"),
    (0, "bronze"),
)

ALL_MODULES = 9


@dataclass(frozen=True)
class Achievement:
    id: str
    title: str
    description: str
    category: Category
    points: int
    rarity: Rarity
    requirement: str
    predicate: Callable[[BehaviorSnapshot], bool]
    is_close: Callable[[BehaviorSnapshot], bool] | None = None
    progress: Callable[[BehaviorSnapshot], tuple[float, float]] | None = None
    reward: str | None = None


@dataclass(frozen=True)
class AchievementTier:
    tier: AchievementTierName
    next_tier_points: int  # 0 at the top of the ladder


@dataclass(frozen=True)
class AchievementProgress:
    current: float
    required: float
    percentage: float


def _night(s: BehaviorSnapshot) -> bool:
    return s.local_time is not None and s.local_time.hour >= 22


def _weekend(s: BehaviorSnapshot) -> bool:
    return s.local_time is not None and s.local_time.weekday() >= 5


ACHIEVEMENTS: tuple[Achievement, ...] = (
    # Exploration
    Achievement(
        id="first_step",
        title="Eerste Stap",
        description="Je eerste module bekeken",
        category="exploration",
        points=10,
        rarity="common",
        requirement="View 1 module",
        predicate=lambda s: s.modules_count >= 1,
        progress=lambda s: (s.modules_count, 1),
    ),
    Achievement(
        id="explorer",
        title="Explorer",
        description="3 modules verkend",
        category="exploration",
        points=25,
        rarity="common",
        requirement="View 3 modules",
        predicate=lambda s: s.modules_count >= 3,
        is_close=lambda s: s.modules_count == 2,
        progress=lambda s: (s.modules_count, 3),
    ),
    Achievement(
        id="deep_dive",
        title="Deep Dive",
        description="5 modules verkend",
        category="exploration",
        points=50,
        rarity="common",
        requirement="View 5 modules",
        predicate=lambda s: s.modules_count >= 5,
        is_close=lambda s: s.modules_count == 4,
        progress=lambda s: (s.modules_count, 5),
    ),
    Achievement(
        id="completionist",
        title="Platform Master",
        description="Alle 9 modules verkend!",
        category="exploration",
        points=150,
        rarity="epic",
        requirement="View all 9 modules",
        predicate=lambda s: s.modules_count >= ALL_MODULES,
        is_close=lambda s: s.modules_count >= 7,
        progress=lambda s: (s.modules_count, ALL_MODULES),
        reward="Complete Platform Guide + Priority Support",
    ),
    # Engagement
    Achievement(
        id="early_bird",
        title="Early Bird",
        description="Binnen 5 minuten 2 modules verkend",
        category="engagement",
        points=30,
        rarity="common",
        requirement="View 2 modules in 5 minutes",
        predicate=lambda s: s.modules_count >= 2 and s.time_on_site_seconds <= 300,
    ),
    Achievement(
        id="power_user",
        title="Power User",
        description="10+ berichten gestuurd",
        category="engagement",
        points=40,
        rarity="common",
        requirement="Send 10 messages",
        predicate=lambda s: s.messages_count >= 10,
        is_close=lambda s: s.messages_count >= 7,
        progress=lambda s: (s.messages_count, 10),
    ),
    Achievement(
        id="question_master",
        title="Question Master",
        description="5 vragen gesteld",
        category="engagement",
        points=35,
        rarity="common",
        requirement="Ask 5 questions",
        predicate=lambda s: s.questions_asked >= 5,
        is_close=lambda s: s.questions_asked >= 3,
        progress=lambda s: (s.questions_asked, 5),
    ),
    Achievement(
        id="engaged_learner",
        title="Engaged Learner",
        description="15+ minuten actief",
        category="engagement",
        points=45,
        rarity="rare",
        requirement="15 minutes on site",
        predicate=lambda s: s.time_on_site_seconds >= 900,
        is_close=lambda s: s.time_on_site_seconds >= 600,
        progress=lambda s: (s.time_on_site_seconds // 60, 15),
    ),
    # Mastery
    Achievement(
        id="roi_calculator",
        title="ROI Expert",
        description="ROI berekend",
        category="mastery",
        points=75,
        rarity="rare",
        requirement="Complete ROI calculator",
        predicate=lambda s: s.calculator_completed,
        is_close=lambda s: s.modules_count >= 3,
        reward="ROI Optimization Guide",
    ),
    Achievement(
        id="data_analyst",
        title="Data Analyst",
        description="Analytics Hub bezocht",
        category="mastery",
        points=50,
        rarity="rare",
        requirement="Visit Analytics Hub",
        predicate=lambda s: "analytics-hub" in s.modules_viewed,
    ),
    Achievement(
        id="automation_expert",
        title="Automation Expert",
        description="Campaign Orchestrator verkend",
        category="mastery",
        points=50,
        rarity="rare",
        requirement="Visit Campaign Orchestrator",
        predicate=lambda s: "campaign-orchestrator" in s.modules_viewed,
    ),
    Achievement(
        id="content_creator",
        title="Content Creator",
        description="Content Pipeline ontdekt",
        category="mastery",
        points=50,
        rarity="rare",
        requirement="Visit Content Pipeline",
        predicate=lambda s: "content-pipeline" in s.modules_viewed,
    ),
    Achievement(
        id="tech_savvy",
        title="Tech Savvy",
        description="Technical deep-dive vraag gesteld",
        category="mastery",
        points=60,
        rarity="epic",
        requirement="Ask technical question",
        predicate=lambda s: s.questions_asked >= 3,
    ),
    # Conversion
    Achievement(
        id="demo_booked",
        title="Demo Scheduled",
        description="Demo call ingepland",
        category="conversion",
        points=150,
        rarity="epic",
        requirement="Schedule demo call",
        predicate=lambda s: s.has_scheduled_demo,
        reward="VIP Onboarding Checklist",
    ),
    Achievement(
        id="high_intent",
        title="High Intent Lead",
        description="ICP score 70+",
        category="conversion",
        points=100,
        rarity="epic",
        requirement="ICP score >= 70",
        predicate=lambda s: s.icp_score >= 70,
        is_close=lambda s: s.icp_score >= 60,
        reward="Early Adopter Discount (20% off)",
    ),
    Achievement(
        id="pricing_explorer",
        title="Pricing Explorer",
        description="Pricing informatie bekeken",
        category="conversion",
        points=80,
        rarity="epic",
        requirement="View pricing",
        predicate=lambda s: s.has_seen_pricing,
    ),
    Achievement(
        id="form_completed",
        title="Contact Info Shared",
        description="Contact formulier ingevuld",
        category="conversion",
        points=90,
        rarity="epic",
        requirement="Complete contact form",
        predicate=lambda s: s.has_completed_contact_form,
    ),
    # Special
    Achievement(
        id="journey_master",
        title="Journey Master",
        description="Volledige demo journey voltooid!",
        category="special",
        points=300,
        rarity="legendary",
        requirement="Complete entire journey (9 modules + ROI + Demo)",
        predicate=lambda s: (
            s.modules_count >= ALL_MODULES
            and s.calculator_completed
            and s.has_scheduled_demo
            and s.icp_score > 0
        ),
        is_close=lambda s: s.modules_count >= 7 and (s.calculator_completed or s.has_scheduled_demo),
        reward="Custom Implementation Plan + Founder Access + VIP Pricing",
    ),
    Achievement(
        id="speed_runner",
        title="Speed Runner",
        description="Journey voltooid in < 10 minuten",
        category="special",
        points=200,
        rarity="legendary",
        requirement="Complete journey in <10 min",
        predicate=lambda s: (
            s.modules_count >= ALL_MODULES
            and s.calculator_completed
            and s.time_on_site_seconds <= 600
        ),
    ),
    Achievement(
        id="perfect_score",
        title="Perfect Fit",
        description="ICP score 90+",
        category="special",
        points=150,
        rarity="legendary",
        requirement="ICP score >= 90",
        predicate=lambda s: s.icp_score >= 90,
        reward="Priority Onboarding + 30% Discount",
    ),
    Achievement(
        id="industry_expert",
        title="Industry Expert",
        description="Alle 9 platform modules volledig verkend",
        category="special",
        points=150,
        rarity="legendary",
        requirement="View all 9 platform modules",
        predicate=lambda s: s.modules_count >= ALL_MODULES,
        reward="Industry-Specific Playbook",
    ),
    Achievement(
        id="comeback_kid",
        title="Comeback Kid",
        description="Teruggekomen na 7+ dagen",
        category="special",
        points=75,
        rarity="rare",
        requirement="Return after 7 days",
        predicate=lambda s: s.days_since_last_visit is not None and s.days_since_last_visit >= 7,
    ),
    Achievement(
        id="night_owl",
        title="Night Owl",
        description="Demo bezocht na 22:00",
        category="special",
        points=25,
        rarity="common",
        requirement="Visit after 10 PM",
        predicate=_night,
    ),
    Achievement(
        id="weekend_warrior",
        title="Weekend Warrior",
        description="Demo bezocht in weekend",
        category="special",
        points=30,
        rarity="common",
        requirement="Visit on weekend",
        predicate=_weekend,
    ),
)

ACHIEVEMENTS_BY_ID: dict[str, Achievement] = {a.id: a for a in ACHIEVEMENTS}


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------

def check_all(
    snapshot: BehaviorSnapshot,
    already_unlocked: Iterable[str] = frozenset(),
    achievements: tuple[Achievement, ...] = ACHIEVEMENTS,
) -> list[Achievement]:
    """Achievements newly unlocked by *snapshot*, in declaration order."""
    unlocked = frozenset(already_unlocked)
    return [a for a in achievements if a.id not in unlocked and a.predicate(snapshot)]


def unlock(
    snapshot: BehaviorSnapshot,
    already_unlocked: Iterable[str] = frozenset(),
    achievements: tuple[Achievement, ...] = ACHIEVEMENTS,
) -> tuple[list[Achievement], UnlockedSet]:
    """Return ``(new_achievements, grown_unlocked_set)``; the input is untouched."""
    unlocked = frozenset(already_unlocked)
    new = check_all(snapshot, unlocked, achievements)
    if new:
        logger.debug("Unlocked achievements: %s", [a.id for a in new])
    return new, unlocked | {a.id for a in new}


def total_points(unlocked: Iterable[str]) -> int:
    """Sum of points; ids no longer declared count as zero."""
    return sum(
        ACHIEVEMENTS_BY_ID[i].points for i in set(unlocked) if i in ACHIEVEMENTS_BY_ID
    )


def achievement_tier(points: int) -> AchievementTier:
    for i, (minimum, tier) in enumerate(TIER_LADDER):
        if points >= minimum:
            next_points = TIER_LADDER[i - 1][0] if i > 0 else 0
            return AchievementTier(tier=tier, next_tier_points=next_points)
    return AchievementTier(tier="bronze", next_tier_points=TIER_LADDER[-2][0])


def next_suggested_achievement(
    snapshot: BehaviorSnapshot,
    already_unlocked: Iterable[str] = frozenset(),
) -> Achievement | None:
    """Something worth working toward next.

    Walks categories by priority and returns the first pending achievement
    that is close to unlocking; otherwise the first pending one overall.
    """
    unlocked = frozenset(already_unlocked)
    pending = [a for a in ACHIEVEMENTS if a.id not in unlocked]
    if not pending:
        return None
    for category in CATEGORY_PRIORITY:
        for achievement in pending:
            if (
                achievement.category == category
                and achievement.is_close is not None
                and achievement.is_close(snapshot)
            ):
                return achievement
    return pending[0]


def achievement_progress(achievement_id: str, snapshot: BehaviorSnapshot) -> AchievementProgress:
    """Progress toward one achievement; unknown ids raise ``KeyError``."""
    achievement = ACHIEVEMENTS_BY_ID[achievement_id]
    if achievement.progress is None:
        return AchievementProgress(current=0, required=1, percentage=0)
    current, required = achievement.progress(snapshot)
    return AchievementProgress(
        current=current,
        required=required,
        percentage=min(current / required * 100, 100),
    )


def achievements_by_category(category: Category) -> list[Achievement]:
    return [a for a in ACHIEVEMENTS if a.category == category]


def achievements_by_rarity(rarity: Rarity) -> list[Achievement]:
    return [a for a in ACHIEVEMENTS if a.rarity == rarity]


def completion_percentage(unlocked: Iterable[str]) -> int:
    known = {i for i in unlocked if i in ACHIEVEMENTS_BY_ID}
    return round(len(known) / len(ACHIEVEMENTS) * 100)
