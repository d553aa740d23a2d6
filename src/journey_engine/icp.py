"""ICP scoring: team size, channels, pain points, and industry to a 0-100 score.

All functions are pure (no I/O).  Sub-scores come from fixed lookup tables;
the pain-point sum is the only nonlinear step (capped at ``MAX_PAIN_POINTS``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from journey_engine.models import (
    ChannelsCount,
    ICPTier,
    Industry,
    PainPoint,
    ProfileInput,
    ScoreBreakdown,
    TeamSize,
)

MAX_TEAM_SIZE = 30
MAX_CHANNELS = 25
MAX_PAIN_POINTS = 25
MAX_INDUSTRY = 20
MAX_TOTAL = 100

PRIMARY_MIN = 70
SECONDARY_MIN = 50

TEAM_SIZE_SCORES: dict[TeamSize, int] = {
    "15-50": 30,  # primary fit
    "5-15": 25,
    "1-5": 15,
    "50+": 10,  # enterprise, not a target
}

CHANNELS_SCORES: dict[ChannelsCount, int] = {
    "6-10": 25,
    "3-5": 20,
    "10+": 15,
    "1-2": 10,
}

PAIN_POINT_SCORES: dict[PainPoint, int] = {
    "agency-cost": 15,
    "scaling-problem": 10,
    "manual-work": 10,
    "channel-overload": 10,
    "content-bottleneck": 10,
    "hiring-limitation": 10,
}

TOP_INDUSTRIES: frozenset[Industry] = frozenset({"ecommerce", "saas", "agency"})


def team_size_score(team_size: TeamSize) -> int:
    return TEAM_SIZE_SCORES[team_size]


def channels_score(channels: ChannelsCount) -> int:
    return CHANNELS_SCORES[channels]


def pain_points_score(pain_points: tuple[PainPoint, ...] | list[PainPoint]) -> int:
    """Sum per-point scores, capped at ``MAX_PAIN_POINTS``."""
    raw = sum(PAIN_POINT_SCORES[p] for p in set(pain_points))
    return min(raw, MAX_PAIN_POINTS)


def industry_score(industry: Industry) -> int:
    return MAX_INDUSTRY if industry in TOP_INDUSTRIES else 10


def icp_tier(score: float) -> ICPTier:
    """Classify a total score; boundary values belong to the higher tier."""
    if score >= PRIMARY_MIN:
        return "primary"
    if score >= SECONDARY_MIN:
        return "secondary"
    return "nurture"


def score_profile(profile: ProfileInput) -> ScoreBreakdown:
    """Compute the full ICP breakdown for *profile*."""
    team = team_size_score(profile.team_size)
    channels = channels_score(profile.channels)
    pains = pain_points_score(profile.pain_points)
    industry = industry_score(profile.industry)
    total = max(0, min(team + channels + pains + industry, MAX_TOTAL))
    return ScoreBreakdown(
        team_size_score=team,
        channels_score=channels,
        pain_points_score=pains,
        industry_score=industry,
        total_score=total,
        tier=icp_tier(total),
        max_score=MAX_TOTAL,
    )


# ---------------------------------------------------------------------------
# Qualification and personalization
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TierRecommendations:
    cta: str
    message: str
    features: tuple[str, ...]
    follow_up_timing: str


@dataclass(frozen=True)
class ICPQualification:
    score: int
    tier: ICPTier
    breakdown: ScoreBreakdown
    recommendations: TierRecommendations


@dataclass(frozen=True)
class PersonalizationConfig:
    tier: ICPTier
    show_premium_features: bool
    show_technical_details: bool
    cta_text: str
    cta_variant: Literal["primary", "secondary", "default"]
    follow_up_strategy: Literal["immediate", "standard", "nurture"]
    priority_level: Literal["high", "medium", "low"]


TIER_RECOMMENDATIONS: dict[ICPTier, TierRecommendations] = {
    "primary": TierRecommendations(
        cta="Book Founder Call",
        message="Perfect fit for teams like yours",
        features=(
            "Premium features",
            "Technical deep-dive",
            "Custom implementation plan",
            "Direct founder access",
        ),
        follow_up_timing="Within 24 hours, founder direct",
    ),
    "secondary": TierRecommendations(
        cta="See Demo",
        message="Great fit for growing teams",
        features=("Standard features", "ROI calculator", "Case studies", "Implementation guide"),
        follow_up_timing="Within 48 hours, standard outreach",
    ),
    "nurture": TierRecommendations(
        cta="Learn More",
        message="Discover how it works",
        features=("Educational content", "Use cases", "Getting started guide", "Community access"),
        follow_up_timing="Email drip campaign",
    ),
}

PERSONALIZATION: dict[ICPTier, PersonalizationConfig] = {
    "primary": PersonalizationConfig(
        tier="primary",
        show_premium_features=True,
        show_technical_details=True,
        cta_text="Book Founder Call",
        cta_variant="primary",
        follow_up_strategy="immediate",
        priority_level="high",
    ),
    "secondary": PersonalizationConfig(
        tier="secondary",
        show_premium_features=False,
        show_technical_details=False,
        cta_text="See Demo",
        cta_variant="secondary",
        follow_up_strategy="standard",
        priority_level="medium",
    ),
    "nurture": PersonalizationConfig(
        tier="nurture",
        show_premium_features=False,
        show_technical_details=False,
        cta_text="Learn More",
        cta_variant="default",
        follow_up_strategy="nurture",
        priority_level="low",
    ),
}


def qualify_profile(profile: ProfileInput) -> ICPQualification:
    """Score, classify, and attach tier recommendations."""
    breakdown = score_profile(profile)
    return ICPQualification(
        score=breakdown.total_score,
        tier=breakdown.tier,
        breakdown=breakdown,
        recommendations=TIER_RECOMMENDATIONS[breakdown.tier],
    )


def personalization_config(tier: ICPTier) -> PersonalizationConfig:
    return PERSONALIZATION[tier]


def is_primary_icp(profile: ProfileInput) -> bool:
    return score_profile(profile).total_score >= PRIMARY_MIN


def is_qualified(profile: ProfileInput) -> bool:
    """True for primary or secondary ICP."""
    return score_profile(profile).total_score >= SECONDARY_MIN


def score_percentage(score: float) -> int:
    return round(score / MAX_TOTAL * 100)


def interpret_score(qualification: ICPQualification) -> str:
    """Human-readable breakdown, used by the CLI."""
    b = qualification.breakdown
    lines = [
        f"Score: {qualification.score}/{MAX_TOTAL} ({score_percentage(qualification.score)}%)",
        f"Tier: {qualification.tier.upper()}",
        "",
        "Breakdown:",
        f"- Team Size: {b.team_size_score}/{MAX_TEAM_SIZE}",
        f"- Channels: {b.channels_score}/{MAX_CHANNELS}",
        f"- Pain Points: {b.pain_points_score}/{MAX_PAIN_POINTS}",
        f"- Industry: {b.industry_score}/{MAX_INDUSTRY}",
    ]
    return "\n".join(lines)
