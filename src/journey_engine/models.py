"""Pydantic models shared by every decision component.

Inputs (``ProfileInput``, ``BehaviorSnapshot``) and decisions (``Nudge``,
``NextBestAction``, ...) are frozen value objects.  The engine never mutates
them; callers build a fresh snapshot per evaluation cycle.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _FrozenModel(BaseModel):
    """Strict, immutable value object."""

    model_config = ConfigDict(extra="forbid", frozen=True)


def _normalize_string_list(values: list[str]) -> list[str]:
    """Trim whitespace and drop empty entries while preserving order."""
    normalized: list[str] = []
    for value in values:
        if not isinstance(value, str):
            continue
        cleaned = value.strip()
        if cleaned:
            normalized.append(cleaned)
    return normalized


def _ordered_unique(values: list[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for value in _normalize_string_list(values):
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


TeamSize = Literal["1-5", "5-15", "15-50", "50+"]
ChannelsCount = Literal["1-2", "3-5", "6-10", "10+"]
Industry = Literal["ecommerce", "saas", "agency", "other"]
PainPoint = Literal[
    "agency-cost",
    "manual-work",
    "scaling-problem",
    "channel-overload",
    "content-bottleneck",
    "hiring-limitation",
]
ICPTier = Literal["primary", "secondary", "nurture"]


# ---------------------------------------------------------------------------
# Profile / ICP
# ---------------------------------------------------------------------------

class ProfileInput(_FrozenModel):
    """Qualification answers collected by the calculator or intake form."""

    team_size: TeamSize
    channels: ChannelsCount
    pain_points: tuple[PainPoint, ...] = ()
    industry: Industry
    current_spend: float | None = Field(default=None, ge=0)

    @field_validator("pain_points", mode="before")
    @classmethod
    def dedupe_pain_points(cls, values: object) -> object:
        if isinstance(values, (list, tuple, set, frozenset)):
            return tuple(dict.fromkeys(values))
        return values


class ScoreBreakdown(_FrozenModel):
    team_size_score: int
    channels_score: int
    pain_points_score: int
    industry_score: int
    total_score: int = Field(ge=0, le=100)
    tier: ICPTier
    max_score: int = 100


# ---------------------------------------------------------------------------
# Behavior snapshot
# ---------------------------------------------------------------------------

class BehaviorSnapshot(_FrozenModel):
    """Read-only capture of one visitor session at evaluation time.

    ``modules_viewed`` is an ordered set: duplicates are dropped and the
    first-seen order kept, so the last element is the most recently *new*
    module.  ``local_time`` is the visitor's wall clock; time-of-day
    achievements never fire without it.
    """

    time_on_site_seconds: float = Field(default=0, ge=0)
    modules_viewed: tuple[str, ...] = ()
    completed_steps: tuple[str, ...] = ()
    messages_count: int = Field(default=0, ge=0)
    questions_asked: int = Field(default=0, ge=0)
    calculator_completed: bool = False
    has_scheduled_demo: bool = False
    has_seen_pricing: bool = False
    has_completed_contact_form: bool = False
    inactivity_seconds: float = Field(default=0, ge=0)
    icp_score: float = Field(default=0, ge=0, le=100)
    industry: Industry | None = None
    current_page: str = ""
    days_since_last_visit: float | None = Field(default=None, ge=0)
    local_time: datetime | None = None

    @field_validator("modules_viewed", "completed_steps", mode="before")
    @classmethod
    def normalize_ordered_sets(cls, values: object) -> object:
        if isinstance(values, (list, tuple)):
            return tuple(_ordered_unique(list(values)))
        return values

    @field_validator("current_page")
    @classmethod
    def normalize_page(cls, value: str) -> str:
        return value.strip()

    @property
    def modules_count(self) -> int:
        return len(self.modules_viewed)

    @property
    def steps_count(self) -> int:
        return len(self.completed_steps)

    @property
    def last_viewed_module(self) -> str | None:
        return self.modules_viewed[-1] if self.modules_viewed else None


# ---------------------------------------------------------------------------
# Nudges
# ---------------------------------------------------------------------------

NudgeType = Literal["info", "success", "warning", "celebration", "cta"]
NudgeActionType = Literal["navigate", "open_chat", "open_calculator", "schedule_demo"]


class NudgeAction(_FrozenModel):
    label: str
    type: NudgeActionType
    value: str | None = None


class Nudge(_FrozenModel):
    """A proactive suggestion ready for the presentation layer."""

    id: str
    type: NudgeType
    title: str
    message: str
    action: NudgeAction | None = None
    icon: str | None = None
    duration_ms: int = 5000


class NudgeRecord(_FrozenModel):
    count: int = Field(default=0, ge=0)
    last_shown_at: datetime


NudgeHistory = dict[str, NudgeRecord]


# ---------------------------------------------------------------------------
# Next-best-action
# ---------------------------------------------------------------------------

ActionType = Literal["navigate", "suggest_module", "calculator", "demo", "chat", "tip"]


class ActionLink(_FrozenModel):
    label: str
    target: str


class NextBestAction(_FrozenModel):
    id: str
    type: ActionType
    priority: int = Field(ge=1, le=10)
    confidence: float = Field(ge=0.0, le=1.0)
    title: str
    message: str
    reason: str
    action: ActionLink | None = None
