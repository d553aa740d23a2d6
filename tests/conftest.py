"""Test fixtures for journey engine tests."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import pytest

from journey_engine.knowledge.loader import load_knowledge_base
from journey_engine.knowledge.models import (
    KnowledgeBase,
    KnowledgeCategory,
    KnowledgeCTA,
    KnowledgeEntry,
)
from journey_engine.models import BehaviorSnapshot, ProfileInput

NOW = datetime(2025, 3, 12, 14, 0, tzinfo=timezone.utc)  # a Wednesday afternoon


def make_snapshot(
    modules: int | list[str] = 0,
    steps: int | list[str] | None = None,
    **overrides: Any,
) -> BehaviorSnapshot:
    """Build a snapshot; integer *modules*/*steps* expand to generated ids.

    *steps* defaults to one step per module, mirroring a visitor who
    completes each module they open.
    """
    module_ids = (
        [f"module-{i}" for i in range(modules)] if isinstance(modules, int) else list(modules)
    )
    if steps is None:
        step_ids = [f"step-{i}" for i in range(len(module_ids))]
    elif isinstance(steps, int):
        step_ids = [f"step-{i}" for i in range(steps)]
    else:
        step_ids = list(steps)
    return BehaviorSnapshot(modules_viewed=module_ids, completed_steps=step_ids, **overrides)


def make_profile(
    team_size: str = "15-50",
    channels: str = "6-10",
    pain_points: list[str] | None = None,
    industry: str = "ecommerce",
) -> ProfileInput:
    return ProfileInput(
        team_size=team_size,
        channels=channels,
        pain_points=pain_points if pain_points is not None else ["agency-cost", "scaling-problem"],
        industry=industry,
    )


def make_entry(
    entry_id: str = "pricing_cost",
    question: str = "Wat kost het platform?",
    keywords: list[str] | None = None,
    category: str = "pricing",
    related_modules: list[str] | None = None,
    cta: KnowledgeCTA | None = None,
) -> KnowledgeEntry:
    return KnowledgeEntry(
        id=entry_id,
        question=question,
        keywords=keywords if keywords is not None else ["prijs", "kosten", "pricing"],
        answer=f"Answer for {entry_id}",
        category=category,
        related_modules=related_modules or [],
        cta=cta,
    )


def make_knowledge_base(
    *entries: KnowledgeEntry,
    fallback_responses: list[str] | None = None,
    escalation_message: str = "Laten we dit persoonlijk bespreken.",
) -> KnowledgeBase:
    """Group *entries* into categories by their category key."""
    if not entries:
        entries = (make_entry(),)
    by_category: dict[str, list[KnowledgeEntry]] = {}
    for entry in entries:
        by_category.setdefault(entry.category, []).append(entry)
    return KnowledgeBase(
        version="1.0",
        categories=tuple(
            KnowledgeCategory(key=key, name=key.title(), questions=tuple(items))
            for key, items in by_category.items()
        ),
        fallback_responses=tuple(
            fallback_responses if fallback_responses is not None
            else ["Fallback A", "Fallback B", "Fallback C"]
        ),
        escalation_message=escalation_message,
    )


@pytest.fixture(scope="session")
def packaged_kb() -> KnowledgeBase:
    return load_knowledge_base()


@pytest.fixture
def now() -> datetime:
    return NOW
