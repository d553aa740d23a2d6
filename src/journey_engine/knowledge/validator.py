"""Knowledge base validator -- ensures the curated Q&A data is usable.

Validation checks:
  - Version string looks like a version number
  - Every entry has a question, an answer and at least one keyword
  - No duplicate entry ids across categories
  - Related modules reference known module ids
  - CTAs carry text and an action
  - At least one fallback response is defined
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from journey_engine.errors import KnowledgeBaseError
from journey_engine.knowledge.loader import DEFAULT_KNOWLEDGE_BASE_PATH, load_knowledge_base
from journey_engine.knowledge.models import KnowledgeBase
from journey_engine.predictions import MODULE_TITLES

logger = logging.getLogger(__name__)


def validate_knowledge_base(
    kb: KnowledgeBase,
    known_modules: Iterable[str] | None = None,
) -> list[str]:
    """Return a list of problems; empty means valid."""
    errors: list[str] = []
    modules = set(known_modules) if known_modules is not None else set(MODULE_TITLES)

    if not kb.version or not all(c.isdigit() or c == "." for c in kb.version):
        errors.append(f"Version '{kb.version}' doesn't look like a version number")

    if not kb.fallback_responses:
        errors.append("No fallback responses defined")

    seen: dict[str, str] = {}
    for category in kb.categories:
        if not category.questions:
            errors.append(f"Category '{category.key}' has no questions")
        for entry in category.questions:
            where = f"{category.key}/{entry.id}"
            if entry.id in seen:
                errors.append(
                    f"Duplicate entry id '{entry.id}' in '{category.key}' "
                    f"(first seen in '{seen[entry.id]}')"
                )
            else:
                seen[entry.id] = category.key

            if not entry.question:
                errors.append(f"{where}: Empty question")
            if not entry.answer:
                errors.append(f"{where}: Empty answer")
            if not entry.keywords:
                errors.append(f"{where}: No keywords")
            for module in entry.related_modules:
                if module not in modules:
                    errors.append(f"{where}: Unknown related module '{module}'")
            if entry.cta is not None and not (entry.cta.text and entry.cta.action):
                errors.append(f"{where}: CTA needs text and action")

    return errors


def validate_knowledge_base_file(
    path: str | Path | None = None,
) -> tuple[KnowledgeBase | None, list[str]]:
    """Load and validate a knowledge base file.

    Returns a tuple of (knowledge_base_or_none, list_of_errors).
    """
    display_path = str(path) if path is not None else str(DEFAULT_KNOWLEDGE_BASE_PATH)
    try:
        kb = load_knowledge_base(path)
    except KnowledgeBaseError as exc:
        return None, [f"{display_path}: Failed to load -- {exc}"]

    errors = [f"{display_path}: {e}" for e in validate_knowledge_base(kb)]
    if errors:
        logger.warning("Knowledge base %s has %d problem(s)", display_path, len(errors))
    return kb, errors
