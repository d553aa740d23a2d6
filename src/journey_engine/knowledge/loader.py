"""YAML knowledge base loading."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from journey_engine.errors import KnowledgeBaseError
from journey_engine.knowledge.models import (
    KnowledgeBase,
    KnowledgeCategory,
    KnowledgeCTA,
    KnowledgeEntry,
)

logger = logging.getLogger(__name__)

DEFAULT_KNOWLEDGE_BASE_PATH = Path(__file__).resolve().parent.parent / "data" / "knowledge_base.yaml"


def parse_knowledge_base(data: dict[str, Any]) -> KnowledgeBase:
    """Build a :class:`KnowledgeBase` from an already-parsed mapping.

    ``categories`` is a mapping of category key to ``{name, questions}``;
    each question inherits its category key.
    """
    if not isinstance(data, dict):
        raise KnowledgeBaseError("Knowledge base must be a mapping")

    try:
        categories: list[KnowledgeCategory] = []
        for key, raw in (data.get("categories") or {}).items():
            raw = raw or {}
            entries = []
            for q in raw.get("questions") or []:
                cta = q.get("cta")
                entries.append(
                    KnowledgeEntry(
                        id=q["id"],
                        question=q["question"],
                        keywords=q.get("keywords", []),
                        answer=q["answer"],
                        category=key,
                        related_modules=q.get("related_modules", []),
                        cta=KnowledgeCTA(**cta) if cta else None,
                    )
                )
            categories.append(
                KnowledgeCategory(key=key, name=raw.get("name", key), questions=tuple(entries))
            )

        return KnowledgeBase(
            version=str(data["version"]),
            categories=tuple(categories),
            fallback_responses=tuple(data.get("fallback_responses") or ()),
            escalation_message=(data.get("escalation_message") or "").strip(),
        )
    except KeyError as exc:
        raise KnowledgeBaseError(f"Missing required field {exc}") from exc
    except (ValidationError, TypeError, AttributeError) as exc:
        raise KnowledgeBaseError(f"Invalid knowledge base: {exc}") from exc


def load_knowledge_base(path: str | Path | None = None) -> KnowledgeBase:
    """Load a knowledge base YAML file; ``None`` loads the packaged one."""
    path = Path(path) if path is not None else DEFAULT_KNOWLEDGE_BASE_PATH
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise KnowledgeBaseError(f"Cannot read knowledge base {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise KnowledgeBaseError(f"Invalid YAML in {path}: {exc}") from exc

    kb = parse_knowledge_base(data)
    logger.debug("Loaded knowledge base %s (%d entries) from %s", kb.version, len(kb.entries()), path)
    return kb
