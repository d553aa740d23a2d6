"""Engine configuration: the knobs a deployment may tune.

An :class:`EngineConfig` is the single object a caller hands the
:class:`~journey_engine.engine.JourneyEngine`.  Defaults reproduce the
stock behavior; a YAML file can override any of them::

    min_confidence: 0.35
    escalation_keywords: [enterprise, contract, sla]
    knowledge_base_path: ./kb/knowledge_base.yaml
    typing:
      cap_ms: 2500
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from journey_engine.errors import ConfigError
from journey_engine.knowledge.routing import (
    DIRECT_ANSWER_CONFIDENCE,
    DISCLAIMER_CONFIDENCE,
    ESCALATION_KEYWORDS,
    SOFT_FALLBACK_CONFIDENCE,
    RoutingRule,
    build_routing_rules,
)
from journey_engine.timing import BASE_MS, CAP_MS, JITTER_MS, PER_CHAR_MS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TypingConfig:
    base_ms: int = BASE_MS
    per_char_ms: int = PER_CHAR_MS
    jitter_ms: tuple[int, int] = JITTER_MS
    cap_ms: int = CAP_MS

    def as_kwargs(self) -> dict[str, Any]:
        return dataclasses.asdict(self)


@dataclass(frozen=True)
class EngineConfig:
    """Tunable engine settings.

    Attributes:
        min_confidence: Matches below this are not returned as answers.
            Also the lower edge of the "answer with disclaimer" band.
        direct_answer_confidence: Matches at or above this are answered
            without a disclaimer.
        soft_fallback_confidence: Below ``min_confidence`` but at or above
            this, the caller gets a "did you mean" fallback.
        related_questions_limit: Maximum related questions per answer.
        escalation_keywords: Whole words or phrases that route a query
            to a human unless it matches at direct-answer strength.
        knowledge_base_path: YAML knowledge base; ``None`` uses the one
            shipped with the package.
        evaluation_interval_seconds: How often the caller should
            re-evaluate.  Informational; the engine keeps no timer.
        typing: Simulated typing delay parameters.
    """

    min_confidence: float = DISCLAIMER_CONFIDENCE
    direct_answer_confidence: float = DIRECT_ANSWER_CONFIDENCE
    soft_fallback_confidence: float = SOFT_FALLBACK_CONFIDENCE
    related_questions_limit: int = 3
    escalation_keywords: tuple[str, ...] = ESCALATION_KEYWORDS
    knowledge_base_path: Path | None = None
    evaluation_interval_seconds: float = 30
    typing: TypingConfig = field(default_factory=TypingConfig)

    def routing_rules(self) -> tuple[RoutingRule, ...]:
        return build_routing_rules(
            escalation_keywords=self.escalation_keywords,
            direct_answer=self.direct_answer_confidence,
            disclaimer=self.min_confidence,
            soft_fallback=self.soft_fallback_confidence,
        )


_FIELDS = {f.name for f in dataclasses.fields(EngineConfig)}
_TYPING_FIELDS = {f.name for f in dataclasses.fields(TypingConfig)}


def config_from_mapping(data: dict[str, Any]) -> EngineConfig:
    """Build an :class:`EngineConfig` from a parsed mapping; unknown keys raise."""
    if not isinstance(data, dict):
        raise ConfigError("Engine config must be a mapping")

    unknown = set(data) - _FIELDS
    if unknown:
        raise ConfigError(f"Unknown config key(s): {', '.join(sorted(unknown))}")

    values = dict(data)
    typing_raw = values.pop("typing", None) or {}
    if not isinstance(typing_raw, dict):
        raise ConfigError("'typing' must be a mapping")
    typing_data = dict(typing_raw)
    unknown_typing = set(typing_data) - _TYPING_FIELDS
    if unknown_typing:
        raise ConfigError(f"Unknown typing key(s): {', '.join(sorted(unknown_typing))}")
    if "jitter_ms" in typing_data:
        typing_data["jitter_ms"] = tuple(typing_data["jitter_ms"])

    if "escalation_keywords" in values:
        keywords = values["escalation_keywords"] or []
        # a bare string would otherwise be split into single characters
        if not isinstance(keywords, (list, tuple)) or not all(
            isinstance(k, str) for k in keywords
        ):
            raise ConfigError("'escalation_keywords' must be a list of strings")
        values["escalation_keywords"] = tuple(k.lower() for k in keywords)
    if values.get("knowledge_base_path") is not None:
        values["knowledge_base_path"] = Path(values["knowledge_base_path"])

    try:
        config = EngineConfig(typing=TypingConfig(**typing_data), **values)
        config.routing_rules()
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid engine config: {exc}") from exc
    return config


def load_engine_config(path: str | Path) -> EngineConfig:
    """Load an engine config YAML file.

    A relative ``knowledge_base_path`` is resolved against the config
    file's directory.
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as exc:
        raise ConfigError(f"Cannot read config {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    config = config_from_mapping(data)
    kb_path = config.knowledge_base_path
    if kb_path is not None and not kb_path.is_absolute():
        config = dataclasses.replace(config, knowledge_base_path=path.parent / kb_path)
    logger.debug("Loaded engine config from %s", path)
    return config
