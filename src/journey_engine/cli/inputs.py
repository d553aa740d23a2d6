"""Shared input loading for CLI handlers. Failures exit with status 1."""

from __future__ import annotations

import sys
from argparse import Namespace
from datetime import datetime
from pathlib import Path
from typing import Any, NoReturn

import yaml
from pydantic import ValidationError

from journey_engine.config import EngineConfig, load_engine_config
from journey_engine.errors import ConfigError
from journey_engine.models import BehaviorSnapshot, NudgeHistory, NudgeRecord


def fail(message: str) -> NoReturn:
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)


def load_mapping(path: str | Path) -> dict[str, Any]:
    """Read a YAML or JSON mapping (JSON is valid YAML)."""
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        fail(f"cannot read {path}: {exc}")
    except yaml.YAMLError as exc:
        fail(f"invalid YAML/JSON in {path}: {exc}")
    if data is None:
        return {}
    if not isinstance(data, dict):
        fail(f"{path} must contain a mapping")
    return data


def load_snapshot(path: str | Path) -> BehaviorSnapshot:
    try:
        return BehaviorSnapshot(**load_mapping(path))
    except ValidationError as exc:
        fail(f"invalid snapshot in {path}:\n{exc}")


def load_history(path: str | Path | None) -> NudgeHistory:
    if path is None:
        return {}
    try:
        return {
            trigger_id: NudgeRecord(**record)
            for trigger_id, record in load_mapping(path).items()
        }
    except (ValidationError, TypeError) as exc:
        fail(f"invalid nudge history in {path}:\n{exc}")


def parse_now(value: str | None) -> datetime | None:
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        fail(f"--now must be an ISO 8601 timestamp, got {value!r}")


def load_config(args: Namespace) -> EngineConfig:
    if getattr(args, "config", None) is None:
        return EngineConfig()
    try:
        return load_engine_config(args.config)
    except ConfigError as exc:
        fail(str(exc))
