"""CLI handler for ``journey-engine evaluate``."""

from __future__ import annotations

from argparse import Namespace

from journey_engine.cli.inputs import load_config, load_history, load_snapshot, parse_now
from journey_engine.cli.report import evaluation_to_dict, format_evaluation, format_json
from journey_engine.engine import JourneyEngine
from journey_engine.telemetry import LoggerDecisionSink


def run_evaluate(args: Namespace) -> None:
    snapshot = load_snapshot(args.snapshot)
    history = load_history(args.history)
    sink = LoggerDecisionSink() if args.verbose else None
    engine = JourneyEngine(load_config(args), telemetry_sink=sink)

    result = engine.evaluate(
        snapshot,
        nudge_history=history,
        unlocked=frozenset(args.unlocked),
        now=parse_now(args.now),
    )

    if args.json:
        print(format_json(evaluation_to_dict(result)))
    else:
        print(format_evaluation(result))
