"""CLI handler for ``journey-engine ask``."""

from __future__ import annotations

import random
from argparse import Namespace

from journey_engine.cli.inputs import fail, load_config, load_snapshot
from journey_engine.cli.report import answer_to_dict, format_answer, format_json
from journey_engine.engine import JourneyEngine
from journey_engine.errors import KnowledgeBaseError, log_and_return_error
from journey_engine.telemetry import LoggerDecisionSink


def run_ask(args: Namespace) -> None:
    snapshot = load_snapshot(args.snapshot) if args.snapshot else None
    rng = random.Random(args.seed) if args.seed is not None else None
    sink = LoggerDecisionSink() if args.verbose else None
    engine = JourneyEngine(load_config(args), telemetry_sink=sink, rng=rng)

    try:
        outcome = engine.answer(args.query, snapshot)
    except KnowledgeBaseError as exc:
        fail(
            log_and_return_error(
                command="ask",
                exc=exc,
                user_message=f"knowledge base could not be loaded: {exc}",
            )
        )

    if args.json:
        print(format_json(answer_to_dict(outcome)))
    else:
        print(format_answer(outcome))
