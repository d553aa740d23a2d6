"""CLI entry point: python -m journey_engine <command>."""

from __future__ import annotations

import argparse
import logging
import sys

from journey_engine.icp import PAIN_POINT_SCORES


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="journey-engine",
        description="Journey decision engine CLI",
    )
    parser.add_argument("--config", default=None, help="Engine config YAML file")
    parser.add_argument("-v", "--verbose", action="store_true", default=False, help="Debug logging")
    sub = parser.add_subparsers(dest="command")

    ev = sub.add_parser("evaluate", help="Run one evaluation cycle for a snapshot")
    ev.add_argument("--snapshot", required=True, help="Snapshot YAML/JSON file")
    ev.add_argument("--history", default=None, help="Nudge history YAML/JSON file")
    ev.add_argument("--unlocked", nargs="*", default=[], help="Achievement ids already unlocked")
    ev.add_argument("--now", default=None, help="Evaluation time (ISO 8601), default: now")
    ev.add_argument("--json", action="store_true", default=False, help="Output as JSON")

    ask = sub.add_parser("ask", help="Match a question against the knowledge base")
    ask.add_argument("query", help="Free-text question")
    ask.add_argument("--snapshot", default=None, help="Snapshot YAML/JSON file for context boosts")
    ask.add_argument("--seed", type=int, default=None, help="Seed for fallback and typing jitter")
    ask.add_argument("--json", action="store_true", default=False, help="Output as JSON")

    sc = sub.add_parser("score", help="Score an ICP profile")
    sc.add_argument("--team-size", required=True, choices=["1-5", "5-15", "15-50", "50+"])
    sc.add_argument("--channels", required=True, choices=["1-2", "3-5", "6-10", "10+"])
    sc.add_argument(
        "--pain-point",
        action="append",
        default=[],
        choices=sorted(PAIN_POINT_SCORES),
        help="Repeat for each pain point",
    )
    sc.add_argument("--industry", required=True, choices=["ecommerce", "saas", "agency", "other"])
    sc.add_argument("--json", action="store_true", default=False, help="Output as JSON")

    vk = sub.add_parser("validate-kb", help="Validate a knowledge base YAML file")
    vk.add_argument("--path", default=None, help="Knowledge base file (default: packaged)")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "evaluate":
        from journey_engine.cli.evaluate import run_evaluate
        run_evaluate(args)
    elif args.command == "ask":
        from journey_engine.cli.ask import run_ask
        run_ask(args)
    elif args.command == "score":
        from journey_engine.cli.score import run_score
        run_score(args)
    elif args.command == "validate-kb":
        from journey_engine.cli.validate_kb import run_validate_kb
        run_validate_kb(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
