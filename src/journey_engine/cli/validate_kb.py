"""CLI handler for ``journey-engine validate-kb``."""

from __future__ import annotations

import sys
from argparse import Namespace

from journey_engine.knowledge.validator import validate_knowledge_base_file


def run_validate_kb(args: Namespace) -> None:
    kb, errors = validate_knowledge_base_file(args.path)

    if errors:
        for error in errors:
            print(error, file=sys.stderr)
        sys.exit(1)

    assert kb is not None
    print(
        f"Knowledge base {kb.version} OK: "
        f"{len(kb.categories)} categories, {len(kb.entries())} entries"
    )
