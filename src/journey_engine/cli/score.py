"""CLI handler for ``journey-engine score``."""

from __future__ import annotations

from argparse import Namespace

from journey_engine.cli.report import format_json, format_qualification, qualification_to_dict
from journey_engine.icp import qualify_profile
from journey_engine.models import ProfileInput


def run_score(args: Namespace) -> None:
    profile = ProfileInput(
        team_size=args.team_size,
        channels=args.channels,
        pain_points=args.pain_point,
        industry=args.industry,
    )
    qualification = qualify_profile(profile)

    if args.json:
        print(format_json(qualification_to_dict(qualification)))
    else:
        print(format_qualification(qualification))
