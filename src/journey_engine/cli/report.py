"""Output formatters for CLI results: aligned text and JSON."""

from __future__ import annotations

import json
from typing import Any

from journey_engine.engine import AnswerOutcome, Evaluation
from journey_engine.icp import ICPQualification, interpret_score


def _row(cols: list[str], widths: list[int]) -> str:
    return "  ".join(c.ljust(w) for c, w in zip(cols, widths))


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------

def evaluation_to_dict(result: Evaluation) -> dict[str, Any]:
    return {
        "nudge": result.nudge.model_dump(mode="json") if result.nudge else None,
        "nudge_history": {
            k: v.model_dump(mode="json") for k, v in sorted(result.nudge_history.items())
        },
        "new_achievements": [
            {"id": a.id, "title": a.title, "points": a.points, "rarity": a.rarity}
            for a in result.new_achievements
        ],
        "unlocked": sorted(result.unlocked),
        "total_points": result.total_points,
        "achievement_tier": result.achievement_tier.tier,
        "next_tier_points": result.achievement_tier.next_tier_points,
        "next_action": result.next_action.model_dump(mode="json") if result.next_action else None,
        "journey_progress": result.journey_progress,
        "minutes_to_completion": result.minutes_to_completion,
        "proactive_message": result.proactive_message,
    }


def format_evaluation(result: Evaluation) -> str:
    lines: list[str] = ["Journey Evaluation", "=" * 60]
    widths = [20, 38]

    nudge = f"{result.nudge.id}: {result.nudge.title}" if result.nudge else "-"
    action = (
        f"{result.next_action.id} (p{result.next_action.priority}, "
        f"{result.next_action.confidence:.2f})"
        if result.next_action
        else "-"
    )
    rows = [
        ("Nudge", nudge),
        ("Next action", action),
        ("New achievements", ", ".join(a.id for a in result.new_achievements) or "-"),
        ("Points", f"{result.total_points} ({result.achievement_tier.tier})"),
        ("Progress", f"{result.journey_progress}%"),
        ("Time remaining", f"~{result.minutes_to_completion} min"),
    ]
    if result.proactive_message:
        rows.append(("Chat opener", result.proactive_message))
    for label, value in rows:
        lines.append(_row([label, value], widths))
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Answers
# ---------------------------------------------------------------------------

def answer_to_dict(outcome: AnswerOutcome) -> dict[str, Any]:
    return {
        "query": outcome.query,
        "tier": outcome.tier,
        "confidence": round(outcome.confidence, 4),
        "match": outcome.match.model_dump(mode="json") if outcome.match else None,
        "related": [r.question for r in outcome.related],
        "message": outcome.message,
        "suggestions": list(outcome.fallback.suggestions) if outcome.fallback else [],
        "should_consult_llm": outcome.should_consult_llm,
        "typing_delay_ms": outcome.typing_delay_ms,
    }


def format_answer(outcome: AnswerOutcome) -> str:
    lines = [
        f"[{outcome.tier}] confidence {outcome.confidence:.2f}",
        "",
        outcome.message,
    ]
    if outcome.related:
        lines.append("")
        lines.append("Related:")
        lines.extend(f"- {r.question}" for r in outcome.related)
    if outcome.fallback and outcome.fallback.suggestions:
        lines.append("")
        lines.append("Suggestions:")
        lines.extend(f"- {s}" for s in outcome.fallback.suggestions)
    if outcome.should_consult_llm:
        lines.append("")
        lines.append("(no curated answer; hand off to the assistant model)")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# ICP
# ---------------------------------------------------------------------------

def qualification_to_dict(q: ICPQualification) -> dict[str, Any]:
    return {
        "score": q.score,
        "tier": q.tier,
        "breakdown": q.breakdown.model_dump(mode="json"),
        "recommendations": {
            "cta": q.recommendations.cta,
            "message": q.recommendations.message,
            "features": list(q.recommendations.features),
            "follow_up_timing": q.recommendations.follow_up_timing,
        },
    }


def format_qualification(q: ICPQualification) -> str:
    return "\n".join([
        interpret_score(q),
        "",
        f"Recommended CTA: {q.recommendations.cta}",
        f"Follow-up: {q.recommendations.follow_up_timing}",
    ])


def format_json(payload: dict[str, Any]) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)
