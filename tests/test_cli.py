"""Tests for the journey-engine command line."""

from __future__ import annotations

import json
import logging

import pytest

from journey_engine.__main__ import main

_SNAPSHOT = """\
modules_viewed: [module-0, module-1, module-2, module-3]
completed_steps: [step-0, step-1, step-2, step-3]
time_on_site_seconds: 500
icp_score: 80
"""


@pytest.fixture
def snapshot_file(tmp_path):
    path = tmp_path / "snapshot.yaml"
    path.write_text(_SNAPSHOT, encoding="utf-8")
    return path


class TestEvaluate:
    def test_json_output(self, snapshot_file, capsys):
        main(["evaluate", "--snapshot", str(snapshot_file), "--now", "2025-03-12T14:00:00+00:00", "--json"])
        payload = json.loads(capsys.readouterr().out)
        assert payload["nudge"]["id"] == "calculator_prompt"
        assert payload["nudge_history"]["calculator_prompt"]["count"] == 1
        assert "first_step" in payload["unlocked"]
        assert payload["next_action"]["id"] == "calculator_after_modules"

    def test_history_and_unlocked_are_honored(self, snapshot_file, tmp_path, capsys):
        history = tmp_path / "history.json"
        history.write_text(
            json.dumps({"calculator_prompt": {"count": 1, "last_shown_at": "2025-03-12T13:50:00+00:00"}}),
            encoding="utf-8",
        )
        main([
            "evaluate", "--snapshot", str(snapshot_file), "--history", str(history),
            "--unlocked", "first_step", "explorer",
            "--now", "2025-03-12T14:00:00+00:00", "--json",
        ])
        payload = json.loads(capsys.readouterr().out)
        assert payload["nudge"] is None
        assert "first_step" not in [a["id"] for a in payload["new_achievements"]]

    def test_text_output(self, snapshot_file, capsys):
        main(["evaluate", "--snapshot", str(snapshot_file)])
        out = capsys.readouterr().out
        assert "Journey Evaluation" in out
        assert "calculator_after_modules" in out

    def test_invalid_snapshot(self, tmp_path, capsys):
        path = tmp_path / "bad.yaml"
        path.write_text("icp_score: 250\n", encoding="utf-8")
        with pytest.raises(SystemExit) as exc_info:
            main(["evaluate", "--snapshot", str(path)])
        assert exc_info.value.code == 1
        assert "invalid snapshot" in capsys.readouterr().err

    def test_bad_now(self, snapshot_file, capsys):
        with pytest.raises(SystemExit):
            main(["evaluate", "--snapshot", str(snapshot_file), "--now", "yesterday"])
        assert "--now" in capsys.readouterr().err


class TestAsk:
    def test_json_answer(self, capsys):
        main(["ask", "hoeveel kost het platform", "--seed", "1", "--json"])
        payload = json.loads(capsys.readouterr().out)
        assert payload["tier"] == "direct_answer"
        assert payload["match"]["question_id"] == "pricing_cost"
        assert payload["should_consult_llm"] is False

    def test_seeded_output_is_stable(self, capsys):
        main(["ask", "waarom zou ik dit doen?", "--seed", "4", "--json"])
        first = capsys.readouterr().out
        main(["ask", "waarom zou ik dit doen?", "--seed", "4", "--json"])
        assert capsys.readouterr().out == first

    def test_verbose_logs_answer_decision(self, caplog, capsys):
        with caplog.at_level(logging.INFO, logger="journey_engine.decisions"):
            main(["-v", "ask", "hoeveel kost het platform", "--seed", "1", "--json"])
        capsys.readouterr()
        decisions = [r for r in caplog.records if r.name == "journey_engine.decisions"]
        assert [r.decision for r in decisions] == ["journey.answer"]
        assert decisions[0].decision_attributes["question_id"] == "pricing_cost"

    def test_text_escalation(self, capsys):
        main(["ask", "We need an enterprise contract"])
        out = capsys.readouterr().out
        assert out.startswith("[escalation]")
        assert "Suggestions:" in out

    def test_config_with_missing_knowledge_base(self, tmp_path, capsys):
        config = tmp_path / "engine.yaml"
        config.write_text("knowledge_base_path: missing.yaml\n", encoding="utf-8")
        with pytest.raises(SystemExit) as exc_info:
            main(["--config", str(config), "ask", "wat kost het"])
        assert exc_info.value.code == 1
        assert "knowledge base could not be loaded" in capsys.readouterr().err

    def test_invalid_config(self, tmp_path, capsys):
        config = tmp_path / "engine.yaml"
        config.write_text("min_confidense: 0.3\n", encoding="utf-8")
        with pytest.raises(SystemExit):
            main(["--config", str(config), "ask", "wat kost het"])
        assert "Unknown config key" in capsys.readouterr().err


class TestScore:
    def test_json(self, capsys):
        main([
            "score", "--team-size", "15-50", "--channels", "6-10",
            "--pain-point", "agency-cost", "--pain-point", "scaling-problem",
            "--industry", "ecommerce", "--json",
        ])
        payload = json.loads(capsys.readouterr().out)
        assert payload["score"] == 100
        assert payload["tier"] == "primary"
        assert payload["breakdown"]["team_size_score"] == 30

    def test_text(self, capsys):
        main(["score", "--team-size", "50+", "--channels", "1-2", "--industry", "other"])
        out = capsys.readouterr().out
        assert "Tier: NURTURE" in out
        assert "Recommended CTA" in out

    def test_rejects_unknown_choice(self):
        with pytest.raises(SystemExit):
            main(["score", "--team-size", "huge", "--channels", "1-2", "--industry", "other"])


class TestValidateKb:
    def test_packaged(self, capsys):
        main(["validate-kb"])
        assert "OK" in capsys.readouterr().out

    def test_broken_file(self, tmp_path, capsys):
        path = tmp_path / "kb.yaml"
        path.write_text(
            "version: '1.0'\ncategories:\n  p:\n    questions:\n"
            "      - {id: a, question: q, answer: x, related_modules: [nowhere]}\n",
            encoding="utf-8",
        )
        with pytest.raises(SystemExit) as exc_info:
            main(["validate-kb", "--path", str(path)])
        assert exc_info.value.code == 1
        err = capsys.readouterr().err
        assert "Unknown related module 'nowhere'" in err
        assert "No fallback responses defined" in err


def test_no_command_prints_help(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main([])
    assert exc_info.value.code == 1
    assert "journey-engine" in capsys.readouterr().out
