"""Tests for knowledge base loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from conftest import make_entry, make_knowledge_base
from journey_engine.errors import KnowledgeBaseError
from journey_engine.knowledge.loader import load_knowledge_base, parse_knowledge_base
from journey_engine.knowledge.models import KnowledgeCTA
from journey_engine.knowledge.validator import (
    validate_knowledge_base,
    validate_knowledge_base_file,
)

_MINIMAL_YAML = """\
version: "2.0"
fallback_responses:
  - "Geen idee."
escalation_message: |
  Neem contact op.
categories:
  pricing:
    name: Pricing
    questions:
      - id: cost
        question: "  Wat kost het?  "
        keywords: [prijs, " kosten ", ""]
        answer: Veel te weinig.
        related_modules: [roi-calculator]
        cta:
          text: Bereken
          action: open_calculator
"""


def _write(tmp_path: Path, text: str, name: str = "kb.yaml") -> Path:
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


class TestLoader:
    def test_packaged_knowledge_base_loads(self, packaged_kb):
        assert packaged_kb.version
        assert len(packaged_kb.entries()) >= 15
        assert {c.key for c in packaged_kb.categories} >= {"pricing", "implementation", "use_cases"}

    def test_minimal_file(self, tmp_path):
        kb = load_knowledge_base(_write(tmp_path, _MINIMAL_YAML))
        assert kb.version == "2.0"
        entry = kb.get("cost")
        assert entry.category == "pricing"
        assert entry.question == "Wat kost het?"
        assert entry.keywords == ("prijs", "kosten")
        assert entry.cta == KnowledgeCTA(text="Bereken", action="open_calculator")
        assert kb.escalation_message == "Neem contact op."
        assert kb.category_name("pricing") == "Pricing"

    def test_missing_file(self, tmp_path):
        with pytest.raises(KnowledgeBaseError, match="Cannot read"):
            load_knowledge_base(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(KnowledgeBaseError, match="Invalid YAML"):
            load_knowledge_base(_write(tmp_path, "version: [unclosed"))

    def test_missing_required_field(self):
        with pytest.raises(KnowledgeBaseError, match="Missing required field"):
            parse_knowledge_base({"version": "1", "categories": {"p": {"questions": [{"id": "x"}]}}})

    def test_not_a_mapping(self):
        with pytest.raises(KnowledgeBaseError):
            parse_knowledge_base(["not", "a", "mapping"])  # type: ignore[arg-type]

    def test_unknown_entry_field_rejected(self):
        data = {
            "version": "1",
            "categories": {"p": {"questions": [{"id": "x", "question": "q", "answer": "a"}]}},
        }
        assert parse_knowledge_base(data).get("x") is not None
        data["categories"]["p"]["questions"][0]["cta"] = {"text": "t", "action": "a", "extra": 1}
        with pytest.raises(KnowledgeBaseError, match="Invalid knowledge base"):
            parse_knowledge_base(data)


class TestValidator:
    def test_packaged_knowledge_base_is_valid(self, packaged_kb):
        assert validate_knowledge_base(packaged_kb) == []

    def test_duplicate_ids(self):
        kb = make_knowledge_base(make_entry("dup"), make_entry("dup", category="features"))
        errors = validate_knowledge_base(kb)
        assert any("Duplicate entry id 'dup'" in e for e in errors)

    def test_missing_keywords(self):
        kb = make_knowledge_base(make_entry(keywords=[]))
        assert any("No keywords" in e for e in validate_knowledge_base(kb))

    def test_unknown_module(self):
        kb = make_knowledge_base(make_entry(related_modules=["time-machine"]))
        assert any("Unknown related module 'time-machine'" in e for e in validate_knowledge_base(kb))

    def test_custom_module_catalogue(self):
        kb = make_knowledge_base(make_entry(related_modules=["time-machine"]))
        assert validate_knowledge_base(kb, known_modules=["time-machine"]) == []

    def test_missing_fallbacks_and_bad_version(self):
        kb = make_knowledge_base(fallback_responses=[]).model_copy(update={"version": "v-next"})
        errors = validate_knowledge_base(kb)
        assert "No fallback responses defined" in errors
        assert any("doesn't look like a version number" in e for e in errors)

    def test_file_validation(self, tmp_path):
        kb, errors = validate_knowledge_base_file(_write(tmp_path, _MINIMAL_YAML))
        assert kb is not None
        assert errors == []

    def test_file_validation_load_failure(self, tmp_path):
        kb, errors = validate_knowledge_base_file(tmp_path / "nope.yaml")
        assert kb is None
        assert "Failed to load" in errors[0]
