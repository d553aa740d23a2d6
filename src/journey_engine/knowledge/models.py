"""Knowledge base and match models."""

from __future__ import annotations

from pydantic import Field, field_validator

from journey_engine.models import BehaviorSnapshot, _FrozenModel, _normalize_string_list


class KnowledgeCTA(_FrozenModel):
    text: str
    action: str
    value: str | None = None


class KnowledgeEntry(_FrozenModel):
    """One curated question/answer pair."""

    id: str
    question: str
    keywords: tuple[str, ...] = ()
    answer: str
    category: str = ""
    related_modules: tuple[str, ...] = ()
    cta: KnowledgeCTA | None = None

    @field_validator("keywords", "related_modules", mode="before")
    @classmethod
    def normalize_lists(cls, values: object) -> object:
        if isinstance(values, (list, tuple)):
            return tuple(_normalize_string_list(list(values)))
        return values

    @field_validator("answer", "question")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return value.strip()


class KnowledgeCategory(_FrozenModel):
    key: str
    name: str
    questions: tuple[KnowledgeEntry, ...] = ()


class KnowledgeBase(_FrozenModel):
    """Static, versioned knowledge base organized in named categories.

    Entries carry their category *key* (e.g. ``pricing``), which is what the
    context boosts are keyed on.
    """

    version: str
    categories: tuple[KnowledgeCategory, ...] = ()
    fallback_responses: tuple[str, ...] = ()
    escalation_message: str = ""

    def entries(self) -> list[KnowledgeEntry]:
        return [entry for category in self.categories for entry in category.questions]

    def get(self, entry_id: str) -> KnowledgeEntry | None:
        for entry in self.entries():
            if entry.id == entry_id:
                return entry
        return None

    def category_name(self, key: str) -> str:
        for category in self.categories:
            if category.key == key:
                return category.name
        return key


class MatchContext(_FrozenModel):
    """The slice of visitor state the matcher boosts on."""

    current_page: str = ""
    modules_viewed: int = Field(default=0, ge=0)
    industry: str | None = None
    icp_score: float = Field(default=0, ge=0, le=100)

    @classmethod
    def from_snapshot(cls, snapshot: BehaviorSnapshot) -> MatchContext:
        return cls(
            current_page=snapshot.current_page,
            modules_viewed=snapshot.modules_count,
            industry=snapshot.industry,
            icp_score=snapshot.icp_score,
        )


class QuestionMatch(_FrozenModel):
    question_id: str
    question: str
    answer: str
    confidence: float = Field(ge=0.0, le=1.0)
    category: str
    related_modules: tuple[str, ...] = ()
    cta: KnowledgeCTA | None = None

    @classmethod
    def from_entry(cls, entry: KnowledgeEntry, confidence: float) -> QuestionMatch:
        return cls(
            question_id=entry.id,
            question=entry.question,
            answer=entry.answer,
            confidence=confidence,
            category=entry.category,
            related_modules=entry.related_modules,
            cta=entry.cta,
        )
