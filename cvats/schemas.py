from typing import Any, Dict, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator
from pydantic.alias_generators import to_camel

from .text_utils import fixed2


class _Schema(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class SubScore(_Schema):
    score: int = Field(ge=0)
    max_score: int = Field(ge=0)

    @model_validator(mode="after")
    def check_within_max(self):
        if self.score > self.max_score:
            raise ValueError(f"score {self.score} exceeds max_score {self.max_score}")
        return self


class KeywordHit(_Schema):
    keyword: str
    count: int = Field(ge=1)


class SectionFeedback(SubScore):
    found: Tuple[str, ...]
    missing: Tuple[str, ...]


class KeywordGroupResult(_Schema):
    found: Tuple[KeywordHit, ...]
    missing: Tuple[str, ...]


class KeywordFeedback(SubScore):
    groups: Dict[str, KeywordGroupResult]
    total_keywords_found: int = Field(ge=0)
    groups_with_coverage: int = Field(ge=0)
    total_groups: int = Field(ge=0)
    density: float = Field(ge=0)

    @field_serializer("density")
    def serialize_density(self, v: float) -> str:
        return fixed2(v)


class ImpactFeedback(SubScore):
    found: Tuple[KeywordHit, ...]
    missing: Tuple[str, ...]
    total_impact_terms: int = Field(ge=0)


class FormattingFeedback(SubScore):
    issues: Tuple[str, ...]
    unusual_characters: int = Field(ge=0)
    line_break_ratio: float = Field(ge=0)

    @field_serializer("line_break_ratio")
    def serialize_ratio(self, v: float) -> str:
        return fixed2(v)


class ReadabilityFeedback(SubScore):
    issues: Tuple[str, ...]
    word_count: int = Field(ge=0)
    sentence_count: int = Field(ge=0)
    paragraph_count: int = Field(ge=0)
    bullet_count: int = Field(ge=0)
    avg_words_per_sentence: float = Field(ge=0)
    avg_sentences_per_paragraph: float = Field(ge=0)

    @field_serializer("avg_words_per_sentence", "avg_sentences_per_paragraph")
    def serialize_averages(self, v: float) -> str:
        return fixed2(v)


class Recommendation(_Schema):
    type: Literal["section", "skills", "impact", "formatting", "readability", "keyword"]
    priority: Literal["high", "medium"]
    message: str


class FeedbackBundle(_Schema):
    sections: SectionFeedback
    skills: KeywordFeedback
    impact: ImpactFeedback
    formatting: FormattingFeedback
    readability: Optional[ReadabilityFeedback] = None
    recommendations: Tuple[Recommendation, ...] = ()


class AnalysisResult(_Schema):
    score: int = Field(ge=0, le=100)
    max_score: Literal[100] = 100
    feedback: FeedbackBundle

    def to_dict(self) -> Dict[str, Any]:
        """Wire shape: camelCase keys, fixed-point ratios, disabled scorers omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


__all__ = [
    "SubScore",
    "KeywordHit",
    "SectionFeedback",
    "KeywordGroupResult",
    "KeywordFeedback",
    "ImpactFeedback",
    "FormattingFeedback",
    "ReadabilityFeedback",
    "Recommendation",
    "FeedbackBundle",
    "AnalysisResult",
]
