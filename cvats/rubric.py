"""
Rubric configuration.

A rubric enumerates the sections a résumé is expected to have, the keyword
groups it is scored against, the impact verbs it should use, and the point
weights, penalties and thresholds of every scoring category. One evaluator
serves any rubric; the two built-in presets only differ in these values.
"""

import json
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class KeywordGroup(BaseModel):
    """Alternative surface forms for one skill or topic."""

    model_config = ConfigDict(frozen=True)

    name: str
    keywords: List[str] = Field(min_length=1)

    @field_validator("keywords")
    @classmethod
    def lowercase_terms(cls, v: List[str]) -> List[str]:
        cleaned = [k.strip().lower() for k in v if k.strip()]
        if not cleaned:
            raise ValueError("keyword group needs at least one non-blank keyword")
        return cleaned


class RubricConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    required_sections: List[str] = Field(min_length=1)
    keyword_groups: List[KeywordGroup] = Field(min_length=1)
    impact_verbs: List[str] = Field(min_length=1)
    focus_label: str = "skill areas"

    # Sections
    section_points: int = Field(25, ge=0)

    # Keywords: breadth across groups plus capped density
    keyword_points: int = Field(45, ge=0)
    breadth_points: float = Field(25, ge=0)
    density_cap: float = Field(20, ge=0)
    # When set, the skills recommendation lists up to this many missing
    # keywords instead of the uncovered groups.
    missing_keyword_limit: Optional[int] = Field(None, ge=1)

    # Impact language
    impact_points: int = Field(10, ge=0)
    impact_points_per_term: int = Field(2, ge=0)

    # Formatting
    formatting_points: int = Field(20, ge=0)
    table_penalty: int = Field(5, ge=0)
    image_penalty: int = Field(5, ge=0)
    text_box_penalty: int = Field(5, ge=0)
    unusual_character_penalty: int = Field(3, ge=0)
    line_break_penalty: int = Field(2, ge=0)
    unusual_character_limit: int = Field(50, ge=0)
    min_line_break_ratio: float = Field(0.01, ge=0)

    # Readability (0 points disables the scorer)
    readability_points: int = Field(0, ge=0)
    long_sentence_words: int = 25
    short_sentence_words: int = 10
    max_paragraph_sentences: int = 8
    min_paragraph_sentences: int = 2
    long_document_words: int = 200
    min_bullets: int = 5
    long_sentence_penalty: int = Field(5, ge=0)
    short_sentence_penalty: int = Field(3, ge=0)
    long_paragraph_penalty: int = Field(3, ge=0)
    short_paragraph_penalty: int = Field(2, ge=0)
    missing_bullets_penalty: int = Field(4, ge=0)
    min_keyword_density: float = Field(2.0, ge=0)

    @field_validator("required_sections", "impact_verbs")
    @classmethod
    def lowercase_terms(cls, v: List[str]) -> List[str]:
        cleaned = [t.strip().lower() for t in v if t.strip()]
        if not cleaned:
            raise ValueError("must contain at least one non-blank entry")
        return cleaned

    @model_validator(mode="after")
    def check_unique_group_names(self) -> "RubricConfig":
        names = [g.name for g in self.keyword_groups]
        if len(names) != len(set(names)):
            raise ValueError("keyword group names must be unique")
        return self

    @property
    def readability_enabled(self) -> bool:
        return self.readability_points > 0

    @classmethod
    def from_file(cls, path: str) -> "RubricConfig":
        """Load a rubric from a JSON file."""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls.model_validate(data)


DEVOPS_RUBRIC = RubricConfig(
    name="devops",
    required_sections=["experience", "skills", "projects", "education"],
    impact_verbs=[
        "automated", "reduced", "improved", "optimized",
        "scaled", "secured", "migrated", "deployed",
    ],
    keyword_groups=[
        KeywordGroup(name="cicd", keywords=["jenkins", "github actions", "gitlab ci", "circleci", "argocd"]),
        KeywordGroup(name="containers", keywords=["docker", "kubernetes", "helm", "containerd"]),
        KeywordGroup(name="cloud", keywords=["aws", "ec2", "s3", "iam", "eks", "azure", "gcp"]),
        KeywordGroup(name="infrastructure", keywords=["terraform", "cloudformation", "pulumi"]),
        KeywordGroup(name="configuration", keywords=["ansible", "chef", "puppet"]),
        KeywordGroup(name="monitoring", keywords=["prometheus", "grafana", "elk", "datadog"]),
        KeywordGroup(name="security", keywords=["iam", "secrets", "vault", "trivy"]),
        KeywordGroup(name="osNetworking", keywords=["linux", "bash", "tcp/ip", "dns", "nginx"]),
        KeywordGroup(
            name="practices",
            keywords=["gitops", "blue green", "canary", "automation", "scalability", "high availability"],
        ),
    ],
    focus_label="DevOps areas",
)


GENERAL_RUBRIC = RubricConfig(
    name="general",
    required_sections=["summary", "experience", "education", "skills", "projects", "certifications"],
    impact_verbs=[
        "achieved", "improved", "increased", "reduced", "led", "managed",
        "delivered", "launched", "built", "designed", "optimized", "automated",
    ],
    keyword_groups=[
        KeywordGroup(name="programming", keywords=["python", "java", "javascript", "typescript", "sql", "c++", "golang"]),
        KeywordGroup(name="data", keywords=["machine learning", "data analysis", "pandas", "tableau", "power bi", "excel"]),
        KeywordGroup(name="cloud", keywords=["aws", "azure", "gcp", "docker", "kubernetes"]),
        KeywordGroup(name="delivery", keywords=["agile", "scrum", "ci/cd", "git", "testing"]),
        KeywordGroup(name="leadership", keywords=["leadership", "mentoring", "stakeholder", "cross functional"]),
        KeywordGroup(name="communication", keywords=["communication", "presentation", "documentation", "collaboration"]),
    ],
    focus_label="skill areas",
    section_points=25,
    keyword_points=30,
    breadth_points=15,
    density_cap=15,
    missing_keyword_limit=10,
    impact_points=10,
    formatting_points=20,
    readability_points=15,
)


PRESETS: Dict[str, RubricConfig] = {
    DEVOPS_RUBRIC.name: DEVOPS_RUBRIC,
    GENERAL_RUBRIC.name: GENERAL_RUBRIC,
}


def get_rubric(name: str) -> RubricConfig:
    """Look up a built-in rubric by preset name."""
    try:
        return PRESETS[name.strip().lower()]
    except KeyError:
        raise ValueError(
            f"Unknown rubric preset '{name}'. Available presets: {', '.join(sorted(PRESETS))}"
        ) from None


__all__ = ["KeywordGroup", "RubricConfig", "DEVOPS_RUBRIC", "GENERAL_RUBRIC", "PRESETS", "get_rubric"]
