import re
from functools import lru_cache
from typing import Dict, List, Optional, Tuple

from .config import load_rubric
from .rubric import DEVOPS_RUBRIC, RubricConfig, get_rubric
from .schemas import (
    AnalysisResult,
    FeedbackBundle,
    FormattingFeedback,
    ImpactFeedback,
    KeywordFeedback,
    KeywordGroupResult,
    KeywordHit,
    ReadabilityFeedback,
    Recommendation,
    SectionFeedback,
)
from .text_utils import normalize, round_half_up, safe_ratio, word_count


TABLE_PATTERNS = [
    re.compile(r"<table", re.IGNORECASE),
    re.compile(r"\|\s*\|"),
    re.compile(r"^[ \t]*\|.*\|[ \t]*$", re.MULTILINE),
    re.compile(r"┌.*┐"),
    re.compile(r"╔.*╗"),
]

IMAGE_PATTERNS = [
    re.compile(r"<img", re.IGNORECASE),
    re.compile(r"\[image\]", re.IGNORECASE),
    re.compile(r"\.(?:jpe?g|png|gif)\b", re.IGNORECASE),
]

TEXT_BOX_PATTERNS = [
    re.compile(r"text box", re.IGNORECASE),
    re.compile(r"textbox", re.IGNORECASE),
]

# Anything that is not a word character, whitespace or common punctuation
UNUSUAL_CHARS = re.compile(r"[^\w\s.,;:!?\-()\[\]{}'\"]")

SENTENCE_SPLIT = re.compile(r"[.!?]+")
PARAGRAPH_SPLIT = re.compile(r"\n\s*\n")
BULLET_LINE = re.compile(r"^[ \t]*(?:[-*•▪◦‣·●]|\d+[.)])[ \t]+\S", re.MULTILINE)
WORD_CHAR = re.compile(r"\w")

TABLE_ISSUE = "Contains tables which may not parse well in ATS systems"
IMAGE_ISSUE = "Contains images which ATS systems cannot read"
TEXT_BOX_ISSUE = "Contains text boxes which may not be parsed correctly"
UNUSUAL_CHARS_ISSUE = "Contains many unusual characters that may cause parsing issues"
LINE_BREAK_ISSUE = "May lack proper formatting and line breaks"
EMPTY_TEXT_ISSUE = "No readable content"


def _term_pattern(term: str) -> re.Pattern:
    """
    Word-bounded, case-insensitive matcher for a keyword or phrase.
    Internal whitespace matches one space or hyphen, or nothing, so
    "github actions" also finds "github-actions" and "githubactions".
    Lookarounds are used instead of \\b so terms ending in symbols ("c++") still match.
    """
    body = r"[\s-]?".join(re.escape(part) for part in term.split())
    return re.compile(rf"(?<!\w){body}(?!\w)", re.IGNORECASE)


def _section_variants(name: str) -> Tuple[List[str], Optional[re.Pattern]]:
    words = name.split()
    literals = list(dict.fromkeys([name, "".join(words), "-".join(words)]))
    initialism = None
    if len(words) > 1:
        initialism = re.compile(rf"(?<!\w){re.escape(''.join(w[0] for w in words))}(?!\w)")
    return literals, initialism


def _count(pattern: re.Pattern, text: str) -> int:
    return sum(1 for _ in pattern.finditer(text))


class RubricEvaluator:
    """
    Scores résumé text against a rubric.

    All matchers are compiled once here; analyze() keeps no state between
    calls, so one evaluator can be shared across threads and requests.
    """

    def __init__(self, rubric: RubricConfig = DEVOPS_RUBRIC):
        self.rubric = rubric
        self._sections = [(name, _section_variants(name)) for name in rubric.required_sections]
        self._keyword_groups: List[Tuple[str, List[Tuple[str, re.Pattern]]]] = [
            (group.name, [(kw, _term_pattern(kw)) for kw in group.keywords])
            for group in rubric.keyword_groups
        ]
        self._impact_verbs = [(verb, _term_pattern(verb)) for verb in rubric.impact_verbs]

    def analyze(self, content: str) -> AnalysisResult:
        content = content or ""
        text = normalize(content)
        words = word_count(content)

        sections = self.check_sections(text)
        skills = self.check_keywords(text, words)
        impact = self.check_impact(text)
        formatting = self.check_formatting(content, words)
        readability = None
        if self.rubric.readability_enabled:
            readability = self.check_readability(content, words)

        total = sections.score + skills.score + impact.score + formatting.score
        if readability is not None:
            total += readability.score

        recommendations = self.generate_recommendations(sections, skills, impact, formatting, readability)

        return AnalysisResult(
            score=max(0, min(100, total)),
            feedback=FeedbackBundle(
                sections=sections,
                skills=skills,
                impact=impact,
                formatting=formatting,
                readability=readability,
                recommendations=recommendations,
            ),
        )

    def check_sections(self, text: str) -> SectionFeedback:
        found: List[str] = []
        missing: List[str] = []

        for name, (literals, initialism) in self._sections:
            present = any(literal in text for literal in literals)
            if not present and initialism is not None:
                present = initialism.search(text) is not None
            (found if present else missing).append(name)

        points = self.rubric.section_points
        score = round_half_up(safe_ratio(len(found), len(self._sections)) * points)
        return SectionFeedback(found=found, missing=missing, score=score, max_score=points)

    def check_keywords(self, text: str, words: int) -> KeywordFeedback:
        rubric = self.rubric
        groups: Dict[str, KeywordGroupResult] = {}
        total_found = 0
        covered = 0

        for group_name, matchers in self._keyword_groups:
            found: List[KeywordHit] = []
            missing: List[str] = []
            for keyword, pattern in matchers:
                count = _count(pattern, text)
                if count > 0:
                    found.append(KeywordHit(keyword=keyword, count=count))
                    total_found += count
                else:
                    missing.append(keyword)
            if found:
                covered += 1
            groups[group_name] = KeywordGroupResult(found=found, missing=missing)

        total_groups = len(self._keyword_groups)
        breadth = safe_ratio(covered, total_groups) * rubric.breadth_points
        # keywords per 100 words
        density = safe_ratio(total_found, words) * 100
        score = round_half_up(min(rubric.keyword_points, breadth + min(rubric.density_cap, density)))

        return KeywordFeedback(
            groups=groups,
            total_keywords_found=total_found,
            groups_with_coverage=covered,
            total_groups=total_groups,
            density=density,
            score=score,
            max_score=rubric.keyword_points,
        )

    def check_impact(self, text: str) -> ImpactFeedback:
        found: List[KeywordHit] = []
        missing: List[str] = []
        total = 0

        for verb, pattern in self._impact_verbs:
            count = _count(pattern, text)
            if count > 0:
                found.append(KeywordHit(keyword=verb, count=count))
                total += count
            else:
                missing.append(verb)

        points = self.rubric.impact_points
        score = min(points, total * self.rubric.impact_points_per_term)
        return ImpactFeedback(found=found, missing=missing, total_impact_terms=total, score=score, max_score=points)

    def check_formatting(self, content: str, words: int) -> FormattingFeedback:
        """Case- and symbol-sensitive checks, so this runs on the original text."""
        rubric = self.rubric
        issues: List[str] = []
        score = rubric.formatting_points

        if any(p.search(content) for p in TABLE_PATTERNS):
            issues.append(TABLE_ISSUE)
            score -= rubric.table_penalty

        if any(p.search(content) for p in IMAGE_PATTERNS):
            issues.append(IMAGE_ISSUE)
            score -= rubric.image_penalty

        if any(p.search(content) for p in TEXT_BOX_PATTERNS):
            issues.append(TEXT_BOX_ISSUE)
            score -= rubric.text_box_penalty

        unusual = len(UNUSUAL_CHARS.findall(content))
        if unusual > rubric.unusual_character_limit:
            issues.append(UNUSUAL_CHARS_ISSUE)
            score -= rubric.unusual_character_penalty

        line_break_ratio = safe_ratio(content.count("\n"), words)
        if words and line_break_ratio < rubric.min_line_break_ratio:
            issues.append(LINE_BREAK_ISSUE)
            score -= rubric.line_break_penalty

        return FormattingFeedback(
            issues=issues,
            unusual_characters=unusual,
            line_break_ratio=line_break_ratio,
            score=max(0, score),
            max_score=rubric.formatting_points,
        )

    def check_readability(self, content: str, words: int) -> ReadabilityFeedback:
        rubric = self.rubric
        sentence_count = sum(1 for s in SENTENCE_SPLIT.split(content) if WORD_CHAR.search(s))
        paragraph_count = sum(1 for p in PARAGRAPH_SPLIT.split(content) if p.strip())
        bullet_count = len(BULLET_LINE.findall(content))
        avg_words = safe_ratio(words, sentence_count)
        avg_sentences = safe_ratio(sentence_count, paragraph_count)

        issues: List[str] = []
        if words == 0:
            issues.append(EMPTY_TEXT_ISSUE)
            score = 0
        else:
            score = rubric.readability_points

            if avg_words > rubric.long_sentence_words:
                issues.append(
                    f"Sentences average {avg_words:.1f} words; keep them under {rubric.long_sentence_words}"
                )
                score -= rubric.long_sentence_penalty
            elif sentence_count and avg_words < rubric.short_sentence_words:
                issues.append(
                    f"Sentences average {avg_words:.1f} words; add detail to reach at least {rubric.short_sentence_words}"
                )
                score -= rubric.short_sentence_penalty

            if paragraph_count and avg_sentences > rubric.max_paragraph_sentences:
                issues.append(f"Paragraphs average {avg_sentences:.1f} sentences; split them up")
                score -= rubric.long_paragraph_penalty
            elif paragraph_count and avg_sentences < rubric.min_paragraph_sentences:
                issues.append(f"Paragraphs average {avg_sentences:.1f} sentences; group related points together")
                score -= rubric.short_paragraph_penalty

            if words > rubric.long_document_words and bullet_count < rubric.min_bullets:
                issues.append(f"Only {bullet_count} bullet points in a {words}-word document")
                score -= rubric.missing_bullets_penalty

        return ReadabilityFeedback(
            issues=issues,
            word_count=words,
            sentence_count=sentence_count,
            paragraph_count=paragraph_count,
            bullet_count=bullet_count,
            avg_words_per_sentence=avg_words,
            avg_sentences_per_paragraph=avg_sentences,
            score=max(0, score),
            max_score=rubric.readability_points,
        )

    def generate_recommendations(
        self,
        sections: SectionFeedback,
        skills: KeywordFeedback,
        impact: ImpactFeedback,
        formatting: FormattingFeedback,
        readability: Optional[ReadabilityFeedback] = None,
    ) -> List[Recommendation]:
        rubric = self.rubric
        recommendations: List[Recommendation] = []

        if sections.missing:
            recommendations.append(Recommendation(
                type="section",
                priority="high",
                message=f"Add missing sections: {', '.join(sections.missing)}",
            ))

        weak_groups = [name for name, result in skills.groups.items() if not result.found]
        if weak_groups:
            if rubric.missing_keyword_limit:
                missing = list(dict.fromkeys(kw for result in skills.groups.values() for kw in result.missing))
                recommendations.append(Recommendation(
                    type="skills",
                    priority="medium",
                    message=f"Consider adding these keywords: {', '.join(missing[:rubric.missing_keyword_limit])}",
                ))
            else:
                recommendations.append(Recommendation(
                    type="skills",
                    priority="high",
                    message=f"Add concrete experience for these {rubric.focus_label}: {', '.join(weak_groups)}",
                ))

        if impact.total_impact_terms == 0:
            examples = ", ".join(rubric.impact_verbs[:4])
            recommendations.append(Recommendation(
                type="impact",
                priority="medium",
                message=f"Use impact-focused verbs (e.g. {examples}) to describe your results",
            ))

        if formatting.issues:
            recommendations.append(Recommendation(
                type="formatting",
                priority="high",
                message=f"Formatting issues: {'; '.join(formatting.issues)}",
            ))

        if readability is not None:
            if readability.avg_words_per_sentence > rubric.long_sentence_words:
                recommendations.append(Recommendation(
                    type="readability",
                    priority="medium",
                    message=(
                        f"Break up long sentences: they average {readability.avg_words_per_sentence:.0f} words, "
                        f"aim for {rubric.long_sentence_words} or fewer"
                    ),
                ))
            if skills.density < rubric.min_keyword_density:
                recommendations.append(Recommendation(
                    type="keyword",
                    priority="high",
                    message=(
                        f"Increase keyword density: {skills.density:.2f} keywords per 100 words "
                        f"is below the recommended {rubric.min_keyword_density:.2f}"
                    ),
                ))

        return recommendations


def get_evaluator(preset: str = DEVOPS_RUBRIC.name) -> RubricEvaluator:
    """Shared evaluator for a built-in preset. Preset names are case- and whitespace-insensitive."""
    return _preset_evaluator(preset.strip().lower())


@lru_cache(maxsize=None)
def _preset_evaluator(name: str) -> RubricEvaluator:
    # get_rubric raises for unknown names, so only real presets are cached
    return RubricEvaluator(get_rubric(name))


@lru_cache(maxsize=1)
def get_default_evaluator() -> RubricEvaluator:
    """Shared evaluator for the rubric chosen by ATS_RUBRIC_FILE or ATS_RUBRIC_PRESET."""
    return RubricEvaluator(load_rubric())


def analyze(content: str, rubric: Optional[RubricConfig] = None) -> AnalysisResult:
    evaluator = RubricEvaluator(rubric) if rubric is not None else get_default_evaluator()
    return evaluator.analyze(content)


__all__ = ["RubricEvaluator", "get_evaluator", "get_default_evaluator", "analyze"]
