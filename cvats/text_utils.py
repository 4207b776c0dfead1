"""
Text utility helpers shared by the rubric scorers.
"""

import math
from typing import List


def normalize(text: str) -> str:
    """Case-folded copy of the text used for all keyword and section matching."""
    return (text or "").lower()


def tokenize(text: str) -> List[str]:
    """Whitespace tokens with empty strings dropped."""
    return (text or "").split()


def word_count(text: str) -> int:
    return len(tokenize(text))


def safe_ratio(numerator: float, denominator: float) -> float:
    """Returns numerator / denominator, or 0.0 when the denominator is zero."""
    if not denominator:
        return 0.0
    return numerator / denominator


def round_half_up(value: float) -> int:
    """Rounds .5 away from zero for positive scores (Python's round() is banker's rounding)."""
    return int(math.floor(value + 0.5))


def fixed2(value: float) -> str:
    """Formats a ratio the way the rubric displays it: two decimal places."""
    return f"{value:.2f}"
