"""
Final score computation.

Combines the sub-scores of a `MatchResult` into one integer in
[0, 100]:

    final = round_half_up(0.5 * skill + 0.3 * experience + 0.2 * title)

Dimensions listed in `MatchResult.skipped` are dropped and the
remaining weights renormalized, so a skipped dimension neither helps
nor hurts.  Weights are module constants and can be overridden per
call without touching the matcher.
"""

from __future__ import annotations

import logging
import math
from typing import Mapping, Tuple

from ..errors import ScoringOverflowError
from .schema import MatchResult

logger = logging.getLogger(__name__)

SKILL_WEIGHT = 0.5
EXPERIENCE_WEIGHT = 0.3
TITLE_WEIGHT = 0.2

DEFAULT_WEIGHTS = {
    "skill": SKILL_WEIGHT,
    "experience": EXPERIENCE_WEIGHT,
    "title": TITLE_WEIGHT,
}

HIGHLY_RECOMMENDED_THRESHOLD = 85
RECOMMENDED_THRESHOLD = 70


def _checked(name: str, value: float) -> float:
    if not math.isfinite(value) or value < 0.0 or value > 100.0:
        raise ScoringOverflowError(f"{name} score {value!r} is outside [0, 100]")
    return value


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives.

    The value is first rounded to 9 decimals so float noise such as
    49.49999999999999 for an exact 49.5 does not round down.
    """
    return int(math.floor(round(value, 9) + 0.5))


def score(result: MatchResult, weights: Mapping[str, float] = DEFAULT_WEIGHTS) -> int:
    """Weighted 0–100 integer score of a match.

    Raises:
        ScoringOverflowError: If any sub-score is not a finite number in
            [0, 100].  This indicates a matcher bug and is never
            silently corrected.
    """
    components = {
        "skill": _checked("skill", result.skill_score),
        "experience": _checked("experience", result.experience_score),
        "title": _checked("title", result.title_score),
    }
    active = {k: v for k, v in components.items() if k not in result.skipped}
    total_weight = sum(weights[k] for k in active)
    if total_weight <= 0:
        return 0
    weighted = sum(weights[k] * v for k, v in active.items()) / total_weight
    return max(0, min(100, round_half_up(weighted)))


def recommendation_for(
    final_score: int,
    highly_recommended: int = HIGHLY_RECOMMENDED_THRESHOLD,
    recommended: int = RECOMMENDED_THRESHOLD,
) -> Tuple[str, str]:
    """Return the `(recommendation, fit_level)` band of a final score."""
    if final_score >= highly_recommended:
        return "Highly Recommended", "High"
    if final_score >= recommended:
        return "Recommended", "Medium"
    return "Consider", "Low"
