"""
Document normalizer.

`normalize` turns raw extracted text (a résumé or a job description)
into a `FeatureSet`.  It is a pure function of the text, the ruleset
and the reference date: no I/O, no shared mutable state, so it can run
concurrently for every candidate in a batch.

`Normalizer` compiles the ruleset's vocabularies once and can then be
shared across worker threads.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING, Optional

from ..errors import InsufficientTextError
from .experience import extract_experience
from .schema import FeatureSet
from .skills import VocabularyMatcher
from .titles import EducationMatcher, TitleMatcher

if TYPE_CHECKING:
    from ..config import Ruleset

logger = logging.getLogger(__name__)


class Normalizer:
    """Normalize documents against one fixed ruleset.

    Args:
        ruleset: Vocabulary, titles, degree patterns and the minimum
            text length.
        today: Reference date used to resolve "Present" in date ranges.
            Fixing it makes normalization fully reproducible.
    """

    def __init__(self, ruleset: "Ruleset", today: Optional[date] = None) -> None:
        self.ruleset = ruleset
        self.today = today or date.today()
        self._skills = VocabularyMatcher(ruleset.skills)
        self._titles = TitleMatcher(ruleset.titles)
        self._education = EducationMatcher(ruleset.degrees)

    def normalize(self, raw_text: str) -> FeatureSet:
        """Derive the canonical feature set of a document.

        Raises:
            InsufficientTextError: If the stripped text is shorter than
                the ruleset's `min_text_length`.
        """
        text = (raw_text or "").strip()
        if len(text) < self.ruleset.min_text_length:
            raise InsufficientTextError(len(text), self.ruleset.min_text_length)
        experience = extract_experience(text, today=self.today)
        features = FeatureSet(
            skills=self._skills.find_all(text),
            titles=self._titles.extract(text),
            experience_years=experience.years,
            education_level=self._education.extract(text),
            experience_known=experience.known,
        )
        logger.debug(
            "Normalized %d chars: %d skills, %d titles, %.1f years (known=%s), %s",
            len(text),
            len(features.skills),
            len(features.titles),
            features.experience_years,
            features.experience_known,
            features.education_level.value,
        )
        return features


def normalize(raw_text: str, ruleset: "Ruleset", today: Optional[date] = None) -> FeatureSet:
    """Normalize one document; see `Normalizer.normalize`."""
    return Normalizer(ruleset, today=today).normalize(raw_text)
