"""
Title and education extraction.

Titles come from a finite table of recognized titles (see
`VocabularyMatcher`); they are returned in order of first appearance,
which in a reverse-chronological résumé means most recent first.
Education is the highest level whose degree patterns match anywhere in
the text.  Unrecognized titles and degrees are dropped, never guessed.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Mapping, Pattern, Tuple

from .schema import EducationLevel
from .skills import VocabularyMatcher

logger = logging.getLogger(__name__)


class TitleMatcher(VocabularyMatcher):
    """Recognize job titles, most recent (first mentioned) first."""

    def extract(self, text: str) -> Tuple[str, ...]:
        return self.find_ordered(text)


class EducationMatcher:
    """Map degree patterns to the highest `EducationLevel` present."""

    def __init__(self, degrees: Mapping[str, Iterable[str]]) -> None:
        self._levels: List[Tuple[EducationLevel, List[Pattern[str]]]] = []
        for level_name, patterns in degrees.items():
            level = EducationLevel.from_name(level_name)
            compiled = [re.compile(p, re.IGNORECASE) for p in patterns]
            self._levels.append((level, compiled))
        # Highest level first so the first hit is the answer.
        self._levels.sort(key=lambda item: item[0].order, reverse=True)

    def extract(self, text: str) -> EducationLevel:
        for level, patterns in self._levels:
            if any(p.search(text) for p in patterns):
                return level
        return EducationLevel.NONE
