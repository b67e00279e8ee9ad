"""
Closed-vocabulary phrase matching.

Skills and job titles are both recognized against a finite table of
canonical names and their variants.  All variants are compiled into a
single case-insensitive alternation, longest variant first, so "Node.js"
wins over "JS" and "Senior Software Engineer" wins over "Software
Engineer" at the same position.  Anything not in the table is dropped.

Boundaries are stricter than `\\b`: a match may not be glued to a
letter, digit, `+`, `#` or a dotted suffix, so "C" never matches inside
"C++" and "JS" never matches inside "Node.js".
"""

from __future__ import annotations

import logging
import re
from typing import Dict, FrozenSet, Iterable, List, Mapping, Tuple

logger = logging.getLogger(__name__)

_LEFT_BOUNDARY = r"(?<![A-Za-z0-9_+#.])"
_RIGHT_BOUNDARY = r"(?![A-Za-z0-9_+#])(?!\.[A-Za-z0-9])"


class VocabularyMatcher:
    """Find canonical vocabulary entries mentioned in free text."""

    def __init__(self, table: Mapping[str, Iterable[str]]) -> None:
        self._canonical: Dict[str, str] = {}
        for canonical, variants in table.items():
            for variant in [canonical, *variants]:
                key = " ".join(variant.lower().split())
                if not key:
                    continue
                existing = self._canonical.setdefault(key, canonical)
                if existing != canonical:
                    logger.warning(
                        "Variant %r maps to both %r and %r; keeping %r",
                        variant,
                        existing,
                        canonical,
                        existing,
                    )
        variants_by_length = sorted(self._canonical, key=lambda v: (-len(v), v))
        # Internal whitespace in a variant matches any run of whitespace.
        alternation = "|".join(
            r"\s+".join(re.escape(part) for part in variant.split())
            for variant in variants_by_length
        )
        self._pattern = re.compile(
            rf"{_LEFT_BOUNDARY}(?:{alternation}){_RIGHT_BOUNDARY}",
            re.IGNORECASE,
        )

    def _canonical_for(self, matched: str) -> str:
        return self._canonical[" ".join(matched.lower().split())]

    def find_ordered(self, text: str) -> Tuple[str, ...]:
        """Return canonical names in order of first appearance, deduplicated."""
        seen: List[str] = []
        for m in self._pattern.finditer(text):
            canonical = self._canonical_for(m.group(0))
            if canonical not in seen:
                seen.append(canonical)
        return tuple(seen)

    def find_all(self, text: str) -> FrozenSet[str]:
        """Return the set of canonical names mentioned in the text."""
        return frozenset(self.find_ordered(text))
