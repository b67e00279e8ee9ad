"""
Years-of-experience extraction.

Two kinds of evidence are collected from the text:

* explicit date ranges (``Jan 2018 – Present``, ``03/2017 - 06/2020``,
  ``2015 - 2019``), merged so overlapping roles are not double counted
  and summed into one total;
* cumulative-duration phrases (``5+ years of experience``, ``over 7
  yrs``); a range phrase such as ``3-5 years`` contributes its lower
  bound.

Every implausible value is discarded and the maximum of the remaining
candidates wins, which limits false negatives when only part of a
résumé was captured.  When nothing is found the result is marked as
unknown rather than zero experience.

"Present" resolves against an explicit reference date so the same text
always yields the same number for a given date.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

MAX_PLAUSIBLE_YEARS = 50.0
EARLIEST_PLAUSIBLE_YEAR = 1950

MONTH_LOOKUP = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}

MONTH_PATTERN = (
    r"(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|Jun(?:e)?|Jul(?:y)?|"
    r"Aug(?:ust)?|Sep(?:t|tember)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)"
)
SEPARATOR_PATTERN = r"\s*(?:[-‐-―−]+|to|until|till|through)\s*"
PRESENT_PATTERN = r"(?:present|current|now|today|date)"

MONTH_YEAR_RANGE_RE = re.compile(
    rf"\b(?P<start_month>{MONTH_PATTERN})\.?,?\s*(?P<start_year>(?:19|20)\d{{2}}){SEPARATOR_PATTERN}"
    rf"(?:(?P<end_month>{MONTH_PATTERN})\.?,?\s*(?P<end_year>(?:19|20)\d{{2}})|(?P<present>{PRESENT_PATTERN}))\b",
    re.IGNORECASE,
)
NUMERIC_RANGE_RE = re.compile(
    rf"\b(?P<start_month>\d{{1,2}})\s*/\s*(?P<start_year>(?:19|20)\d{{2}}){SEPARATOR_PATTERN}"
    rf"(?:(?P<end_month>\d{{1,2}})\s*/\s*(?P<end_year>(?:19|20)\d{{2}})|(?P<present>{PRESENT_PATTERN}))\b",
    re.IGNORECASE,
)
YEAR_RANGE_RE = re.compile(
    rf"\b(?P<start_year>(?:19|20)\d{{2}}){SEPARATOR_PATTERN}"
    rf"(?:(?P<end_year>(?:19|20)\d{{2}})|(?P<present>{PRESENT_PATTERN}))\b",
    re.IGNORECASE,
)
DURATION_PHRASE_RE = re.compile(
    r"(?<![\d.])(?P<low>\d{1,2}(?:\.\d+)?)\s*(?:(?:[-‐-―]|to)\s*(?P<high>\d{1,2}(?:\.\d+)?)\s*)?"
    r"\+?\s*(?:years?|yrs?)\b(?!\s+old)",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class ExperienceEstimate:
    """Extracted years of experience and whether any evidence was found."""

    years: float = 0.0
    known: bool = False


def _month_index(year: int, month: int) -> int:
    return year * 12 + (month - 1)


def _parse_month(token: Optional[str]) -> Optional[int]:
    if token is None:
        return None
    token = token.strip().lower()
    if token.isdigit():
        value = int(token)
        return value if 1 <= value <= 12 else None
    return MONTH_LOOKUP.get(token[:3])


def _collect_ranges(text: str, today: date) -> List[Tuple[int, int]]:
    """Find date ranges as (start, end) month indexes.

    Patterns run most specific first; each matched span is blanked out
    so a less specific pattern cannot match the same dates again.
    """
    now_index = _month_index(today.year, today.month)
    ranges: List[Tuple[int, int]] = []
    remaining = text
    for pattern in (MONTH_YEAR_RANGE_RE, NUMERIC_RANGE_RE, YEAR_RANGE_RE):
        for m in pattern.finditer(remaining):
            groups = m.groupdict()
            start_year = int(groups["start_year"])
            start_month = _parse_month(groups.get("start_month")) if "start_month" in groups else 1
            if start_month is None:
                continue
            if groups.get("present"):
                end = now_index
            else:
                end_year = int(groups["end_year"])
                end_month = _parse_month(groups.get("end_month")) if "end_month" in groups else 1
                if end_month is None:
                    continue
                end = _month_index(end_year, end_month)
            start = _month_index(start_year, start_month)
            if start_year < EARLIEST_PLAUSIBLE_YEAR or start > end or end > now_index + 1:
                logger.debug("Discarding implausible range %r", m.group(0))
                continue
            ranges.append((start, end))
        remaining = pattern.sub(lambda m: " " * len(m.group(0)), remaining)
    return ranges


def _merged_months(ranges: List[Tuple[int, int]]) -> int:
    """Total months covered by the union of the ranges."""
    total = 0
    current_start: Optional[int] = None
    current_end = 0
    for start, end in sorted(ranges):
        if current_start is None:
            current_start, current_end = start, end
        elif start <= current_end:
            current_end = max(current_end, end)
        else:
            total += current_end - current_start
            current_start, current_end = start, end
    if current_start is not None:
        total += current_end - current_start
    return total


def _duration_phrases(text: str) -> List[float]:
    values: List[float] = []
    for m in DURATION_PHRASE_RE.finditer(text):
        values.append(float(m.group("low")))
    return values


def extract_experience(text: str, today: Optional[date] = None) -> ExperienceEstimate:
    """Estimate years of experience mentioned in text.

    Args:
        text: Raw document text.
        today: Reference date used to resolve "Present".  Defaults to
            the current date.

    Returns:
        An `ExperienceEstimate`; `known` is False when no plausible
        evidence was found.
    """
    today = today or date.today()
    candidates: List[float] = []
    ranges = _collect_ranges(text, today)
    if ranges:
        candidates.append(round(_merged_months(ranges) / 12.0, 1))
    candidates.extend(_duration_phrases(text))
    plausible = [v for v in candidates if 0.0 <= v <= MAX_PLAUSIBLE_YEARS]
    if not plausible:
        return ExperienceEstimate()
    years = max(plausible)
    logger.debug("Experience candidates %s -> %.1f years", plausible, years)
    return ExperienceEstimate(years=years, known=True)
