"""
Feature matching stage.

Compares a candidate's `FeatureSet` with a job description's and
produces the un-weighted sub-scores of a `MatchResult`:

* skill score – share of the job's skills the candidate covers.  Extra
  candidate skills earn nothing, so padding a résumé does not help.
* experience score – full marks at or above the required years, linear
  falloff below; a job with no requirement never penalizes.
* title score – 100 for an exact title match, 70 for an adjacent title
  from the configured adjacency table, else 0.

Dimensions with no information for the pair are listed in `skipped` so
the scorer can leave them out instead of reading them as zero: the
title dimension when the job names no recognized title, and (under the
"neutral" policy) experience when the job requires years but the
résumé gave no usable evidence.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from ..normalize.schema import EducationLevel, FeatureSet
from .schema import MatchResult

logger = logging.getLogger(__name__)

EXACT_TITLE_SCORE = 100.0
ADJACENT_TITLE_SCORE = 70.0

DIMENSION_EXPERIENCE = "experience"
DIMENSION_TITLE = "title"

# Skill coverage above the first earns a strength, below the second a concern.
STRONG_SKILL_COVERAGE = 60.0
WEAK_SKILL_COVERAGE = 40.0


def skill_score(candidate_skills: Iterable[str], job_skills: Iterable[str]) -> float:
    job = set(job_skills)
    covered = set(candidate_skills) & job
    return 100.0 * len(covered) / max(1, len(job))


def experience_score(candidate_years: float, required_years: float) -> float:
    if required_years <= 0 or candidate_years >= required_years:
        return 100.0
    return max(0.0, 100.0 * candidate_years / required_years)


def title_score(
    candidate_titles: Sequence[str],
    required_titles: Sequence[str],
    adjacency: Optional[Mapping[str, Iterable[str]]] = None,
) -> float:
    held = set(candidate_titles)
    if held & set(required_titles):
        return EXACT_TITLE_SCORE
    adjacency = adjacency or {}
    for required in required_titles:
        if held & set(adjacency.get(required, ())):
            return ADJACENT_TITLE_SCORE
    return 0.0


def explain(
    candidate: FeatureSet,
    job: FeatureSet,
    skill: float,
    experience: float,
    title: float,
    skipped: Iterable[str],
) -> Tuple[Tuple[str, ...], Tuple[str, ...]]:
    """Summarize a comparison as human-readable strengths and concerns.

    Only dimensions the job actually asks for produce a statement, and
    skipped dimensions are reported as missing evidence rather than as a
    shortfall.

    Returns:
        A ``(strengths, concerns)`` pair of tuples.
    """
    strengths: List[str] = []
    concerns: List[str] = []
    skipped = set(skipped)

    if job.skills:
        covered = len(candidate.skills & job.skills)
        coverage = f"{covered} of {len(job.skills)} required skills"
        if skill > STRONG_SKILL_COVERAGE:
            strengths.append(f"Good skill alignment ({coverage})")
        elif skill < WEAK_SKILL_COVERAGE:
            concerns.append(f"Limited skill match ({coverage})")

    if job.required_years > 0:
        if DIMENSION_EXPERIENCE in skipped:
            concerns.append("No verifiable experience in the résumé")
        elif experience >= 100.0:
            strengths.append(f"Meets the {job.required_years:g}-year experience requirement")
        else:
            concerns.append(
                f"{candidate.experience_years:g} of {job.required_years:g} required years of experience"
            )

    if DIMENSION_TITLE not in skipped:
        if title >= EXACT_TITLE_SCORE:
            strengths.append("Holds a required job title")
        elif title >= ADJACENT_TITLE_SCORE:
            strengths.append("Holds an adjacent job title")
        else:
            concerns.append("No matching job title")

    if job.education_level is not EducationLevel.NONE:
        if job.education_level <= candidate.education_level:
            strengths.append(f"Meets the {job.education_level.value} education requirement")
        else:
            concerns.append(f"Education below the required {job.education_level.value} level")

    return tuple(strengths), tuple(concerns)


def match(
    candidate: FeatureSet,
    job: FeatureSet,
    candidate_id: str = "",
    job_id: str = "",
    adjacency: Optional[Mapping[str, Iterable[str]]] = None,
    unknown_experience: str = "neutral",
) -> MatchResult:
    """Compare one candidate with one job description.

    Args:
        candidate: Features of the résumé.
        job: Features of the job description; its `experience_years`
            is the required years and its titles the required titles.
        candidate_id: Id of the candidate document.
        job_id: Id of the job description.
        adjacency: Required title to acceptable adjacent titles.
        unknown_experience: "neutral" skips the experience dimension
            when the résumé has no experience evidence; "penalize"
            scores it as zero years.

    Returns:
        A new `MatchResult`.
    """
    skipped = set()
    if not job.titles:
        skipped.add(DIMENSION_TITLE)
    if (
        unknown_experience == "neutral"
        and job.required_years > 0
        and not candidate.experience_known
    ):
        skipped.add(DIMENSION_EXPERIENCE)

    skill = skill_score(candidate.skills, job.skills)
    experience = experience_score(candidate.experience_years, job.required_years)
    title = title_score(candidate.titles, job.titles, adjacency)
    strengths, concerns = explain(candidate, job, skill, experience, title, skipped)
    result = MatchResult(
        candidate_id=candidate_id,
        job_id=job_id,
        skill_score=skill,
        experience_score=experience,
        title_score=title,
        matched_skills=frozenset(candidate.skills & job.skills),
        missing_skills=frozenset(job.skills - candidate.skills),
        skipped=frozenset(skipped),
        education_met=job.education_level <= candidate.education_level,
        strengths=strengths,
        concerns=concerns,
    )
    logger.debug(
        "Matched %s against %s: skills=%.1f experience=%.1f title=%.1f skipped=%s",
        candidate_id,
        job_id,
        result.skill_score,
        result.experience_score,
        result.title_score,
        sorted(skipped),
    )
    return result
