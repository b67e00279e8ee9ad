"""Tests for the feature matcher."""

from __future__ import annotations

import pytest  # type: ignore

from cvrank.normalize.schema import EducationLevel, FeatureSet
from cvrank.rank.matcher import (
    ADJACENT_TITLE_SCORE,
    EXACT_TITLE_SCORE,
    experience_score,
    match,
    skill_score,
    title_score,
)

ADJACENCY = {"Software Engineer": ["Backend Developer"]}


def _features(skills=(), titles=(), years=0.0, known=True, education=EducationLevel.NONE):
    return FeatureSet(
        skills=frozenset(skills),
        titles=tuple(titles),
        experience_years=years,
        education_level=education,
        experience_known=known,
    )


def test_skill_score_measures_job_coverage() -> None:
    assert skill_score({"Python", "SQL", "Docker"}, {"Python", "SQL"}) == 100.0
    assert skill_score({"Python"}, {"Python", "SQL"}) == 50.0
    assert skill_score(set(), {"Python", "SQL"}) == 0.0


def test_skill_score_with_no_job_skills() -> None:
    assert skill_score({"Python"}, set()) == 0.0


@pytest.mark.parametrize(
    "candidate, required, expected",
    [
        (5.0, 3.0, 100.0),
        (3.0, 3.0, 100.0),
        (1.0, 4.0, 25.0),
        (0.0, 3.0, 0.0),
        (0.0, 0.0, 100.0),
    ],
)
def test_experience_score(candidate: float, required: float, expected: float) -> None:
    assert experience_score(candidate, required) == pytest.approx(expected)


def test_title_score_exact_adjacent_and_none() -> None:
    assert title_score(["Software Engineer"], ["Software Engineer"], ADJACENCY) == EXACT_TITLE_SCORE
    assert title_score(["Backend Developer"], ["Software Engineer"], ADJACENCY) == ADJACENT_TITLE_SCORE
    assert title_score(["Data Scientist"], ["Software Engineer"], ADJACENCY) == 0.0
    # adjacency is directional: required title -> accepted titles
    assert title_score(["Software Engineer"], ["Backend Developer"], ADJACENCY) == 0.0


def test_match_sets_and_ids() -> None:
    result = match(
        _features(skills={"Python", "Docker"}, years=5),
        _features(skills={"Python", "SQL"}, years=3),
        candidate_id="cv1",
        job_id="jd1",
    )
    assert result.candidate_id == "cv1"
    assert result.job_id == "jd1"
    assert result.matched_skills == {"Python"}
    assert result.missing_skills == {"SQL"}
    assert result.skill_score == 50.0
    assert result.experience_score == 100.0


def test_title_skipped_when_job_names_no_title() -> None:
    result = match(_features(titles=["Software Engineer"]), _features())
    assert "title" in result.skipped


def test_title_scored_when_job_names_a_title() -> None:
    result = match(
        _features(titles=["Backend Developer"]),
        _features(titles=["Software Engineer"]),
        adjacency=ADJACENCY,
    )
    assert "title" not in result.skipped
    assert result.title_score == ADJACENT_TITLE_SCORE


def test_unknown_experience_is_neutral_by_default() -> None:
    result = match(_features(known=False), _features(years=3))
    assert "experience" in result.skipped


def test_unknown_experience_can_be_penalized() -> None:
    result = match(_features(known=False), _features(years=3), unknown_experience="penalize")
    assert "experience" not in result.skipped
    assert result.experience_score == 0.0


def test_unknown_experience_without_requirement_is_not_skipped() -> None:
    result = match(_features(known=False), _features(years=0))
    assert "experience" not in result.skipped
    assert result.experience_score == 100.0


def test_education_met() -> None:
    job = _features(education=EducationLevel.BACHELOR)
    assert match(_features(education=EducationLevel.MASTER), job).education_met
    assert not match(_features(education=EducationLevel.NONE), job).education_met


def test_strong_candidate_is_explained_by_strengths() -> None:
    result = match(
        _features(
            skills={"Python", "SQL", "Docker"},
            titles=["Software Engineer"],
            years=5,
            education=EducationLevel.MASTER,
        ),
        _features(
            skills={"Python", "SQL"},
            titles=["Software Engineer"],
            years=3,
            education=EducationLevel.BACHELOR,
        ),
    )
    assert result.strengths == (
        "Good skill alignment (2 of 2 required skills)",
        "Meets the 3-year experience requirement",
        "Holds a required job title",
        "Meets the bachelor education requirement",
    )
    assert result.concerns == ()


def test_weak_candidate_is_explained_by_concerns() -> None:
    result = match(
        _features(skills={"Docker"}, titles=["Data Scientist"], years=1),
        _features(
            skills={"Python", "SQL"},
            titles=["Software Engineer"],
            years=4,
            education=EducationLevel.BACHELOR,
        ),
        adjacency=ADJACENCY,
    )
    assert result.strengths == ()
    assert result.concerns == (
        "Limited skill match (0 of 2 required skills)",
        "1 of 4 required years of experience",
        "No matching job title",
        "Education below the required bachelor level",
    )


def test_skipped_dimensions_are_not_reported_as_shortfalls() -> None:
    result = match(_features(skills={"Python"}, known=False), _features(skills={"Python", "SQL"}, years=3))
    assert result.strengths == ()
    assert result.concerns == ("No verifiable experience in the résumé",)
    assert result.to_dict()["concerns"] == ["No verifiable experience in the résumé"]
