"""Shared fixtures: a small ruleset and sample documents."""

from __future__ import annotations

from datetime import date
from typing import Dict, List

import pytest  # type: ignore

from cvrank.config import Ruleset, Settings, build_ruleset
from cvrank.normalize.schema import CandidateDocument, JobDescription
from cvrank.rank.schema import Batch, BatchMode

TODAY = date(2024, 1, 1)

RULES: Dict[str, object] = {
    "skills": {
        "Python": [],
        "SQL": ["PostgreSQL", "MySQL"],
        "Docker": [],
        "Java": [],
        "JavaScript": ["JS"],
        "Node.js": ["NodeJS"],
        "C++": [],
        "Machine Learning": ["ML"],
    },
    "titles": {
        "Software Engineer": ["Software Developer"],
        "Senior Software Engineer": [],
        "Backend Developer": [],
        "Data Scientist": [],
    },
    "title_adjacency": {"Software Engineer": ["Backend Developer"]},
    "degrees": {
        "bachelor": [r"\bbachelor", r"\bB\.?Sc\b"],
        "master": [r"\bmaster"],
        "doctorate": [r"\bPh\.?D\b"],
    },
    "scoring": {"min_text_length": 50},
}

JOB_TEXT = (
    "We are hiring. Required skills: Python and SQL. "
    "Minimum 3 years of experience required."
)

CANDIDATE_A = (
    "Alice Smith\n"
    "alice@example.com\n"
    "Skills: Python, SQL, Docker.\n"
    "I have 5 years of experience building data services."
)
CANDIDATE_B = (
    "Bob Jones\n"
    "Skills: Python scripting for reports.\n"
    "About 1 year of experience in operations work."
)
CANDIDATE_C = (
    "Carol White\n"
    "I enjoy gardening, cooking and long walks on the beach every weekend."
)


@pytest.fixture
def ruleset() -> Ruleset:
    return build_ruleset(RULES)


@pytest.fixture
def settings() -> Settings:
    return Settings(max_concurrency=2, max_candidates=10)


def make_batch(
    candidate_texts: List[str],
    job_texts: List[str] = None,
    mode: BatchMode = BatchMode.SINGLE,
    batch_id: str = "batch1",
) -> Batch:
    """Build an in-memory batch with predictable ids (cv0, cv1, ...)."""
    job_texts = [JOB_TEXT] if job_texts is None else job_texts
    return Batch(
        id=batch_id,
        name="Test batch",
        mode=mode,
        job_descriptions=[
            JobDescription(id=f"jd{i}", batch_id=batch_id, text=text)
            for i, text in enumerate(job_texts)
        ],
        candidate_documents=[
            CandidateDocument(
                id=f"cv{i}", batch_id=batch_id, text=text, source_filename=f"cv{i}.txt"
            )
            for i, text in enumerate(candidate_texts)
        ],
    )
