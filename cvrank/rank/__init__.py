"""
Ranking subsystem for cvrank.

The `rank` package turns normalized feature sets into an ordered,
scored list of candidates.  The stages include:

* `matcher` – Compares a candidate with a job description and yields
  the skill, experience and title sub-scores.
* `scorer` – Weights the sub-scores into a single 0–100 integer and
  maps it to a recommendation band.
* `aggregate` – Stable ordering, competition ranks and the batch
  summary.
* `ranker` – Runs a whole batch concurrently and assembles the result.
"""

from .schema import (  # noqa: F401
    Batch,
    BatchMode,
    BatchStatus,
    BatchSummary,
    Candidate,
    CandidateFailure,
    MatchResult,
)
from .matcher import match  # noqa: F401
from .scorer import DEFAULT_WEIGHTS, recommendation_for, score  # noqa: F401
from .aggregate import assign_ranks, summarize  # noqa: F401
from .ranker import BatchRanker, CancellationToken  # noqa: F401
