"""
Ranking aggregation.

Orders scored candidates, assigns competition ranks and computes the
batch summary.  Ordering is a stable sort on `final_score` descending,
so candidates with equal scores keep their submission order.  A rank
is one more than the number of candidates with a strictly higher
score: scores 90, 80, 80, 70 rank 1, 2, 2, 4.
"""

from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

from .schema import BatchSummary

logger = logging.getLogger(__name__)


def order_by_score(scored: Sequence[Tuple[int, object]]) -> List[Tuple[int, object]]:
    """Stable sort of `(final_score, item)` pairs, highest score first."""
    return sorted(scored, key=lambda pair: pair[0], reverse=True)


def assign_ranks(scores: Sequence[int]) -> List[int]:
    """Competition ranks for scores already sorted in descending order."""
    ranks: List[int] = []
    for index, value in enumerate(scores):
        if index and value == scores[index - 1]:
            ranks.append(ranks[-1])
        else:
            ranks.append(index + 1)
    return ranks


def summarize(
    scores: Sequence[int],
    failed_count: int = 0,
    highly_recommended: int = 85,
    recommended: int = 70,
) -> BatchSummary:
    """Summary statistics over successfully scored candidates.

    Args:
        scores: Final scores of the candidates that were ranked.
            Failed candidates are not part of the average.
        failed_count: Number of candidates excluded from the ranking.
        highly_recommended: Lower bound of the "Highly Recommended" band.
        recommended: Lower bound of the "Recommended" band.

    Returns:
        A `BatchSummary`; the average is 0.0 when nothing was ranked.
    """
    total = len(scores)
    average = sum(scores) / total if total else 0.0
    summary = BatchSummary(
        total_processed=total,
        average_score=average,
        highly_recommended_count=sum(1 for s in scores if s >= highly_recommended),
        recommended_count=sum(1 for s in scores if recommended <= s < highly_recommended),
        failed_count=failed_count,
    )
    logger.debug("Summarized %d ranked and %d failed candidates", total, failed_count)
    return summary
