"""
Batch ranking.

`BatchRanker` drives one ranking pass over a batch:

1. validate the batch (candidate count, job description count for the
   batch mode, job descriptions with usable text);
2. move a working copy to `processing`;
3. fan out one task per candidate document, bounded by an
   `asyncio.Semaphore`; each task normalizes, matches and scores its
   document in a thread executor and never touches shared state;
4. join on `asyncio.gather`, then sort, rank and summarize.

A candidate that fails (too little text, a scoring bug) is excluded
from the ranking and reported in `Batch.failures`; its siblings are
unaffected.  The caller's batch object is never mutated: the pass
returns a new `Batch` with new `Candidate` objects.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass, replace
from datetime import date
from typing import Callable, List, Optional, Sequence, Tuple, Union

from ..config import Ruleset, Settings
from ..errors import InsufficientTextError, InvalidBatchError, ScoringOverflowError
from ..normalize.contact import extract_contact
from ..normalize.normalizer import Normalizer
from ..normalize.schema import CandidateDocument, ContactInfo, FeatureSet, JobDescription
from .aggregate import assign_ranks, order_by_score, summarize
from .matcher import match
from .schema import (
    Batch,
    BatchMode,
    BatchStatus,
    BatchSummary,
    Candidate,
    CandidateFailure,
    MatchResult,
    utc_now,
)
from .scorer import recommendation_for, score

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]

CANCELLED_REASON = "cancelled"
NO_CANDIDATES_REASON = "no candidate could be scored"


class CancellationToken:
    """Cooperative cancellation flag for a ranking pass.

    Setting it does not interrupt candidates already being scored; the
    ranker checks it at the join barrier and discards the results.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass(frozen=True)
class _Scored:
    document: CandidateDocument
    match_result: MatchResult
    final_score: int
    contact: ContactInfo


Outcome = Union[_Scored, CandidateFailure]


def _failure(document: CandidateDocument, exc: BaseException) -> CandidateFailure:
    return CandidateFailure(
        document_id=document.id,
        source_filename=document.source_filename,
        error=type(exc).__name__,
        message=str(exc),
    )


def discard_results(batch: Batch, reason: str) -> Batch:
    """Return `batch` marked failed with no ranking.

    Used when a pass is abandoned: whatever an earlier pass produced is
    dropped too, so a failed batch never shows a ranking.
    """
    return replace(
        batch,
        status=BatchStatus.FAILED,
        candidates=[],
        summary=BatchSummary(),
        failures=[],
        failure_reason=reason,
        updated_at=utc_now(),
    )


class BatchRanker:
    """Rank the candidates of a batch against its job description(s).

    Args:
        ruleset: Rules captured for every pass run by this ranker.
        settings: Runtime limits (`max_concurrency`, `max_candidates`).
        today: Reference date for "Present" in résumé date ranges.
    """

    def __init__(
        self,
        ruleset: Ruleset,
        settings: Optional[Settings] = None,
        today: Optional[date] = None,
    ) -> None:
        settings = settings or Settings()
        self.ruleset = ruleset
        self.max_concurrency = settings.max_concurrency
        self.max_candidates = settings.max_candidates
        self.today = today

    def validate(self, batch: Batch, normalizer: Optional[Normalizer] = None) -> List[FeatureSet]:
        """Check a batch can be ranked and normalize its job descriptions.

        Returns:
            The feature sets of the batch's job descriptions, in order.

        Raises:
            InvalidBatchError: If the batch is already processing, has no
                candidates or too many, has the wrong number of job
                descriptions for its mode, or a job description has too
                little text.
        """
        if batch.status is BatchStatus.PROCESSING:
            raise InvalidBatchError(f"batch {batch.id!r} is already processing")
        if not batch.candidate_documents:
            raise InvalidBatchError("batch has no candidate documents")
        if len(batch.candidate_documents) > self.max_candidates:
            raise InvalidBatchError(
                f"batch has {len(batch.candidate_documents)} candidates; "
                f"at most {self.max_candidates} allowed"
            )
        job_count = len(batch.job_descriptions)
        if batch.mode is BatchMode.SINGLE and job_count != 1:
            raise InvalidBatchError(
                f"single-mode batch needs exactly one job description, got {job_count}"
            )
        if batch.mode is BatchMode.MULTI and job_count < 1:
            raise InvalidBatchError("multi-mode batch needs at least one job description")

        normalizer = normalizer or Normalizer(self.ruleset, today=self.today)
        features: List[FeatureSet] = []
        for job in batch.job_descriptions:
            try:
                features.append(normalizer.normalize(job.text))
            except InsufficientTextError as exc:
                raise InvalidBatchError(f"job description {job.id}: {exc}") from exc
        return features

    def _score_document(
        self,
        normalizer: Normalizer,
        document: CandidateDocument,
        jobs: Sequence[Tuple[JobDescription, FeatureSet]],
    ) -> _Scored:
        features = normalizer.normalize(document.text)
        scored: List[Tuple[int, MatchResult]] = []
        for job, job_features in jobs:
            result = match(
                features,
                job_features,
                candidate_id=document.id,
                job_id=job.id,
                adjacency=self.ruleset.title_adjacency,
                unknown_experience=self.ruleset.unknown_experience,
            )
            scored.append((score(result), result))
        # max() keeps the first maximum, so the earliest job wins ties
        final, best = max(scored, key=lambda item: item[0])
        return _Scored(
            document=document,
            match_result=best,
            final_score=final,
            contact=extract_contact(document.text, document.source_filename),
        )

    async def rank_async(
        self,
        batch: Batch,
        cancel_token: Optional[CancellationToken] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> Batch:
        """Run one ranking pass and return the resulting batch.

        Args:
            batch: The batch to rank.  It is not modified.
            cancel_token: Checked once all candidates have finished; a
                cancelled pass returns the batch `failed` with reason
                "cancelled" and no new results.
            progress: Called as `progress(done, total)` after each
                candidate finishes.

        Returns:
            A new `Batch`, `completed` when at least one candidate was
            ranked and `failed` otherwise.

        Raises:
            InvalidBatchError: If the batch fails validation.  Nothing
                has been processed at that point.
        """
        ruleset = self.ruleset
        normalizer = Normalizer(ruleset, today=self.today)
        job_features = self.validate(batch, normalizer)
        jobs = list(zip(batch.job_descriptions, job_features))

        working = replace(batch, status=BatchStatus.PROCESSING, updated_at=utc_now())
        documents = list(working.candidate_documents)
        total = len(documents)
        logger.info(
            "Ranking batch %s: %d candidates against %d job description(s), ruleset %s",
            working.id,
            total,
            len(jobs),
            ruleset.version,
        )

        semaphore = asyncio.Semaphore(self.max_concurrency)
        loop = asyncio.get_running_loop()
        done = 0

        async def score_one(document: CandidateDocument) -> Outcome:
            nonlocal done
            async with semaphore:
                try:
                    return await loop.run_in_executor(
                        None, self._score_document, normalizer, document, jobs
                    )
                except InsufficientTextError as exc:
                    logger.warning("Skipping %s: %s", document.source_filename or document.id, exc)
                    return _failure(document, exc)
                except ScoringOverflowError as exc:
                    logger.error(
                        "Scoring bug, excluding %s: %s", document.source_filename or document.id, exc
                    )
                    return _failure(document, exc)
                finally:
                    done += 1
                    if progress is not None:
                        progress(done, total)

        results = await asyncio.gather(
            *(score_one(doc) for doc in documents), return_exceptions=True
        )

        if cancel_token is not None and cancel_token.cancelled:
            logger.warning("Ranking of batch %s cancelled; results discarded", working.id)
            return discard_results(batch, CANCELLED_REASON)

        scored: List[_Scored] = []
        failures: List[CandidateFailure] = []
        for document, result in zip(documents, results):
            if isinstance(result, _Scored):
                scored.append(result)
            elif isinstance(result, CandidateFailure):
                failures.append(result)
            elif isinstance(result, Exception):
                logger.error(
                    "Unexpected error scoring %s", document.id, exc_info=result
                )
                failures.append(_failure(document, result))
            else:
                raise result

        ordered = order_by_score([(s.final_score, s) for s in scored])
        ranks = assign_ranks([final for final, _ in ordered])
        candidates: List[Candidate] = []
        for (final, item), position in zip(ordered, ranks):
            recommendation, fit_level = recommendation_for(
                final,
                ruleset.highly_recommended_threshold,
                ruleset.recommended_threshold,
            )
            candidates.append(
                Candidate(
                    document=item.document,
                    match_result=item.match_result,
                    final_score=final,
                    rank=position,
                    contact=item.contact,
                    recommendation=recommendation,
                    fit_level=fit_level,
                )
            )

        summary: BatchSummary = summarize(
            [c.final_score for c in candidates],
            failed_count=len(failures),
            highly_recommended=ruleset.highly_recommended_threshold,
            recommended=ruleset.recommended_threshold,
        )
        status = BatchStatus.COMPLETED if candidates else BatchStatus.FAILED
        ranked = replace(
            working,
            status=status,
            candidates=candidates,
            summary=summary,
            failures=failures,
            updated_at=utc_now(),
            ruleset_version=ruleset.version,
            failure_reason=None if candidates else NO_CANDIDATES_REASON,
        )
        logger.info(
            "Batch %s %s: %d ranked, %d failed, average %.1f",
            ranked.id,
            status.value,
            summary.total_processed,
            summary.failed_count,
            summary.average_score,
        )
        return ranked

    def rank(
        self,
        batch: Batch,
        cancel_token: Optional[CancellationToken] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> Batch:
        """Synchronous wrapper around `rank_async`."""
        return asyncio.run(self.rank_async(batch, cancel_token, progress))
