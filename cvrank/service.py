"""
Batch service.

`BatchService` is the inbound boundary of cvrank: it accepts extracted
résumé and job description text, creates batches, runs ranking passes
and persists their results through a `BatchStore`.

A ranking pass captures the ruleset current at its start.  Calling
`reload_ruleset` while a pass is running only affects later passes.
Results are persisted with one `save_batch` call after the pass ends,
so a failed write leaves the previously stored batch intact and the
pass can simply be retried.  The batch keeps the date it was created
on as its reference date, so a retry in a later month scores the same.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import replace
from datetime import date
from typing import Dict, List, Optional, Sequence, Union

from .config import Ruleset, Settings, load_ruleset
from .errors import InvalidBatchError
from .normalize.schema import CandidateDocument, JobDescription, new_id
from .rank.ranker import BatchRanker, CancellationToken, ProgressCallback, discard_results
from .rank.schema import Batch, BatchMode, BatchStatus
from .store.base import BatchStore

logger = logging.getLogger(__name__)

TIMEOUT_REASON = "timeout"


class BatchService:
    """Create, rank and look up batches.

    Args:
        store: Where batches are persisted.
        ruleset: Rules used by ranking passes until `reload_ruleset`.
        settings: Runtime limits; defaults to `Settings()`.
        today: Reference date stamped on new batches; defaults to the
            current date.
    """

    def __init__(
        self,
        store: BatchStore,
        ruleset: Ruleset,
        settings: Optional[Settings] = None,
        today: Optional[date] = None,
    ) -> None:
        self.store = store
        self.ruleset = ruleset
        self.settings = settings or Settings()
        self.today = today
        self._lock = threading.Lock()
        self._in_flight: Dict[str, CancellationToken] = {}

    def create_batch(
        self,
        name: str,
        candidate_texts: Sequence[str],
        job_description_text: Union[str, Sequence[str]],
        filenames: Optional[Sequence[str]] = None,
        mode: BatchMode = BatchMode.SINGLE,
    ) -> Batch:
        """Validate inputs and persist a new pending batch.

        Args:
            name: Display name of the batch.
            candidate_texts: Extracted text of each résumé, in
                submission order.
            job_description_text: One job description, or a list of
                them for a multi-mode batch.
            filenames: Source file name of each résumé; defaults to
                `cv_<n>.txt`.
            mode: `BatchMode.SINGLE` or `BatchMode.MULTI`.

        Returns:
            The stored batch, status `pending`.

        Raises:
            InvalidBatchError: If the inputs cannot form a valid batch.
                Nothing is persisted in that case.
        """
        if isinstance(job_description_text, str):
            job_texts = [job_description_text]
        else:
            job_texts = list(job_description_text)
        texts = list(candidate_texts)
        if not name or not name.strip():
            raise InvalidBatchError("batch name must not be empty")
        if not texts:
            raise InvalidBatchError("at least one candidate document is required")
        if len(texts) > self.settings.max_candidates:
            raise InvalidBatchError(
                f"{len(texts)} candidate documents submitted; "
                f"at most {self.settings.max_candidates} allowed"
            )
        if filenames is not None and len(filenames) != len(texts):
            raise InvalidBatchError("filenames must match candidate documents one to one")
        if mode is BatchMode.SINGLE and len(job_texts) != 1:
            raise InvalidBatchError("single-mode batch needs exactly one job description")
        if not job_texts:
            raise InvalidBatchError("at least one job description is required")
        for text in job_texts:
            if len((text or "").strip()) < self.ruleset.min_text_length:
                raise InvalidBatchError(
                    f"job description needs at least {self.ruleset.min_text_length} characters"
                )

        batch_id = new_id()
        names = list(filenames) if filenames is not None else [
            f"cv_{i + 1}.txt" for i in range(len(texts))
        ]
        batch = Batch(
            id=batch_id,
            name=name.strip(),
            mode=mode,
            reference_date=(self.today or date.today()).isoformat(),
            job_descriptions=[
                JobDescription(id=new_id(), batch_id=batch_id, text=text) for text in job_texts
            ],
            candidate_documents=[
                CandidateDocument(id=new_id(), batch_id=batch_id, text=text, source_filename=fname)
                for text, fname in zip(texts, names)
            ],
        )
        self.store.save_batch(batch)
        logger.info(
            "Created batch %s %r with %d candidates (%s mode)",
            batch.id,
            batch.name,
            len(texts),
            mode.value,
        )
        return batch

    async def _run(
        self,
        ranker: BatchRanker,
        batch: Batch,
        token: CancellationToken,
        timeout: Optional[float],
        progress: Optional[ProgressCallback],
    ) -> Batch:
        if timeout is None:
            return await ranker.rank_async(batch, token, progress)
        try:
            return await asyncio.wait_for(ranker.rank_async(batch, token, progress), timeout)
        except asyncio.TimeoutError:
            token.cancel()
            logger.warning("Ranking of batch %s timed out after %.1fs", batch.id, timeout)
            return discard_results(batch, TIMEOUT_REASON)

    def _reference_date(self, batch: Batch) -> Optional[date]:
        if batch.reference_date:
            try:
                return date.fromisoformat(batch.reference_date)
            except ValueError as exc:
                raise InvalidBatchError(
                    f"batch {batch.id!r} has an invalid reference date {batch.reference_date!r}"
                ) from exc
        return self.today

    async def rank_async(
        self,
        batch_id: str,
        timeout: Optional[float] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> Batch:
        """Run a ranking pass over a stored batch and persist the result.

        Re-ranking an already ranked batch is safe and recomputes every
        score from the stored documents.  While the pass runs,
        `get_batch` and `list_batches` report the batch as `processing`.
        A cancelled or timed-out pass stores the batch `failed` with no
        ranking, including any ranking from an earlier pass.

        Args:
            batch_id: Id of a stored batch.
            timeout: Seconds before the pass is abandoned; None waits.
            progress: Called as `progress(done, total)` per candidate.

        Raises:
            BatchNotFoundError: If the batch does not exist.
            InvalidBatchError: If the batch is invalid or already being
                ranked.
            PersistenceError: If the result could not be stored.
        """
        loop = asyncio.get_running_loop()
        batch = await loop.run_in_executor(None, self.store.load_batch, batch_id)
        token = CancellationToken()
        with self._lock:
            if batch_id in self._in_flight:
                raise InvalidBatchError(f"batch {batch_id!r} is already being ranked")
            self._in_flight[batch_id] = token
            ruleset = self.ruleset
        try:
            ranker = BatchRanker(ruleset, self.settings, today=self._reference_date(batch))
            ranked = await self._run(ranker, batch, token, timeout, progress)
            await loop.run_in_executor(None, self.store.save_batch, ranked)
        finally:
            with self._lock:
                self._in_flight.pop(batch_id, None)
        return ranked

    def rank(
        self,
        batch_id: str,
        timeout: Optional[float] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> Batch:
        """Synchronous wrapper around `rank_async`."""
        return asyncio.run(self.rank_async(batch_id, timeout, progress))

    def cancel(self, batch_id: str) -> bool:
        """Request cancellation of an in-flight pass.

        Returns:
            True if a pass was running for this batch.
        """
        with self._lock:
            token = self._in_flight.get(batch_id)
        if token is None:
            return False
        token.cancel()
        logger.info("Cancellation requested for batch %s", batch_id)
        return True

    def _with_live_status(self, batch: Batch) -> Batch:
        # the stored record is only replaced when a pass ends
        with self._lock:
            running = batch.id in self._in_flight
        if running:
            return replace(batch, status=BatchStatus.PROCESSING)
        return batch

    def get_batch(self, batch_id: str) -> Batch:
        return self._with_live_status(self.store.load_batch(batch_id))

    def list_batches(self) -> List[Batch]:
        return [self._with_live_status(b) for b in self.store.list_batches()]

    def delete_batch(self, batch_id: str) -> None:
        with self._lock:
            if batch_id in self._in_flight:
                raise InvalidBatchError(f"batch {batch_id!r} is being ranked")
        self.store.delete_batch(batch_id)
        logger.info("Deleted batch %s", batch_id)

    def reload_ruleset(self, config_path: Optional[str] = None) -> Ruleset:
        """Load a new ruleset for subsequent passes."""
        ruleset = load_ruleset(config_path)
        with self._lock:
            self.ruleset = ruleset
        logger.info("Ruleset reloaded: version %s", ruleset.version)
        return ruleset
