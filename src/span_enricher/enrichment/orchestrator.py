"""
Concurrent batch enrichment.

Eligible annotations are split into disjoint, fixed-size batches. Each batch
is one task for a fixed-size thread pool; a worker enriches its batch
sequentially against the shared token index and term store. The pass returns
once every batch has finished, or as soon as the overall timeout expires;
lookups still running at that point are abandoned and can no longer write
features.

Failure handling:
- malformed spans are reported per annotation and never stop the pass;
- a term-store failure (or the overall timeout) cancels the shared scope,
  remaining annotations are reported as cancelled, and every collected error
  is raised together in a BatchEnrichmentError.
"""

import time
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Optional, Sequence, TypeVar

import structlog

from ..config import Settings
from ..errors import BatchEnrichmentError, EnrichmentTimeoutError
from ..models.annotations import EntityAnnotation, Token
from ..term_store.base import BaseTermStore
from .cancellation import CancelScope
from .enricher import enrich_annotation
from .report import EnrichmentOutcome, EnrichmentReport, EnrichmentStatus
from .token_index import build_token_index


logger = structlog.get_logger(__name__)

T = TypeVar("T")

URN_PREFIX = "urn:"


def is_eligible(annotation: EntityAnnotation, provenance: str) -> bool:
    """
    Check whether an annotation was produced by the recognizer being enriched.

    A ``urn:`` prefix on the marker is ignored.

    Examples:
        >>> is_eligible(EntityAnnotation(0, 6, "urn:organism_from_ncbi"), "organism_from_ncbi")
        True
    """
    marker = annotation.provenance or ""
    if marker.startswith(URN_PREFIX):
        marker = marker[len(URN_PREFIX):]
    return marker == provenance


def partition(items: Sequence[T], batch_size: int) -> List[List[T]]:
    """
    Split items into consecutive disjoint batches of at most ``batch_size``.

    Examples:
        >>> partition([1, 2, 3, 4, 5, 6, 7], 5)
        [[1, 2, 3, 4, 5], [6, 7]]
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    return [list(items[i : i + batch_size]) for i in range(0, len(items), batch_size)]


@dataclass
class BatchResult:
    """
    Outcomes of one batch plus the fatal error that stopped it, if any.

    Filled in by the worker as it goes; ``error_at`` is a monotonic timestamp
    used to order errors across batches.
    """

    batch_index: int
    outcomes: List[EnrichmentOutcome] = field(default_factory=list)
    error: Optional[Exception] = None
    error_at: float = 0.0


class BatchOrchestrator:
    """
    Fans enrichment out over a thread pool and fans the outcomes back in.

    Attributes:
        batch_size: Annotations per batch
        max_workers: Worker threads (concurrent term-store queries)
        timeout_seconds: Overall deadline for the pass, None to wait forever
    """

    def __init__(
        self,
        batch_size: Optional[int] = None,
        max_workers: Optional[int] = None,
        timeout_seconds: Optional[float] = None,
        settings: Optional[Settings] = None,
    ):
        if settings is None:
            from ..config import settings

        self.settings = settings
        self.batch_size = batch_size or settings.enrichment_batch_size
        self.max_workers = max_workers or settings.enrichment_max_workers
        self.timeout_seconds = (
            timeout_seconds if timeout_seconds is not None else settings.enrichment_timeout_seconds
        )

        if self.batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be positive, got {self.max_workers}")

    def run(
        self,
        annotations: Iterable[EntityAnnotation],
        index: Mapping[int, Token],
        term_store: BaseTermStore,
    ) -> EnrichmentReport:
        """
        Enrich every eligible annotation.

        Args:
            annotations: All annotations of the document (mutated in place)
            index: Shared token index
            term_store: Connected term store

        Returns:
            EnrichmentReport for the pass

        Raises:
            BatchEnrichmentError: A worker hit a fatal error or the pass timed out
        """
        annotations = list(annotations)
        eligible = [a for a in annotations if is_eligible(a, self.settings.eligible_provenance)]
        batches = partition(eligible, self.batch_size)

        report = EnrichmentReport(total=len(annotations), eligible=len(eligible), batches=len(batches))

        logger.info(
            "enrichment_pass_start",
            total=report.total,
            eligible=report.eligible,
            batches=report.batches,
            batch_size=self.batch_size,
            max_workers=self.max_workers,
        )

        if not batches:
            return report

        start_time = time.time()
        scope = CancelScope()
        results = [BatchResult(batch_index=i) for i in range(len(batches))]
        not_done = set()
        observed = []

        executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="enrich")
        try:
            futures = [
                executor.submit(self._run_batch, result, batch, index, term_store, scope)
                for result, batch in zip(results, batches)
            ]

            _, not_done = wait(futures, timeout=self.timeout_seconds)

            if not_done:
                scope.cancel()
                timeout_error = EnrichmentTimeoutError(self.timeout_seconds, len(not_done))
                observed.append((time.monotonic(), timeout_error))
                logger.error(
                    "enrichment_pass_timeout",
                    timeout_seconds=self.timeout_seconds,
                    pending_batches=len(not_done),
                )
        finally:
            # Lookups still running after a timeout are abandoned, not awaited
            executor.shutdown(wait=not not_done, cancel_futures=True)

        for batch, result in zip(batches, results):
            for outcome in self._settle(batch, result, scope):
                report.record(outcome)

        observed.extend((r.error_at, r.error) for r in results if r.error is not None)
        errors = [error for _, error in sorted(observed, key=lambda pair: pair[0])]

        logger.info(
            "enrichment_pass_complete",
            enriched=report.enriched,
            missed=report.missed,
            failed=report.failed,
            cancelled=report.cancelled,
            errors=len(errors),
            duration_ms=round((time.time() - start_time) * 1000, 2),
        )

        if errors:
            raise BatchEnrichmentError(errors, report)

        return report

    @staticmethod
    def _settle(
        batch: List[EntityAnnotation], result: BatchResult, scope: CancelScope
    ) -> List[EnrichmentOutcome]:
        """Outcomes for a whole batch, including annotations its worker never reached."""
        outcomes = list(result.outcomes)
        for annotation in batch[len(outcomes):]:
            status = (
                EnrichmentStatus.ENRICHED if scope.committed(annotation) else EnrichmentStatus.CANCELLED
            )
            outcomes.append(EnrichmentOutcome(annotation=annotation, status=status))
        return outcomes

    def _run_batch(
        self,
        result: BatchResult,
        batch: List[EntityAnnotation],
        index: Mapping[int, Token],
        term_store: BaseTermStore,
        scope: CancelScope,
    ) -> BatchResult:
        log = logger.bind(batch_index=result.batch_index, batch_size=len(batch))
        log.debug("batch_start")

        for annotation in batch:
            if scope.is_set():
                result.outcomes.append(
                    EnrichmentOutcome(annotation=annotation, status=EnrichmentStatus.CANCELLED)
                )
                continue

            try:
                outcome = enrich_annotation(annotation, index, term_store, self.settings, cancel=scope)
            except Exception as e:
                log.error(
                    "batch_failed",
                    annotation_id=annotation.annotation_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                result.error_at = time.monotonic()
                result.error = e
                scope.cancel()
                outcome = EnrichmentOutcome(annotation=annotation, status=EnrichmentStatus.CANCELLED)

            result.outcomes.append(outcome)

        log.debug("batch_complete", cancelled=scope.is_set())
        return result


def enrich_document(
    tokens: Iterable[Token],
    annotations: Iterable[EntityAnnotation],
    term_store: BaseTermStore,
    settings: Optional[Settings] = None,
    batch_size: Optional[int] = None,
    max_workers: Optional[int] = None,
) -> EnrichmentReport:
    """
    Run a full enrichment pass over one document.

    Builds the token index, connects the term store once, enriches the
    eligible annotations in place and always disconnects afterwards.

    Args:
        tokens: All tokens of the document
        annotations: All entity annotations of the document
        term_store: Term store (connected and disconnected here)
        settings: Overrides the global settings
        batch_size: Overrides ``settings.enrichment_batch_size``
        max_workers: Overrides ``settings.enrichment_max_workers``

    Returns:
        EnrichmentReport for the pass

    Raises:
        DuplicateTokenError: Duplicate token offsets under the ``reject`` policy
        TermStoreConnectionError: The term store is unreachable
        BatchEnrichmentError: The pass could not complete

    Examples:
        >>> tokens = [Token(0, 6, "canine")]
        >>> annotations = [EntityAnnotation(0, 6, "organism_from_ncbi")]
        >>> report = enrich_document(tokens, annotations, SqlTermStore("sqlite:///terms.db"))
        >>> annotations[0].features["taxonId"]
        '9615'
    """
    if settings is None:
        from ..config import settings

    index = build_token_index(tokens, settings.duplicate_token_policy)
    orchestrator = BatchOrchestrator(
        batch_size=batch_size, max_workers=max_workers, settings=settings
    )

    term_store.connect()
    try:
        return orchestrator.run(annotations, index, term_store)
    finally:
        term_store.disconnect()
