"""
Exception hierarchy for span enrichment.

Per-annotation faults (``MalformedSpanError``) are reported and skipped;
term-store faults abort the pass and surface through ``BatchEnrichmentError``.
"""

from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from .enrichment.report import EnrichmentReport


class EnrichmentError(Exception):
    """Base class for every error raised by span_enricher."""


class MalformedSpanError(EnrichmentError):
    """
    Raised when a span cannot be reconstructed from the token index.

    Attributes:
        start: Span start offset
        end: Span end offset
        reason: Short description of what went wrong
    """

    def __init__(self, start, end, reason: str):
        self.start = start
        self.end = end
        self.reason = reason
        super().__init__(f"Malformed span [{start}, {end}): {reason}")


class DuplicateTokenError(EnrichmentError):
    """Raised when two tokens share a start offset under the ``reject`` policy."""

    def __init__(self, offset: int):
        self.offset = offset
        super().__init__(f"Duplicate token start offset: {offset}")


class TermStoreError(EnrichmentError):
    """Raised when a term-store query fails."""


class TermStoreConnectionError(TermStoreError, ConnectionError):
    """Raised when the term store cannot be reached."""


class EnrichmentTimeoutError(EnrichmentError):
    """Raised when a pass does not finish within the configured timeout."""

    def __init__(self, timeout_seconds: float, pending_batches: int):
        self.timeout_seconds = timeout_seconds
        self.pending_batches = pending_batches
        super().__init__(
            f"Enrichment did not finish within {timeout_seconds}s "
            f"({pending_batches} batches outstanding)"
        )


class BatchEnrichmentError(EnrichmentError):
    """
    Raised after every worker has stopped when the pass could not complete.

    Attributes:
        errors: Worker failures and the timeout, ordered by when each was observed
        report: Partial report (enriched annotations keep their new features)
    """

    def __init__(self, errors: List[Exception], report: Optional["EnrichmentReport"] = None):
        self.errors = list(errors)
        self.report = report
        summary = "; ".join(f"{type(e).__name__}: {e}" for e in self.errors)
        super().__init__(f"Enrichment pass failed with {len(self.errors)} error(s): {summary}")
