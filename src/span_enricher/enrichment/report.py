"""
Outcomes and reports of an enrichment pass.
"""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from ..models.annotations import EntityAnnotation


class EnrichmentStatus(str, Enum):
    ENRICHED = "enriched"
    MISSED = "missed"  # label not in the term store
    FAILED = "failed"  # span could not be reconstructed
    CANCELLED = "cancelled"  # pass aborted before this annotation ran


@dataclass
class EnrichmentOutcome:
    """Result of enriching a single annotation."""

    annotation: EntityAnnotation
    status: EnrichmentStatus
    label: Optional[str] = None
    error: Optional[Exception] = None


@dataclass
class AnnotationFailure:
    """An annotation left unmodified because its span was malformed."""

    annotation_id: Optional[int]
    start: int
    end: int
    error: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "annotation_id": self.annotation_id,
            "start": self.start,
            "end": self.end,
            "error": self.error,
        }


@dataclass
class EnrichmentReport:
    """
    Counts for one enrichment pass.

    Attributes:
        total: Annotations handed to the pass
        eligible: Annotations whose provenance matched
        enriched: Annotations whose features were replaced
        missed: Eligible annotations with no term record
        failed: Eligible annotations with a malformed span
        cancelled: Eligible annotations never processed (pass aborted)
        failures: One entry per failed annotation
    """

    total: int = 0
    eligible: int = 0
    enriched: int = 0
    missed: int = 0
    failed: int = 0
    cancelled: int = 0
    batches: int = 0
    failures: List[AnnotationFailure] = field(default_factory=list)

    def record(self, outcome: EnrichmentOutcome) -> None:
        if outcome.status is EnrichmentStatus.ENRICHED:
            self.enriched += 1
        elif outcome.status is EnrichmentStatus.MISSED:
            self.missed += 1
        elif outcome.status is EnrichmentStatus.CANCELLED:
            self.cancelled += 1
        else:
            self.failed += 1
            annotation = outcome.annotation
            self.failures.append(
                AnnotationFailure(
                    annotation_id=annotation.annotation_id,
                    start=annotation.start,
                    end=annotation.end,
                    error=str(outcome.error),
                )
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "eligible": self.eligible,
            "enriched": self.enriched,
            "missed": self.missed,
            "failed": self.failed,
            "cancelled": self.cancelled,
            "batches": self.batches,
            "failures": [f.to_dict() for f in self.failures],
        }


def summarize_annotations(annotations: Iterable[EntityAnnotation]) -> Dict[str, Any]:
    """
    Summarize annotations per type, with one printable row per annotation.

    Rows follow the ``type | start | end | id | features`` layout.

    Examples:
        >>> summary = summarize_annotations([EntityAnnotation(0, 6, "organism_from_ncbi")])
        >>> summary["counts"]
        {'Lookup': 1}
    """
    annotations = list(annotations)
    counts = Counter(a.annotation_type for a in annotations)

    rows = [
        f"{a.annotation_type} | {a.start} | {a.end} | {a.annotation_id} | {a.features}"
        for a in sorted(annotations, key=lambda a: (a.annotation_type, a.start, a.end))
    ]

    return {"counts": dict(sorted(counts.items())), "rows": rows}
