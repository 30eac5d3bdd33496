"""
Span enrichment pipeline (token index + span resolution + term lookup).

Public API:
    - build_token_index: Offset index over a document's tokens
    - resolve_label: Reconstruct the text covered by an entity span
    - enrich_annotation: Enrich a single annotation
    - BatchOrchestrator: Concurrent batch enrichment
    - enrich_document: Complete pass (recommended)

Example usage:
    >>> from span_enricher.enrichment import enrich_document
    >>> from span_enricher.models import EntityAnnotation, Token
    >>> from span_enricher.term_store import SqlTermStore
    >>>
    >>> tokens = [Token(0, 4, "Homo"), Token(5, 12, "sapiens")]
    >>> annotations = [EntityAnnotation(0, 12, "organism_from_ncbi")]
    >>> report = enrich_document(tokens, annotations, SqlTermStore())
    >>> report.enriched
    1
"""

from .cancellation import CancelScope
from .enricher import build_features, enrich_annotation
from .orchestrator import BatchOrchestrator, enrich_document, is_eligible, partition
from .report import (
    AnnotationFailure,
    EnrichmentOutcome,
    EnrichmentReport,
    EnrichmentStatus,
    summarize_annotations,
)
from .span_resolver import resolve_label
from .token_index import DuplicatePolicy, TokenIndex, build_token_index

__all__ = [
    # Main API
    "enrich_document",
    "BatchOrchestrator",
    # Components
    "build_token_index",
    "TokenIndex",
    "DuplicatePolicy",
    "resolve_label",
    "enrich_annotation",
    "build_features",
    "is_eligible",
    "partition",
    "CancelScope",
    # Reporting
    "EnrichmentOutcome",
    "EnrichmentReport",
    "EnrichmentStatus",
    "AnnotationFailure",
    "summarize_annotations",
]
