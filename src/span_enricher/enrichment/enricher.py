"""
Single-annotation enrichment: label reconstruction, term lookup, feature merge.
"""

from typing import Any, Dict, Mapping, Optional

import structlog

from ..config import Settings
from ..errors import MalformedSpanError
from ..models.annotations import EntityAnnotation, Token
from ..term_store.base import BaseTermStore
from .cancellation import CancelScope
from .report import EnrichmentOutcome, EnrichmentStatus
from .span_resolver import resolve_label


logger = structlog.get_logger(__name__)


def build_features(record: Mapping[str, Any], settings: Optional[Settings] = None) -> Dict[str, Any]:
    """
    Build the feature map written on an enriched annotation.

    Fixed type fields come first; term attributes are merged on top of them.

    Examples:
        >>> build_features({"taxonId": "9615"})
        {'majorType': 'organism', 'minorType': 'organism_from_ncbi', 'language': 'en', 'taxonId': '9615'}
    """
    if settings is None:
        from ..config import settings

    features: Dict[str, Any] = {
        "majorType": settings.enrichment_major_type,
        "minorType": settings.enrichment_minor_type,
        "language": settings.enrichment_language,
    }
    features.update(record)
    return features


def enrich_annotation(
    annotation: EntityAnnotation,
    index: Mapping[int, Token],
    term_store: BaseTermStore,
    settings: Optional[Settings] = None,
    cancel: Optional[CancelScope] = None,
) -> EnrichmentOutcome:
    """
    Enrich one eligible annotation in place.

    Features are replaced only when the term store returns a record; on a miss
    or a malformed span the annotation keeps its original features.

    Args:
        annotation: Annotation to enrich
        index: Shared token index
        term_store: Connected term store
        settings: Overrides the global settings
        cancel: Cancel scope of the running pass; features are not written
            once it is cancelled, even if the lookup already returned

    Returns:
        EnrichmentOutcome describing what happened

    Raises:
        TermStoreError: If the lookup itself fails
    """
    if settings is None:
        from ..config import settings

    try:
        label = resolve_label(
            annotation.start, annotation.end, index, max_walk_back=settings.max_walk_back
        )
    except MalformedSpanError as e:
        logger.warning(
            "annotation_span_malformed",
            annotation_id=annotation.annotation_id,
            start=annotation.start,
            end=annotation.end,
            reason=e.reason,
        )
        return EnrichmentOutcome(annotation=annotation, status=EnrichmentStatus.FAILED, error=e)

    record = term_store.lookup(label.lower())

    if record is None:
        logger.debug("annotation_term_missing", annotation_id=annotation.annotation_id, label=label)
        return EnrichmentOutcome(annotation=annotation, status=EnrichmentStatus.MISSED, label=label)

    features = build_features(record, settings)
    if cancel is None:
        annotation.features = features
    elif not cancel.commit(annotation, features):
        logger.debug("annotation_enrichment_abandoned", annotation_id=annotation.annotation_id, label=label)
        return EnrichmentOutcome(annotation=annotation, status=EnrichmentStatus.CANCELLED, label=label)

    logger.debug(
        "annotation_enriched",
        annotation_id=annotation.annotation_id,
        label=label,
        features_count=len(annotation.features),
    )

    return EnrichmentOutcome(annotation=annotation, status=EnrichmentStatus.ENRICHED, label=label)
