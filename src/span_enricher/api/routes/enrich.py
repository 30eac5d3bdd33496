"""
Enrichment API route.

- POST /api/v1/enrich - Enrich a document's entity annotations
"""

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
import structlog

from ...enrichment import enrich_document
from ...errors import BatchEnrichmentError, DuplicateTokenError, TermStoreConnectionError
from ...models.api_models import AnnotationPayload, EnrichRequest, EnrichResponse
from ...term_store import BaseTermStore, SqlTermStore


logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["Enrichment"])


def get_term_store() -> BaseTermStore:
    """Term store dependency, one store per request (overridden in tests)."""
    return SqlTermStore()


@router.post("/enrich", response_model=EnrichResponse, status_code=status.HTTP_200_OK)
def enrich_endpoint(
    request: EnrichRequest,
    term_store: BaseTermStore = Depends(get_term_store),
) -> EnrichResponse:
    """
    Enrich the eligible annotations of one document.

    A pass that fails part way answers 500 with ``success=False``, the
    annotations as they stand and the partial report.

    Args:
        request: Tokens and annotations of the document
        term_store: Term store to query

    Returns:
        EnrichResponse with every annotation (enriched ones carry new features)

    Raises:
        HTTPException: 422 on duplicate token offsets, 503 when the term store
            is unreachable
    """
    tokens = [t.to_token() for t in request.tokens]
    annotations = [a.to_annotation() for a in request.annotations]

    logger.info(
        "enrich_request_received",
        tokens_count=len(tokens),
        annotations_count=len(annotations),
    )

    try:
        report = enrich_document(tokens, annotations, term_store, batch_size=request.batch_size)

    except DuplicateTokenError as e:
        logger.warning("enrich_duplicate_token", offset=e.offset)
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Validation error: {str(e)}",
        )

    except TermStoreConnectionError as e:
        logger.error("enrich_term_store_unavailable", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Term store unavailable: {str(e)}",
        )

    except BatchEnrichmentError as e:
        logger.error("enrich_failed", errors=len(e.errors), error=str(e))
        response = EnrichResponse(
            success=False,
            annotations=[AnnotationPayload.from_annotation(a) for a in annotations],
            report=e.report.to_dict() if e.report else {},
            error=str(e),
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=response.model_dump(),
        )

    logger.info("enrich_request_completed", **{k: v for k, v in report.to_dict().items() if k != "failures"})

    return EnrichResponse(
        success=True,
        annotations=[AnnotationPayload.from_annotation(a) for a in annotations],
        report=report.to_dict(),
    )
