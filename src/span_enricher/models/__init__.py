# Data models for span enrichment

from .annotations import EntityAnnotation, Token
from .api_models import (
    AnnotationPayload,
    EnrichRequest,
    EnrichResponse,
    HealthResponse,
    TokenPayload,
    VersionResponse,
)

__all__ = [
    "Token",
    "EntityAnnotation",
    "TokenPayload",
    "AnnotationPayload",
    "EnrichRequest",
    "EnrichResponse",
    "HealthResponse",
    "VersionResponse",
]
