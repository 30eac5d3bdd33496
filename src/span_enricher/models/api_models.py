"""
API request and response models.

This module defines the Pydantic models used for request/response validation
by the HTTP API and for reading/writing documents in the CLI.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, model_validator

from .annotations import EntityAnnotation, Token


class TokenPayload(BaseModel):
    """Token as produced by the upstream tokenizer."""

    start: int = Field(ge=0, description="Start offset in the document text")
    end: int = Field(description="End offset (exclusive)")
    text: Optional[str] = Field(default=None, description="Token string, may be absent")

    @model_validator(mode="after")
    def check_offsets(self) -> "TokenPayload":
        if self.end <= self.start:
            raise ValueError(f"token end ({self.end}) must be greater than start ({self.start})")
        return self

    def to_token(self) -> Token:
        return Token(start=self.start, end=self.end, text=self.text)


class AnnotationPayload(BaseModel):
    """Entity annotation as produced by an upstream recognizer."""

    start: int = Field(description="Start offset in the document text")
    end: int = Field(description="End offset (exclusive)")
    provenance: str = Field(description="Recognizer marker, e.g. organism_from_ncbi")
    features: Dict[str, Any] = Field(default_factory=dict)
    id: Optional[int] = Field(default=None, description="Upstream annotation id")
    type: str = Field(default="Lookup", description="Upstream annotation type")

    def to_annotation(self) -> EntityAnnotation:
        return EntityAnnotation(
            start=self.start,
            end=self.end,
            provenance=self.provenance,
            features=dict(self.features),
            annotation_id=self.id,
            annotation_type=self.type,
        )

    @classmethod
    def from_annotation(cls, annotation: EntityAnnotation) -> "AnnotationPayload":
        return cls(
            start=annotation.start,
            end=annotation.end,
            provenance=annotation.provenance,
            features=dict(annotation.features),
            id=annotation.annotation_id,
            type=annotation.annotation_type,
        )


class EnrichRequest(BaseModel):
    """Request model for the enrichment endpoint (and the CLI input file)."""

    tokens: List[TokenPayload] = Field(default_factory=list)
    annotations: List[AnnotationPayload] = Field(default_factory=list)
    batch_size: Optional[int] = Field(default=None, ge=1, description="Overrides the configured batch size")


class EnrichResponse(BaseModel):
    """Response model for the enrichment endpoint."""

    success: bool = Field(description="Whether the pass completed")
    annotations: List[AnnotationPayload] = Field(default_factory=list)
    report: Dict[str, Any] = Field(default_factory=dict)
    error: Optional[str] = Field(None, description="Error message if failed")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service status")
    version: str = Field(description="API version")
    uptime_seconds: float = Field(description="Service uptime")


class VersionResponse(BaseModel):
    """Version information response."""

    api_version: str = Field(description="API version")
    components: Dict[str, str] = Field(description="Component versions")
