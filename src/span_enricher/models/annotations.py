"""
Token and entity annotation dataclasses.

Both are produced by the upstream NLP pipeline (tokenizer, gazetteers) and
only consumed here through their offsets, token text and provenance marker.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Token:
    """
    Atomic, offset-addressed unit of a document.

    Attributes:
        start: Character start offset in the document text
        end: Character end offset (exclusive)
        text: Exact document substring between start and end (may be absent)
    """

    start: int
    end: int
    text: Optional[str] = None

    def __repr__(self) -> str:
        return f"Token({self.text!r}, [{self.start},{self.end}])"


@dataclass
class EntityAnnotation:
    """
    Recognizer-produced span, enriched in place with term attributes.

    Attributes:
        start: Character start offset (need not align with a token)
        end: Character end offset, exclusive
        provenance: Marker identifying the recognizer that produced the span
        features: Feature map, replaced wholesale on a successful lookup
        annotation_id: Upstream annotation id, used for reporting
        annotation_type: Upstream annotation type (e.g. "Lookup")
    """

    start: int
    end: int
    provenance: str
    features: Dict[str, Any] = field(default_factory=dict)
    annotation_id: Optional[int] = None
    annotation_type: str = "Lookup"

    def __post_init__(self):
        self.features.setdefault("provenance", self.provenance)

    def __repr__(self) -> str:
        return (
            f"EntityAnnotation({self.annotation_type}, [{self.start},{self.end}], "
            f"{self.provenance}, id={self.annotation_id})"
        )
