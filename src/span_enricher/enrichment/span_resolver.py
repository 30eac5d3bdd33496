"""
Label reconstruction for entity spans.

Entity spans come from gazetteers that do not share the tokenizer's
boundaries, so the covered text is rebuilt from the tokens that overlap the
span using nothing but character offsets:

- a span starting inside a token walks left until a token starts, then trims
  the extra leading characters from the final label;
- a span ending inside a token drops the token's overhanging characters;
- tokens separated by a gap are joined with a single space, whatever the
  original separator was; directly adjacent tokens are joined with nothing.
"""

from typing import Mapping, Optional

from ..errors import MalformedSpanError
from ..models.annotations import Token


def _check_offsets(start, end) -> None:
    for name, value in (("start", start), ("end", end)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise MalformedSpanError(start, end, f"{name} offset is not an integer")
    if start < 0:
        raise MalformedSpanError(start, end, "negative start offset")
    if end <= start:
        raise MalformedSpanError(start, end, "end offset must be greater than start")


def resolve_label(
    start: int,
    end: int,
    index: Mapping[int, Token],
    max_walk_back: Optional[int] = None,
) -> str:
    """
    Reconstruct the document substring covered by ``[start, end)``.

    Args:
        start: Span start offset
        end: Span end offset (exclusive)
        index: Token index keyed by start offset
        max_walk_back: Max characters to walk left of ``start`` looking for a
            covering token; defaults to ``settings.max_walk_back``

    Returns:
        The stitched label

    Raises:
        MalformedSpanError: Offsets are invalid or the tokens around the span
            do not allow it to be reconstructed

    Examples:
        >>> from span_enricher.enrichment.token_index import build_token_index
        >>> index = build_token_index([Token(0, 4, "Homo"), Token(5, 12, "sapiens")])
        >>> resolve_label(0, 12, index)
        'Homo sapiens'
        >>> resolve_label(1, 8, index)
        'omo sap'
    """
    if max_walk_back is None:
        from ..config import settings

        max_walk_back = settings.max_walk_back

    _check_offsets(start, end)

    cursor = start
    trim = 0
    label: Optional[str] = None
    joiner = ""

    while True:
        token = index.get(cursor)

        if token is None:
            if label is None:
                # Left edge falls inside a token that starts further left
                if cursor == 0:
                    raise MalformedSpanError(start, end, "no token covers the span start")
                if trim >= max_walk_back:
                    raise MalformedSpanError(
                        start, end, f"no covering token within {max_walk_back} chars of the start"
                    )
                cursor -= 1
                trim += 1
                continue

            # Inter-token separator
            cursor += 1
            if cursor >= end:
                raise MalformedSpanError(start, end, "span ends inside a separator")
            continue

        if token.text is None:
            raise MalformedSpanError(start, end, f"token at {cursor} has no text")
        if token.end <= token.start:
            raise MalformedSpanError(start, end, f"token at {cursor} ends at {token.end}")

        label = token.text if label is None else label + joiner + token.text

        if token.end > end:
            label = label[: len(label) - (token.end - end)]

        if token.end >= end:
            if trim > len(label):
                raise MalformedSpanError(
                    start, end, f"cannot trim {trim} chars from {len(label)}-char label"
                )
            return label[trim:]

        if token.end in index:
            joiner = ""
            cursor = token.end
        else:
            joiner = " "
            cursor = token.end + 1
            if cursor >= end:
                raise MalformedSpanError(start, end, "span ends inside a separator")
