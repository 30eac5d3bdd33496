"""
Token index keyed by start offset.

Built once per document and shared read-only by every enrichment worker.
"""

from enum import Enum
from typing import Dict, Iterable, Iterator, Mapping, Optional, Union

import structlog

from ..errors import DuplicateTokenError
from ..models.annotations import Token


logger = structlog.get_logger(__name__)


class DuplicatePolicy(str, Enum):
    """What to do when two tokens share a start offset."""

    LAST_WINS = "last_wins"
    REJECT = "reject"


class TokenIndex(Mapping[int, Token]):
    """
    Read-only ``start offset -> Token`` mapping.

    Attributes:
        overwritten: Number of tokens dropped because a later token had the
            same start offset (only non-zero under ``LAST_WINS``)
    """

    def __init__(self, tokens_by_start: Dict[int, Token], overwritten: int = 0):
        self._tokens = tokens_by_start
        self.overwritten = overwritten

    def __getitem__(self, offset: int) -> Token:
        return self._tokens[offset]

    def __iter__(self) -> Iterator[int]:
        return iter(self._tokens)

    def __len__(self) -> int:
        return len(self._tokens)

    def __repr__(self) -> str:
        return f"TokenIndex(tokens={len(self._tokens)}, overwritten={self.overwritten})"


def build_token_index(
    tokens: Iterable[Token],
    duplicate_policy: Optional[Union[DuplicatePolicy, str]] = None,
) -> TokenIndex:
    """
    Build the offset index for one document's tokens.

    Args:
        tokens: All tokens of the document
        duplicate_policy: ``last_wins`` or ``reject``; defaults to
            ``settings.duplicate_token_policy``

    Returns:
        TokenIndex over the tokens

    Raises:
        DuplicateTokenError: Two tokens share a start offset under ``reject``

    Examples:
        >>> index = build_token_index([Token(0, 6, "canine")])
        >>> index[0].text
        'canine'
    """
    if duplicate_policy is None:
        from ..config import settings

        duplicate_policy = settings.duplicate_token_policy
    policy = DuplicatePolicy(duplicate_policy)

    table: Dict[int, Token] = {}
    overwritten = 0

    for token in tokens:
        previous = table.get(token.start)
        if previous is not None:
            if policy is DuplicatePolicy.REJECT:
                logger.error("duplicate_token_rejected", offset=token.start)
                raise DuplicateTokenError(token.start)
            overwritten += 1
            logger.warning(
                "duplicate_token_overwritten",
                offset=token.start,
                dropped=repr(previous),
                kept=repr(token),
            )
        table[token.start] = token

    logger.debug(
        "token_index_built",
        tokens_count=len(table),
        overwritten=overwritten,
        policy=policy.value,
    )

    return TokenIndex(table, overwritten=overwritten)
