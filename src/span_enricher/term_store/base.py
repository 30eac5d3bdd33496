"""
Term store interface.

A term store maps lowercased labels to attribute records. The enrichment pass
connects once, shares the store between worker threads, and disconnects when
every batch has finished.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class BaseTermStore(ABC):
    """
    Abstract base class for term stores.

    Implementations must allow ``lookup`` to be called concurrently from
    several threads between ``connect`` and ``disconnect``.
    """

    @abstractmethod
    def connect(self) -> None:
        """
        Open the connection.

        Raises:
            TermStoreConnectionError: If the store is unreachable
        """

    @abstractmethod
    def lookup(self, label: str) -> Optional[Dict[str, Any]]:
        """
        Fetch the attribute record for a lowercased label.

        Returns:
            Attribute mapping, or None when no record matches

        Raises:
            TermStoreError: If the query fails
        """

    @abstractmethod
    def disconnect(self) -> None:
        """Release the connection. Safe to call more than once."""

    def __enter__(self) -> "BaseTermStore":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.disconnect()
