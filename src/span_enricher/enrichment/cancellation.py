"""
Cancel flag shared by the workers of one enrichment pass.
"""

import threading
from typing import Any, Dict, Set

from ..models.annotations import EntityAnnotation


class CancelScope:
    """
    Cancellation flag plus the gate every feature write goes through.

    ``commit`` and ``cancel`` take the same lock, so once ``cancel()`` has
    returned no worker can replace an annotation's features, including a
    worker whose lookup was still running when the pass gave up on it.
    """

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._committed: Set[int] = set()

    def is_set(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        with self._lock:
            self._event.set()

    def commit(self, annotation: EntityAnnotation, features: Dict[str, Any]) -> bool:
        """
        Replace the annotation's features unless the pass was cancelled.

        Returns:
            True if the features were written
        """
        with self._lock:
            if self._event.is_set():
                return False
            annotation.features = features
            self._committed.add(id(annotation))
            return True

    def committed(self, annotation: EntityAnnotation) -> bool:
        with self._lock:
            return id(annotation) in self._committed
