"""
In-memory term store and sample documents for tests.
"""

import threading
import time
from typing import Any, Dict, List, Optional

from span_enricher.errors import TermStoreConnectionError, TermStoreError
from span_enricher.models.annotations import EntityAnnotation, Token
from span_enricher.term_store.base import BaseTermStore


class FakeTermStore(BaseTermStore):
    """
    Dict-backed term store that records every call.

    Args:
        records: label -> features (labels should already be lowercased)
        fail_on: labels whose lookup raises TermStoreError
        unreachable: connect() raises TermStoreConnectionError
        delay_seconds: sleep inside each lookup
        label_delays: extra per-label sleep, added to delay_seconds
        gate: lookups block until this event is set
    """

    def __init__(
        self,
        records: Optional[Dict[str, Dict[str, Any]]] = None,
        fail_on: Optional[List[str]] = None,
        unreachable: bool = False,
        delay_seconds: float = 0.0,
        label_delays: Optional[Dict[str, float]] = None,
        gate: Optional[threading.Event] = None,
    ):
        self.records = dict(records or {})
        self.fail_on = set(fail_on or [])
        self.unreachable = unreachable
        self.delay_seconds = delay_seconds
        self.label_delays = dict(label_delays or {})
        self.gate = gate

        self.connected = False
        self.connect_calls = 0
        self.disconnect_calls = 0
        self.lookups: List[str] = []
        self.threads = set()
        self._lock = threading.Lock()

    def connect(self) -> None:
        self.connect_calls += 1
        if self.unreachable:
            raise TermStoreConnectionError("term store unreachable")
        self.connected = True

    def lookup(self, label: str) -> Optional[Dict[str, Any]]:
        if not self.connected:
            raise TermStoreError("not connected")
        with self._lock:
            self.lookups.append(label)
            self.threads.add(threading.get_ident())
        if self.gate is not None:
            self.gate.wait(timeout=10)
        delay = self.delay_seconds + self.label_delays.get(label, 0.0)
        if delay:
            time.sleep(delay)
        if label in self.fail_on:
            raise TermStoreError(f"lookup failed for {label!r}")
        record = self.records.get(label)
        return dict(record) if record is not None else None

    def disconnect(self) -> None:
        self.disconnect_calls += 1
        self.connected = False


ORGANISM = "organism_from_ncbi"

# "Homo sapiens and Mus musculus live with Canis lupus familiaris."
ORGANISM_TEXT = "Homo sapiens and Mus musculus live with Canis lupus familiaris."


def tokenize(text: str) -> List[Token]:
    """Whitespace/punctuation tokenizer used to build test documents."""
    tokens = []
    start = None
    for i, ch in enumerate(text + " "):
        if ch.isalnum():
            if start is None:
                start = i
            continue
        if start is not None:
            tokens.append(Token(start, i, text[start:i]))
            start = None
        if ch.strip():
            tokens.append(Token(i, i + 1, ch))
    return tokens


def span(text: str, surface: str, provenance: str = ORGANISM, annotation_id: Optional[int] = None) -> EntityAnnotation:
    """Annotation over the first occurrence of ``surface`` in ``text``."""
    start = text.index(surface)
    return EntityAnnotation(
        start=start,
        end=start + len(surface),
        provenance=provenance,
        annotation_id=annotation_id,
    )
