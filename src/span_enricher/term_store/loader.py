"""
Seeding the term store from JSON lines.

Each line holds ``{"label": "...", "features": {...}}``; labels are lowercased
on the way in so lookups stay case-insensitive.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, Optional, Union

import structlog

from .database import SqlTermStore
from .models import TermRecord

logger = structlog.get_logger(__name__)


def read_terms_jsonl(path: Union[str, Path]) -> Iterator[Dict[str, Any]]:
    """
    Read term records from a JSON lines file, skipping blank lines.

    Raises:
        ValueError: If a line is not a JSON object with ``label`` and ``features``
    """
    with open(path, "r", encoding="utf-8") as f:
        for line_no, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue
            record = json.loads(line)
            if not isinstance(record, dict) or "label" not in record:
                raise ValueError(f"{path}:{line_no}: expected an object with a 'label' key")
            if not isinstance(record.get("features", {}), dict):
                raise ValueError(f"{path}:{line_no}: 'features' must be an object")
            yield record


def load_terms(
    store: SqlTermStore,
    records: Iterable[Dict[str, Any]],
    source: Optional[str] = None,
) -> int:
    """
    Insert or replace term records.

    Args:
        store: Connected SQL term store (tables are created if missing)
        records: Dicts with ``label`` and optional ``features``
        source: Vocabulary name stored alongside each record

    Returns:
        Number of records written
    """
    store.create_tables()

    count = 0
    with store.session_scope() as session:
        for record in records:
            session.merge(
                TermRecord(
                    label=str(record["label"]).lower(),
                    features=dict(record.get("features") or {}),
                    source=record.get("source", source),
                )
            )
            count += 1

    logger.info("terms_loaded", count=count, source=source)
    return count
