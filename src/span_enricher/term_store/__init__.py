"""Term store module.

Provides the term store interface, the SQL-backed implementation and helpers
to seed it from JSON lines.
"""

from .base import BaseTermStore
from .database import SqlTermStore
from .loader import load_terms, read_terms_jsonl
from .models import Base, TermRecord

__all__ = [
    "BaseTermStore",
    "SqlTermStore",
    "TermRecord",
    "Base",
    "load_terms",
    "read_terms_jsonl",
]
